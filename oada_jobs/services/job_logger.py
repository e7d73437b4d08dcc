"""Per-job logger handed to workers."""

from __future__ import annotations

from typing import Any, Protocol

from oada_jobs.config.logging_config import get_logger

logger = get_logger(__name__)


class UpdatePoster(Protocol):
    """Anything that can annotate a job with an update."""

    job_id: str

    async def post_update(self, status: str, meta: Any) -> None: ...


class JobLogger:
    """Logs worker progress and records it on the job's update history.

    Workers never touch the job document directly; every call here emits a
    structlog event and posts ``{status, time, meta}`` to the job updates.
    """

    def __init__(self, poster: UpdatePoster, *, service: str) -> None:
        self._poster = poster
        self._log = logger.bind(job_id=poster.job_id, service=service)

    async def trace(self, status: str, meta: Any = None) -> None:
        self._log.debug("job_progress", status=status, meta=meta, trace=True)
        await self._poster.post_update(status, meta)

    async def debug(self, status: str, meta: Any = None) -> None:
        self._log.debug("job_progress", status=status, meta=meta)
        await self._poster.post_update(status, meta)

    async def info(self, status: str, meta: Any = None) -> None:
        self._log.info("job_progress", status=status, meta=meta)
        await self._poster.post_update(status, meta)

    async def warn(self, status: str, meta: Any = None) -> None:
        self._log.warning("job_progress", status=status, meta=meta)
        await self._poster.post_update(status, meta)

    async def error(self, status: str, meta: Any = None) -> None:
        self._log.error("job_progress", status=status, meta=meta)
        await self._poster.post_update(status, meta)


__all__ = ["JobLogger", "UpdatePoster"]

"""Service definition: worker registry and options."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import pytz
from pydantic import BaseModel, Field, field_validator

from oada_jobs.config.logging_config import get_logger
from oada_jobs.domain.exceptions import WorkerNotFoundError
from oada_jobs.domain.models import FinishReporterConfig, Job
from oada_jobs.ports.record_store import RecordStorePort
from oada_jobs.services.job_logger import JobLogger

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkerContext:
    """Execution context given to a worker."""

    job_id: str
    log: JobLogger
    oada: RecordStorePort


WorkFunction = Callable[[Job, WorkerContext], Awaitable[Any]]


@dataclass(frozen=True)
class Worker:
    """A work function and its allowed running time in milliseconds."""

    work: WorkFunction
    timeout: int | float


class ServiceOptions(BaseModel):
    """Optional per-service configuration."""

    finish_reporters: list[FinishReporterConfig] = Field(default_factory=list)
    tz_default: str = Field(
        default="UTC", description="Timezone used for day-index keys"
    )

    @field_validator("tz_default")
    @classmethod
    def _validate_tz(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value


class Service:
    """A named microservice and the workers it runs, keyed by job type."""

    def __init__(self, name: str, opts: ServiceOptions | None = None) -> None:
        if not name:
            raise ValueError("service name must not be empty")
        self.name = name
        self.opts = opts or ServiceOptions()
        self._workers: dict[str, Worker] = {}

    def on(self, job_type: str, timeout: int | float, work: WorkFunction) -> None:
        """Register the worker for ``job_type``, replacing any previous one.

        Args:
            job_type: Job type handled by ``work``
            timeout: Allowed running time in milliseconds
            work: Async work function
        """
        if timeout <= 0:
            raise ValueError("worker timeout must be positive")
        if job_type in self._workers:
            logger.warning("worker_replaced", service=self.name, job_type=job_type)
        self._workers[job_type] = Worker(work=work, timeout=timeout)

    def off(self, job_type: str) -> None:
        """Unregister the worker for ``job_type`` if present."""
        self._workers.pop(job_type, None)

    def get_worker(self, job_type: str) -> Worker:
        """Return the worker for ``job_type``.

        Raises:
            WorkerNotFoundError: If no worker is registered
        """
        worker = self._workers.get(job_type)
        if worker is None:
            raise WorkerNotFoundError(self.name, job_type)
        return worker


__all__ = ["Service", "ServiceOptions", "Worker", "WorkerContext", "WorkFunction"]

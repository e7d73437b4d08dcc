"""Registry of finish reporter handlers keyed by reporter type."""

from __future__ import annotations

from oada_jobs.adapters.slack_finish_reporter import (
    SLACK_REPORTER_TYPE,
    SlackFinishReporter,
)
from oada_jobs.config.logging_config import get_logger
from oada_jobs.ports.finish_reporter import FinishReport, FinishReporterHandler

logger = get_logger(__name__)


async def unsupported_reporter(report: FinishReport) -> None:
    """Handler for reporter types nobody registered: warn and do nothing."""
    logger.warning(
        "finish_reporter_unsupported",
        reporter_type=report.config.type,
        job_id=report.job_id,
        service=report.service.name,
    )


class FinishReporterRegistry:
    """Maps reporter ``type`` to its handler."""

    def __init__(self) -> None:
        self._handlers: dict[str, FinishReporterHandler] = {}

    def register(self, reporter_type: str, handler: FinishReporterHandler) -> None:
        if not reporter_type:
            raise ValueError("reporter_type must not be empty")
        self._handlers[reporter_type] = handler

    def resolve(self, reporter_type: str) -> FinishReporterHandler:
        return self._handlers.get(reporter_type, unsupported_reporter)

    @property
    def types(self) -> list[str]:
        return sorted(self._handlers)


def default_registry() -> FinishReporterRegistry:
    """Registry with the built-in reporter channels."""
    registry = FinishReporterRegistry()
    registry.register(SLACK_REPORTER_TYPE, SlackFinishReporter())
    return registry


__all__ = ["FinishReporterRegistry", "default_registry", "unsupported_reporter"]

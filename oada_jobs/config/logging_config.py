"""Structured logging for job runners.

Runners bind ``job_id`` and ``service`` to their logger, so every event a
job produces can be filtered per job. :func:`setup_logging` takes the level
and the output format (JSON for production, console for development) from
:class:`~oada_jobs.config.settings.Settings`.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Final

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from oada_jobs.config.settings import Settings

APP_NAME: Final[str] = "oada_jobs"
QUIET_LOGGERS: Final[tuple[str, ...]] = ("slack_sdk", "urllib3")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp every entry with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
    ]


def _renderers(json_logs: bool) -> list[Processor]:
    if json_logs:
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog from ``settings``.

    Args:
        settings: Provides ``log_level`` and ``json_logs``
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*_shared_processors(), *_renderers(settings.json_logs)],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger; usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]

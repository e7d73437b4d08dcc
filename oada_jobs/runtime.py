"""Process wiring for job runners: settings, logging and services."""

from __future__ import annotations

from oada_jobs.config.logging_config import get_logger, setup_logging
from oada_jobs.config.settings import Settings, get_settings
from oada_jobs.services.service import Service

logger = get_logger(__name__)


def initialize_logging(settings: Settings | None = None) -> Settings:
    """Initialize structlog-based logging and return the settings used."""
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info(
        "logging_initialized", level=settings.log_level, json_logs=settings.json_logs
    )
    return settings


def create_service(name: str, settings: Settings | None = None) -> Service:
    """Service whose finish reporters and day-index timezone come from settings.

    Example:
        >>> service = create_service("my-service")
        >>> service.on("demo", 5000, work)
    """
    settings = settings or get_settings()
    service = Service(name, settings.service_options())
    logger.debug(
        "service_created",
        service=name,
        tz_default=settings.tz_default,
        finish_reporters=len(service.opts.finish_reporters),
    )
    return service


__all__ = ["create_service", "initialize_logging"]

"""Application settings with Pydantic Settings validation.

Environment variables (prefix ``OADA_JOBS_``, optionally from a .env file)
win. Remaining values are loaded from config/main.yaml, validated against a
JSON Schema, and applied without overriding environment values.
"""

from pathlib import Path
from typing import Any, Final, cast

import pytz
import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oada_jobs.config.logging_config import get_logger
from oada_jobs.domain.models import FinishReporterConfig
from oada_jobs.services.service import ServiceOptions

DEFAULT_CONFIG_PATH: Final[Path] = Path("config/main.yaml")

CONFIG_SCHEMA: Final[dict[str, Any]] = {
    "type": "object",
    "properties": {
        "oada": {
            "type": "object",
            "properties": {"domain": {"type": "string"}},
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string"},
                "json": {"type": "boolean"},
            },
        },
        "processing": {
            "type": "object",
            "properties": {"tz_default": {"type": "string"}},
        },
        "finish_reporters": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["type", "status"],
                "properties": {
                    "type": {"type": "string"},
                    "status": {"enum": ["success", "failure"]},
                },
            },
        },
    },
}

logger = cast(Any, get_logger(__name__))


def _ensure_timezone(value: str) -> str:
    try:
        pytz.timezone(value)
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load and validate the YAML config file.

    Args:
        path: Config file location

    Returns:
        Parsed configuration, or an empty dict if the file does not exist

    Raises:
        ValueError: If the file does not match the config schema
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning("config_file_load_failed", path=str(path), error=str(e))
        return {}

    try:
        validate(instance=config, schema=CONFIG_SCHEMA)
    except JSONSchemaValidationError as e:
        raise ValueError(f"Config validation failed (file: {path}): {e.message}") from e

    logger.debug("config_file_loaded", path=str(path))
    return cast(dict[str, Any], config)


class Settings(BaseSettings):
    """Runtime settings for job runners."""

    model_config = SettingsConfigDict(
        env_prefix="OADA_JOBS_",
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    oada_domain: str | None = Field(
        default=None,
        description="OADA server base URL, used in finish reporter links",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON logs")
    tz_default: str = Field(
        default="UTC", description="Timezone used for day-index keys"
    )
    finish_reporters: list[FinishReporterConfig] = Field(
        default_factory=list, description="Finish reporters for every service"
    )

    @field_validator("tz_default")
    @classmethod
    def _validate_tz(cls, value: str) -> str:
        return _ensure_timezone(value)

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH, **data: Any):
        """Initialize settings, then fill unset fields from the YAML config."""
        config = load_config(config_path)

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        oada_config = config.get("oada") or {}
        _assign("oada_domain", oada_config.get("domain"))

        logging_config = config.get("logging") or {}
        _assign("log_level", logging_config.get("level"))
        _assign("json_logs", logging_config.get("json"))

        processing_config = config.get("processing") or {}
        tz_name = processing_config.get("tz_default")
        if tz_name is not None:
            _assign("tz_default", _ensure_timezone(tz_name))

        reporters_config = config.get("finish_reporters")
        if isinstance(reporters_config, list):
            _assign(
                "finish_reporters",
                [FinishReporterConfig(**reporter) for reporter in reporters_config],
            )

    def service_options(self) -> ServiceOptions:
        """Service options built from these settings.

        Reporters without their own ``domain`` link to ``oada_domain``.
        """
        reporters: list[FinishReporterConfig] = []
        for config in self.finish_reporters:
            if self.oada_domain and config.option("domain") is None:
                config = FinishReporterConfig(
                    **{**config.model_dump(), "domain": self.oada_domain}
                )
            reporters.append(config)
        return ServiceOptions(finish_reporters=reporters, tz_default=self.tz_default)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

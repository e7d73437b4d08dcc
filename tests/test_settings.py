"""Tests for settings loading from YAML and environment."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from oada_jobs.config import settings as settings_module
from oada_jobs.config.settings import Settings, load_config
from oada_jobs.domain.models import JobStatus


def _write_config(tmp_path: Path, content: dict[str, object]) -> Path:
    path = tmp_path / "main.yaml"
    path.write_text(yaml.safe_dump(content), encoding="utf-8")
    return path


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    settings = Settings(config_path=tmp_path / "absent.yaml")

    assert settings.log_level == "INFO"
    assert settings.tz_default == "UTC"
    assert settings.finish_reporters == []
    assert settings.oada_domain is None


def test_yaml_values_are_applied(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        {
            "oada": {"domain": "https://oada.example.com"},
            "logging": {"level": "DEBUG", "json": True},
            "processing": {"tz_default": "America/Chicago"},
            "finish_reporters": [
                {"type": "slack", "status": "failure", "posturl": "https://hooks/x"}
            ],
        },
    )

    settings = Settings(config_path=path)

    assert settings.oada_domain == "https://oada.example.com"
    assert settings.log_level == "DEBUG"
    assert settings.json_logs is True
    assert settings.tz_default == "America/Chicago"
    [reporter] = settings.service_options().finish_reporters
    assert reporter.type == "slack"
    assert reporter.status is JobStatus.FAILURE
    assert reporter.option("posturl") == "https://hooks/x"


def test_environment_wins_over_yaml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = _write_config(
        tmp_path,
        {
            "logging": {"level": "DEBUG"},
            "processing": {"tz_default": "America/Chicago"},
        },
    )
    monkeypatch.setenv("OADA_JOBS_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("OADA_JOBS_TZ_DEFAULT", "Europe/Amsterdam")

    settings = Settings(config_path=path)

    assert settings.log_level == "WARNING"
    assert settings.tz_default == "Europe/Amsterdam"
    assert settings.service_options().tz_default == "Europe/Amsterdam"


def test_invalid_reporter_status_fails_schema_validation(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path, {"finish_reporters": [{"type": "slack", "status": "done"}]}
    )

    with pytest.raises(ValueError, match="Config validation failed"):
        load_config(path)


def test_unknown_timezone_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Settings(config_path=tmp_path / "absent.yaml", tz_default="Mars/Olympus")


def test_get_settings_returns_cached_instance(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "_settings", None)

    first = settings_module.get_settings()

    assert settings_module.get_settings() is first


def test_reporter_domain_is_not_overridden(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        {
            "oada": {"domain": "https://oada.example.com"},
            "finish_reporters": [
                {"type": "slack", "status": "success", "domain": "https://other"},
                {"type": "slack", "status": "failure"},
            ],
        },
    )

    options = Settings(config_path=path).service_options()

    assert [r.option("domain") for r in options.finish_reporters] == [
        "https://other",
        "https://oada.example.com",
    ]

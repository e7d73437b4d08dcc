"""Tests for finish reporter dispatch."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from oada_jobs.adapters.memory_record_store import InMemoryRecordStore
from oada_jobs.adapters.slack_finish_reporter import SlackFinishReporter
from oada_jobs.domain.models import FinishReporterConfig, Job
from oada_jobs.ports.finish_reporter import FinishReport
from oada_jobs.services.finish_reporters import (
    FinishReporterRegistry,
    default_registry,
    unsupported_reporter,
)
from oada_jobs.services.service import Service, ServiceOptions, WorkerContext
from oada_jobs.workers.runner import Runner
from tests.helpers import (
    FIXED_NOW,
    JOB_ID,
    QUEUE_PATH,
    SERVICE_NAME,
    day_index,
    load_job,
    lookup,
)


class RecordingReporter:
    def __init__(self, error: Exception | None = None) -> None:
        self.reports: list[FinishReport] = []
        self._error = error

    async def __call__(self, report: FinishReport) -> None:
        self.reports.append(report)
        if self._error is not None:
            raise self._error


def _service(*reporters: dict[str, Any]) -> Service:
    options = ServiceOptions(
        finish_reporters=[FinishReporterConfig(**reporter) for reporter in reporters]
    )
    service = Service(SERVICE_NAME, options)

    async def work(job: Job, context: WorkerContext) -> dict[str, Any]:
        return {"ok": True}

    service.on("demo", 1000, work)
    return service


def _runner(
    service: Service, store: InMemoryRecordStore, registry: FinishReporterRegistry
) -> Runner:
    return Runner(
        service, JOB_ID, load_job(store), store, reporters=registry, now=lambda: FIXED_NOW
    )


def test_unsupported_reporter_type_does_not_abort_finish(
    store: InMemoryRecordStore,
) -> None:
    service = _service({"type": "unsupported", "status": "success"})

    asyncio.run(_runner(service, store, default_registry()).run())

    snapshot = store.snapshot()
    assert lookup(snapshot, "resources", "job1", "status") == "success"
    assert lookup(snapshot, *day_index("success"), JOB_ID) is not None
    assert JOB_ID not in lookup(snapshot, *QUEUE_PATH)


def test_reporters_fire_only_for_matching_status(
    store: InMemoryRecordStore,
) -> None:
    recorder = RecordingReporter()
    registry = FinishReporterRegistry()
    registry.register("recording", recorder)
    service = _service(
        {"type": "recording", "status": "failure", "channel": "ops"},
        {"type": "recording", "status": "success", "channel": "team"},
    )

    asyncio.run(_runner(service, store, registry).run())

    assert len(recorder.reports) == 1
    report = recorder.reports[0]
    assert report.status == "success"
    assert report.config.option("channel") == "team"
    assert report.job_id == JOB_ID
    assert report.service is service
    assert report.oada is store
    assert report.finalpath == "/" + "/".join(day_index("success"))


def test_reporter_error_is_raised_after_all_reporters_ran(
    store: InMemoryRecordStore,
) -> None:
    failing = RecordingReporter(error=RuntimeError("webhook down"))
    recorder = RecordingReporter()
    registry = FinishReporterRegistry()
    registry.register("failing", failing)
    registry.register("recording", recorder)
    service = _service(
        {"type": "failing", "status": "success"},
        {"type": "recording", "status": "success"},
    )

    with pytest.raises(RuntimeError, match="webhook down"):
        asyncio.run(_runner(service, store, registry).run())

    assert len(failing.reports) == 1
    assert len(recorder.reports) == 1
    snapshot = store.snapshot()
    assert lookup(snapshot, "resources", "job1", "status") == "success"
    assert lookup(snapshot, *day_index("success"), JOB_ID) is not None
    assert JOB_ID not in lookup(snapshot, *QUEUE_PATH)


def test_registry_resolves_unknown_types_to_noop() -> None:
    registry = FinishReporterRegistry()

    assert registry.resolve("email") is unsupported_reporter


def test_default_registry_has_slack_channel() -> None:
    registry = default_registry()

    assert registry.types == ["slack"]
    assert isinstance(registry.resolve("slack"), SlackFinishReporter)


def test_register_rejects_empty_type() -> None:
    registry = FinishReporterRegistry()

    with pytest.raises(ValueError):
        registry.register("", RecordingReporter())

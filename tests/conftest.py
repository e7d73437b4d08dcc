"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from oada_jobs.adapters.memory_record_store import InMemoryRecordStore
from oada_jobs.domain.models import Job
from oada_jobs.services.finish_reporters import FinishReporterRegistry
from oada_jobs.services.service import Service
from oada_jobs.workers.runner import Runner
from tests.helpers import FIXED_NOW, JOB_ID, SERVICE_NAME, load_job, seeded_store


@pytest.fixture
def store() -> InMemoryRecordStore:
    return seeded_store()


@pytest.fixture
def service() -> Service:
    return Service(SERVICE_NAME)


@pytest.fixture
def make_runner(
    store: InMemoryRecordStore, service: Service
) -> Callable[..., Runner]:
    """Build a Runner for the seeded job with a fixed clock."""

    def _make(
        job: Job | None = None,
        *,
        reporters: FinishReporterRegistry | None = None,
        **kwargs: Any,
    ) -> Runner:
        kwargs.setdefault("now", lambda: FIXED_NOW)
        return Runner(
            service,
            JOB_ID,
            job if job is not None else load_job(store),
            store,
            reporters=reporters,
            **kwargs,
        )

    return _make

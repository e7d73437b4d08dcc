"""Shared test helpers: a seeded in-memory store and a fixed clock."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

from oada_jobs.adapters.memory_record_store import InMemoryRecordStore
from oada_jobs.domain.models import Job

SERVICE_NAME = "test-service"
JOB_ID = "job1"
OADA_ID = "resources/job1"
FIXED_NOW = datetime(2024, 5, 6, 12, 0, tzinfo=UTC)
FIXED_DAY = "2024-05-06"
QUEUE_PATH = ("bookmarks", "services", SERVICE_NAME, "jobs")


def job_record(**overrides: Any) -> dict[str, Any]:
    """Stored job document with sensible defaults."""

    record: dict[str, Any] = {
        "_type": "application/vnd.oada.service.job.1+json",
        "type": "demo",
        "service": SERVICE_NAME,
        "status": "pending",
        "config": {},
    }
    record.update(overrides)
    return record


def seeded_store(record: dict[str, Any] | None = None) -> InMemoryRecordStore:
    """Store holding one job document and its queue entry."""

    return InMemoryRecordStore(
        {
            "resources": {"job1": record if record is not None else job_record()},
            "bookmarks": {
                "services": {SERVICE_NAME: {"jobs": {JOB_ID: {"_id": OADA_ID}}}}
            },
        }
    )


def lookup(snapshot: dict[str, Any], *path: str) -> Any:
    """Walk ``path`` in a store snapshot, returning None when absent."""

    node: Any = snapshot
    for segment in path:
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node


def day_index(status: str, day: str = FIXED_DAY) -> tuple[str, ...]:
    return (
        "bookmarks",
        "services",
        SERVICE_NAME,
        f"jobs-{status}",
        "day-index",
        day,
    )


def load_job(store: InMemoryRecordStore) -> Job:
    return asyncio.run(Job.from_record_store(store, OADA_ID, JOB_ID))


def updates_with_status(store: InMemoryRecordStore, status: str) -> list[dict[str, Any]]:
    updates = lookup(store.snapshot(), "resources", "job1", "updates") or {}
    return [update for update in updates.values() if update["status"] == status]

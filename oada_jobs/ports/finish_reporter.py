"""Port definition for finish reporters."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from oada_jobs.domain.models import FinishReporterConfig, Job, JobStatus
from oada_jobs.ports.record_store import RecordStorePort
from oada_jobs.services.service import Service


@dataclass(frozen=True)
class FinishReport:
    """What a finish reporter is told about a filed job.

    ``job`` is the Runner's in-memory copy; reporters that need the
    finalized document re-read it through ``oada``.
    """

    config: FinishReporterConfig
    service: Service
    finalpath: str
    job: Job
    job_id: str
    status: JobStatus
    oada: RecordStorePort


FinishReporterHandler = Callable[[FinishReport], Awaitable[None]]


__all__ = ["FinishReport", "FinishReporterHandler"]

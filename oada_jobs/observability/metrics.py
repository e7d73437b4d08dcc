"""Prometheus metrics for job execution."""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram

JOBS_FINISHED_TOTAL: Final = Counter(
    "oada_jobs_finished_total",
    "Jobs that completed the finish protocol",
    labelnames=("service", "status"),
)
JOB_DURATION_SECONDS: Final = Histogram(
    "oada_jobs_duration_seconds",
    "Wall time spent inside worker functions",
    labelnames=("service", "type"),
)


__all__ = ["JOBS_FINISHED_TOTAL", "JOB_DURATION_SECONDS"]

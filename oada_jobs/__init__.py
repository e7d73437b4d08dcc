"""Run OADA job records for microservices.

A :class:`Runner` executes one job with the worker its service registered
for the job type, then files the job under the service's success or failure
day-index, removes it from the queue and notifies finish reporters.
"""

from oada_jobs.domain.models import FinishReporterConfig, Job, JobStatus, JobUpdate
from oada_jobs.runtime import create_service, initialize_logging
from oada_jobs.services.service import Service, ServiceOptions, Worker, WorkerContext
from oada_jobs.workers.runner import Runner

__all__ = [
    "FinishReporterConfig",
    "Job",
    "JobStatus",
    "JobUpdate",
    "Runner",
    "Service",
    "ServiceOptions",
    "Worker",
    "WorkerContext",
    "create_service",
    "initialize_logging",
]

"""Worker package exports."""

from oada_jobs.workers.runner import Runner

__all__ = ["Runner"]

"""Custom exception hierarchy for OADA jobs.

Following error taxonomy: retryable, non-retryable, timeout.

Errors that escape ``Runner.run`` tell the caller whether to run the job
again: a :class:`RetryableError` left the job queued and a later run
replays the unfinished bookkeeping, a :class:`NonRetryableError` will fail
the same way until the configuration or the record is fixed. Worker
errors (including :class:`JobTimeoutError` and
:class:`WorkerCancelledError`) never escape and end as a failure finish.
"""


class OADAJobsError(Exception):
    """Base exception for all library errors."""

    pass


class RetryableError(OADAJobsError):
    """Errors that can be retried (network issues, temporary failures)."""

    pass


class NonRetryableError(OADAJobsError):
    """Errors that should not be retried (configuration, validation)."""

    pass


class WorkerNotFoundError(NonRetryableError):
    """No worker is registered for a job type."""

    def __init__(self, service: str, job_type: str) -> None:
        """Initialize with the service and the unknown job type."""
        self.service = service
        self.job_type = job_type
        super().__init__(f"No worker registered for type '{job_type}' in {service}")


class InvalidJobError(NonRetryableError):
    """A stored record cannot be interpreted as a job."""

    pass


class JobTimeoutError(OADAJobsError):
    """Worker exceeded its allowed running time."""

    def __init__(self, timeout_ms: int | float) -> None:
        """Initialize with the configured limit in milliseconds."""
        self.timeout_ms = timeout_ms
        super().__init__(f"Job exceeded the allowed {timeout_ms} ms running limit")


class WorkerCancelledError(OADAJobsError):
    """Worker task ended cancelled although the runner was not."""

    def __init__(self) -> None:
        """Initialize with a fixed message."""
        super().__init__("Worker was cancelled before returning a result")


class RecordStoreError(RetryableError):
    """Record store communication errors."""

    pass


class RecordNotFoundError(RecordStoreError):
    """Requested path does not exist in the record store."""

    def __init__(self, path: str) -> None:
        """Initialize with the missing path."""
        self.path = path
        super().__init__(f"No record at {path}")


class FinishReporterError(RetryableError):
    """Finish reporter could not deliver its notification."""

    pass

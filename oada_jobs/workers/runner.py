"""Runner: executes one job and finalizes its record."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from time import perf_counter
from typing import Any, Final

import pytz

from oada_jobs.config.logging_config import get_logger
from oada_jobs.domain.exceptions import JobTimeoutError, WorkerCancelledError
from oada_jobs.domain.models import Job, JobStatus
from oada_jobs.domain.tree import SERVICE_TREE
from oada_jobs.observability.metrics import JOB_DURATION_SECONDS, JOBS_FINISHED_TOTAL
from oada_jobs.ports.finish_reporter import FinishReport
from oada_jobs.ports.record_store import RecordStorePort
from oada_jobs.services.finish_reporters import FinishReporterRegistry, default_registry
from oada_jobs.services.job_logger import JobLogger
from oada_jobs.services.service import Service, Worker, WorkerContext

logger = get_logger(__name__)

_STARTED_META: Final[str] = "Runner started"
_FINISHED_META: Final[str] = "Runner finished"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def day_key(moment: datetime | str, tz_name: str = "UTC") -> str:
    """Calendar day (``YYYY-MM-DD``) of ``moment`` in ``tz_name``.

    Strings are parsed as ISO-8601; naive values are taken as UTC.
    """
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(pytz.timezone(tz_name)).strftime("%Y-%m-%d")


def error_payload(exc: BaseException) -> dict[str, Any]:
    """JSON representation of a worker failure stored as the job result."""
    payload: dict[str, Any] = {"name": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, JobTimeoutError):
        payload["timeout_ms"] = exc.timeout_ms
    return payload


class Runner:
    """Manages a job and updates the associated job record as needed.

    One Runner owns one job for the duration of :meth:`run`. Callers must
    ensure only one Runner is active per job id.
    """

    def __init__(
        self,
        service: Service,
        job_id: str,
        job: Job,
        oada: RecordStorePort,
        *,
        reporters: FinishReporterRegistry | None = None,
        tz_name: str | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a Runner.

        Args:
            service: Service the job belongs to
            job_id: Queue key of the job
            job: The job to run
            oada: Record store client
            reporters: Finish reporter registry (defaults to built-in channels)
            tz_name: Timezone used to pick the day-index day (defaults to
                the service's ``tz_default``)
            now: Clock, for tests
        """
        self.service = service
        self.job_id = job_id
        self.job = job
        self.oada = oada
        self._reporters = reporters or default_registry()
        self._tz_name = tz_name or service.opts.tz_default
        self._now = now or _utc_now
        self._log = logger.bind(job_id=job_id, service=service.name)

    async def run(self) -> None:
        """Run the job's worker and finalize the job.

        Worker errors, cancellations and timeouts end as a ``failure``
        finish. Raises only for a missing worker (non-retryable), record
        store errors and finish reporter errors (retryable: the job can be
        run again).
        """
        if self.job.status.is_terminal:
            await self._replay_finish()
            return

        worker = self.service.get_worker(self.job.type)

        self._log.info("job_started", job_type=self.job.type)
        await self.post_update(JobStatus.STARTED, _STARTED_META)

        started = perf_counter()
        try:
            result = await self._work_with_deadline(worker)
        except Exception as exc:  # noqa: BLE001
            self._observe_duration(started)
            self._log.error(
                "job_failed",
                job_type=self.job.type,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await self.finish(JobStatus.FAILURE, error_payload(exc), self._now())
            return

        self._observe_duration(started)
        self._log.info("job_succeeded", job_type=self.job.type)
        await self.finish(JobStatus.SUCCESS, result, self._now())

    async def post_update(self, status: str, meta: Any) -> None:
        """Append an update to the job's update history.

        Args:
            status: Status the update is about
            meta: Arbitrary JSON meta data
        """
        await self.oada.post(
            f"/{self.job.oada_id}/updates",
            {"status": str(status), "time": self._now().isoformat(), "meta": meta},
        )

    async def finish(
        self, status: JobStatus | str, result: Any, time: datetime | str
    ) -> None:
        """Finalize the job: status and result, event log, queue, reporters.

        Steps run strictly in order and are not rolled back: a record store
        failure leaves the earlier steps applied and the job still queued, so
        running again replays the bookkeeping. Reporter failures are raised
        after every matching reporter was attempted.

        Args:
            status: ``success`` or ``failure``
            result: JSON result data
            time: Finish time, selects the day-index day
        """
        status = JobStatus(status)
        if not status.is_terminal:
            raise ValueError(f"Cannot finish a job with status '{status}'")

        await self.oada.put(
            f"/{self.job.oada_id}", {"status": status.value, "result": result}
        )

        await self.post_update(status, _FINISHED_META)

        day = day_key(time, self._tz_name)
        finalpath = (
            f"/bookmarks/services/{self.service.name}"
            f"/jobs-{status.value}/day-index/{day}"
        )
        await self.oada.put(
            finalpath, {self.job_id: {"_id": self.job.oada_id}}, tree=SERVICE_TREE
        )

        await self.oada.delete(
            f"/bookmarks/services/{self.service.name}/jobs/{self.job_id}"
        )

        JOBS_FINISHED_TOTAL.labels(service=self.service.name, status=status.value).inc()
        self._log.debug("job_filed", finalpath=finalpath, status=status.value)

        await self._notify_finish_reporters(status, finalpath)

    async def _replay_finish(self) -> None:
        # Re-delivered terminal job: redo the bookkeeping at the recorded
        # finish time when there is one.
        status = self.job.status
        self._log.debug("job_already_complete", status=status.value)

        update = self.job.find_update(status)
        if update is not None and update.time is not None:
            self._log.debug("job_completion_time_found", time=update.time.isoformat())
            await self.finish(status, {}, update.time)
            return

        self._log.debug("job_completion_time_missing")
        await self.finish(status, {}, self._now())

    async def _work_with_deadline(self, worker: Worker) -> Any:
        context = WorkerContext(
            job_id=self.job_id,
            log=JobLogger(self, service=self.service.name),
            oada=self.oada,
        )
        task = asyncio.ensure_future(worker.work(self.job, context))
        try:
            done, _ = await asyncio.wait({task}, timeout=worker.timeout / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            if task.cancelled():
                raise WorkerCancelledError()
            return task.result()

        # cancel() is only a request. A worker that suppresses CancelledError
        # or blocks in a thread keeps running after the job is marked failed.
        task.cancel()
        task.add_done_callback(self._log_late_outcome)
        raise JobTimeoutError(worker.timeout)

    def _log_late_outcome(self, task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            self._log.debug("job_worker_cancelled_after_timeout")
            return
        exc = task.exception()
        self._log.warning(
            "job_worker_finished_after_timeout",
            outcome="error" if exc is not None else "result",
            error=str(exc) if exc is not None else None,
        )

    async def _notify_finish_reporters(self, status: JobStatus, finalpath: str) -> None:
        errors: list[Exception] = []
        for index, config in enumerate(self.service.opts.finish_reporters):
            if config.status != status:
                continue

            self._log.debug(
                "finish_reporter_dispatch",
                reporter_index=index,
                reporter_type=config.type,
            )
            handler = self._reporters.resolve(config.type)
            report = FinishReport(
                config=config,
                service=self.service,
                finalpath=finalpath,
                job=self.job,
                job_id=self.job_id,
                status=status,
                oada=self.oada,
            )
            try:
                await handler(report)
            except Exception as exc:  # noqa: BLE001
                self._log.exception(
                    "finish_reporter_failed",
                    reporter_index=index,
                    reporter_type=config.type,
                )
                errors.append(exc)

        if errors:
            raise errors[0]

    def _observe_duration(self, started: float) -> None:
        JOB_DURATION_SECONDS.labels(
            service=self.service.name, type=self.job.type
        ).observe(perf_counter() - started)


__all__ = ["Runner", "day_key", "error_payload"]

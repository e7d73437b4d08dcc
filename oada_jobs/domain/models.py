"""Domain models for OADA jobs.

All models use Pydantic v2 for validation and serialization.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from oada_jobs.domain.exceptions import InvalidJobError

if TYPE_CHECKING:
    from oada_jobs.ports.record_store import RecordStorePort


class JobStatus(StrEnum):
    """Lifecycle states of a job. Advances monotonically."""

    PENDING = "pending"
    STARTED = "started"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCESS, JobStatus.FAILURE)


class JobUpdate(BaseModel):
    """One entry of a job's audit trail."""

    model_config = ConfigDict(extra="ignore")

    status: str
    time: datetime | None = None
    meta: Any = None

    @field_validator("time", mode="wrap")
    @classmethod
    def _ensure_tz(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> datetime | None:
        # Entries written by other clients may carry no usable time.
        try:
            parsed = handler(value)
        except PydanticValidationError:
            return None
        if parsed is not None and parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed


class Job(BaseModel):
    """In-memory projection of a job record.

    ``id`` is the key of the job in the service queue, ``oada_id`` is the
    record store identity of the job document (``_id`` on the wire).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    oada_id: str = Field(..., alias="_id")
    type: str
    service: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    status: JobStatus = JobStatus.PENDING
    updates: dict[str, JobUpdate] = Field(default_factory=dict)
    result: Any = None

    @field_validator("updates", mode="before")
    @classmethod
    def _key_update_list(cls, value: Any) -> Any:
        if isinstance(value, list):
            return {str(index): update for index, update in enumerate(value)}
        return value

    def find_update(self, status: str) -> JobUpdate | None:
        """Return the earliest timed update carrying ``status``, if any.

        Storage keys carry no ordering guarantee, so occurrence order is
        taken from the update time. Entries without a time are skipped.
        """
        timed = [update for update in self.updates.values() if update.time]
        for update in sorted(timed, key=lambda update: update.time):
            if update.status == status:
                return update
        return None

    @classmethod
    async def from_record_store(
        cls, store: RecordStorePort, oada_id: str, job_id: str
    ) -> Job:
        """Load a job document from the record store.

        Args:
            store: Record store client
            oada_id: Record store identity of the job document
            job_id: Queue key of the job

        Returns:
            Parsed job

        Raises:
            InvalidJobError: If the record is not a valid job document
        """
        record = await store.get(f"/{oada_id}")
        if not isinstance(record, dict):
            raise InvalidJobError(f"Job record {oada_id} is not an object")

        try:
            return cls.model_validate({**record, "_id": oada_id, "id": job_id})
        except PydanticValidationError as exc:
            raise InvalidJobError(f"Job record {oada_id} is invalid: {exc}") from exc


class FinishReporterConfig(BaseModel):
    """Finish reporter configuration.

    Reporter specific fields (``posturl`` for slack) are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    status: JobStatus

    def option(self, name: str, default: Any = None) -> Any:
        """Read a reporter specific field."""
        return (self.model_extra or {}).get(name, default)

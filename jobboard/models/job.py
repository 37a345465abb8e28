from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class JobStatus(str, Enum):
    APPLIED = "applied"
    IN_PROGRESS = "inProgress"
    INTERVIEW = "interview"
    OFFER = "offer"
    DONE = "done"
    REJECTED = "rejected"


VALID_STATUSES = [s.value for s in JobStatus]

# Fields a client may set; id and the timestamps are owned by the server.
EDITABLE_FIELDS = (
    "company",
    "position",
    "source",
    "resume_used",
    "notes",
    "status",
    "url",
    "salary",
    "location",
    "contact_person",
)


class Job(BaseModel):
    id: int
    company: str
    position: str
    source: str = ""
    resume_used: str = ""
    notes: str = ""
    status: JobStatus = JobStatus.APPLIED
    url: str = ""
    salary: str = ""
    location: str = ""
    contact_person: str = ""
    applied_date: datetime
    updated_at: datetime

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("applied_date", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_record(self) -> dict:
        """Serialize to the camelCase JSON shape kept in storage."""
        return self.model_dump(mode="json", by_alias=True)


class JobFields(BaseModel):
    """Request body for create, replace and patch.

    Every field is optional at the schema level so the service can report
    missing or invalid values with its own messages.
    """

    company: Optional[str] = None
    position: Optional[str] = None
    source: Optional[str] = None
    resume_used: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    url: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    contact_person: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def supplied(self) -> dict[str, str]:
        """Fields present in the request with a non-null value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class StatusUpdate(BaseModel):
    status: Optional[str] = None


class JobStats(BaseModel):
    total: int
    by_status: dict[str, int] = Field(default_factory=dict)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class BoardSummary(BaseModel):
    total: int
    active: int
    offers: int
    success_rate: int  # percent of finished applications that ended in an offer

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class BoardColumn(BaseModel):
    status: JobStatus
    title: str
    jobs: list[Job] = []


class BoardView(BaseModel):
    columns: list[BoardColumn]
    summary: BoardSummary

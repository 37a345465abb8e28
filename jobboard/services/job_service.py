"""Job CRUD and status workflow over a JobStore.

Every operation loads the whole collection, changes it in memory and writes
it back. There is no locking: concurrent writers can lose each other's edits.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from jobboard.errors import InvalidJobError, JobNotFoundError
from jobboard.models import (
    EDITABLE_FIELDS,
    VALID_STATUSES,
    Job,
    JobFields,
    JobStats,
    JobStatus,
)
from jobboard.store import JobStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("company", "position")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_status(status: str | None) -> JobStatus:
    if status not in VALID_STATUSES:
        raise InvalidJobError("Invalid status")
    return JobStatus(status)


def _check_required(values: dict[str, str]) -> None:
    if not values.get("company") or not values.get("position"):
        raise InvalidJobError("Company and position are required")


def _status_or_default(values: dict[str, str]) -> JobStatus:
    # An empty status counts as not supplied.
    status = values.pop("status", None)
    return _check_status(status) if status else JobStatus.APPLIED


def _touch(job: Job) -> None:
    # updatedAt never goes backwards, even if the clock does.
    job.updated_at = max(_utcnow(), job.updated_at + timedelta(microseconds=1))


def _find_index(jobs: list[Job], job_id: int) -> int:
    for i, job in enumerate(jobs):
        if job.id == job_id:
            return i
    raise JobNotFoundError(job_id)


class JobService:
    def __init__(self, store: JobStore) -> None:
        self.store = store

    def list_jobs(self) -> list[Job]:
        """All jobs, most recently updated first."""
        return sorted(self.store.load_jobs(), key=lambda j: j.updated_at, reverse=True)

    def get_job(self, job_id: int) -> Job:
        jobs = self.store.load_jobs()
        return jobs[_find_index(jobs, job_id)]

    def create_job(self, fields: JobFields) -> Job:
        values = fields.supplied()
        _check_required(values)
        status = _status_or_default(values)

        jobs = self.store.load_jobs()
        job_id = max([self.store.get_next_id(), *(j.id + 1 for j in jobs)])
        # Advance the counter first so the id is burned even if the next save fails.
        self.store.save_next_id(job_id + 1)

        now = _utcnow()
        job = Job(id=job_id, status=status, applied_date=now, updated_at=now, **values)
        jobs.append(job)
        self.store.save_jobs(jobs)
        logger.info("Created job %d: %s at %s", job.id, job.position, job.company)
        return job

    def replace_job(self, job_id: int, fields: JobFields) -> Job:
        """Full replace: fields missing from the request reset to their defaults."""
        jobs = self.store.load_jobs()
        index = _find_index(jobs, job_id)
        values = fields.supplied()
        _check_required(values)
        status = _status_or_default(values)

        current = jobs[index]
        job = Job(
            id=current.id,
            status=status,
            applied_date=current.applied_date,
            updated_at=current.updated_at,
            **values,
        )
        _touch(job)
        jobs[index] = job
        self.store.save_jobs(jobs)
        return job

    def patch_job(self, job_id: int, fields: JobFields) -> Job:
        """Partial merge: omitted or null fields are left unchanged."""
        values = fields.supplied()
        if "status" in values:
            values["status"] = _check_status(values["status"])
        for name in REQUIRED_FIELDS:
            if name in values and not values[name]:
                raise InvalidJobError(f"{name.capitalize()} cannot be empty")

        jobs = self.store.load_jobs()
        job = jobs[_find_index(jobs, job_id)]
        if not values:
            return job

        for name in EDITABLE_FIELDS:
            if name in values:
                setattr(job, name, values[name])
        _touch(job)
        self.store.save_jobs(jobs)
        return job

    def update_status(self, job_id: int, status: str | None) -> Job:
        new_status = _check_status(status)
        jobs = self.store.load_jobs()
        job = jobs[_find_index(jobs, job_id)]
        old_status = job.status
        job.status = new_status
        _touch(job)
        self.store.save_jobs(jobs)
        logger.info("Job %d moved %s -> %s", job_id, old_status.value, new_status.value)
        return job

    def delete_job(self, job_id: int) -> None:
        jobs = self.store.load_jobs()
        remaining = [j for j in jobs if j.id != job_id]
        if len(remaining) == len(jobs):
            raise JobNotFoundError(job_id)
        self.store.save_jobs(remaining)
        logger.info("Deleted job %d", job_id)

    def stats(self) -> JobStats:
        jobs = self.store.load_jobs()
        by_status = Counter(job.status.value for job in jobs)
        return JobStats(total=len(jobs), by_status=dict(by_status))

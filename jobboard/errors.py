"""Exceptions raised by the job service and storage backends."""
from __future__ import annotations


class JobBoardError(Exception):
    """Base class for all job board errors."""


class InvalidJobError(JobBoardError):
    """Missing required field or a value outside the allowed set."""


class JobNotFoundError(JobBoardError):
    def __init__(self, job_id: int) -> None:
        super().__init__("Job not found")
        self.job_id = job_id


class StorageError(JobBoardError):
    """The underlying store could not be read or written."""

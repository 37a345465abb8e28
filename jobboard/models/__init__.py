from .job import (
    EDITABLE_FIELDS,
    VALID_STATUSES,
    BoardColumn,
    BoardSummary,
    BoardView,
    Job,
    JobFields,
    JobStats,
    JobStatus,
    StatusUpdate,
)

__all__ = [
    "EDITABLE_FIELDS",
    "VALID_STATUSES",
    "BoardColumn",
    "BoardSummary",
    "BoardView",
    "Job",
    "JobFields",
    "JobStats",
    "JobStatus",
    "StatusUpdate",
]

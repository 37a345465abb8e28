"""Kanban board view: columns, search and dashboard figures.

Served by ``GET /api/board`` for clients that want the board laid out by the
server instead of grouping ``GET /api/jobs`` themselves.
"""
from __future__ import annotations

from dataclasses import dataclass

from jobboard.models import BoardColumn, BoardSummary, BoardView, Job, JobStatus


@dataclass(frozen=True)
class Column:
    status: JobStatus
    title: str


COLUMNS = [
    Column(JobStatus.APPLIED, "Applied"),
    Column(JobStatus.IN_PROGRESS, "In Progress"),
    Column(JobStatus.INTERVIEW, "Interview"),
    Column(JobStatus.OFFER, "Offer"),
    Column(JobStatus.DONE, "Done"),
    Column(JobStatus.REJECTED, "Rejected"),
]

ACTIVE_STATUSES = {JobStatus.APPLIED, JobStatus.IN_PROGRESS, JobStatus.INTERVIEW}
FINISHED_STATUSES = {JobStatus.OFFER, JobStatus.DONE, JobStatus.REJECTED}

SEARCH_FIELDS = ("company", "position", "source", "location")


def filter_jobs(jobs: list[Job], query: str) -> list[Job]:
    """Case-insensitive substring match over company, position, source and location."""
    if not query:
        return list(jobs)
    q = query.lower()
    return [
        job for job in jobs
        if any(q in (getattr(job, name) or "").lower() for name in SEARCH_FIELDS)
    ]


def group_by_column(jobs: list[Job]) -> dict[JobStatus, list[Job]]:
    columns: dict[JobStatus, list[Job]] = {col.status: [] for col in COLUMNS}
    for job in jobs:
        columns[job.status].append(job)
    return columns


def summarize(jobs: list[Job]) -> BoardSummary:
    offers = sum(1 for j in jobs if j.status == JobStatus.OFFER)
    finished = sum(1 for j in jobs if j.status in FINISHED_STATUSES)
    return BoardSummary(
        total=len(jobs),
        active=sum(1 for j in jobs if j.status in ACTIVE_STATUSES),
        offers=offers,
        success_rate=round(offers / finished * 100) if finished else 0,
    )


def build_board(jobs: list[Job], query: str = "") -> BoardView:
    """Columns hold the jobs matching ``query``; the summary always covers every job."""
    grouped = group_by_column(filter_jobs(jobs, query))
    return BoardView(
        columns=[
            BoardColumn(status=col.status, title=col.title, jobs=grouped[col.status])
            for col in COLUMNS
        ],
        summary=summarize(jobs),
    )

"""Job REST endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from jobboard.board import build_board
from jobboard.errors import InvalidJobError, JobNotFoundError
from jobboard.models import BoardView, Job, JobFields, JobStats, StatusUpdate
from jobboard.services.job_service import JobService

router = APIRouter(prefix="/api", tags=["jobs"])


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


@router.get("/jobs", response_model=list[Job])
def list_jobs(service: JobService = Depends(get_job_service)) -> list[Job]:
    return service.list_jobs()


@router.post("/jobs", response_model=Job, status_code=201)
def create_job(fields: JobFields, service: JobService = Depends(get_job_service)) -> Job:
    try:
        return service.create_job(fields)
    except InvalidJobError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/jobs/{job_id}", response_model=Job)
def get_job(job_id: int, service: JobService = Depends(get_job_service)) -> Job:
    try:
        return service.get_job(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/jobs/{job_id}", response_model=Job)
def replace_job(
    job_id: int, fields: JobFields, service: JobService = Depends(get_job_service)
) -> Job:
    try:
        return service.replace_job(job_id, fields)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidJobError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/jobs/{job_id}", response_model=Job)
def patch_job(
    job_id: int, fields: JobFields, service: JobService = Depends(get_job_service)
) -> Job:
    try:
        return service.patch_job(job_id, fields)
    except InvalidJobError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/jobs/{job_id}/status", response_model=Job)
def update_status(
    job_id: int, body: StatusUpdate, service: JobService = Depends(get_job_service)
) -> Job:
    """Dedicated path used when a card is dropped on another kanban column."""
    try:
        return service.update_status(job_id, body.status)
    except InvalidJobError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/jobs/{job_id}")
def delete_job(job_id: int, service: JobService = Depends(get_job_service)) -> dict:
    try:
        service.delete_job(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Job deleted successfully"}


@router.get("/stats", response_model=JobStats)
def stats(service: JobService = Depends(get_job_service)) -> JobStats:
    return service.stats()


@router.get("/board", response_model=BoardView)
def board(q: str = "", service: JobService = Depends(get_job_service)) -> BoardView:
    """Jobs grouped into kanban columns, most recently updated first, plus dashboard figures."""
    return build_board(service.list_jobs(), q)

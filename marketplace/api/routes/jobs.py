"""
Job API Endpoints
Employers post and manage jobs; contractors browse open ones
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from marketplace.api.deps import get_caller_id, get_job_service
from marketplace.models.job import JobState
from marketplace.schemas.job import JobCreate, JobDetailsUpdate, JobResponse, JobStateUpdate
from marketplace.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    job_data: JobCreate,
    caller_id: str = Depends(get_caller_id),
    service: JobService = Depends(get_job_service),
):
    """Post a new job; the caller becomes its employer"""
    return service.create_job(
        employer_id=caller_id,
        rate=job_data.rate,
        duration=job_data.duration,
        invoice_interval=job_data.invoice_interval,
    )


# ============== LISTINGS ==============

@router.get("/available", response_model=List[JobResponse])
def list_available_jobs(
    min_rate: Optional[float] = None,
    max_rate: Optional[float] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    service: JobService = Depends(get_job_service),
):
    """Open jobs with no contractor, newest first"""
    return service.list_available_jobs(min_rate, max_rate, limit, offset)


@router.get("/my/employer", response_model=List[JobResponse])
def list_my_employer_jobs(
    state: Optional[JobState] = None,
    min_rate: Optional[float] = None,
    max_rate: Optional[float] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    caller_id: str = Depends(get_caller_id),
    service: JobService = Depends(get_job_service),
):
    return service.list_jobs_by_employer(caller_id, state, min_rate, max_rate, limit, offset)


@router.get("/my/contractor", response_model=List[JobResponse])
def list_my_contractor_jobs(
    state: Optional[JobState] = None,
    min_rate: Optional[float] = None,
    max_rate: Optional[float] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    caller_id: str = Depends(get_caller_id),
    service: JobService = Depends(get_job_service),
):
    return service.list_jobs_by_contractor(caller_id, state, min_rate, max_rate, limit, offset)


# ============== SINGLE JOB ==============

@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str, service: JobService = Depends(get_job_service)):
    """Get a specific job by ID"""
    return service.get_job(job_id)


@router.patch("/{job_id}/details", response_model=JobResponse)
def update_job_details(
    job_id: str,
    job_data: JobDetailsUpdate,
    caller_id: str = Depends(get_caller_id),
    service: JobService = Depends(get_job_service),
):
    """Change rate and/or duration of an open job"""
    return service.update_job_details(job_id, caller_id, rate=job_data.rate, duration=job_data.duration)


@router.patch("/{job_id}/state", response_model=JobResponse)
def update_job_state(
    job_id: str,
    state_data: JobStateUpdate,
    caller_id: str = Depends(get_caller_id),
    service: JobService = Depends(get_job_service),
):
    """Mark an ongoing job Complete, or a complete job Archived"""
    return service.update_job_state(job_id, caller_id, state_data.state)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: str,
    caller_id: str = Depends(get_caller_id),
    service: JobService = Depends(get_job_service),
):
    service.delete_job(job_id, caller_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

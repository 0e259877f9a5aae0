"""
Job Application API Endpoints
Contractors apply and withdraw; employers accept or reject
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from marketplace.api.deps import get_application_service, get_caller_id
from marketplace.models.application import ApplicationState
from marketplace.schemas.application import ApplicationResponse
from marketplace.schemas.job import JobResponse
from marketplace.services.application_service import ApplicationService

router = APIRouter(tags=["Applications"])


# ============== JOB-SCOPED ENDPOINTS ==============

@router.post(
    "/jobs/{job_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
def apply_to_job(
    job_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    """Apply to an open job as the calling contractor"""
    return service.apply_to_job(job_id, caller_id)


@router.get("/jobs/{job_id}/applications", response_model=List[ApplicationResponse])
def list_job_applications(
    job_id: str,
    state: Optional[ApplicationState] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    """All applications for a job (employer only)"""
    return service.list_applications_by_job(job_id, caller_id, state, limit, offset)


# ============== APPLICATION ENDPOINTS ==============

@router.get("/applications/my", response_model=List[ApplicationResponse])
def list_my_applications(
    state: Optional[ApplicationState] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    return service.list_applications_by_contractor(caller_id, state, limit, offset)


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    return service.get_application(application_id, caller_id)


@router.patch("/applications/{application_id}/accept", response_model=JobResponse)
def accept_application(
    application_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Accept an application
    - Assigns the applicant to the job and moves the job to Ongoing
    - Rejects every other waiting application for the job
    """
    return service.accept_application(application_id, caller_id)


@router.patch("/applications/{application_id}/reject", response_model=ApplicationResponse)
def reject_application(
    application_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    return service.reject_application(application_id, caller_id)


@router.patch("/applications/{application_id}/withdraw", response_model=ApplicationResponse)
def withdraw_application(
    application_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ApplicationService = Depends(get_application_service),
):
    return service.withdraw_application(application_id, caller_id)

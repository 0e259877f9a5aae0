"""
Authorization policy

Pure predicates over a caller id and the current entities. No I/O and no
exceptions: services decide which error a failed check becomes.
"""
from typing import Optional

from marketplace.models.application import JobApplication
from marketplace.models.job import Job


def is_employer(job: Job, caller_id: str) -> bool:
    return job.employer_id == caller_id


def is_assigned_contractor(job: Job, caller_id: str) -> bool:
    return job.contractor_id is not None and job.contractor_id == caller_id


def is_job_party(job: Job, caller_id: str) -> bool:
    """Employer or assigned contractor: may read invoices and drive Complete/Archive."""
    return is_employer(job, caller_id) or is_assigned_contractor(job, caller_id)


def is_job_available(job: Job) -> bool:
    """Open for applications and for edits by the employer."""
    return job.is_available


def can_edit_job_details(job: Job, caller_id: str) -> bool:
    return is_employer(job, caller_id) and is_job_available(job)


def can_apply(job: Job, contractor_id: str) -> bool:
    return not is_employer(job, contractor_id)


def is_applicant(application: JobApplication, caller_id: str) -> bool:
    return application.contractor_id == caller_id


def can_view_application(
    application: JobApplication, job: Optional[Job], caller_id: str
) -> bool:
    if is_applicant(application, caller_id):
        return True
    return job is not None and is_employer(job, caller_id)

"""
Job Lifecycle Service
Creates jobs and drives them through Waiting -> Ongoing -> Complete -> Archived
"""
import logging
from typing import List, Optional

from marketplace.core.database import Database
from marketplace.core.errors import (
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
)
from marketplace.models.application import ApplicationState
from marketplace.models.job import Job, JobState
from marketplace.schemas.common import Page
from marketplace.services import policy
from marketplace.services.helpers import (
    is_valid_job_transition,
    require_positive,
    store_errors,
    validate_rate_range,
)
from marketplace.stores.transaction import Stores

logger = logging.getLogger(__name__)


class JobService:
    """
    Owns job creation, detail edits, the manual state transitions and deletion.

    The Waiting -> Ongoing edge is not reachable from here: it only happens
    when an application is accepted (see ApplicationService).
    """

    def __init__(self, database: Database):
        self.stores = Stores(database)

    def create_job(
        self,
        employer_id: str,
        rate: float,
        duration: int,
        invoice_interval: int,
    ) -> Job:
        require_positive(rate=rate, duration=duration, invoice_interval=invoice_interval)

        with store_errors("creating job"):
            job = self.stores.jobs.create(employer_id, rate, duration, invoice_interval)
        logger.info("Job %s posted by employer %s", job.id, employer_id)
        return job

    def get_job(self, job_id: str) -> Job:
        with store_errors("fetching job"):
            return self.stores.jobs.get_by_id(job_id)

    def list_available_jobs(
        self,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Job]:
        validate_rate_range(min_rate, max_rate)
        page = Page.of(limit, offset)
        with store_errors("listing available jobs"):
            return self.stores.jobs.list_available(min_rate, max_rate, page.limit, page.offset)

    def list_jobs_by_employer(
        self,
        employer_id: str,
        state: Optional[JobState] = None,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Job]:
        validate_rate_range(min_rate, max_rate)
        page = Page.of(limit, offset)
        with store_errors("listing employer jobs"):
            return self.stores.jobs.list_by_employer(
                employer_id, state, min_rate, max_rate, page.limit, page.offset
            )

    def list_jobs_by_contractor(
        self,
        contractor_id: str,
        state: Optional[JobState] = None,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Job]:
        validate_rate_range(min_rate, max_rate)
        page = Page.of(limit, offset)
        with store_errors("listing contractor jobs"):
            return self.stores.jobs.list_by_contractor(
                contractor_id, state, min_rate, max_rate, page.limit, page.offset
            )

    def update_job_details(
        self,
        job_id: str,
        caller_id: str,
        rate: Optional[float] = None,
        duration: Optional[int] = None,
    ) -> Job:
        """Change rate and/or duration while the job is still an open posting."""
        if rate is None and duration is None:
            raise ValidationError("at least one of rate or duration must be provided")
        if rate is not None:
            require_positive(rate=rate)
        if duration is not None:
            require_positive(duration=duration)

        with store_errors("updating job details"):
            job = self.stores.jobs.get_by_id(job_id)
            if not policy.can_edit_job_details(job, caller_id):
                logger.info(
                    "Rejected detail edit on job %s by %s (state=%s, contractor=%s)",
                    job_id, caller_id, job.state.value, job.contractor_id,
                )
                raise ForbiddenError("only the employer may edit an open, unassigned job")

            return self.stores.jobs.update(
                job_id,
                rate=rate,
                duration=duration,
                expected_state=JobState.WAITING,
                require_unassigned=True,
            )

    def update_job_state(self, job_id: str, caller_id: str, new_state: JobState) -> Job:
        try:
            new_state = JobState(new_state)
        except ValueError:
            raise ValidationError(f"unknown job state {new_state!r}", field="state")
        if new_state == JobState.ONGOING:
            raise InvalidTransitionError(
                "a job becomes Ongoing only by accepting an application",
                to_state=new_state.value,
            )

        with store_errors("updating job state"):
            job = self.stores.jobs.get_by_id(job_id)

            if not is_valid_job_transition(job.state, new_state):
                logger.info(
                    "Rejected transition on job %s: %s -> %s",
                    job_id, job.state.value, new_state.value,
                )
                raise InvalidTransitionError(
                    f"cannot move job from {job.state.value} to {new_state.value}",
                    from_state=job.state.value,
                    to_state=new_state.value,
                )
            if not policy.is_job_party(job, caller_id):
                raise ForbiddenError("only the employer or the assigned contractor may change job state")

            updated = self.stores.jobs.update(job_id, state=new_state, expected_state=job.state)

        logger.info("Job %s moved %s -> %s by %s", job_id, job.state.value, new_state.value, caller_id)
        return updated

    def delete_job(self, job_id: str, caller_id: str) -> None:
        """
        Delete an open posting.

        The job must be Waiting and unassigned, owned by the caller, and have no
        invoices or Waiting applications. Rejected and withdrawn applications
        are removed along with it.
        """
        with store_errors("deleting job"), self.stores.transaction() as tx:
            job = tx.jobs.get_by_id(job_id, for_update=True)

            if not policy.is_job_available(job):
                raise InvalidStateError(
                    "only open, unassigned jobs can be deleted",
                    state=job.state.value,
                )
            if not policy.is_employer(job, caller_id):
                raise ForbiddenError("only the employer may delete a job")

            if tx.invoices.count_for_job(job_id):
                raise InvalidStateError("job has invoices")
            pending = tx.applications.count_by_job(job_id, ApplicationState.WAITING)
            if pending:
                raise InvalidStateError(
                    "job has pending applications",
                    pending_applications=pending,
                )

            removed = tx.applications.delete_closed_by_job_id(job_id)
            if tx.applications.count_by_job(job_id):
                raise InvalidStateError("job still has open applications")
            tx.jobs.delete(job_id)

        logger.info("Job %s deleted by %s (%d closed applications removed)", job_id, caller_id, removed)

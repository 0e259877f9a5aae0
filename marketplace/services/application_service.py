"""
Application Workflow Service
Handles apply / accept / reject / withdraw for job applications

Accepting an application is the one transition that spans several rows:
the application, its job, and every other waiting application for that job
change together or not at all.
"""
import logging
from typing import List, Optional

from marketplace.core.database import Database
from marketplace.core.errors import ConflictError, ForbiddenError, InvalidStateError
from marketplace.models.application import ApplicationState, JobApplication
from marketplace.models.job import Job, JobState
from marketplace.schemas.common import Page
from marketplace.services import policy
from marketplace.services.helpers import store_errors
from marketplace.stores.errors import StaleRecordError
from marketplace.stores.transaction import Stores

logger = logging.getLogger(__name__)


class ApplicationService:
    def __init__(self, database: Database):
        self.stores = Stores(database)

    def apply_to_job(self, job_id: str, contractor_id: str) -> JobApplication:
        """Submit an application from ``contractor_id`` to an open job."""
        with store_errors("applying to job"), self.stores.transaction() as tx:
            # Shared lock: DeleteJob and AcceptApplication wait for this insert
            job = tx.jobs.get_by_id(job_id, for_share=True)

            if not policy.is_job_available(job):
                logger.info(
                    "Application to unavailable job %s (state=%s, contractor=%s)",
                    job_id, job.state.value, job.contractor_id,
                )
                raise InvalidStateError("job is not open for applications", state=job.state.value)
            if not policy.can_apply(job, contractor_id):
                raise ForbiddenError("an employer cannot apply to their own job")

            existing = tx.applications.get_by_job_and_contractor(job_id, contractor_id)
            if existing is not None:
                raise ConflictError(
                    "contractor already applied to this job",
                    application_id=existing.id,
                    state=existing.state.value,
                )

            # A concurrent duplicate trips the unique constraint -> ConflictError
            application = tx.applications.create(job_id, contractor_id)

        logger.info("Contractor %s applied to job %s (%s)", contractor_id, job_id, application.id)
        return application

    def accept_application(self, application_id: str, caller_id: str) -> Job:
        """
        Accept one application and assign its contractor to the job.

        Within one transaction, with the job and application rows locked:
        the application becomes Accepted, the job gets the contractor and moves
        to Ongoing, and every other waiting application is Rejected. If the
        job was taken by a concurrent accept the job update matches no row and
        the whole transaction rolls back with ConflictError.
        """
        with store_errors("accepting application"), self.stores.transaction() as tx:
            application = tx.applications.get_by_id(application_id, for_update=True)
            job = tx.jobs.get_by_id(application.job_id, for_update=True)

            if not policy.is_job_available(job):
                logger.info(
                    "Accept on unavailable job %s (state=%s, contractor=%s)",
                    job.id, job.state.value, job.contractor_id,
                )
                raise InvalidStateError("job is no longer accepting applications", state=job.state.value)
            if application.state != ApplicationState.WAITING:
                raise InvalidStateError(
                    "application is not waiting",
                    state=application.state.value,
                )
            if not policy.is_employer(job, caller_id):
                logger.info("Forbidden accept by %s on job %s", caller_id, job.id)
                raise ForbiddenError("only the employer may accept applications")

            tx.applications.update_state(
                application.id,
                ApplicationState.ACCEPTED,
                expected_state=ApplicationState.WAITING,
            )
            try:
                updated_job = tx.jobs.update(
                    job.id,
                    contractor_id=application.contractor_id,
                    state=JobState.ONGOING,
                    expected_state=JobState.WAITING,
                    require_unassigned=True,
                )
            except StaleRecordError as exc:
                raise ConflictError("job was assigned by a concurrent accept") from exc

            rejected = tx.applications.update_state_by_job_id(
                job.id,
                ApplicationState.REJECTED,
                exclude_application_id=application.id,
            )

        logger.info(
            "Application %s accepted: job %s Ongoing with contractor %s, %d sibling(s) rejected",
            application.id, job.id, application.contractor_id, rejected,
        )
        return updated_job

    def reject_application(self, application_id: str, caller_id: str) -> JobApplication:
        with store_errors("rejecting application"):
            application = self.stores.applications.get_by_id(application_id)
            if application.state != ApplicationState.WAITING:
                raise InvalidStateError("application is not waiting", state=application.state.value)

            job = self.stores.jobs.get_by_id(application.job_id)
            if not policy.is_employer(job, caller_id):
                raise ForbiddenError("only the employer may reject applications")

            updated = self.stores.applications.update_state(
                application_id,
                ApplicationState.REJECTED,
                expected_state=ApplicationState.WAITING,
            )

        logger.info("Application %s rejected by %s", application_id, caller_id)
        return updated

    def withdraw_application(self, application_id: str, caller_id: str) -> JobApplication:
        with store_errors("withdrawing application"):
            application = self.stores.applications.get_by_id(application_id)
            if application.state != ApplicationState.WAITING:
                raise InvalidStateError("application is not waiting", state=application.state.value)
            if not policy.is_applicant(application, caller_id):
                raise ForbiddenError("only the applicant may withdraw an application")

            updated = self.stores.applications.update_state(
                application_id,
                ApplicationState.WITHDRAWN,
                expected_state=ApplicationState.WAITING,
            )

        logger.info("Application %s withdrawn", application_id)
        return updated

    def get_application(self, application_id: str, caller_id: str) -> JobApplication:
        with store_errors("fetching application"):
            application = self.stores.applications.get_by_id(application_id)
            job = self.stores.jobs.get_by_id(application.job_id)
        if not policy.can_view_application(application, job, caller_id):
            raise ForbiddenError("only the applicant or the job's employer may view this application")
        return application

    def list_applications_by_contractor(
        self,
        contractor_id: str,
        state: Optional[ApplicationState] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[JobApplication]:
        page = Page.of(limit, offset)
        with store_errors("listing contractor applications"):
            return self.stores.applications.list_by_contractor(
                contractor_id, state, page.limit, page.offset
            )

    def list_applications_by_job(
        self,
        job_id: str,
        caller_id: str,
        state: Optional[ApplicationState] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[JobApplication]:
        page = Page.of(limit, offset)
        with store_errors("listing job applications"):
            job = self.stores.jobs.get_by_id(job_id)
            if not policy.is_employer(job, caller_id):
                raise ForbiddenError("only the employer may list applications for a job")
            return self.stores.applications.list_by_job(job_id, state, page.limit, page.offset)

"""
Job application storage
"""
from typing import List, Optional

from sqlalchemy import delete, func, select, update

from marketplace.models.application import ApplicationState, JobApplication
from marketplace.models.job import utcnow
from marketplace.stores.base import BaseStore
from marketplace.stores.errors import RecordNotFoundError, StaleRecordError

CLOSED_APPLICATION_STATES = (ApplicationState.REJECTED, ApplicationState.WITHDRAWN)


class ApplicationStore(BaseStore):
    """Persistence for JobApplication rows."""

    def create(self, job_id: str, contractor_id: str) -> JobApplication:
        """Insert a Waiting application; a repeat (job, contractor) raises DuplicateRecordError."""
        with self._scope() as session:
            application = JobApplication(
                job_id=job_id,
                contractor_id=contractor_id,
                state=ApplicationState.WAITING,
            )
            session.add(application)
            self._flush(session, f"application by {contractor_id} for job {job_id}")
            return application

    def get_by_id(self, application_id: str, for_update: bool = False) -> JobApplication:
        with self._scope() as session:
            query = select(JobApplication).where(JobApplication.id == application_id)
            if for_update:
                query = query.with_for_update()
            application = session.execute(query).scalar_one_or_none()
            if application is None:
                raise RecordNotFoundError(f"application {application_id}")
            return application

    def get_by_job_and_contractor(self, job_id: str, contractor_id: str) -> Optional[JobApplication]:
        with self._scope() as session:
            return session.execute(
                select(JobApplication).where(
                    JobApplication.job_id == job_id,
                    JobApplication.contractor_id == contractor_id,
                )
            ).scalar_one_or_none()

    def list_by_contractor(
        self,
        contractor_id: str,
        state: Optional[ApplicationState] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[JobApplication]:
        return self._list(JobApplication.contractor_id == contractor_id, state, limit, offset)

    def list_by_job(
        self,
        job_id: str,
        state: Optional[ApplicationState] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[JobApplication]:
        return self._list(JobApplication.job_id == job_id, state, limit, offset)

    def _list(self, condition, state, limit, offset) -> List[JobApplication]:
        query = select(JobApplication).where(condition)
        if state is not None:
            query = query.where(JobApplication.state == state)
        query = query.order_by(JobApplication.created_at.desc(), JobApplication.id)
        query = query.limit(limit).offset(offset)

        with self._scope() as session:
            return list(session.execute(query).scalars().all())

    def count_by_job(self, job_id: str, state: Optional[ApplicationState] = None) -> int:
        query = select(func.count(JobApplication.id)).where(JobApplication.job_id == job_id)
        if state is not None:
            query = query.where(JobApplication.state == state)
        with self._scope() as session:
            return session.execute(query).scalar_one()

    def update_state(
        self,
        application_id: str,
        new_state: ApplicationState,
        expected_state: Optional[ApplicationState] = None,
    ) -> JobApplication:
        statement = update(JobApplication).where(JobApplication.id == application_id)
        if expected_state is not None:
            statement = statement.where(JobApplication.state == expected_state)
        statement = statement.values(state=new_state, updated_at=utcnow()).execution_options(
            synchronize_session=False
        )

        with self._scope() as session:
            result = session.execute(statement)
            if result.rowcount == 0:
                if session.get(JobApplication, application_id) is None:
                    raise RecordNotFoundError(f"application {application_id}")
                raise StaleRecordError(f"application {application_id}")
            return session.get(JobApplication, application_id, populate_existing=True)

    def update_state_by_job_id(
        self,
        job_id: str,
        new_state: ApplicationState,
        exclude_application_id: Optional[str] = None,
    ) -> int:
        """Move every Waiting application of the job to ``new_state``; returns the count."""
        statement = update(JobApplication).where(
            JobApplication.job_id == job_id,
            JobApplication.state == ApplicationState.WAITING,
        )
        if exclude_application_id is not None:
            statement = statement.where(JobApplication.id != exclude_application_id)
        statement = statement.values(state=new_state, updated_at=utcnow()).execution_options(
            synchronize_session=False
        )

        with self._scope() as session:
            return session.execute(statement).rowcount

    def delete_closed_by_job_id(self, job_id: str) -> int:
        """Delete the job's Rejected and Withdrawn applications; Waiting ones are kept."""
        with self._scope() as session:
            return session.execute(
                delete(JobApplication)
                .where(
                    JobApplication.job_id == job_id,
                    JobApplication.state.in_(CLOSED_APPLICATION_STATES),
                )
                .execution_options(synchronize_session=False)
            ).rowcount

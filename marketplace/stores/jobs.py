"""
Job storage
"""
import logging
from typing import List, Optional

from sqlalchemy import delete, select, update

from marketplace.models.job import Job, JobState, utcnow
from marketplace.stores.base import BaseStore
from marketplace.stores.errors import RecordNotFoundError, StaleRecordError

logger = logging.getLogger(__name__)


class JobStore(BaseStore):
    """Persistence for Job rows."""

    def create(self, employer_id: str, rate: float, duration: int, invoice_interval: int) -> Job:
        with self._scope() as session:
            job = Job(
                employer_id=employer_id,
                rate=rate,
                duration=duration,
                invoice_interval=invoice_interval,
                state=JobState.WAITING,
            )
            session.add(job)
            self._flush(session, "job")
            logger.debug("Job %s created for employer %s", job.id, employer_id)
            return job

    def get_by_id(self, job_id: str, for_update: bool = False, for_share: bool = False) -> Job:
        """
        Fetch a job. Inside a transaction ``for_update`` takes an exclusive row
        lock and ``for_share`` a shared one.
        """
        with self._scope() as session:
            query = select(Job).where(Job.id == job_id)
            if for_update:
                query = query.with_for_update()
            elif for_share:
                query = query.with_for_update(read=True)
            job = session.execute(query).scalar_one_or_none()
            if job is None:
                raise RecordNotFoundError(f"job {job_id}")
            return job

    def list_available(
        self,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Job]:
        return self._list(
            [Job.state == JobState.WAITING, Job.contractor_id.is_(None)],
            None, min_rate, max_rate, limit, offset,
        )

    def list_by_employer(
        self,
        employer_id: str,
        state: Optional[JobState] = None,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Job]:
        return self._list([Job.employer_id == employer_id], state, min_rate, max_rate, limit, offset)

    def list_by_contractor(
        self,
        contractor_id: str,
        state: Optional[JobState] = None,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Job]:
        return self._list([Job.contractor_id == contractor_id], state, min_rate, max_rate, limit, offset)

    def _list(self, conditions, state, min_rate, max_rate, limit, offset) -> List[Job]:
        query = select(Job).where(*conditions)
        if state is not None:
            query = query.where(Job.state == state)
        if min_rate is not None:
            query = query.where(Job.rate >= min_rate)
        if max_rate is not None:
            query = query.where(Job.rate <= max_rate)
        query = query.order_by(Job.created_at.desc(), Job.id).limit(limit).offset(offset)

        with self._scope() as session:
            return list(session.execute(query).scalars().all())

    def update(
        self,
        job_id: str,
        *,
        rate: Optional[float] = None,
        duration: Optional[int] = None,
        contractor_id: Optional[str] = None,
        state: Optional[JobState] = None,
        expected_state: Optional[JobState] = None,
        require_unassigned: bool = False,
    ) -> Job:
        """
        Partial update in a single conditional statement.

        ``expected_state`` and ``require_unassigned`` guard the write: when the
        row exists but no longer satisfies them, StaleRecordError is raised and
        nothing is written.
        """
        values = {}
        if rate is not None:
            values["rate"] = rate
        if duration is not None:
            values["duration"] = duration
        if contractor_id is not None:
            values["contractor_id"] = contractor_id
        if state is not None:
            values["state"] = state
        if not values:
            return self.get_by_id(job_id)
        values["updated_at"] = utcnow()

        statement = update(Job).where(Job.id == job_id)
        if expected_state is not None:
            statement = statement.where(Job.state == expected_state)
        if require_unassigned:
            statement = statement.where(Job.contractor_id.is_(None))
        statement = statement.values(**values).execution_options(synchronize_session=False)

        with self._scope() as session:
            result = session.execute(statement)
            if result.rowcount == 0:
                if session.get(Job, job_id) is None:
                    raise RecordNotFoundError(f"job {job_id}")
                raise StaleRecordError(f"job {job_id}")
            return session.get(Job, job_id, populate_existing=True)

    def delete(self, job_id: str) -> None:
        with self._scope() as session:
            result = session.execute(
                delete(Job).where(Job.id == job_id).execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RecordNotFoundError(f"job {job_id}")

"""
Invoice storage
"""
from typing import List, Optional

from sqlalchemy import delete, func, select, update

from marketplace.models.invoice import Invoice, InvoiceState
from marketplace.models.job import utcnow
from marketplace.stores.base import BaseStore
from marketplace.stores.errors import RecordNotFoundError, StaleRecordError


class InvoiceStore(BaseStore):
    """Persistence for Invoice rows."""

    def create(self, job_id: str, interval_number: int, value: float) -> Invoice:
        """Insert a Waiting invoice; a taken interval number raises DuplicateRecordError."""
        with self._scope() as session:
            invoice = Invoice(
                job_id=job_id,
                interval_number=interval_number,
                value=value,
                state=InvoiceState.WAITING,
            )
            session.add(invoice)
            self._flush(session, f"invoice {interval_number} for job {job_id}")
            return invoice

    def get_by_id(self, invoice_id: str) -> Invoice:
        with self._scope() as session:
            invoice = session.get(Invoice, invoice_id)
            if invoice is None:
                raise RecordNotFoundError(f"invoice {invoice_id}")
            return invoice

    def list_by_job(
        self,
        job_id: str,
        state: Optional[InvoiceState] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Invoice]:
        query = select(Invoice).where(Invoice.job_id == job_id)
        if state is not None:
            query = query.where(Invoice.state == state)
        query = query.order_by(Invoice.interval_number.asc()).limit(limit).offset(offset)

        with self._scope() as session:
            return list(session.execute(query).scalars().all())

    def get_max_interval_for_job(self, job_id: str) -> int:
        """Highest interval number invoiced so far, 0 when there are none."""
        with self._scope() as session:
            result = session.execute(
                select(func.max(Invoice.interval_number)).where(Invoice.job_id == job_id)
            ).scalar()
            return result or 0

    def count_for_job(self, job_id: str) -> int:
        with self._scope() as session:
            return session.execute(
                select(func.count(Invoice.id)).where(Invoice.job_id == job_id)
            ).scalar_one()

    def update_state(
        self,
        invoice_id: str,
        new_state: InvoiceState,
        expected_state: Optional[InvoiceState] = None,
    ) -> Invoice:
        statement = update(Invoice).where(Invoice.id == invoice_id)
        if expected_state is not None:
            statement = statement.where(Invoice.state == expected_state)
        statement = statement.values(state=new_state, updated_at=utcnow()).execution_options(
            synchronize_session=False
        )

        with self._scope() as session:
            result = session.execute(statement)
            if result.rowcount == 0:
                if session.get(Invoice, invoice_id) is None:
                    raise RecordNotFoundError(f"invoice {invoice_id}")
                raise StaleRecordError(f"invoice {invoice_id}")
            return session.get(Invoice, invoice_id, populate_existing=True)

    def delete(self, invoice_id: str, expected_state: Optional[InvoiceState] = None) -> None:
        statement = delete(Invoice).where(Invoice.id == invoice_id)
        if expected_state is not None:
            statement = statement.where(Invoice.state == expected_state)

        with self._scope() as session:
            result = session.execute(statement.execution_options(synchronize_session=False))
            if result.rowcount == 0:
                if session.get(Invoice, invoice_id) is None:
                    raise RecordNotFoundError(f"invoice {invoice_id}")
                raise StaleRecordError(f"invoice {invoice_id}")

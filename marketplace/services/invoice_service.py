"""
Invoice Service
Raises invoices interval by interval for ongoing jobs and settles them
"""
import logging
import math
from typing import List, Optional

from marketplace.core.database import Database
from marketplace.core.errors import (
    ForbiddenError,
    IntervalExceededError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
)
from marketplace.models.invoice import Invoice, InvoiceState
from marketplace.models.job import Job, JobState
from marketplace.schemas.common import Page
from marketplace.services import billing, policy
from marketplace.services.helpers import is_valid_invoice_transition, store_errors
from marketplace.stores.transaction import Stores

logger = logging.getLogger(__name__)


class InvoiceService:
    """
    Invoices are numbered 1..N per job, N being ceil(duration / invoice_interval).
    Only the assigned contractor raises, settles or deletes them; the employer
    can read them.
    """

    def __init__(self, database: Database):
        self.stores = Stores(database)

    def create_invoice(
        self,
        job_id: str,
        caller_id: str,
        adjustment: Optional[float] = None,
    ) -> Invoice:
        if adjustment is not None and not math.isfinite(adjustment):
            raise ValidationError("adjustment must be a finite number", field="adjustment")

        with store_errors("creating invoice"), self.stores.transaction() as tx:
            # Locked so the job cannot leave Ongoing before the invoice is written
            job = tx.jobs.get_by_id(job_id, for_update=True)

            if job.state != JobState.ONGOING:
                logger.info("Invoice attempt for job %s in state %s", job_id, job.state.value)
                raise InvalidStateError("invoices can only be raised for ongoing jobs", state=job.state.value)
            if not policy.is_assigned_contractor(job, caller_id):
                logger.info("Forbidden invoice attempt by %s on job %s", caller_id, job_id)
                raise ForbiddenError("only the assigned contractor may raise invoices")

            next_interval = tx.invoices.get_max_interval_for_job(job_id) + 1
            limit = billing.max_intervals(job.duration, job.invoice_interval)
            if next_interval > limit:
                raise IntervalExceededError(next_interval=next_interval, max_intervals=limit)

            hours = billing.hours_for_interval(next_interval, job.duration, job.invoice_interval)
            value = billing.invoice_value(job.rate, hours, adjustment)

            # The (job_id, interval_number) constraint settles concurrent creators
            invoice = tx.invoices.create(job_id, next_interval, value)

        logger.info(
            "Invoice %s raised for job %s interval %d/%d (%d h, value %.2f)",
            invoice.id, job_id, next_interval, limit, hours, value,
        )
        return invoice

    def _load_for_party(self, invoice_id: str, caller_id: str):
        invoice = self.stores.invoices.get_by_id(invoice_id)
        job = self.stores.jobs.get_by_id(invoice.job_id)
        if not policy.is_job_party(job, caller_id):
            raise ForbiddenError("only the job's employer or contractor may access its invoices")
        return invoice, job

    def get_invoice(self, invoice_id: str, caller_id: str) -> Invoice:
        with store_errors("fetching invoice"):
            invoice, _ = self._load_for_party(invoice_id, caller_id)
            return invoice

    def list_invoices_by_job(
        self,
        job_id: str,
        caller_id: str,
        state: Optional[InvoiceState] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Invoice]:
        page = Page.of(limit, offset)
        with store_errors("listing invoices"):
            job: Job = self.stores.jobs.get_by_id(job_id)
            if not policy.is_job_party(job, caller_id):
                raise ForbiddenError("only the job's employer or contractor may list its invoices")
            return self.stores.invoices.list_by_job(job_id, state, page.limit, page.offset)

    def update_invoice_state(self, invoice_id: str, caller_id: str, new_state: InvoiceState) -> Invoice:
        try:
            new_state = InvoiceState(new_state)
        except ValueError:
            raise ValidationError(f"unknown invoice state {new_state!r}", field="state")

        with store_errors("updating invoice state"):
            invoice = self.stores.invoices.get_by_id(invoice_id)
            if not is_valid_invoice_transition(invoice.state, new_state):
                raise InvalidTransitionError(
                    f"cannot move invoice from {invoice.state.value} to {new_state.value}",
                    from_state=invoice.state.value,
                    to_state=new_state.value,
                )

            job = self.stores.jobs.get_by_id(invoice.job_id)
            if not policy.is_assigned_contractor(job, caller_id):
                raise ForbiddenError("only the assigned contractor may settle invoices")

            updated = self.stores.invoices.update_state(
                invoice_id, new_state, expected_state=invoice.state
            )

        logger.info("Invoice %s moved %s -> %s", invoice_id, invoice.state.value, new_state.value)
        return updated

    def delete_invoice(self, invoice_id: str, caller_id: str) -> None:
        """
        Delete the job's latest invoice while it is still Waiting.

        Only the highest interval may go, so the remaining numbers stay 1..N
        and the next CreateInvoice bills the freed interval again.
        """
        with store_errors("deleting invoice"), self.stores.transaction() as tx:
            invoice = tx.invoices.get_by_id(invoice_id)
            # Same lock as create_invoice: the latest interval cannot move underneath us
            job = tx.jobs.get_by_id(invoice.job_id, for_update=True)

            if invoice.state != InvoiceState.WAITING:
                raise InvalidStateError("only waiting invoices can be deleted", state=invoice.state.value)
            latest = tx.invoices.get_max_interval_for_job(job.id)
            if invoice.interval_number != latest:
                raise InvalidStateError(
                    "only the latest invoice of a job can be deleted",
                    interval_number=invoice.interval_number,
                    latest_interval=latest,
                )
            if not policy.is_assigned_contractor(job, caller_id):
                raise ForbiddenError("only the assigned contractor may delete invoices")

            tx.invoices.delete(invoice_id, expected_state=InvoiceState.WAITING)

        logger.info("Invoice %s deleted by %s", invoice_id, caller_id)

"""Tests for invoice creation, settlement and deletion."""
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import CONTRACTOR, EMPLOYER, STRANGER, make_database
from marketplace.core.errors import (
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InternalError,
    IntervalExceededError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from marketplace.models.invoice import InvoiceState
from marketplace.models.job import JobState
from marketplace.services import billing
from marketplace.services.application_service import ApplicationService
from marketplace.services.invoice_service import InvoiceService
from marketplace.services.job_service import JobService
from marketplace.stores.invoices import InvoiceStore
from marketplace.stores.jobs import JobStore


class TestCreateInvoice:
    def test_partial_last_interval_scenario(self, invoice_service, ongoing_job):
        # rate=50, duration=25, interval=10
        first = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        second = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        third = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)

        assert (first.interval_number, first.value) == (1, 500.0)
        assert (second.interval_number, second.value) == (2, 500.0)
        assert (third.interval_number, third.value) == (3, 250.0)
        assert all(i.state == InvoiceState.WAITING for i in (first, second, third))

        with pytest.raises(IntervalExceededError) as exc_info:
            invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        error = exc_info.value
        assert error.kind == ErrorKind.INVALID_STATE
        assert (error.next_interval, error.max_intervals) == (4, 3)

    @given(
        duration=st.integers(min_value=1, max_value=60),
        interval=st.integers(min_value=1, max_value=20),
    )
    @settings(max_examples=25)
    def test_intervals_are_contiguous(self, duration, interval):
        database = make_database()
        try:
            job = JobService(database).create_job(EMPLOYER, rate=3.0, duration=duration, invoice_interval=interval)
            applications = ApplicationService(database)
            application = applications.apply_to_job(job.id, CONTRACTOR)
            applications.accept_application(application.id, EMPLOYER)

            invoices = InvoiceService(database)
            expected = billing.max_intervals(duration, interval)
            created = [invoices.create_invoice(job.id, CONTRACTOR) for _ in range(expected)]

            assert [i.interval_number for i in created] == list(range(1, expected + 1))
            last_hours = duration - interval * (expected - 1) if duration % interval else interval
            assert created[-1].value == pytest.approx(3.0 * last_hours)
            with pytest.raises(IntervalExceededError):
                invoices.create_invoice(job.id, CONTRACTOR)
        finally:
            database.dispose()

    def test_adjustment(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR, adjustment=-120.0)
        assert invoice.value == 380.0

    def test_value_never_negative(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR, adjustment=-10_000.0)
        assert invoice.value == 0.0

    def test_waiting_job_invalid_state(self, invoice_service, waiting_job):
        with pytest.raises(InvalidStateError):
            invoice_service.create_invoice(waiting_job.id, CONTRACTOR)

    def test_completed_job_invalid_state(self, invoice_service, job_service, ongoing_job):
        job_service.update_job_state(ongoing_job.id, EMPLOYER, JobState.COMPLETE)
        with pytest.raises(InvalidStateError):
            invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)

    @pytest.mark.parametrize("caller", [EMPLOYER, STRANGER])
    def test_only_assigned_contractor(self, invoice_service, ongoing_job, caller):
        with pytest.raises(ForbiddenError):
            invoice_service.create_invoice(ongoing_job.id, caller)
        assert invoice_service.list_invoices_by_job(ongoing_job.id, EMPLOYER) == []

    def test_unknown_job(self, invoice_service):
        with pytest.raises(NotFoundError):
            invoice_service.create_invoice("missing", CONTRACTOR)

    @pytest.mark.parametrize("adjustment", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_adjustment_rejected(self, invoice_service, ongoing_job, adjustment):
        with pytest.raises(ValidationError) as exc_info:
            invoice_service.create_invoice(ongoing_job.id, CONTRACTOR, adjustment=adjustment)
        assert exc_info.value.details["field"] == "adjustment"
        assert invoice_service.list_invoices_by_job(ongoing_job.id, CONTRACTOR) == []

    def test_check_violation_is_internal_not_conflict(self, invoice_service, ongoing_job, monkeypatch):
        monkeypatch.setattr(billing, "invoice_value", lambda rate, hours, adjustment=None: -1.0)
        with pytest.raises(InternalError):
            invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)

    def test_job_row_locked_while_invoicing(self, invoice_service, ongoing_job, monkeypatch):
        calls = []
        original = JobStore.get_by_id

        def recording_get_by_id(self, job_id, for_update=False, for_share=False):
            calls.append(for_update)
            return original(self, job_id, for_update=for_update, for_share=for_share)

        monkeypatch.setattr(JobStore, "get_by_id", recording_get_by_id)
        invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        assert calls == [True]

    def test_lost_interval_race_is_conflict(self, invoice_service, ongoing_job, monkeypatch):
        invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)

        # Another writer took interval 1 after this reader looked
        monkeypatch.setattr(InvoiceStore, "get_max_interval_for_job", lambda self, job_id: 0)
        with pytest.raises(ConflictError):
            invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)

        monkeypatch.undo()
        invoices = invoice_service.list_invoices_by_job(ongoing_job.id, CONTRACTOR)
        assert [i.interval_number for i in invoices] == [1]


class TestReadInvoices:
    def test_parties_can_read(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        assert invoice_service.get_invoice(invoice.id, EMPLOYER).id == invoice.id
        assert invoice_service.get_invoice(invoice.id, CONTRACTOR).id == invoice.id

    def test_stranger_cannot_read(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        with pytest.raises(ForbiddenError):
            invoice_service.get_invoice(invoice.id, STRANGER)
        with pytest.raises(ForbiddenError):
            invoice_service.list_invoices_by_job(ongoing_job.id, STRANGER)

    def test_unknown_invoice(self, invoice_service):
        with pytest.raises(NotFoundError):
            invoice_service.get_invoice("missing", EMPLOYER)

    def test_list_in_interval_order_with_state_filter(self, invoice_service, ongoing_job):
        created = [invoice_service.create_invoice(ongoing_job.id, CONTRACTOR) for _ in range(3)]
        invoice_service.update_invoice_state(created[1].id, CONTRACTOR, InvoiceState.COMPLETE)

        listed = invoice_service.list_invoices_by_job(ongoing_job.id, EMPLOYER)
        assert [i.interval_number for i in listed] == [1, 2, 3]

        waiting = invoice_service.list_invoices_by_job(ongoing_job.id, EMPLOYER, state=InvoiceState.WAITING)
        assert [i.interval_number for i in waiting] == [1, 3]

        page = invoice_service.list_invoices_by_job(ongoing_job.id, EMPLOYER, limit=1, offset=2)
        assert [i.interval_number for i in page] == [3]


class TestUpdateInvoiceState:
    def test_contractor_completes_invoice(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        updated = invoice_service.update_invoice_state(invoice.id, CONTRACTOR, InvoiceState.COMPLETE)
        assert updated.state == InvoiceState.COMPLETE
        assert invoice_service.get_invoice(invoice.id, EMPLOYER).state == InvoiceState.COMPLETE

    def test_employer_forbidden(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        with pytest.raises(ForbiddenError):
            invoice_service.update_invoice_state(invoice.id, EMPLOYER, InvoiceState.COMPLETE)

    def test_complete_is_terminal(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoice_service.update_invoice_state(invoice.id, CONTRACTOR, InvoiceState.COMPLETE)

        for target in InvoiceState:
            with pytest.raises(InvalidTransitionError):
                invoice_service.update_invoice_state(invoice.id, CONTRACTOR, target)

    def test_transition_checked_before_identity(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        with pytest.raises(InvalidTransitionError):
            invoice_service.update_invoice_state(invoice.id, STRANGER, InvoiceState.WAITING)

    def test_unknown_state_value(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        with pytest.raises(ValidationError):
            invoice_service.update_invoice_state(invoice.id, CONTRACTOR, "Paid")


class TestDeleteInvoice:
    def test_contractor_deletes_waiting_invoice(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoice_service.delete_invoice(invoice.id, CONTRACTOR)
        with pytest.raises(NotFoundError):
            invoice_service.get_invoice(invoice.id, CONTRACTOR)

    def test_completed_invoice_cannot_be_deleted(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoice_service.update_invoice_state(invoice.id, CONTRACTOR, InvoiceState.COMPLETE)
        with pytest.raises(InvalidStateError):
            invoice_service.delete_invoice(invoice.id, CONTRACTOR)

    def test_employer_forbidden(self, invoice_service, ongoing_job):
        invoice = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        with pytest.raises(ForbiddenError):
            invoice_service.delete_invoice(invoice.id, EMPLOYER)
        assert invoice_service.get_invoice(invoice.id, EMPLOYER).state == InvoiceState.WAITING

    def test_deleting_last_invoice_frees_its_interval(self, invoice_service, ongoing_job):
        invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        second = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoice_service.delete_invoice(second.id, CONTRACTOR)

        again = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        assert again.interval_number == 2

    def test_only_latest_invoice_can_be_deleted(self, invoice_service, ongoing_job):
        first = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)

        with pytest.raises(InvalidStateError) as exc_info:
            invoice_service.delete_invoice(first.id, CONTRACTOR)
        assert exc_info.value.details["latest_interval"] == 2

        invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoices = invoice_service.list_invoices_by_job(ongoing_job.id, CONTRACTOR)
        assert [i.interval_number for i in invoices] == [1, 2, 3]

    def test_intervals_stay_contiguous_after_deletes(self, invoice_service, ongoing_job):
        created = [invoice_service.create_invoice(ongoing_job.id, CONTRACTOR) for _ in range(3)]
        invoice_service.delete_invoice(created[2].id, CONTRACTOR)
        invoice_service.delete_invoice(created[1].id, CONTRACTOR)

        again = invoice_service.create_invoice(ongoing_job.id, CONTRACTOR)
        invoices = invoice_service.list_invoices_by_job(ongoing_job.id, CONTRACTOR)
        assert again.interval_number == 2
        assert [i.interval_number for i in invoices] == [1, 2]

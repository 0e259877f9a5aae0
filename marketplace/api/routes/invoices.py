"""
Invoice API Endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from marketplace.api.deps import get_caller_id, get_invoice_service
from marketplace.models.invoice import InvoiceState
from marketplace.schemas.invoice import InvoiceCreate, InvoiceResponse, InvoiceStateUpdate
from marketplace.services.invoice_service import InvoiceService

router = APIRouter(tags=["Invoices"])


@router.post("/invoices/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    caller_id: str = Depends(get_caller_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Raise the next interval's invoice for an ongoing job"""
    return service.create_invoice(invoice_data.job_id, caller_id, invoice_data.adjustment)


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    caller_id: str = Depends(get_caller_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_invoice(invoice_id, caller_id)


@router.patch("/invoices/{invoice_id}/state", response_model=InvoiceResponse)
def update_invoice_state(
    invoice_id: str,
    state_data: InvoiceStateUpdate,
    caller_id: str = Depends(get_caller_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_invoice_state(invoice_id, caller_id, state_data.state)


@router.delete("/invoices/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: str,
    caller_id: str = Depends(get_caller_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    service.delete_invoice(invoice_id, caller_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/jobs/{job_id}/invoices", response_model=List[InvoiceResponse])
def list_job_invoices(
    job_id: str,
    state: Optional[InvoiceState] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    caller_id: str = Depends(get_caller_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoices of a job in interval order"""
    return service.list_invoices_by_job(job_id, caller_id, state, limit, offset)

"""
Pydantic schemas for Invoice API
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from marketplace.models.invoice import InvoiceState


class InvoiceCreate(BaseModel):
    """Value and interval number are computed from the job"""
    job_id: str
    adjustment: Optional[float] = None  # Added to (or taken off) the interval's value


class InvoiceStateUpdate(BaseModel):
    state: InvoiceState


class InvoiceResponse(BaseModel):
    id: str
    job_id: str
    interval_number: int
    value: float
    state: InvoiceState
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

"""
Pydantic schemas for Job API
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from marketplace.models.job import JobState


class JobCreate(BaseModel):
    """Schema for posting a new job; value rules are enforced by JobService"""
    rate: float = Field(..., description="Currency per hour")
    duration: int = Field(..., description="Total hours")
    invoice_interval: int = Field(..., description="Hours per billing interval")


class JobDetailsUpdate(BaseModel):
    """Schema for editing an open job; omitted fields are left unchanged"""
    rate: Optional[float] = None
    duration: Optional[int] = None


class JobStateUpdate(BaseModel):
    state: JobState


class JobResponse(BaseModel):
    """Response schema for job details"""
    id: str
    rate: float
    duration: int
    invoice_interval: int
    employer_id: str
    contractor_id: Optional[str] = None
    state: JobState
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

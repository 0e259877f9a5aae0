"""
Pydantic schemas for Application API
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from marketplace.models.application import ApplicationState


class ApplicationResponse(BaseModel):
    """Response schema for applications"""
    id: str
    job_id: str
    contractor_id: str
    state: ApplicationState
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

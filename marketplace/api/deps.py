"""
FastAPI dependencies: caller identity and service wiring
"""
from fastapi import Depends, HTTPException, Request, status

from marketplace.core.config import Settings, get_settings
from marketplace.core.database import Database, get_database
from marketplace.services.application_service import ApplicationService
from marketplace.services.invoice_service import InvoiceService
from marketplace.services.job_service import JobService


def get_caller_id(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Authenticated user id, set by the gateway in front of this service"""
    caller_id = request.headers.get(settings.USER_ID_HEADER)
    if not caller_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.USER_ID_HEADER} header",
        )
    return caller_id


def get_job_service(db: Database = Depends(get_database)) -> JobService:
    return JobService(db)


def get_invoice_service(db: Database = Depends(get_database)) -> InvoiceService:
    return InvoiceService(db)


def get_application_service(db: Database = Depends(get_database)) -> ApplicationService:
    return ApplicationService(db)

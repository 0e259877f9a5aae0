from fastapi import APIRouter
from marketplace.api.routes import jobs, applications, invoices
from marketplace.schemas.common import ErrorResponse

# Error bodies documented on every engine route
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    403: {"model": ErrorResponse, "description": "Caller may not perform this operation"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Invalid state, transition or conflict"},
}

api_router = APIRouter()

# Include all route modules
api_router.include_router(jobs.router, responses=ERROR_RESPONSES)
api_router.include_router(applications.router, responses=ERROR_RESPONSES)
api_router.include_router(invoices.router, responses=ERROR_RESPONSES)

"""
Contractor Marketplace
======================
Lifecycle engine for a two-sided contractor/employer job marketplace

Flow:
1. Employer posts a job (rate, duration, invoice interval)
2. Contractors apply while the job is open
3. Employer accepts one application: the job becomes Ongoing and
   every other waiting application is rejected
4. The contractor raises one invoice per billing interval
5. The job is marked Complete, then Archived
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace import __version__
from marketplace.api import api_router
from marketplace.api.errors import register_error_handlers
from marketplace.core.config import settings
from marketplace.core.database import init_db
from marketplace.core.log import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and database on startup"""
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting %s %s", settings.APP_NAME, __version__)
    init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
## Contractor Marketplace API

Jobs, applications and interval invoices for employers and contractors.

The caller is identified by the `X-User-ID` header set by the gateway.

### Workflow:
1. Employer creates job → listed as available
2. Contractors apply
3. Employer accepts one application → job Ongoing
4. Contractor invoices each interval
5. Job marked Complete → Archived
    """,
    version=__version__,
    lifespan=lifespan
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": settings.APP_NAME}


@app.get("/")
def root():
    """Root endpoint with API info"""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "jobs": "/api/v1/jobs",
            "available_jobs": "/api/v1/jobs/available",
            "applications": "/api/v1/applications",
            "invoices": "/api/v1/invoices"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("marketplace.main:app", host="0.0.0.0", port=8000, reload=True)

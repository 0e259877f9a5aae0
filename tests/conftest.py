"""
Shared pytest fixtures for the marketplace test suite.

This module provides:
- Hypothesis profiles for the property tests
- An in-memory SQLite database per test
- The three lifecycle services bound to that database
- A FastAPI TestClient wired to the same database
- Helpers to build jobs in a given lifecycle state
"""
import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from hypothesis import HealthCheck
from hypothesis import settings as hypothesis_settings
from sqlalchemy import update
from sqlalchemy.pool import StaticPool

from marketplace.core.database import Database, create_db_engine, get_database
from marketplace.main import app
from marketplace.models.application import JobApplication
from marketplace.models.job import Job
from marketplace.services.application_service import ApplicationService
from marketplace.services.invoice_service import InvoiceService
from marketplace.services.job_service import JobService

# Register Hypothesis profiles
hypothesis_settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
hypothesis_settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
hypothesis_settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
hypothesis_settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

EMPLOYER = "employer-1"
CONTRACTOR = "contractor-1"
OTHER_CONTRACTOR = "contractor-2"
STRANGER = "stranger-1"


def make_database() -> Database:
    """Fresh in-memory database; StaticPool keeps one connection across sessions."""
    database = Database(create_db_engine("sqlite://", poolclass=StaticPool))
    database.create_all()
    return database


@pytest.fixture
def database():
    db = make_database()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def job_service(database):
    return JobService(database)


@pytest.fixture
def invoice_service(database):
    return InvoiceService(database)


@pytest.fixture
def application_service(database):
    return ApplicationService(database)


@pytest.fixture
def client(database):
    app.dependency_overrides[get_database] = lambda: database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def waiting_job(job_service):
    return job_service.create_job(EMPLOYER, rate=50.0, duration=25, invoice_interval=10)


@pytest.fixture
def ongoing_job(job_service, application_service, waiting_job):
    """The waiting job after CONTRACTOR's application was accepted"""
    application = application_service.apply_to_job(waiting_job.id, CONTRACTOR)
    return application_service.accept_application(application.id, EMPLOYER)


def set_created_at(database: Database, model, entity_id: str, when: datetime) -> None:
    """Pin a creation timestamp so list ordering does not depend on clock resolution."""
    session = database.session_factory()
    with session.begin():
        session.execute(update(model).where(model.id == entity_id).values(created_at=when))
    session.close()


def timestamps(count: int):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [base + timedelta(minutes=i) for i in range(count)]


@pytest.fixture
def pin_job_created_at(database):
    return lambda job_id, when: set_created_at(database, Job, job_id, when)


@pytest.fixture
def pin_application_created_at(database):
    return lambda application_id, when: set_created_at(database, JobApplication, application_id, when)

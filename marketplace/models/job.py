"""
Job posting database model
"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Float, Integer, String
from sqlalchemy.orm import relationship

from marketplace.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class JobState(str, enum.Enum):
    WAITING = "Waiting"    # Posted, open for applications
    ONGOING = "Ongoing"    # Contractor accepted, work in progress
    COMPLETE = "Complete"  # Work finished
    ARCHIVED = "Archived"  # Terminal


# Transitions a caller may request directly. Waiting -> Ongoing only happens
# when an application is accepted.
JOB_STATE_TRANSITIONS = {
    JobState.WAITING: frozenset(),
    JobState.ONGOING: frozenset({JobState.COMPLETE}),
    JobState.COMPLETE: frozenset({JobState.ARCHIVED}),
    JobState.ARCHIVED: frozenset(),
}


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=new_id)
    rate = Column(Float, nullable=False)                 # Currency per hour
    duration = Column(Integer, nullable=False)           # Hours
    invoice_interval = Column(Integer, nullable=False)   # Hours per billing interval
    employer_id = Column(String(64), nullable=False, index=True)
    contractor_id = Column(String(64), nullable=True, index=True)
    state = Column(
        Enum(JobState, name="job_state", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=JobState.WAITING,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    applications = relationship("JobApplication", back_populates="job")
    invoices = relationship("Invoice", back_populates="job")

    @property
    def is_available(self) -> bool:
        return self.state == JobState.WAITING and self.contractor_id is None

    def __repr__(self):
        return f"<Job {self.id} {self.state.value if self.state else None}>"

"""
Job application database model
One application per contractor per job
"""
import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from marketplace.core.database import Base
from marketplace.models.job import new_id, utcnow


class ApplicationState(str, enum.Enum):
    WAITING = "Waiting"      # Submitted, awaiting the employer
    ACCEPTED = "Accepted"    # Chosen; the job is now Ongoing
    REJECTED = "Rejected"    # Declined, or a sibling was accepted
    WITHDRAWN = "Withdrawn"  # Pulled back by the contractor


class JobApplication(Base):
    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "contractor_id", name="uq_application_job_contractor"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    contractor_id = Column(String(64), nullable=False, index=True)
    state = Column(
        Enum(
            ApplicationState,
            name="job_application_state",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ApplicationState.WAITING,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    job = relationship("Job", back_populates="applications")

    def __repr__(self):
        return f"<JobApplication {self.id} by {self.contractor_id} for Job {self.job_id}>"

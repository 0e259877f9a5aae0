"""
Invoice database model
Interval numbers are unique per job and run 1..N
"""
import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from marketplace.core.database import Base
from marketplace.models.job import new_id, utcnow


class InvoiceState(str, enum.Enum):
    WAITING = "Waiting"
    COMPLETE = "Complete"


INVOICE_STATE_TRANSITIONS = {
    InvoiceState.WAITING: frozenset({InvoiceState.COMPLETE}),
    InvoiceState.COMPLETE: frozenset(),
}


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("job_id", "interval_number", name="uq_invoice_job_interval"),
        CheckConstraint("interval_number > 0", name="ck_invoice_interval_positive"),
        CheckConstraint("value >= 0", name="ck_invoice_value_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    interval_number = Column(Integer, nullable=False)
    value = Column(Float, nullable=False)
    state = Column(
        Enum(InvoiceState, name="invoice_state", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InvoiceState.WAITING,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    job = relationship("Job", back_populates="invoices")

    def __repr__(self):
        return f"<Invoice #{self.interval_number} for Job {self.job_id}>"

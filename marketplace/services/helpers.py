"""
Helpers shared by the lifecycle services
"""
import logging
import math
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from marketplace.core.errors import (
    ConflictError,
    InternalError,
    MarketplaceError,
    NotFoundError,
    ValidationError,
)
from marketplace.models.invoice import INVOICE_STATE_TRANSITIONS, InvoiceState
from marketplace.models.job import JOB_STATE_TRANSITIONS, JobState
from marketplace.stores.errors import (
    DuplicateRecordError,
    RecordNotFoundError,
    StaleRecordError,
    StoreError,
)

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate storage failures raised inside the block into engine errors."""
    try:
        yield
    except MarketplaceError:
        raise
    except RecordNotFoundError as exc:
        raise NotFoundError(f"{exc} not found") from exc
    except DuplicateRecordError as exc:
        raise ConflictError(f"{action}: {exc} already exists") from exc
    except StaleRecordError as exc:
        raise ConflictError(f"{action}: {exc} was modified concurrently") from exc
    except (StoreError, SQLAlchemyError) as exc:
        logger.exception("Storage failure while %s", action)
        raise InternalError(f"internal error {action}") from exc


def is_valid_job_transition(current: JobState, target: JobState) -> bool:
    return target in JOB_STATE_TRANSITIONS.get(current, frozenset())


def is_valid_invoice_transition(current: InvoiceState, target: InvoiceState) -> bool:
    return target in INVOICE_STATE_TRANSITIONS.get(current, frozenset())


def require_positive(**values) -> None:
    for name, value in values.items():
        if value is None or not math.isfinite(value) or not value > 0:
            raise ValidationError(f"{name} must be a finite number greater than 0", field=name)


def validate_rate_range(min_rate: Optional[float], max_rate: Optional[float]) -> None:
    for name, value in (("min_rate", min_rate), ("max_rate", max_rate)):
        if value is not None and math.isnan(value):
            raise ValidationError(f"{name} must be a number", field=name)
    if min_rate is not None and min_rate < 0:
        raise ValidationError("min_rate must not be negative", field="min_rate")
    if max_rate is not None and max_rate < 0:
        raise ValidationError("max_rate must not be negative", field="max_rate")
    if min_rate is not None and max_rate is not None and min_rate > max_rate:
        raise ValidationError("min_rate must not exceed max_rate", field="max_rate")

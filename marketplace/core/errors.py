"""
Error taxonomy for the lifecycle engine

Every failure the engine reports is a MarketplaceError with one of a fixed
set of kinds. Callers branch on ``error.kind`` (or the concrete class),
never on the message text. Mapping kinds to transport status codes is the
job of the request layer.
"""
import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    INVALID_TRANSITION = "invalid_transition"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INTERNAL = "internal"


class MarketplaceError(Exception):
    """Base class for every error raised across the engine boundary."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "internal error"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind.value,
            "message": self.message,
            "details": {k: str(v) for k, v in self.details.items()},
        }

    def __repr__(self):
        return f"<{type(self).__name__} kind={self.kind.value} message={self.message!r}>"


class NotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "resource not found"


class ForbiddenError(MarketplaceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "forbidden"


class InvalidStateError(MarketplaceError):
    kind = ErrorKind.INVALID_STATE
    default_message = "invalid state for operation"


class InvalidTransitionError(MarketplaceError):
    kind = ErrorKind.INVALID_TRANSITION
    default_message = "invalid state transition"


class ConflictError(MarketplaceError):
    kind = ErrorKind.CONFLICT
    default_message = "conflict"


class ValidationError(MarketplaceError):
    kind = ErrorKind.VALIDATION
    default_message = "validation failed"


class InternalError(MarketplaceError):
    kind = ErrorKind.INTERNAL


class IntervalExceededError(InvalidStateError):
    """All billing intervals of the job have already been invoiced."""

    default_message = "invoice interval exceeds the job's billable intervals"

    def __init__(self, next_interval: int, max_intervals: int):
        super().__init__(
            next_interval=next_interval,
            max_intervals=max_intervals,
        )
        self.next_interval = next_interval
        self.max_intervals = max_intervals

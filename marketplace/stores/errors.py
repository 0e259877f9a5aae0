"""
Storage errors

Raised by the stores only. The services translate these into the engine's
error taxonomy so none of them reach a caller.
"""


class StoreError(Exception):
    """Base class for storage failures."""


class RecordNotFoundError(StoreError):
    """No row matched the lookup."""


class DuplicateRecordError(StoreError):
    """A uniqueness constraint rejected the write."""


class StaleRecordError(StoreError):
    """The row exists but no longer matched the write's guard condition."""

"""
Shared schemas: pagination and error bodies
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel

from marketplace.core.config import settings


class Page(BaseModel):
    """Normalized limit/offset pair for list operations"""
    limit: int
    offset: int

    @classmethod
    def of(cls, limit: Optional[int] = None, offset: Optional[int] = None) -> "Page":
        """Non-positive limits and negative offsets fall back to the defaults."""
        if limit is None or limit <= 0:
            limit = settings.DEFAULT_PAGE_LIMIT
        if offset is None or offset < 0:
            offset = 0
        return cls(limit=min(limit, settings.MAX_PAGE_LIMIT), offset=offset)


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Dict[str, Any] = {}

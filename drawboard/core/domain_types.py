"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - DrawingId wraps UUID — never pass bare strings into the persistence port
    - DrawingData is an opaque JSON object; its contents are never interpreted
    - PageWindow is always normalized: limit >= 1, offset >= 0

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - PageWindow frozen dataclass: derived per request, never persisted
"""

from dataclasses import dataclass
from typing import Any, NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

DrawingId = NewType("DrawingId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

DrawingData = dict[str, Any]

MAX_NAME_LENGTH: int = 255
DEFAULT_PAGE_LIMIT: int = 10


# ─── Pagination ──────────────────────────────────────────────────

@dataclass(frozen=True)
class PageWindow:
    """Normalized limit/offset pair for list queries."""
    limit: int = DEFAULT_PAGE_LIMIT
    offset: int = 0

    @classmethod
    def normalize(cls, limit: int | None, offset: int | None) -> "PageWindow":
        """Non-positive or absent limit -> default; negative or absent offset -> 0."""
        if limit is None or limit <= 0:
            limit = DEFAULT_PAGE_LIMIT
        if offset is None or offset < 0:
            offset = 0
        return cls(limit=limit, offset=offset)

"""Drawing Schemas — Pydantic models for the drawings API boundary.

Invariants:
    - Request bodies only check JSON shape (name is a string, data is an object);
      content rules (empty/too-long name, null data) belong to the aggregate
    - DrawingUpdate fields are all optional: absence means "keep stored value"
    - Timestamps serialize as RFC 3339 UTC with a Z suffix

Design Decisions:
    - name: str | None instead of str = "": an explicit JSON null is treated as absent,
      same as omitting the key (ADR: merge-on-absence covers both)
    - data typed dict[str, Any]: opaque document, any JSON object accepted verbatim
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, field_serializer

from drawboard.services.drawing_service import DrawingPage, DrawingView


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC, e.g. 2026-10-17T20:47:00.123456Z."""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="microseconds")
        .replace("+00:00", "Z")
    )


class DrawingCreate(BaseModel):
    """POST /drawings body."""
    name: str | None = None
    data: dict[str, Any] | None = None


class DrawingUpdate(BaseModel):
    """PUT /drawings/{id} body — either field may be omitted."""
    name: str | None = None
    data: dict[str, Any] | None = None


class DrawingResponse(BaseModel):
    """Public-facing drawing."""
    id: str
    name: str
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @classmethod
    def from_view(cls, view: DrawingView) -> "DrawingResponse":
        return cls(
            id=str(view.id),
            name=view.name,
            data=view.data,
            created_at=view.created_at,
            updated_at=view.updated_at,
        )


class DrawingListResponse(BaseModel):
    """Paginated drawing list."""
    drawings: list[DrawingResponse]
    total: int
    limit: int
    offset: int

    @classmethod
    def from_page(cls, page: DrawingPage) -> "DrawingListResponse":
        return cls(
            drawings=[DrawingResponse.from_view(v) for v in page.drawings],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )

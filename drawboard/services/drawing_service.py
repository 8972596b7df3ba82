"""Drawing Service — use cases for the Drawing aggregate atop the persistence port.

Invariants:
    - Identifiers are parsed here, before any storage call: malformed -> InvalidRequestError
    - Valid but unknown identifiers -> DrawingNotFoundError (never a silent success)
    - update is merge-on-absence: "" name keeps the stored name, None data keeps stored data
    - list total comes from an independent count query, not from len(page)
    - Errors outside the taxonomy coming out of the port are wrapped as InternalError

Design Decisions:
    - No transaction spans count + page read: under concurrent writes total and page may
      disagree (ADR: accepted eventual-consistency tradeoff, no locking in the core)
    - Delete checks existence first, then treats a zero-row delete as NotFound too:
      covers a concurrent delete between the two statements
    - DrawingView is a frozen snapshot: handlers cannot mutate the aggregate through it
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, TypeVar
from uuid import UUID

from drawboard.core.domain_types import DrawingData, DrawingId, PageWindow
from drawboard.core.drawing import Drawing
from drawboard.core.errors import (
    DrawboardError, DrawingNotFoundError, ErrorCategory, ErrorContext,
    InternalError, InvalidRequestError,
)
from drawboard.core.repository_protocols import DrawingRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DrawingView:
    """Read-only projection of a Drawing returned by every use case."""
    id: UUID
    name: str
    data: DrawingData
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_drawing(cls, drawing: Drawing) -> "DrawingView":
        return cls(
            id=drawing.id,
            name=drawing.name,
            data=drawing.data,
            created_at=drawing.created_at,
            updated_at=drawing.updated_at,
        )


@dataclass(frozen=True)
class DrawingPage:
    """One page of drawings plus the collection-wide total."""
    drawings: list[DrawingView]
    total: int
    limit: int
    offset: int


def parse_drawing_id(raw: str | None) -> DrawingId:
    """Parse a path-captured identifier. Raises InvalidRequestError."""
    if raw is None or not raw.strip():
        raise InvalidRequestError("missing drawing ID")
    try:
        return DrawingId(UUID(raw.strip()))
    except ValueError as e:
        raise InvalidRequestError("invalid drawing ID") from e


class DrawingService:
    """Orchestrates drawing use cases against a DrawingRepository."""

    def __init__(self, repository: DrawingRepository):
        self._repo = repository

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except DrawboardError:
            raise
        except Exception as e:
            logger.error(
                f"Persistence {operation} failed: {e}",
                extra={"operation": operation},
            )
            raise InternalError(
                f"failed to {operation} drawing: {e}",
                ErrorCategory.DATABASE,
                ErrorContext(operation=operation, cause=e),
            ) from e

    async def _load(self, drawing_id: DrawingId) -> Drawing:
        drawing = await self._call("find", self._repo.find_by_id(drawing_id))
        if drawing is None:
            logger.info(
                f"Drawing {drawing_id} not found",
                extra={"drawing_id": str(drawing_id)},
            )
            raise DrawingNotFoundError(str(drawing_id))
        return drawing

    async def create_drawing(
        self, name: str, data: DrawingData | None,
    ) -> DrawingView:
        logger.info(f"Creating drawing {name!r}")
        drawing = Drawing.create(name, data)
        await self._call("save", self._repo.create(drawing))
        logger.info(
            f"Drawing {drawing.id} created",
            extra={"drawing_id": str(drawing.id)},
        )
        return DrawingView.from_drawing(drawing)

    async def get_drawing(self, raw_id: str) -> DrawingView:
        drawing_id = parse_drawing_id(raw_id)
        drawing = await self._load(drawing_id)
        return DrawingView.from_drawing(drawing)

    async def list_drawings(
        self, limit: int | None = None, offset: int | None = None,
    ) -> DrawingPage:
        window = PageWindow.normalize(limit, offset)
        drawings = await self._call(
            "list", self._repo.find_page(window.limit, window.offset),
        )
        total = await self._call("count", self._repo.count())
        logger.info(
            f"Listed {len(drawings)} of {total} drawings "
            f"(limit={window.limit}, offset={window.offset})",
        )
        return DrawingPage(
            drawings=[DrawingView.from_drawing(d) for d in drawings],
            total=total,
            limit=window.limit,
            offset=window.offset,
        )

    async def update_drawing(
        self, raw_id: str, name: str | None, data: DrawingData | None,
    ) -> DrawingView:
        drawing_id = parse_drawing_id(raw_id)
        drawing = await self._load(drawing_id)

        # Merge-on-absence: empty name / null data keep what is stored
        new_name = name if name else drawing.name
        new_data = data if data is not None else drawing.data
        drawing.update(new_name, new_data)

        if not await self._call("update", self._repo.update(drawing)):
            raise DrawingNotFoundError(str(drawing_id))
        logger.info(
            f"Drawing {drawing_id} updated",
            extra={"drawing_id": str(drawing_id)},
        )
        return DrawingView.from_drawing(drawing)

    async def delete_drawing(self, raw_id: str) -> None:
        drawing_id = parse_drawing_id(raw_id)
        await self._load(drawing_id)
        if not await self._call("delete", self._repo.delete(drawing_id)):
            raise DrawingNotFoundError(str(drawing_id))
        logger.info(
            f"Drawing {drawing_id} deleted",
            extra={"drawing_id": str(drawing_id)},
        )

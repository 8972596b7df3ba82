"""Drawing Repository — SQLAlchemy implementation of the DrawingRepository protocol.

Invariants:
    - Every row leaving this module has passed Drawing.reconstruct (a corrupt row raises
      CorruptRecordError, it is never coerced into a "best effort" aggregate)
    - SQLAlchemy exceptions never escape: mapped to DatabaseError after rollback
    - Writes commit per call: one statement, one transaction (last write wins)

Design Decisions:
    - Core-level statements (insert/update/delete) over ORM unit-of-work for writes:
      rowcount tells the service whether the drawing still existed
    - Timestamps normalized to UTC on read: SQLite drops tzinfo, PostgreSQL keeps it
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from drawboard.core.domain_types import DrawingId
from drawboard.core.drawing import Drawing
from drawboard.core.errors import (
    CorruptRecordError, DatabaseError, DrawingValidationError,
)
from drawboard.models.drawing import DrawingRecord

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_aggregate(row: DrawingRecord) -> Drawing:
    try:
        return Drawing.reconstruct(
            DrawingId(row.id),
            row.name,
            row.data,
            _as_utc(row.created_at),
            _as_utc(row.updated_at),
        )
    except DrawingValidationError as e:
        logger.error(
            f"Corrupt drawing row {row.id}: {e.message}",
            extra={"drawing_id": str(row.id), "error_code": e.code},
        )
        raise CorruptRecordError(str(row.id), e.message) from e


class SqlAlchemyDrawingRepository:
    """DrawingRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(
                f"Drawing {operation} failed: {e}",
                extra={"operation": operation},
            )
            raise DatabaseError(type(e).__name__, operation) from e

    async def create(self, drawing: Drawing) -> None:
        async with self._guard("insert"):
            await self._db.execute(
                insert(DrawingRecord).values(
                    id=drawing.id,
                    name=drawing.name,
                    data=drawing.data,
                    created_at=drawing.created_at,
                    updated_at=drawing.updated_at,
                ),
            )
            await self._db.commit()

    async def find_by_id(self, drawing_id: DrawingId) -> Drawing | None:
        async with self._guard("select"):
            result = await self._db.execute(
                select(DrawingRecord).where(DrawingRecord.id == drawing_id),
            )
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return _to_aggregate(row)

    async def find_page(self, limit: int, offset: int) -> list[Drawing]:
        async with self._guard("select"):
            result = await self._db.execute(
                select(DrawingRecord)
                .order_by(DrawingRecord.created_at.desc(), DrawingRecord.id.desc())
                .limit(limit)
                .offset(offset),
            )
            rows = result.scalars().all()
        return [_to_aggregate(row) for row in rows]

    async def update(self, drawing: Drawing) -> bool:
        async with self._guard("update"):
            result = await self._db.execute(
                update(DrawingRecord)
                .where(DrawingRecord.id == drawing.id)
                .values(
                    name=drawing.name,
                    data=drawing.data,
                    updated_at=drawing.updated_at,
                ),
            )
            await self._db.commit()
        return result.rowcount > 0

    async def delete(self, drawing_id: DrawingId) -> bool:
        async with self._guard("delete"):
            result = await self._db.execute(
                delete(DrawingRecord).where(DrawingRecord.id == drawing_id),
            )
            await self._db.commit()
        return result.rowcount > 0

    async def count(self) -> int:
        async with self._guard("count"):
            result = await self._db.execute(
                select(func.count()).select_from(DrawingRecord),
            )
            return int(result.scalar_one())

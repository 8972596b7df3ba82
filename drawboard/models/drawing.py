"""Drawing ORM — persisted shape of the Drawing aggregate.

Invariants:
    - id is a UUID primary key assigned by the domain (no server default)
    - data holds the opaque document as a JSON blob (JSONB on PostgreSQL)
    - created_at / updated_at are timezone-aware and written by the domain, not the DB

Design Decisions:
    - JSON with a JSONB variant: PostgreSQL gets JSONB, SQLite test DBs get plain JSON
    - Index on created_at: list queries order by created_at DESC
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID, JSONB

from drawboard.db.base import Base


class DrawingRecord(Base):
    """Row in the drawings table."""
    __tablename__ = "drawings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    data: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    __table_args__ = (
        Index("ix_drawings_created_at", "created_at"),
    )

"""Drawing Aggregate — identity, name, opaque document and timestamps.

Invariants:
    - A Drawing instance that exists is valid: create, reconstruct and update
      all run the same validation before state becomes observable
    - Name emptiness is checked on the trimmed value, length on the raw value;
      the raw value is what gets stored
    - updated_at == created_at right after create; every update moves it strictly forward
    - data is stored verbatim — only checked to be a JSON-serializable object

Design Decisions:
    - Validate-then-commit in update(): a rejected update leaves the aggregate untouched
      (ADR: no partially-applied mutations, callers may keep using the instance)
    - Read-only properties over a mutable dataclass: update() is the only mutation path
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from drawboard.core.domain_types import DrawingData, DrawingId, MAX_NAME_LENGTH
from drawboard.core.errors import EmptyNameError, InvalidDataError, NameTooLongError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_name(name: Any) -> str:
    """Return name unchanged if valid, raise EmptyNameError / NameTooLongError otherwise."""
    if not isinstance(name, str) or not name.strip():
        raise EmptyNameError()
    if len(name) > MAX_NAME_LENGTH:
        raise NameTooLongError(MAX_NAME_LENGTH)
    return name


def validate_data(data: Any) -> DrawingData:
    """Return data unchanged if it is a strictly JSON-serializable object."""
    if data is None:
        raise InvalidDataError("data cannot be null")
    if not isinstance(data, dict):
        raise InvalidDataError("data must be a JSON object")
    try:
        json.dumps(data, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidDataError(f"cannot serialize to JSON: {e}") from e
    return data


class Drawing:
    """Drawing aggregate root."""

    __slots__ = ("_id", "_name", "_data", "_created_at", "_updated_at")

    def __init__(
        self,
        drawing_id: DrawingId,
        name: str,
        data: DrawingData,
        created_at: datetime,
        updated_at: datetime,
    ):
        self._id = drawing_id
        self._name = validate_name(name)
        self._data = validate_data(data)
        self._created_at = created_at
        self._updated_at = updated_at

    @classmethod
    def create(cls, name: str, data: DrawingData | None) -> "Drawing":
        """Build a brand-new drawing with a fresh identity and timestamps."""
        now = utc_now()
        return cls(DrawingId(uuid4()), name, data, now, now)

    @classmethod
    def reconstruct(
        cls,
        drawing_id: DrawingId,
        name: str,
        data: DrawingData | None,
        created_at: datetime,
        updated_at: datetime,
    ) -> "Drawing":
        """Rehydrate from storage. Runs the same validation as create()."""
        return cls(drawing_id, name, data, created_at, updated_at)

    def update(self, name: str, data: DrawingData | None) -> None:
        """Replace name and data, stamping a new updated_at."""
        name = validate_name(name)
        data = validate_data(data)
        now = utc_now()
        if now <= self._updated_at:
            now = self._updated_at + timedelta(microseconds=1)
        self._name = name
        self._data = data
        self._updated_at = now

    @property
    def id(self) -> DrawingId:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def data(self) -> DrawingData:
        return self._data

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def __repr__(self) -> str:
        return f"Drawing(id={self._id}, name={self._name!r})"

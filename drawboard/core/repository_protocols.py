"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Implementations return fully reconstructed (and therefore valid) Drawing aggregates
    - Storage failures surface as DatabaseError; invalid stored rows as CorruptRecordError

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - update/delete return bool (row affected) instead of raising: the service decides
      whether a zero-row write means NotFound
"""

from typing import Protocol

from drawboard.core.domain_types import DrawingId
from drawboard.core.drawing import Drawing


class DrawingRepository(Protocol):
    """Contract for drawing persistence — implemented by shell."""
    async def create(self, drawing: Drawing) -> None: ...
    async def find_by_id(self, drawing_id: DrawingId) -> Drawing | None: ...
    async def find_page(self, limit: int, offset: int) -> list[Drawing]: ...
    async def update(self, drawing: Drawing) -> bool: ...
    async def delete(self, drawing_id: DrawingId) -> bool: ...
    async def count(self) -> int: ...

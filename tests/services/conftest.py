"""Service test fixtures — in-memory DrawingRepository fake.

Invariants:
    - The fake stores plain tuples and rebuilds aggregates on read (Drawing.reconstruct),
      so service tests never share object identity with "storage"
    - calls records every port invocation for "no storage access" assertions
"""

import pytest

from drawboard.core.drawing import Drawing
from drawboard.services.drawing_service import DrawingService


class InMemoryDrawingRepository:
    def __init__(self):
        self.rows: dict = {}
        self.calls: list[tuple] = []
        self.total_override: int | None = None
        self.update_result: bool | None = None
        self.delete_result: bool | None = None

    async def create(self, drawing):
        self.calls.append(("create", drawing.id))
        self.rows[drawing.id] = (
            drawing.name, drawing.data, drawing.created_at, drawing.updated_at,
        )

    async def find_by_id(self, drawing_id):
        self.calls.append(("find_by_id", drawing_id))
        row = self.rows.get(drawing_id)
        if row is None:
            return None
        return Drawing.reconstruct(drawing_id, *row)

    async def find_page(self, limit, offset):
        self.calls.append(("find_page", limit, offset))
        ordered = sorted(self.rows.items(), key=lambda kv: kv[1][2], reverse=True)
        return [
            Drawing.reconstruct(did, *row)
            for did, row in ordered[offset:offset + limit]
        ]

    async def update(self, drawing):
        self.calls.append(("update", drawing.id))
        if self.update_result is not None:
            return self.update_result
        if drawing.id not in self.rows:
            return False
        self.rows[drawing.id] = (
            drawing.name, drawing.data, drawing.created_at, drawing.updated_at,
        )
        return True

    async def delete(self, drawing_id):
        self.calls.append(("delete", drawing_id))
        if self.delete_result is not None:
            return self.delete_result
        return self.rows.pop(drawing_id, None) is not None

    async def count(self):
        self.calls.append(("count",))
        if self.total_override is not None:
            return self.total_override
        return len(self.rows)


@pytest.fixture
def repo():
    return InMemoryDrawingRepository()


@pytest.fixture
def service(repo):
    return DrawingService(repo)

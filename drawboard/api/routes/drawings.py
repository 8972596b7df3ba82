"""Drawings — CRUD routes over DrawingService.

Invariants:
    - {drawing_id} is captured as a plain string; parsing/validation is the service's job
    - Bodies are shape-checked by Pydantic, field rules checked by api/validation.py
    - Unparseable or out-of-range (beyond signed 64-bit) limit/offset values fall
      back to defaults, they never 400 or 500
    - Routes never contain business logic (merge policy, existence checks live in the service)

Design Decisions:
    - Service built per request from the request-scoped AsyncSession (get_drawing_service)
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from drawboard.api.validation import check_create_fields, check_update_fields
from drawboard.infrastructure.database import get_db
from drawboard.infrastructure.drawing_repository import SqlAlchemyDrawingRepository
from drawboard.schemas.drawing import (
    DrawingCreate, DrawingListResponse, DrawingResponse, DrawingUpdate,
)
from drawboard.services.drawing_service import DrawingService

router = APIRouter(prefix="/drawings", tags=["drawings"])


def get_drawing_service(db: AsyncSession = Depends(get_db)) -> DrawingService:
    return DrawingService(SqlAlchemyDrawingRepository(db))


# Values outside a signed 64-bit integer cannot reach the database driver
_INT64_MIN, _INT64_MAX = -(2 ** 63), 2 ** 63 - 1


def _parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


@router.post(
    "", response_model=DrawingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_drawing(
    body: DrawingCreate,
    service: DrawingService = Depends(get_drawing_service),
):
    """Create a drawing."""
    check_create_fields(body.name, body.data)
    view = await service.create_drawing(body.name or "", body.data)
    return DrawingResponse.from_view(view)


@router.get("", response_model=DrawingListResponse)
async def list_drawings(
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    service: DrawingService = Depends(get_drawing_service),
):
    """List drawings, newest first."""
    page = await service.list_drawings(_parse_int(limit), _parse_int(offset))
    return DrawingListResponse.from_page(page)


@router.get("/{drawing_id}", response_model=DrawingResponse)
async def get_drawing(
    drawing_id: str,
    service: DrawingService = Depends(get_drawing_service),
):
    view = await service.get_drawing(drawing_id)
    return DrawingResponse.from_view(view)


@router.put("/{drawing_id}", response_model=DrawingResponse)
async def update_drawing(
    drawing_id: str,
    body: DrawingUpdate,
    service: DrawingService = Depends(get_drawing_service),
):
    """Partial update: empty name / null data keep the stored values."""
    check_update_fields(body.name, body.data)
    view = await service.update_drawing(drawing_id, body.name, body.data)
    return DrawingResponse.from_view(view)


@router.delete("/{drawing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_drawing(
    drawing_id: str,
    service: DrawingService = Depends(get_drawing_service),
):
    await service.delete_drawing(drawing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

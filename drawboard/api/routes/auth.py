"""Auth Probe — lets clients check a stored access key.

Invariants:
    - Reaching the handler means AuthMiddleware already accepted the request
      (or auth is disabled), so the answer is always {"authenticated": true}
"""

from fastapi import APIRouter

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/validate")
async def validate_access_key():
    return {"authenticated": True}

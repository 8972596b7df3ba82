"""Middleware Pipeline — ordered cross-cutting request transformers.

Invariants:
    - Order is fixed and explicit, outermost first:
      panic isolation -> request id -> access log -> CORS -> auth -> routes
    - Every stage is a pure ASGI middleware configured from Settings at construction
    - One CORSPolicy instance shared by the CORS stage and panic isolation

Design Decisions:
    - build_middleware() returns the list handed to FastAPI(middleware=...): Starlette wraps
      the first entry outermost, so list order IS execution order (no add_middleware
      calls whose reverse-registration order readers have to simulate)
"""

from starlette.middleware import Middleware

from drawboard.config import Settings
from drawboard.api.middleware.access_log import AccessLogMiddleware
from drawboard.api.middleware.auth import AuthMiddleware
from drawboard.api.middleware.cors import CORSPolicy, CORSPolicyMiddleware
from drawboard.api.middleware.panic import PanicIsolationMiddleware
from drawboard.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware


def build_middleware(settings: Settings) -> list[Middleware]:
    """The request pipeline, outermost stage first."""
    cors = CORSPolicy(
        allowed_origins=list(settings.cors_allowed_origins),
        allowed_methods=list(settings.cors_allowed_methods),
        allowed_headers=list(settings.cors_allowed_headers),
        max_age=settings.cors_max_age,
        expose_headers=[REQUEST_ID_HEADER],
    )
    return [
        Middleware(PanicIsolationMiddleware, cors=cors),
        Middleware(RequestIdMiddleware),
        Middleware(AccessLogMiddleware),
        Middleware(CORSPolicyMiddleware, policy=cors),
        Middleware(
            AuthMiddleware,
            enabled=settings.auth_enabled,
            access_key=settings.auth_access_key,
            public_paths=list(settings.public_paths),
        ),
    ]

"""Bearer Authentication — shared access key gate for every non-public path.

Invariants:
    - Skipped entirely for public paths and when auth is disabled
    - Missing header -> AUTH_REQUIRED, non-Bearer scheme -> INVALID_AUTH_FORMAT,
      wrong key -> INVALID_ACCESS_KEY; all 401 with WWW-Authenticate: Bearer
    - Key comparison is constant-time (hmac.compare_digest on bytes)
"""

import hmac

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from drawboard.api.error_handlers import error_response, log_error
from drawboard.core.errors import UnauthorizedError

BEARER_PREFIX = "Bearer "


def check_bearer(header: str | None, access_key: str) -> None:
    """Raise UnauthorizedError unless header is 'Bearer <access_key>'."""
    if not header:
        raise UnauthorizedError.missing()
    if not header.startswith(BEARER_PREFIX):
        raise UnauthorizedError.bad_scheme()
    token = header[len(BEARER_PREFIX):]
    if not hmac.compare_digest(token.encode("utf-8"), access_key.encode("utf-8")):
        raise UnauthorizedError.bad_token()


class AuthMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        enabled: bool,
        access_key: str,
        public_paths: list[str],
    ):
        self.app = app
        self.enabled = enabled
        self.access_key = access_key
        self.public_paths = frozenset(public_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or not self.enabled
            or scope["path"] in self.public_paths
        ):
            await self.app(scope, receive, send)
            return

        try:
            check_bearer(Headers(scope=scope).get("authorization"), self.access_key)
        except UnauthorizedError as exc:
            log_error(scope["path"], exc, method=scope["method"])
            response = error_response(exc)
            response.headers["WWW-Authenticate"] = "Bearer"
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

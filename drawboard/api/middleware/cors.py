"""CORS Policy — allow-list origin echo plus unconditional preflight short-circuit.

Invariants:
    - Access-Control-Allow-Origin echoes the request Origin only when it is allow-listed
      (or the allow-list contains "*"); it is never set to a non-matching origin
    - Allow-Methods, Allow-Headers, Max-Age and Expose-Headers are set on every response,
      whether or not the origin matched
    - Any OPTIONS request ends here with 204: it never reaches auth or the routes

Design Decisions:
    - Own middleware instead of starlette's CORSMiddleware: that one answers preflights
      with 200/400 depending on origin and omits headers for disallowed origins
    - Policy split from the middleware: PanicIsolationMiddleware sits outside this
      layer and stamps the same headers on the 500s it sends
"""

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class CORSPolicy:
    def __init__(
        self,
        allowed_origins: list[str],
        allowed_methods: list[str],
        allowed_headers: list[str],
        max_age: int = 3600,
        expose_headers: list[str] | None = None,
    ):
        self.allow_all = "*" in allowed_origins
        self.allowed_origins = frozenset(allowed_origins)
        self.policy_headers = {
            "Access-Control-Allow-Methods": ", ".join(allowed_methods),
            "Access-Control-Allow-Headers": ", ".join(allowed_headers),
            "Access-Control-Max-Age": str(max_age),
        }
        if expose_headers:
            self.policy_headers["Access-Control-Expose-Headers"] = ", ".join(expose_headers)

    def is_allowed(self, origin: str) -> bool:
        return self.allow_all or origin in self.allowed_origins

    def apply(self, headers: MutableHeaders, origin: str | None) -> None:
        if origin and self.is_allowed(origin):
            headers["Access-Control-Allow-Origin"] = origin
            headers.add_vary_header("Origin")
        for key, value in self.policy_headers.items():
            headers[key] = value


def request_origin(scope: Scope) -> str | None:
    return Headers(scope=scope).get("origin")


class CORSPolicyMiddleware:
    def __init__(self, app: ASGIApp, policy: CORSPolicy):
        self.app = app
        self.policy = policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = request_origin(scope)

        if scope["method"] == "OPTIONS":
            response = Response(status_code=204)
            self.policy.apply(response.headers, origin)
            await response(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                self.policy.apply(MutableHeaders(scope=message), origin)
            await send(message)

        await self.app(scope, receive, send_wrapper)

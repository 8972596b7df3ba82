"""Panic Isolation — last line of defence around the whole request pipeline.

Invariants:
    - Any Exception escaping the inner app is classified (classify_error), logged through
      the same boundary log as handled errors (status, code, cause traceback, request id)
      and never propagates to the server
    - If no response has started, the client gets 500 INTERNAL_ERROR with no internal
      detail, carrying X-Request-ID and the CORS policy headers
    - If a response already started, the failure is only logged (headers are on the wire)
    - asyncio.CancelledError is not intercepted: cancellation is not a fault

Design Decisions:
    - Pure ASGI middleware: observes http.response.start without buffering bodies
    - Request id read from scope state: this layer sits outside RequestIdMiddleware,
      which stores the id there before calling inward (the ContextVar is already reset)
"""

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from drawboard.api.error_handlers import error_response, log_error
from drawboard.api.middleware.cors import CORSPolicy, request_origin
from drawboard.api.middleware.request_id import REQUEST_ID_HEADER, scope_request_id
from drawboard.core.errors import classify_error


class PanicIsolationMiddleware:
    def __init__(self, app: ASGIApp, cors: CORSPolicy | None = None):
        self.app = app
        self.cors = cors

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            request_id = scope_request_id(scope)
            error = classify_error(exc)
            log_error(
                scope["path"], error,
                method=scope.get("method"), request_id=request_id,
            )
            if response_started:
                return
            response = error_response(error)
            if request_id:
                response.headers[REQUEST_ID_HEADER] = request_id
            if self.cors is not None:
                self.cors.apply(response.headers, request_origin(scope))
            await response(scope, receive, send)

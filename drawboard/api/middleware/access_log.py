"""Access Log — one line per request, written after it completes.

Invariants:
    - Logged on every path: success, handled error, short-circuit and unhandled exception
    - status is the one actually sent in http.response.start; a request that raised
      before any response started is logged as 500 (PanicIsolation sends that 500)
    - duration_ms measured with a monotonic clock
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class AccessLogMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            client = scope.get("client")
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            final_status = status_code if status_code is not None else 500
            logger.info(
                f"{scope['method']} {scope['path']} {final_status} {duration_ms}ms",
                extra={
                    "method": scope["method"],
                    "path": scope["path"],
                    "status": final_status,
                    "duration_ms": duration_ms,
                    "remote_addr": f"{client[0]}:{client[1]}" if client else None,
                },
            )

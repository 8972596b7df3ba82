"""Error Handlers — global exception handlers for the Drawboard API.

Invariants:
    - DrawboardError -> {error, message, details?} with the error's own status
    - RequestValidationError (bad JSON, wrong field types) -> 400 VALIDATION_ERROR with
      a {field: reason} details map
    - Every handled error is logged with status, code, message and underlying cause;
      InternalError bodies never contain the cause

Design Decisions:
    - No catch-all Exception handler here: unclassified exceptions travel up to
      PanicIsolationMiddleware, the single place that turns them into 500s
    - Log level taken from ErrorSeverity (WARNING for client errors, CRITICAL for
      InternalError), with the cause traceback at ERROR and above
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from drawboard.core.errors import DrawboardError, ErrorSeverity, ValidationFailedError
from drawboard.infrastructure.observability import get_request_id

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_drawboard_error_handler(app)
    _register_validation_error_handler(app)


_LOG_LEVELS = {
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def log_error(
    request_path: str,
    exc: DrawboardError,
    method: str | None = None,
    request_id: str | None = None,
) -> None:
    """Boundary log line for a classified error; level follows its severity."""
    extra = {
        "error_code": exc.code,
        "status": exc.http_status,
        "method": method,
        "path": request_path,
        "request_id": request_id or get_request_id(),
        "drawing_id": exc.context.drawing_id,
        "operation": exc.context.operation,
    }
    level = _LOG_LEVELS.get(exc.severity, logging.ERROR)
    if level < logging.ERROR:
        logger.log(level, f"{exc.code} on {request_path}: {exc.message}", extra=extra)
        return
    source = exc.cause or exc
    logger.log(
        level,
        f"{exc.code} on {request_path}: {exc} (cause: {exc.cause!r})",
        extra=extra,
        exc_info=(type(source), source, source.__traceback__),
    )


def error_response(exc: DrawboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_drawboard_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(DrawboardError)
    async def drawboard_error_handler(request: Request, exc: DrawboardError):
        """Handle all Drawboard domain/infrastructure errors."""
        log_error(request.url.path, exc, method=request.method)
        return error_response(exc)


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        error = ValidationFailedError(_build_details(exc))
        log_error(request.url.path, error, method=request.method)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error.to_response(),
        )


def _build_details(exc: RequestValidationError) -> dict[str, str]:
    """Collapse Pydantic's error list into {field: reason} (first reason per field)."""
    details: dict[str, str] = {}
    for e in exc.errors():
        loc = [str(part) for part in e["loc"] if part != "body"]
        details.setdefault(".".join(loc) or "body", e["msg"])
    return details

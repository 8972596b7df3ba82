"""Error Hierarchy — closed, flat taxonomy for every Drawboard failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity and http_status
    - Domain errors (400-level) are recoverable by the caller; internal errors (500) are not
    - to_response() produces the wire envelope {error, message, details?}
    - InternalError never exposes its underlying cause in to_response()

Design Decisions:
    - Single hierarchy with DrawboardError base: one FastAPI handler covers all (ADR: uniform error shape)
    - classify_error() is total: anything outside the hierarchy becomes InternalError,
      keeping the original exception as cause for the log line only
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and log level selection."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Diagnostic context attached to an error. Never serialized to clients."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    drawing_id: str | None = None
    operation: str | None = None
    cause: BaseException | None = None


class DrawboardError(Exception):
    """Base exception for all Drawboard errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        details: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.details = details

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        body: dict = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = dict(self.details)
        return body

    @property
    def cause(self) -> BaseException | None:
        return self.context.cause or self.__cause__


# ─── Request Errors (400-level) ─────────────────────────────────

class InvalidRequestError(DrawboardError):
    """Malformed identifier or missing path parameter."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class DrawingValidationError(DrawboardError):
    """Base for the aggregate's own validation failures."""
    field: str = ""


class EmptyNameError(DrawingValidationError):
    """Name is empty after trimming whitespace."""
    field = "name"

    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Drawing name cannot be empty",
            "EMPTY_NAME", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class NameTooLongError(DrawingValidationError):
    """Name exceeds the maximum length."""
    field = "name"

    def __init__(self, max_length: int, context: ErrorContext | None = None):
        super().__init__(
            f"Drawing name exceeds maximum length of {max_length} characters",
            "NAME_TOO_LONG", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.max_length = max_length


class InvalidDataError(DrawingValidationError):
    """Document is absent, not an object, or not JSON-serializable."""
    field = "data"

    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid drawing data: {reason}",
            "INVALID_DATA", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.reason = reason


class ValidationFailedError(DrawboardError):
    """Several request fields failed validation at once."""
    def __init__(self, details: dict[str, str], context: ErrorContext | None = None):
        super().__init__(
            "Invalid request data",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400, details,
        )


class UnauthorizedError(DrawboardError):
    """Missing, malformed or incorrect bearer credential."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )

    @classmethod
    def missing(cls) -> "UnauthorizedError":
        return cls("Access key required", "AUTH_REQUIRED")

    @classmethod
    def bad_scheme(cls) -> "UnauthorizedError":
        return cls(
            "Invalid authorization format. Use: Bearer <key>",
            "INVALID_AUTH_FORMAT",
        )

    @classmethod
    def bad_token(cls) -> "UnauthorizedError":
        return cls("Invalid access key", "INVALID_ACCESS_KEY")


class DrawingNotFoundError(DrawboardError):
    """Requested drawing does not exist."""
    def __init__(self, drawing_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.drawing_id = drawing_id
        super().__init__(
            "Drawing not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


# ─── Internal Errors (500-level) ────────────────────────────────

INTERNAL_ERROR_MESSAGE = "Internal server error"


class InternalError(DrawboardError):
    """Anything unclassified. The client only ever sees INTERNAL_ERROR_MESSAGE."""
    def __init__(
        self,
        detail: str = "unclassified failure",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR", category,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.detail = detail

    def __str__(self) -> str:
        return self.detail


class DatabaseError(InternalError):
    """Storage operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Database {operation} failed: {message}",
            ErrorCategory.DATABASE, ctx,
        )
        self.operation = operation


class CorruptRecordError(InternalError):
    """A stored row no longer satisfies the aggregate's invariants."""
    def __init__(self, drawing_id: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.drawing_id = drawing_id
        super().__init__(
            f"Stored drawing {drawing_id} is invalid: {reason}",
            ErrorCategory.DATABASE, ctx,
        )


def classify_error(exc: BaseException) -> DrawboardError:
    """Map any exception onto the taxonomy. Total: unknown errors become InternalError."""
    if isinstance(exc, DrawboardError):
        return exc
    return InternalError(
        f"{type(exc).__name__}: {exc}", context=ErrorContext(cause=exc),
    )

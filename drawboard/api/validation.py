"""Request Validation — collects every field violation before the service runs.

Invariants:
    - Uses the aggregate's own validate_name / validate_data: one source of truth for rules
    - Exactly one violated field -> that field's specific error (EMPTY_NAME, NAME_TOO_LONG, INVALID_DATA)
    - Two or more violated fields -> ValidationFailedError with a {field: reason} details map
    - Update checks only fields that will actually replace stored values (merge-on-absence)
"""

from typing import Any, Callable

from drawboard.core.drawing import validate_data, validate_name
from drawboard.core.errors import DrawingValidationError, ValidationFailedError


def _collect(checks: list[tuple[str, Callable[[Any], Any], Any]]) -> None:
    failures: dict[str, DrawingValidationError] = {}
    for field, check, value in checks:
        try:
            check(value)
        except DrawingValidationError as e:
            failures.setdefault(field, e)
    if len(failures) == 1:
        raise next(iter(failures.values()))
    if failures:
        raise ValidationFailedError(
            {field: e.message for field, e in failures.items()},
        )


def check_create_fields(name: str | None, data: Any) -> None:
    _collect([
        ("name", validate_name, name or ""),
        ("data", validate_data, data),
    ])


def check_update_fields(name: str | None, data: Any) -> None:
    checks: list[tuple[str, Callable[[Any], Any], Any]] = []
    if name:
        checks.append(("name", validate_name, name))
    if data is not None:
        checks.append(("data", validate_data, data))
    _collect(checks)

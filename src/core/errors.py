"""Record error kinds and their classification into structured responses."""

from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


class RecordError(Exception):
    """Base class for errors raised while declaring or constructing records."""

    def __init__(self, message: str, *, entity: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.field = field


class SchemaConstructionError(RecordError):
    """A required field was omitted or a schema declaration is defective.

    Raised during startup this is fatal and should abort initialisation.
    """


class ValidationError(RecordError):
    """A field value violates a declared rule (length, not blank, pattern, type)."""


class DomainError(ValidationError):
    """An enumerated field was given a value outside its declared set."""

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        field: str | None = None,
        value: Any = None,
        allowed: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, entity=entity, field=field)
        self.value = value
        self.allowed = allowed


class DatabaseError(Exception):
    """A storage operation failed."""


class RecordNotFoundError(DatabaseError):
    """No record exists with the requested ID."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Record errors
    ERR_REQUIRED_FIELD_MISSING = "ERR_REQUIRED_FIELD_MISSING"
    ERR_FIELD_VALIDATION = "ERR_FIELD_VALIDATION"
    ERR_VALUE_OUT_OF_DOMAIN = "ERR_VALUE_OUT_OF_DOMAIN"
    ERR_SCHEMA_DEFINITION = "ERR_SCHEMA_DEFINITION"

    # Storage errors
    ERR_RECORD_NOT_FOUND = "ERR_RECORD_NOT_FOUND"
    ERR_DATABASE = "ERR_DATABASE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    field: str | None = None


def _loc_to_field(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _error_message(error: dict[str, Any]) -> str:
    """Return the message of a single pydantic error without the 'Value error, ' prefix."""
    if error["type"] == "value_error" and "error" in error.get("ctx", {}):
        return str(error["ctx"]["error"])
    return error["msg"]


def translate_validation_error(
    exc: PydanticValidationError,
    *,
    entity: str,
    allowed_values: dict[str, tuple[str, ...]] | None = None,
) -> RecordError:
    """Translate a pydantic validation failure into a record error.

    Missing fields win over out-of-domain values, which win over any other
    validation failure.

    Args:
        exc: The pydantic error raised by the record model
        entity: Entity name used in messages (e.g., "Task")
        allowed_values: Enum value sets keyed by column name, used in DomainError messages

    Returns:
        The record error to raise, chained by the caller
    """
    errors = exc.errors()
    allowed_values = allowed_values or {}

    # only top-level fields are record fields; a nested missing key is a malformed value
    missing = [_loc_to_field(e["loc"]) for e in errors if e["type"] == "missing" and len(e["loc"]) == 1]
    if missing:
        return SchemaConstructionError(
            f"{entity} is missing required field(s): {', '.join(missing)}",
            entity=entity,
            field=missing[0],
        )

    for error in errors:
        if error["type"] == "enum":
            field = _loc_to_field(error["loc"])
            allowed = allowed_values.get(field, ())
            expected = ", ".join(allowed) if allowed else error.get("ctx", {}).get("expected", "")
            return DomainError(
                f"{entity}.{field} must be one of: {expected} (got {error['input']!r})",
                entity=entity,
                field=field,
                value=error["input"],
                allowed=allowed,
            )

    first = errors[0]
    field = _loc_to_field(first["loc"])
    if first["type"] == "extra_forbidden":
        return ValidationError(f"{entity} has no field '{field}'", entity=entity, field=field)
    return ValidationError(_error_message(first), entity=entity, field=field or None)


def classify_record_error(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised while creating, updating or loading a record

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, SchemaConstructionError):
        if exception.field is None:
            return ErrorResponse(
                code=ErrorCode.ERR_SCHEMA_DEFINITION,
                message=exception.message,
                suggestion="Fix the entity declaration and restart the application.",
                severity=ErrorSeverity.CRITICAL,
            )
        return ErrorResponse(
            code=ErrorCode.ERR_REQUIRED_FIELD_MISSING,
            message=exception.message,
            suggestion=f"Provide a value for '{exception.field}'.",
            severity=ErrorSeverity.LOW,
            field=exception.field,
        )

    if isinstance(exception, DomainError):
        allowed = ", ".join(exception.allowed) if exception.allowed else "the declared values"
        return ErrorResponse(
            code=ErrorCode.ERR_VALUE_OUT_OF_DOMAIN,
            message=exception.message,
            suggestion=f"Use one of: {allowed}.",
            severity=ErrorSeverity.LOW,
            field=exception.field,
        )

    if isinstance(exception, ValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_FIELD_VALIDATION,
            message=exception.message,
            suggestion="Correct the highlighted field and try again.",
            severity=ErrorSeverity.LOW,
            field=exception.field,
        )

    if isinstance(exception, RecordNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_RECORD_NOT_FOUND,
            message=str(exception),
            suggestion="Check the record ID and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_DATABASE,
            message="A storage error occurred.",
            suggestion="Please try again later. If the problem persists, contact support.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )

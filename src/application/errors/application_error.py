"""Application layer error types.

This module defines application-level errors that wrap domain errors and add
application-specific context (CQRS command/query execution failures).

Exports:
    ApplicationErrorCode: Application-level error code enum
    ApplicationError: Application layer error dataclass
    from_domain_error: Wrap a domain error with the matching code
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.core.errors.domain_error import DomainError
from src.domain.errors import StoreUnavailableError


class ApplicationErrorCode(Enum):
    """Application-level error codes.

    These codes represent failures at the application layer (command/query handlers),
    typically wrapping domain errors with additional context. The presentation
    layer maps each code to one HTTP status.

    Examples:
        >>> error = ApplicationError(
        ...     code=ApplicationErrorCode.NOT_FOUND,
        ...     message="Rate limit config 'api' not found",
        ... )
    """

    COMMAND_VALIDATION_FAILED = "command_validation_failed"
    COMMAND_EXECUTION_FAILED = "command_execution_failed"
    QUERY_FAILED = "query_failed"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplicationError:
    """Application layer error.

    Wraps domain errors with application-specific context. Used by command and
    query handlers to provide structured error information to the presentation layer.

    Attributes:
        code: Application error code (from ApplicationErrorCode enum)
        message: Human-readable error message
        domain_error: Original domain error (if error originated from domain layer)
        details: Additional context as key-value pairs

    Examples:
        >>> # Command validation failure
        >>> error = ApplicationError(
        ...     code=ApplicationErrorCode.COMMAND_VALIDATION_FAILED,
        ...     message="windowMs must be a positive integer",
        ...     domain_error=validation_error,
        ...     details={"field": "windowMs"},
        ... )
    """

    code: ApplicationErrorCode
    message: str
    domain_error: DomainError | None = None
    details: dict[str, Any] | None = None


_CODES: list[tuple[type[DomainError], ApplicationErrorCode]] = [
    (ValidationError, ApplicationErrorCode.COMMAND_VALIDATION_FAILED),
    (NotFoundError, ApplicationErrorCode.NOT_FOUND),
    (ConflictError, ApplicationErrorCode.CONFLICT),
    (AuthenticationError, ApplicationErrorCode.UNAUTHORIZED),
    (AuthorizationError, ApplicationErrorCode.FORBIDDEN),
    (StoreUnavailableError, ApplicationErrorCode.STORE_UNAVAILABLE),
]


def from_domain_error(error: DomainError) -> ApplicationError:
    """Wrap a domain error, choosing the code from its type.

    Validation errors carry the offending field in ``details``.
    """
    code = next(
        (code for error_type, code in _CODES if isinstance(error, error_type)),
        ApplicationErrorCode.COMMAND_EXECUTION_FAILED,
    )
    details: dict[str, Any] | None = None
    if isinstance(error, ValidationError) and error.field:
        details = {"field": error.field}
    return ApplicationError(
        code=code, message=error.message, domain_error=error, details=details
    )

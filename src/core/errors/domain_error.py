"""Base domain error class for Railway-Oriented Programming.

DomainError is the base class for every error that flows through the rate
limit service as data. Errors are returned inside ``Failure`` results and
never raised, so store outages and bad configuration payloads travel the
same path as successful values.

Usage:
    from dataclasses import dataclass

    from src.core.errors import DomainError

    @dataclass(frozen=True, slots=True, kw_only=True)
    class StoreUnavailableError(DomainError):
        backend: str
"""

from dataclasses import dataclass

from src.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base domain error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code (enum).
        message: Human-readable error message.
        details: Optional context for debugging.
    """

    code: ErrorCode
    message: str
    details: dict[str, str] | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"

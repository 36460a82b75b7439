"""Rate limit error types.

Errors raised by the rate limit infrastructure are carried as data inside
``Failure`` results. None of them is ever surfaced raw to an end user:
enforcement converts them into an allow/deny decision per failure policy.

Usage:
    from src.domain.errors import StoreUnavailableError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=StoreUnavailableError(
        code=ErrorCode.COUNTER_STORE_UNAVAILABLE,
        message="Redis connection refused",
        backend="redis",
    ))
"""

from dataclasses import dataclass

from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitError(DomainError):
    """Rate limit system failure.

    A DENIED decision is NOT an error; it is a successful check that returned
    ``allowed=False``. This type covers real failures, such as an admin reset
    that could not reach the store.
    """

    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class StoreUnavailableError(RateLimitError):
    """Counter store unreachable or returned an unusable reply.

    Attributes:
        backend: Store adapter that failed (redis, memory).
        operation: Store operation that failed (increment_and_check, ...).
    """

    backend: str
    operation: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class KeyDerivationError(RateLimitError):
    """Custom key generator failed, timed out or produced nothing.

    Always recovered by falling back to ``ip:<address>``; only logged.

    Attributes:
        config_name: Configuration whose generator failed.
    """

    config_name: str


def config_name_conflict(name: str) -> ConflictError:
    return ConflictError(
        code=ErrorCode.RATE_LIMIT_CONFIG_ALREADY_EXISTS,
        message=f"Rate limit config '{name}' already exists",
        resource_type="RateLimitConfig",
        conflicting_field="name",
    )


def config_prefix_conflict(prefix: str, owner: str | None = None) -> ConflictError:
    """Prefix equal to, or nested with, another configuration's namespace."""
    message = f"Prefix '{prefix}' is already in use"
    if owner is not None:
        message = f"Prefix '{prefix}' overlaps the namespace of config '{owner}'"
    return ConflictError(
        code=ErrorCode.RATE_LIMIT_PREFIX_CONFLICT,
        message=message,
        resource_type="RateLimitConfig",
        conflicting_field="prefix",
    )

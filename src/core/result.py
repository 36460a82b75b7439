"""Result types for railway-oriented programming.

Operations that can fail in an expected way (counter store outage, unknown
configuration, invalid payload) return a Result instead of raising. Callers
branch with structural pattern matching.

Usage:
    result = await store.increment_and_check(
        "rl:api:ip:10.0.0.1", 60_000, 100, config_name="api"
    )
    match result:
        case Success(value=counter):
            allowed = counter.allowed
        case Failure(error=error):
            logger.warning("counter_store_unavailable", error=str(error))
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


Result: TypeAlias = Success[T] | Failure[E]

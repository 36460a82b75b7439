"""Core shared kernel.

Foundational pieces used by every layer of the rate limit service:
- Result types for railway-oriented programming
- Base error classes carried inside Failure results
- Settings loaded from the environment
- Keyed asyncio locks for per-name write serialization

The core module has NO dependencies on other application layers.
"""

from src.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DomainError",
    "ErrorCode",
    "Failure",
    "NotFoundError",
    "Result",
    "Success",
    "ValidationError",
]

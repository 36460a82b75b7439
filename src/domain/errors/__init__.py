"""Domain errors package.

Usage:
    from src.domain.errors import StoreUnavailableError, KeyDerivationError
"""

from src.domain.errors.rate_limit_error import (
    KeyDerivationError,
    RateLimitError,
    StoreUnavailableError,
    config_name_conflict,
    config_prefix_conflict,
)

__all__ = [
    "KeyDerivationError",
    "RateLimitError",
    "StoreUnavailableError",
    "config_name_conflict",
    "config_prefix_conflict",
]

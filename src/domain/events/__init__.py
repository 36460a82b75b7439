"""Domain events module.

Events decouple enforcement and administration from their side effects
(logging, usage rollups, config cache invalidation).

Usage:
    >>> from src.domain.events import RateLimitConfigChanged
    >>> await event_bus.publish(
    ...     RateLimitConfigChanged(config_name="api", action="updated", changed_by="admin-1")
    ... )
"""

from src.domain.events.base_event import DomainEvent
from src.domain.events.rate_limit_events import (
    RateLimitCheckAllowed,
    RateLimitCheckDenied,
    RateLimitConfigChanged,
    RateLimitKeyReset,
    RateLimitRequestCompleted,
    RateLimitStoreFailure,
)

__all__ = [
    "DomainEvent",
    "RateLimitCheckAllowed",
    "RateLimitCheckDenied",
    "RateLimitConfigChanged",
    "RateLimitKeyReset",
    "RateLimitRequestCompleted",
    "RateLimitStoreFailure",
]

"""Domain Events Registry - Single Source of Truth.

Catalogs every rate limit domain event with the handlers it needs. The
container walks this registry to subscribe handlers, and tests walk it to
verify no event is left without its handler method.

Adding new events:
1. Define the event dataclass in rate_limit_events.py
2. Add an entry to EVENT_REGISTRY below
3. Add ``handle_<snake_case_name>`` to LoggingEventHandler
"""

import re
from dataclasses import dataclass
from enum import Enum

from src.domain.events.base_event import DomainEvent
from src.domain.events.rate_limit_events import (
    RateLimitCheckAllowed,
    RateLimitCheckDenied,
    RateLimitConfigChanged,
    RateLimitKeyReset,
    RateLimitRequestCompleted,
    RateLimitStoreFailure,
)


class EventCategory(Enum):
    """Event categories for organization and filtering."""

    ENFORCEMENT = "enforcement"
    ADMIN = "admin"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata for a domain event.

    Attributes:
        event_class: The event dataclass.
        category: Event category.
        requires_logging: LoggingEventHandler handles this event.
        requires_usage: UsageSampleRecorder handles this event.
        invalidates_config: Effective config cache drops entries on this event.
    """

    event_class: type[DomainEvent]
    category: EventCategory
    requires_logging: bool = True
    requires_usage: bool = False
    invalidates_config: bool = False


EVENT_REGISTRY: list[EventMetadata] = [
    EventMetadata(
        event_class=RateLimitCheckAllowed,
        category=EventCategory.ENFORCEMENT,
    ),
    EventMetadata(
        event_class=RateLimitCheckDenied,
        category=EventCategory.ENFORCEMENT,
        requires_usage=True,
    ),
    EventMetadata(
        event_class=RateLimitStoreFailure,
        category=EventCategory.ENFORCEMENT,
    ),
    EventMetadata(
        event_class=RateLimitRequestCompleted,
        category=EventCategory.ENFORCEMENT,
        requires_usage=True,
    ),
    EventMetadata(
        event_class=RateLimitConfigChanged,
        category=EventCategory.ADMIN,
        invalidates_config=True,
    ),
    EventMetadata(
        event_class=RateLimitKeyReset,
        category=EventCategory.ADMIN,
    ),
]


def get_all_events() -> list[type[DomainEvent]]:
    """Get all registered event classes."""
    return [meta.event_class for meta in EVENT_REGISTRY]


def get_events_requiring_handler(handler_type: str) -> list[type[DomainEvent]]:
    """Get events requiring a specific handler.

    Args:
        handler_type: "logging", "usage" or "config_cache".

    Returns:
        List of event classes requiring that handler.

    Raises:
        ValueError: If handler_type is invalid.
    """
    field_map = {
        "logging": "requires_logging",
        "usage": "requires_usage",
        "config_cache": "invalidates_config",
    }

    if handler_type not in field_map:
        raise ValueError(
            f"Invalid handler_type: {handler_type}. "
            f"Must be one of: {list(field_map.keys())}"
        )

    field = field_map[handler_type]
    return [meta.event_class for meta in EVENT_REGISTRY if getattr(meta, field)]


def handler_method_name(event_class: type[DomainEvent]) -> str:
    """``RateLimitCheckDenied`` -> ``handle_rate_limit_check_denied``."""
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", event_class.__name__).lower()
    return f"handle_{snake}"

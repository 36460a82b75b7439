"""Base domain event class.

Domain events record facts about the rate limit subsystem (a request was
denied, a configuration changed, a key was reset). They are named in past
tense and published on the event bus after the fact has happened.

Usage:
    >>> @dataclass(frozen=True, kw_only=True, slots=True)
    >>> class RateLimitKeyReset(DomainEvent):
    ...     config_name: str
    ...     key: str
    >>>
    >>> event = RateLimitKeyReset(config_name="api", key="ip:10.0.0.1")
    >>> event.event_id, event.occurred_at  # auto-generated
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    All domain events MUST:
        1. Inherit from this base class
        2. Use past tense naming (RateLimitConfigChanged, NOT ChangeConfig)
        3. Be frozen dataclasses with kw_only=True

    Attributes:
        event_id: Unique identifier for this event instance (UUID v4).
        occurred_at: When the event occurred (UTC).
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

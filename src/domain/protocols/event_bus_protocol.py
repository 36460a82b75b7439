"""Event bus protocol (port) for domain events.

Architecture:
    - Protocol (structural typing, NOT ABC inheritance)
    - Domain defines the port, infrastructure provides InMemoryEventBus
    - Container (src/core/container/events.py) wires subscriptions

Usage:
    >>> event_bus = get_event_bus()
    >>> event_bus.subscribe(RateLimitCheckDenied, recorder.handle_check_denied)
    >>> await event_bus.publish(RateLimitCheckDenied(...))
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from src.domain.events.base_event import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]
"""Async event handler: one event in, side effects only, never raises."""


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Key Requirements:
        1. **Fail-open**: One handler failure must NOT prevent other handlers
           from executing, and never reaches the publisher.
        2. **Async**: Handlers are coroutines.
        3. **Exact type routing**: Handlers only receive the type they
           subscribed to (no inheritance matching).
        4. **No ordering guarantees**: Handlers run concurrently.
    """

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register an async handler for one event type."""
        ...

    async def publish(self, event: DomainEvent) -> None:
        """Run every handler registered for ``type(event)`` concurrently.

        Handler exceptions are logged, never propagated.
        """
        ...

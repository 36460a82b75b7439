"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. All handler
subscriptions are derived from EVENT_REGISTRY at startup.
"""

from functools import lru_cache
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.domain.protocols.event_bus_protocol import EventBusProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Event handlers are registered automatically from EVENT_REGISTRY:
        1. Loop through EVENT_REGISTRY
        2. Compute the handler method name from the event class name
        3. Subscribe each handler whose ``requires_*`` flag is set

    A registry entry whose handler lacks the expected method is a wiring
    bug and fails startup.

    Returns:
        Event bus implementing EventBusProtocol.

    Usage:
        # Application Layer (direct use)
        event_bus = get_event_bus()
        await event_bus.publish(RateLimitConfigChanged(...))

        # Presentation Layer (FastAPI Depends)
        event_bus: EventBusProtocol = Depends(get_event_bus)
    """
    from src.core.container.infrastructure import get_logger
    from src.core.container.rate_limit import get_config_resolver, get_usage_recorder
    from src.domain.events.registry import EVENT_REGISTRY, handler_method_name
    from src.infrastructure.events.handlers.logging_event_handler import (
        LoggingEventHandler,
    )
    from src.infrastructure.events.in_memory_event_bus import InMemoryEventBus

    event_bus = InMemoryEventBus(logger=get_logger())

    subscribers: dict[str, Any] = {
        "requires_logging": LoggingEventHandler(logger=get_logger()),
        "requires_usage": get_usage_recorder(),
        "invalidates_config": get_config_resolver(),
    }

    for metadata in EVENT_REGISTRY:
        event_class = metadata.event_class
        method_name = handler_method_name(event_class)

        for flag, handler in subscribers.items():
            if not getattr(metadata, flag):
                continue
            handler_method = getattr(handler, method_name, None)
            if handler_method is None:
                raise RuntimeError(
                    f"Missing event handler\n"
                    f"Event: {event_class.__name__}\n"
                    f"Expected method: {type(handler).__name__}.{method_name}"
                )
            event_bus.subscribe(event_class, handler_method)

    return event_bus

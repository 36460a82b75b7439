"""Infrastructure event implementations.

Event Bus:
    - InMemoryEventBus: Per-process event bus with fail-open behavior

Event Handlers:
    - LoggingEventHandler: Structured logging for all rate limit events
"""

from src.infrastructure.events.in_memory_event_bus import InMemoryEventBus

__all__ = [
    "InMemoryEventBus",
]

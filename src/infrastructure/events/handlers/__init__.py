"""Event handlers for infrastructure concerns.

Handlers:
    - LoggingEventHandler: Structured logging for all rate limit events

The usage rollup and the effective config cache also subscribe to events;
they live beside the enforcement code in src/infrastructure/rate_limit/.
"""

from src.infrastructure.events.handlers.logging_event_handler import (
    LoggingEventHandler,
)

__all__ = ["LoggingEventHandler"]

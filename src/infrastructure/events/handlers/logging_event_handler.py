"""Logging event handler for rate limit domain events.

Log Levels:
    - DEBUG: Allowed checks and completed requests (high volume)
    - INFO: Configuration changes and resets
    - WARNING: Denials and counter store failures

Structured Fields:
    - event_id: UUID for correlation
    - occurred_at: ISO 8601 timestamp (UTC)
    - config_name, key and event-specific fields

Usage:
    >>> handler = LoggingEventHandler(logger=get_logger())
    >>> event_bus.subscribe(RateLimitCheckDenied, handler.handle_rate_limit_check_denied)
"""

from src.domain.events.rate_limit_events import (
    RateLimitCheckAllowed,
    RateLimitCheckDenied,
    RateLimitConfigChanged,
    RateLimitKeyReset,
    RateLimitRequestCompleted,
    RateLimitStoreFailure,
)
from src.domain.protocols.logger_protocol import LoggerProtocol


class LoggingEventHandler:
    """Structured logging of rate limit events.

    Method names follow ``handle_<snake_case_event_name>`` so the container
    can subscribe them from the event registry.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    # =========================================================================
    # Enforcement
    # =========================================================================

    async def handle_rate_limit_check_allowed(
        self, event: RateLimitCheckAllowed
    ) -> None:
        self._logger.debug(
            "rate_limit_check_allowed",
            event_id=str(event.event_id),
            config_name=event.config_name,
            key=event.key,
            current_count=event.current_count,
            max_allowed=event.max_allowed,
            source=event.source,
        )

    async def handle_rate_limit_check_denied(self, event: RateLimitCheckDenied) -> None:
        """Log a throttled request (WARNING level)."""
        self._logger.warning(
            "rate_limit_check_denied",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            config_name=event.config_name,
            key=event.key,
            outcome=event.outcome,
            current_count=event.current_count,
            max_allowed=event.max_allowed,
            retry_after=event.retry_after,
            ip_address=event.ip_address,
            path=event.path,
        )

    async def handle_rate_limit_store_failure(
        self, event: RateLimitStoreFailure
    ) -> None:
        """Log a counter store outage and the policy that was applied."""
        self._logger.warning(
            "rate_limit_store_failure",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            config_name=event.config_name,
            failure_mode=event.failure_mode,
            error=event.error,
        )

    async def handle_rate_limit_request_completed(
        self, event: RateLimitRequestCompleted
    ) -> None:
        self._logger.debug(
            "rate_limit_request_completed",
            event_id=str(event.event_id),
            config_name=event.config_name,
            key=event.key,
            status_code=event.status_code,
            decremented=event.decremented,
        )

    # =========================================================================
    # Administration
    # =========================================================================

    async def handle_rate_limit_config_changed(
        self, event: RateLimitConfigChanged
    ) -> None:
        """Log a configuration mutation (INFO level)."""
        self._logger.info(
            "rate_limit_config_changed",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            config_name=event.config_name,
            action=event.action,
            changed_by=event.changed_by,
            changed_fields=list(event.changed_fields),
        )

    async def handle_rate_limit_key_reset(self, event: RateLimitKeyReset) -> None:
        """Log a manual or automatic counter reset (INFO level)."""
        self._logger.info(
            "rate_limit_key_reset",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            config_name=event.config_name,
            key=event.key,
            keys_removed=event.keys_removed,
            reset_by=event.reset_by,
        )

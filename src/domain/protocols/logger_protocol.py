"""LoggerProtocol definition for structured logging.

Backend-agnostic structured logging port. Every log call is a short
snake_case event name plus key-value context. Never log bearer tokens or
CSRF tokens.

Log Levels:
    - DEBUG: Allowed checks, cache hits
    - INFO: Configuration changes, resets, startup
    - WARNING: Denials, fail-open store outages, key template fallbacks
    - ERROR: Operation failed, system continues
    - CRITICAL: System-wide failure

Usage:
    from src.core.container import get_logger

    logger = get_logger()
    logger.warning("rate_limit_denied", config="auth", key="ip:10.0.0.1")

    request_logger = logger.bind(trace_id=trace_id)
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters."""

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message.

        Args:
            message: Event name.
            error: Optional exception; adapters add error_type and error_message.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message for system-wide failures."""
        ...

    def bind(self, **context: Any) -> "LoggerProtocol":
        """Return a new logger with permanently bound context.

        The original logger is unchanged.
        """
        ...

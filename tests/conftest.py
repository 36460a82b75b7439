"""Pytest configuration shared by all test suites.

This configuration ensures:
1. Settings load without a .env file (test defaults below)
2. Tests never need a running Redis or PostgreSQL
   (memory counter store, in-memory SQLite)
3. Domain test helpers are importable from one place
"""

import os

# Must run before anything imports src.core.config
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes!!")
os.environ.setdefault("RATE_LIMIT_STORE", "memory")
os.environ.setdefault("RATE_LIMIT_CONFIG_CACHE_TTL_SECONDS", "0")
os.environ.setdefault("RATE_LIMIT_SEED_DEFAULTS", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import UTC, datetime  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from uuid_extensions import uuid7  # noqa: E402

from src.domain.entities.rate_limit_config import RateLimitConfig  # noqa: E402
from src.domain.enums import KeyStrategy, RateLimitType  # noqa: E402
from src.domain.value_objects.request_context import RequestContext  # noqa: E402


# =============================================================================
# Test helpers
# =============================================================================


class FakeClock:
    """Controllable epoch-seconds clock for stores and the enforcer."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingEventBus:
    """Event bus double that keeps every published event."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def subscribe(self, event_type: type, handler: Any) -> None:
        pass

    async def publish(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


def create_config(
    name: str = "api",
    *,
    max: int = 5,
    window_ms: int = 60_000,
    key_strategy: KeyStrategy = KeyStrategy.IP,
    type: RateLimitType = RateLimitType.API,
    **overrides: Any,
) -> RateLimitConfig:
    """Helper to create a RateLimitConfig for testing.

    Usage:
        config = create_config()
        config = create_config("auth", max=3, type=RateLimitType.AUTH)
    """
    now = datetime.now(UTC)
    values: dict[str, Any] = {
        "id": uuid7(),
        "name": name,
        "display_name": name.title(),
        "type": type,
        "window_ms": window_ms,
        "max": max,
        "key_strategy": key_strategy,
        "created_by": "admin-1",
        "updated_by": "admin-1",
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return RateLimitConfig(**values)


def create_context(**overrides: Any) -> RequestContext:
    """Helper to create a RequestContext (IP 10.0.0.1 by default)."""
    values: dict[str, Any] = {"ip": "10.0.0.1", "method": "GET", "path": "/api/v1/x"}
    values.update(overrides)
    return RequestContext(**values)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double accepting the LoggerProtocol calls."""
    return MagicMock()


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Tests against in-memory SQLite and fakeredis"
    )
    config.addinivalue_line("markers", "api: HTTP tests through the FastAPI app")

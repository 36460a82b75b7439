"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Database (PostgreSQL / SQLite)
- Redis client for the shared counter store
- Counter store (Redis or in-process)
- Token verification (JWT)
- Per-name configuration write locks
- Logging (console)
"""

from functools import lru_cache
from typing import TYPE_CHECKING, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.keyed_lock import KeyedLock
from src.infrastructure.persistence.database import Database

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from src.domain.protocols.counter_store_protocol import CounterStoreProtocol
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.token_validation_protocol import (
        TokenValidationProtocol,
    )


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_database() -> Database:
    """Get database manager singleton (app-scoped).

    Returns Database instance with connection pool.
    Use get_db_session() for per-request sessions.

    Usage:
        # Application Layer (direct use)
        db = get_database()

        # Presentation Layer - use get_db_session() instead
    """
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_redis() -> "Redis":
    """Get Redis client singleton (app-scoped).

    Connection pool is shared across the entire process. Responses are
    decoded so Lua script results come back as ``str``.
    """
    from redis.asyncio import ConnectionPool, Redis

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=50,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        socket_keepalive=True,
    )
    return Redis(connection_pool=pool)


@lru_cache()
def get_counter_store() -> "CounterStoreProtocol":
    """Get counter store singleton (app-scoped).

    Container owns adapter selection based on RATE_LIMIT_STORE:
        - 'redis': RedisCounterStore (shared across API processes)
        - 'memory': InMemoryCounterStore (single process, local runs)

    Returns:
        Counter store implementing CounterStoreProtocol.
    """
    if settings.rate_limit_store == "memory":
        from src.infrastructure.rate_limit import InMemoryCounterStore

        return InMemoryCounterStore()

    from src.infrastructure.rate_limit import RedisCounterStore

    return RedisCounterStore(
        redis_client=get_redis(),
        scan_batch_size=settings.rate_limit_scan_batch_size,
    )


@lru_cache()
def get_config_locks() -> KeyedLock:
    """Per-configuration-name write locks shared by all admin handlers."""
    return KeyedLock()


# ============================================================================
# Request-Scoped Dependencies (Per-Request)
# ============================================================================


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session (request-scoped).

    Creates new session per request with automatic transaction management:
        - Commits on success
        - Rolls back on exception
        - Always closes session

    Yields:
        Database session for request duration.
    """
    db = get_database()
    async with db.get_session() as session:
        yield session


# ============================================================================
# Security Services (Application-Scoped)
# ============================================================================


@lru_cache()
def get_token_service() -> "TokenValidationProtocol":
    """Get JWT verification service singleton (app-scoped).

    Tokens are issued by the identity service; this process only verifies
    them with the shared secret.
    """
    from src.infrastructure.security import JWTService

    return JWTService(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
    )


# ============================================================================
# Logging (Application-Scoped)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from src.infrastructure.logging.console_adapter import ConsoleAdapter

    env = (
        settings.environment.value
        if hasattr(settings.environment, "value")
        else str(settings.environment)
    )
    return ConsoleAdapter(use_json=env != "development", level=settings.log_level)

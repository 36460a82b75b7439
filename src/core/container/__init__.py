"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from src.core.container import get_event_bus, get_enforcer, handler_factory

The container is organized into modules by concern:
- infrastructure: Core services (database, redis, counter store, logging)
- events: Event bus and subscriptions
- rate_limit: Enforcement path (resolver, key engine, enforcer, usage)
- handler_factory: Auto-wired CQRS handler dependencies
"""

# Infrastructure services
from src.core.container.infrastructure import (
    get_config_locks,
    get_counter_store,
    get_database,
    get_db_session,
    get_logger,
    get_redis,
    get_token_service,
)

# Event bus
from src.core.container.events import get_event_bus

# Enforcement
from src.core.container.rate_limit import (
    get_config_resolver,
    get_enforcer,
    get_key_engine,
    get_usage_recorder,
)

# Handler factory
from src.core.container.handler_factory import (
    clear_handler_factory_cache,
    create_handler,
    handler_factory,
)

__all__ = [
    # Infrastructure
    "get_config_locks",
    "get_counter_store",
    "get_database",
    "get_db_session",
    "get_logger",
    "get_redis",
    "get_token_service",
    # Events
    "get_event_bus",
    # Enforcement
    "get_config_resolver",
    "get_enforcer",
    "get_key_engine",
    "get_usage_recorder",
    # Handler factory
    "clear_handler_factory_cache",
    "create_handler",
    "handler_factory",
]

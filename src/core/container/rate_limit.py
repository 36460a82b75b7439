"""Rate limit enforcement dependency factories.

Application-scoped singletons wiring the request-time enforcement path:
- Effective config resolver (TTL cache over the config table)
- Key strategy engine (built-in strategies plus template generators)
- Enforcer used by RateLimitMiddleware
- Usage sample recorder (hourly rollups for analytics)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import settings
from src.core.container.infrastructure import (
    get_counter_store,
    get_database,
    get_logger,
)

if TYPE_CHECKING:
    from src.infrastructure.rate_limit import (
        EffectiveConfigResolver,
        KeyStrategyEngine,
        RateLimitEnforcer,
        UsageSampleRecorder,
    )


@lru_cache()
def get_config_resolver() -> "EffectiveConfigResolver":
    """Get effective config resolver singleton (app-scoped).

    Entries are cached for RATE_LIMIT_CONFIG_CACHE_TTL_SECONDS and dropped
    early when a RateLimitConfigChanged event is published in this process.
    """
    from src.infrastructure.rate_limit import EffectiveConfigResolver

    return EffectiveConfigResolver(
        database=get_database(),
        environment=settings.environment.value,
        ttl_seconds=settings.rate_limit_config_cache_ttl_seconds,
    )


@lru_cache()
def get_key_engine() -> "KeyStrategyEngine":
    """Get key strategy engine singleton (app-scoped)."""
    from src.infrastructure.rate_limit import KeyStrategyEngine, TemplateKeyGenerator

    return KeyStrategyEngine(
        custom_generator=TemplateKeyGenerator(),
        logger=get_logger(),
        timeout_ms=settings.rate_limit_custom_key_timeout_ms,
    )


@lru_cache()
def get_enforcer() -> "RateLimitEnforcer":
    """Get rate limit enforcer singleton (app-scoped).

    Usage:
        enforcer = get_enforcer()
        decision = await enforcer.check("api", context)
    """
    from src.core.container.events import get_event_bus
    from src.infrastructure.rate_limit import RateLimitEnforcer

    return RateLimitEnforcer(
        resolver=get_config_resolver(),
        key_engine=get_key_engine(),
        store=get_counter_store(),
        event_bus=get_event_bus(),
        logger=get_logger(),
    )


@lru_cache()
def get_usage_recorder() -> "UsageSampleRecorder":
    """Get usage sample recorder singleton (app-scoped).

    The recorder buffers per-hour counts in memory; the application
    lifespan runs its periodic flush task.
    """
    from src.infrastructure.rate_limit import UsageSampleRecorder

    return UsageSampleRecorder(database=get_database(), logger=get_logger())

"""Rate limit infrastructure adapters.

Exports:
    RedisCounterStore: Shared counter store backed by Redis Lua scripts.
    InMemoryCounterStore: Single-process counter store (tests, dev).
    TemplateKeyGenerator: Evaluates custom key templates under a timeout.
    KeyStrategyEngine: Derives bucket keys from the key strategy.
    EffectiveConfigResolver: TTL-cached effective configuration lookup.
    RateLimitEnforcer: Request-time allow/deny decisions.
    UsageSampleRecorder: Hourly usage rollups for analytics.
"""

from src.infrastructure.rate_limit.config_resolver import EffectiveConfigResolver
from src.infrastructure.rate_limit.enforcer import RateLimitEnforcer
from src.infrastructure.rate_limit.in_memory_counter_store import (
    InMemoryCounterStore,
)
from src.infrastructure.rate_limit.key_strategy import KeyStrategyEngine
from src.infrastructure.rate_limit.redis_counter_store import RedisCounterStore
from src.infrastructure.rate_limit.template_key_generator import (
    TemplateKeyGenerator,
)
from src.infrastructure.rate_limit.usage_recorder import UsageSampleRecorder

__all__ = [
    "EffectiveConfigResolver",
    "InMemoryCounterStore",
    "KeyStrategyEngine",
    "RateLimitEnforcer",
    "RedisCounterStore",
    "TemplateKeyGenerator",
    "UsageSampleRecorder",
]

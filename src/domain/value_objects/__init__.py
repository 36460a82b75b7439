"""Domain value objects.

Immutable values used by key derivation, override resolution, counter
store results and enforcement decisions.
"""

from src.domain.value_objects.counter import (
    ActiveLimitRecord,
    CounterResult,
    CounterSnapshot,
)
from src.domain.value_objects.effective_config import EffectiveRateLimitConfig
from src.domain.value_objects.key_template import KeyTemplate
from src.domain.value_objects.limit_override import (
    GLOBAL_SOURCE,
    OVERRIDE_PRECEDENCE,
    ApplicationLimit,
    ApplicationOverrideProvider,
    ComponentLimit,
    ComponentOverrideProvider,
    EnvironmentOverride,
    OverrideProvider,
    RoleLimit,
    RoleOverrideProvider,
    resolve_max,
)
from src.domain.value_objects.rate_limit_decision import (
    DecisionOutcome,
    RateLimitDecision,
)
from src.domain.value_objects.request_context import (
    RequestContext,
    RequestContextView,
)

__all__ = [
    "ActiveLimitRecord",
    "ApplicationLimit",
    "ApplicationOverrideProvider",
    "ComponentLimit",
    "ComponentOverrideProvider",
    "CounterResult",
    "CounterSnapshot",
    "DecisionOutcome",
    "EffectiveRateLimitConfig",
    "EnvironmentOverride",
    "GLOBAL_SOURCE",
    "KeyTemplate",
    "OVERRIDE_PRECEDENCE",
    "OverrideProvider",
    "RateLimitDecision",
    "RequestContext",
    "RequestContextView",
    "RoleLimit",
    "RoleOverrideProvider",
    "resolve_max",
]

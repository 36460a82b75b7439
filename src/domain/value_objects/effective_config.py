"""Environment-resolved configuration consumed by enforcement.

The enforcer never reads a stored RateLimitConfig directly. It reads this
snapshot, produced by ``RateLimitConfig.resolve_effective(environment)``,
so environment gating happens in exactly one place.
"""

from dataclasses import dataclass

from src.domain.enums import FailureMode, KeyStrategy, RateLimitType
from src.domain.value_objects.limit_override import OverrideProvider, resolve_max
from src.domain.value_objects.request_context import RequestContext


@dataclass(frozen=True, slots=True, kw_only=True)
class EffectiveRateLimitConfig:
    """Immutable snapshot of one configuration for one environment.

    Attributes:
        name: Configuration name.
        type: Traffic class.
        environment: Environment the snapshot was resolved for.
        enabled: Base ``enabled`` AND the environment override's ``enabled``.
        window_ms: Environment window or the base window.
        max: Environment max or the base max (before per-dimension overrides).
        key_strategy: Key derivation strategy.
        custom_key_generator: Key template for the custom strategy.
        prefix: Counter key namespace.
        skip_successful_requests: Decrement after responses below 400.
        skip_failed_requests: Decrement after responses of 400 and above.
        exec_evenly: Enforce minimum spacing instead of a burst window.
        block_duration_ms: Extra lockout once the limit is hit.
        message: Text returned to throttled callers.
        failure_mode: Resolved store outage policy.
        providers: Override providers in precedence order.
    """

    name: str
    type: RateLimitType
    environment: str
    enabled: bool
    window_ms: int
    max: int
    key_strategy: KeyStrategy
    prefix: str
    message: str
    failure_mode: FailureMode
    custom_key_generator: str | None = None
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False
    exec_evenly: bool = False
    block_duration_ms: int = 0
    providers: tuple[OverrideProvider, ...] = ()

    def max_for(self, context: RequestContext) -> tuple[int, str]:
        """Effective max for a request and the dimension that supplied it."""
        return resolve_max(self.providers, context, self.max)

    @property
    def fails_closed(self) -> bool:
        return self.failure_mode is FailureMode.CLOSED

    def store_key(self, key: str) -> str:
        """Full counter store key for a derived key."""
        return f"{self.prefix}{key}"

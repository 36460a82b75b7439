"""Rate limit enforcer.

The request-time decision point used by RateLimitMiddleware:

    1. Resolve the effective config (disabled -> pass-through)
    2. Derive the bucket key (never fails, falls back to IP)
    3. Pick the max (component > role > application > global)
    4. Reject without counting if the key carries a block marker
    5. Increment-and-check (or even spacing when execEvenly is set)
    6. On a window denial with blockDurationMs > 0, set the block marker
    7. On counter store failure, apply the config's failure mode

After the response, ``record_outcome`` retroactively removes the request
from the count when a skip flag matches the response status.
"""

from collections.abc import Callable
from time import time

from src.core.result import Failure, Success
from src.domain.errors import StoreUnavailableError
from src.domain.events.rate_limit_events import (
    RateLimitCheckAllowed,
    RateLimitCheckDenied,
    RateLimitRequestCompleted,
    RateLimitStoreFailure,
)
from src.domain.protocols import (
    CounterStoreProtocol,
    EventBusProtocol,
    LoggerProtocol,
)
from src.domain.value_objects.effective_config import EffectiveRateLimitConfig
from src.domain.value_objects.rate_limit_decision import (
    DecisionOutcome,
    RateLimitDecision,
)
from src.domain.value_objects.request_context import RequestContext
from src.infrastructure.rate_limit.config_resolver import EffectiveConfigResolver
from src.infrastructure.rate_limit.key_strategy import KeyStrategyEngine

# Upper bound on the retry hint for fail-closed denials.
_FAIL_CLOSED_MAX_RETRY_MS = 60_000


class RateLimitEnforcer:
    """Applies one configuration to one request.

    Args:
        resolver: Effective config lookup (TTL cached).
        key_engine: Bucket key derivation.
        store: Counter store.
        event_bus: Receives allowed/denied/failure/completed events.
        logger: Structured logger.
        clock: Epoch seconds (injectable for tests).
    """

    def __init__(
        self,
        *,
        resolver: EffectiveConfigResolver,
        key_engine: KeyStrategyEngine,
        store: CounterStoreProtocol,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        clock: Callable[[], float] = time,
    ) -> None:
        self._resolver = resolver
        self._key_engine = key_engine
        self._store = store
        self._event_bus = event_bus
        self._logger = logger
        self._clock = clock

    async def check(
        self, config_name: str, context: RequestContext
    ) -> RateLimitDecision | None:
        """Decide whether a request may proceed.

        Returns:
            The decision, or None when no configuration named ``config_name``
            exists (the request is not rate limited).
        """
        config = await self._resolver.resolve(config_name)
        if config is None:
            self._logger.debug("rate_limit_config_missing", config=config_name)
            return None
        if not config.enabled:
            return RateLimitDecision(
                allowed=True,
                outcome=DecisionOutcome.DISABLED,
                config_name=config.name,
            )

        key = await self._key_engine.derive_key(config, context)
        store_key = config.store_key(key)
        max_allowed, source = config.max_for(context)
        base = {
            "config_name": config.name,
            "key": key,
            "store_key": store_key,
            "max_allowed": max_allowed,
            "source": source,
            "message": config.message,
            "skip_successful_requests": config.skip_successful_requests,
            "skip_failed_requests": config.skip_failed_requests,
        }

        match await self._store.blocked_until(store_key):
            case Failure(error=error):
                return await self._store_failure(config, error, base, context)
            case Success(value=until) if until is not None:
                decision = RateLimitDecision(
                    allowed=False,
                    outcome=DecisionOutcome.BLOCKED,
                    reset_time=until,
                    now_ms=self._now_ms(),
                    **base,
                )
                await self._publish_denied(decision, context)
                return decision

        if config.exec_evenly:
            result = await self._store.schedule_even_distribution(
                store_key, config.window_ms, max_allowed, config_name=config.name
            )
        else:
            result = await self._store.increment_and_check(
                store_key, config.window_ms, max_allowed, config_name=config.name
            )

        match result:
            case Failure(error=error):
                return await self._store_failure(config, error, base, context)
            case Success(value=counter):
                pass

        now = self._now_ms()
        if counter.allowed:
            decision = RateLimitDecision(
                allowed=True,
                outcome=DecisionOutcome.ALLOWED,
                current_count=counter.current_count,
                reset_time=counter.reset_time,
                now_ms=now,
                counted=True,
                **base,
            )
            await self._event_bus.publish(
                RateLimitCheckAllowed(
                    config_name=config.name,
                    key=key,
                    current_count=counter.current_count,
                    max_allowed=max_allowed,
                    source=source,
                )
            )
            return decision

        if counter.retry_after_ms > 0:
            decision = RateLimitDecision(
                allowed=False,
                outcome=DecisionOutcome.SPACED,
                current_count=counter.current_count,
                reset_time=now + counter.retry_after_ms,
                now_ms=now,
                **base,
            )
        else:
            reset_time = counter.reset_time
            if config.block_duration_ms > 0:
                reset_time = max(
                    reset_time, await self._block(store_key, config.block_duration_ms)
                )
            decision = RateLimitDecision(
                allowed=False,
                outcome=DecisionOutcome.LIMITED,
                current_count=counter.current_count,
                reset_time=reset_time,
                now_ms=now,
                counted=True,
                **base,
            )
        await self._publish_denied(decision, context)
        return decision

    async def record_outcome(
        self, decision: RateLimitDecision, status_code: int
    ) -> None:
        """Apply skip flags once the response status is known."""
        decremented = False
        if decision.should_decrement(status_code):
            match await self._store.decrement(decision.store_key):
                case Failure(error=error):
                    self._logger.warning(
                        "rate_limit_decrement_failed",
                        config=decision.config_name,
                        key=decision.key,
                        error=error.message,
                    )
                case Success():
                    decremented = True

        await self._event_bus.publish(
            RateLimitRequestCompleted(
                config_name=decision.config_name,
                key=decision.key,
                status_code=status_code,
                decremented=decremented,
            )
        )

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _block(self, store_key: str, duration_ms: int) -> int:
        match await self._store.block(store_key, duration_ms):
            case Success(value=until):
                return until
            case Failure(error=error):
                self._logger.warning(
                    "rate_limit_block_failed", key=store_key, error=error.message
                )
        return 0

    async def _store_failure(
        self,
        config: EffectiveRateLimitConfig,
        error: StoreUnavailableError,
        base: dict[str, object],
        context: RequestContext,
    ) -> RateLimitDecision:
        now = self._now_ms()
        await self._event_bus.publish(
            RateLimitStoreFailure(
                config_name=config.name,
                failure_mode=config.failure_mode.value,
                error=error.message,
            )
        )
        if config.fails_closed:
            decision = RateLimitDecision(
                allowed=False,
                outcome=DecisionOutcome.STORE_FAILED_CLOSED,
                reset_time=now + min(config.window_ms, _FAIL_CLOSED_MAX_RETRY_MS),
                now_ms=now,
                **base,  # type: ignore[arg-type]
            )
            await self._publish_denied(decision, context)
            return decision

        self._logger.warning(
            "rate_limit_fail_open",
            config=config.name,
            backend=error.backend,
            operation=error.operation,
            error=error.message,
        )
        return RateLimitDecision(
            allowed=True,
            outcome=DecisionOutcome.STORE_FAILED_OPEN,
            now_ms=now,
            **base,  # type: ignore[arg-type]
        )

    async def _publish_denied(
        self, decision: RateLimitDecision, context: RequestContext
    ) -> None:
        await self._event_bus.publish(
            RateLimitCheckDenied(
                config_name=decision.config_name,
                key=decision.key,
                outcome=decision.outcome.value,
                current_count=decision.current_count,
                max_allowed=decision.max_allowed,
                retry_after=decision.retry_after_seconds,
                ip_address=context.ip,
                path=context.path,
            )
        )

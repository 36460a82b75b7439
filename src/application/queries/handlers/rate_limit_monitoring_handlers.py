"""Live counter query handlers.

Read the counter store through its non-mutating operations only
(``list_active``, ``peek``); inspecting a key never changes its count or
reset time.
"""

import math
from collections.abc import Callable
from time import time

from src.application.dtos import ActiveLimit, ConfigKeyStats, KeyStatus
from src.application.errors import ApplicationError, from_domain_error
from src.application.queries.rate_limit_queries import (
    GetRateLimitKeyStatus,
    GetRateLimitStats,
    ListActiveLimits,
)
from src.application.services import (
    attribute_records,
    find_config,
    store_key_for,
    top_by_count,
)
from src.core.result import Failure, Result, Success
from src.domain.enums import LimitState
from src.domain.protocols import CounterStoreProtocol, RateLimitConfigRepository


class ListActiveLimitsHandler:
    """Handler for the tracked-keys listing."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store

    async def handle(
        self, query: ListActiveLimits
    ) -> Result[list[ActiveLimit], ApplicationError]:
        """Handle listing query.

        Returns:
            Success(list) sorted by current count, or Failure with NOT_FOUND
            (unknown ``config_name``) or STORE_UNAVAILABLE.
        """
        prefix: str | None = None
        if query.config_name:
            match await find_config(self._config_repo, query.config_name):
                case Failure(error=error):
                    return Failure(error=from_domain_error(error))
                case Success(value=config):
                    prefix = config.prefix

        match await self._counter_store.list_active(prefix):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=records):
                pass

        limits = attribute_records(records, await self._config_repo.list())
        return Success(value=top_by_count(limits, max(query.limit, 0)))


class GetRateLimitKeyStatusHandler:
    """Handler for a single key's live state.

    Args:
        config_repo: Configuration lookup.
        counter_store: Counter state.
        clock: Epoch seconds (same clock family as the store's reset times).
    """

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
        clock: Callable[[], float] = time,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store
        self._clock = clock

    async def handle(
        self, query: GetRateLimitKeyStatus
    ) -> Result[KeyStatus, ApplicationError]:
        match await find_config(self._config_repo, query.config_name):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=config):
                pass

        store_key = store_key_for(config, query.key)
        match await self._counter_store.peek(store_key):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=snapshot):
                pass

        key = store_key[len(config.prefix) :]
        if snapshot is None:
            return Success(
                value=KeyStatus(
                    config_name=config.name,
                    key=key,
                    count=0,
                    max_allowed=config.max,
                    ttl=0,
                    reset_time=None,
                    blocked=False,
                    block_ttl=0,
                    state=LimitState.FRESH,
                )
            )

        now_ms = self._clock() * 1000
        max_allowed = snapshot.max_allowed or config.max
        return Success(
            value=KeyStatus(
                config_name=config.name,
                key=key,
                count=snapshot.current_count,
                max_allowed=max_allowed,
                ttl=_seconds_until(snapshot.reset_time, now_ms),
                reset_time=snapshot.reset_time,
                blocked=snapshot.blocked,
                block_ttl=_seconds_until(snapshot.blocked_until, now_ms),
                state=snapshot.state(max_allowed),
            )
        )


class GetRateLimitStatsHandler:
    """Handler for per-configuration key counts."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store

    async def handle(
        self, query: GetRateLimitStats
    ) -> Result[list[ConfigKeyStats], ApplicationError]:
        match await self._counter_store.list_active():
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=records):
                pass

        configs = await self._config_repo.list()
        limits = attribute_records(records, configs)
        stats: list[ConfigKeyStats] = []
        for config in configs:
            own = [limit for limit in limits if limit.config_name == config.name]
            stats.append(
                ConfigKeyStats(
                    config_name=config.name,
                    prefix=config.prefix,
                    enabled=config.enabled,
                    active_keys=sum(1 for limit in own if limit.current_count > 0),
                    blocked_keys=sum(1 for limit in own if limit.blocked),
                    total_requests=sum(limit.current_count for limit in own),
                )
            )
        return Success(value=stats)


def _seconds_until(epoch_ms: int | None, now_ms: float) -> int:
    if epoch_ms is None:
        return 0
    return max(math.ceil((epoch_ms - now_ms) / 1000), 0)

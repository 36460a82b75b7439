"""In-process counter store.

Single-process implementation of CounterStoreProtocol for local development
and tests. All state lives on the instance (never at module level) and
every operation runs under one asyncio lock, which gives the same per-key
linearizability as the Redis scripts inside one event loop.

Expired windows are dropped lazily on access.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from time import time

from src.core.result import Result, Success
from src.domain.errors import StoreUnavailableError
from src.domain.value_objects.counter import (
    ActiveLimitRecord,
    CounterResult,
    CounterSnapshot,
)


@dataclass(slots=True)
class _Window:
    count: int
    max_allowed: int
    config_name: str
    expires_at: int


class InMemoryCounterStore:
    """Counter store backed by instance dictionaries.

    Args:
        clock: Returns current epoch seconds (injectable for tests).
    """

    backend = "memory"

    def __init__(self, *, clock: Callable[[], float] = time) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._windows: dict[str, _Window] = {}
        self._blocks: dict[str, int] = {}
        self._spacing: dict[str, int] = {}

    async def increment_and_check(
        self,
        key: str,
        window_ms: int,
        max_allowed: int,
        *,
        config_name: str,
    ) -> Result[CounterResult, StoreUnavailableError]:
        async with self._lock:
            now = self._now_ms()
            window = self._count(key, window_ms, max_allowed, config_name, now)
            return Success(
                value=CounterResult(
                    allowed=window.count <= max_allowed,
                    current_count=window.count,
                    reset_time=window.expires_at,
                )
            )

    async def schedule_even_distribution(
        self,
        key: str,
        window_ms: int,
        max_allowed: int,
        *,
        config_name: str,
    ) -> Result[CounterResult, StoreUnavailableError]:
        async with self._lock:
            now = self._now_ms()
            spacing = max(window_ms // max_allowed, 1)
            last = self._spacing.get(key)
            if last is not None and now < last + spacing:
                next_slot = last + spacing
                window = self._live_window(key, now)
                return Success(
                    value=CounterResult(
                        allowed=False,
                        current_count=window.count if window else 0,
                        reset_time=window.expires_at if window else next_slot,
                        retry_after_ms=next_slot - now,
                    )
                )
            self._spacing[key] = now
            window = self._count(key, window_ms, max_allowed, config_name, now)
            return Success(
                value=CounterResult(
                    allowed=True,
                    current_count=window.count,
                    reset_time=window.expires_at,
                )
            )

    async def decrement(self, key: str) -> Result[int | None, StoreUnavailableError]:
        async with self._lock:
            window = self._live_window(key, self._now_ms())
            if window is None:
                return Success(value=None)
            window.count = max(window.count - 1, 0)
            return Success(value=window.count)

    async def peek(
        self, key: str
    ) -> Result[CounterSnapshot | None, StoreUnavailableError]:
        async with self._lock:
            return Success(value=self._snapshot(key, self._now_ms()))

    async def blocked_until(
        self, key: str
    ) -> Result[int | None, StoreUnavailableError]:
        async with self._lock:
            return Success(value=self._live_block(key, self._now_ms()))

    async def list_active(
        self, prefix: str | None = None
    ) -> Result[list[ActiveLimitRecord], StoreUnavailableError]:
        async with self._lock:
            now = self._now_ms()
            keys = {
                k
                for k in (*self._windows, *self._blocks)
                if prefix is None or k.startswith(prefix)
            }
            records: list[ActiveLimitRecord] = []
            for key in sorted(keys):
                snapshot = self._snapshot(key, now)
                if snapshot is None:
                    continue
                window = self._windows.get(key)
                records.append(
                    ActiveLimitRecord(
                        key=key,
                        config_name=window.config_name if window else "",
                        current_count=snapshot.current_count,
                        max_allowed=snapshot.max_allowed or 0,
                        reset_time=snapshot.reset_time or snapshot.blocked_until or 0,
                        blocked=snapshot.blocked,
                        blocked_until=snapshot.blocked_until,
                    )
                )
            return Success(value=records)

    async def reset(self, key: str) -> Result[bool, StoreUnavailableError]:
        async with self._lock:
            removed = [
                store.pop(key, None) is not None
                for store in (self._windows, self._blocks, self._spacing)
            ]
            return Success(value=any(removed))

    async def block(
        self, key: str, duration_ms: int
    ) -> Result[int, StoreUnavailableError]:
        async with self._lock:
            now = self._now_ms()
            until = max(now + duration_ms, self._live_block(key, now) or 0)
            self._blocks[key] = until
            return Success(value=until)

    async def unblock(self, key: str) -> Result[bool, StoreUnavailableError]:
        async with self._lock:
            existed = self._live_block(key, self._now_ms()) is not None
            self._blocks.pop(key, None)
            return Success(value=existed)

    async def clear_prefix(self, prefix: str) -> Result[int, StoreUnavailableError]:
        async with self._lock:
            now = self._now_ms()
            counters = [k for k in self._windows if k.startswith(prefix)]
            removed = sum(1 for k in counters if self._live_window(k, now))
            for store in (self._windows, self._blocks, self._spacing):
                for k in [k for k in store if k.startswith(prefix)]:
                    del store[k]
            return Success(value=removed)

    # ---------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ---------------------------------------------------------------------
    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _count(
        self, key: str, window_ms: int, max_allowed: int, config_name: str, now: int
    ) -> _Window:
        window = self._live_window(key, now)
        if window is None:
            window = _Window(
                count=0,
                max_allowed=max_allowed,
                config_name=config_name,
                expires_at=now + window_ms,
            )
            self._windows[key] = window
        window.count += 1
        window.max_allowed = max_allowed
        window.config_name = config_name
        return window

    def _live_window(self, key: str, now: int) -> _Window | None:
        window = self._windows.get(key)
        if window is not None and window.expires_at <= now:
            del self._windows[key]
            return None
        return window

    def _live_block(self, key: str, now: int) -> int | None:
        until = self._blocks.get(key)
        if until is not None and until <= now:
            del self._blocks[key]
            return None
        return until

    def _snapshot(self, key: str, now: int) -> CounterSnapshot | None:
        window = self._live_window(key, now)
        blocked_until = self._live_block(key, now)
        if window is None and blocked_until is None:
            return None
        return CounterSnapshot(
            current_count=window.count if window else 0,
            reset_time=window.expires_at if window else None,
            max_allowed=window.max_allowed if window else None,
            blocked_until=blocked_until,
        )

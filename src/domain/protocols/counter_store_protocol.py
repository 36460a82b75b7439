"""Counter store protocol (port).

The counter store is the only mutable shared state in the request hot
path. Every read-modify-write happens inside one atomic store operation;
callers never read a count and write it back.

Following hexagonal architecture:
- Domain defines the PORT (this protocol)
- Infrastructure provides ADAPTERS (RedisCounterStore, InMemoryCounterStore)
- The enforcer and admin handlers depend on the protocol only

Error Handling:
    Adapters never raise to callers. Backend trouble is returned as
    Failure(StoreUnavailableError) and the enforcer applies the config's
    failure policy (fail open or fail closed).

Key Layout:
    Keys are opaque strings, normally ``<config prefix><derived key>``
    (``rl:api:ip:10.0.0.1``). Filtering by prefix scopes results to one
    configuration's namespace.
"""

from typing import Protocol

from src.core.result import Result
from src.domain.errors import StoreUnavailableError
from src.domain.value_objects.counter import (
    ActiveLimitRecord,
    CounterResult,
    CounterSnapshot,
)


class CounterStoreProtocol(Protocol):
    """Atomic keyed counters with TTL windows, block markers and spacing."""

    async def increment_and_check(
        self,
        key: str,
        window_ms: int,
        max_allowed: int,
        *,
        config_name: str,
    ) -> Result[CounterResult, StoreUnavailableError]:
        """Atomically count one request and compare against ``max_allowed``.

        The first increment of a window sets expiry to ``now + window_ms``.
        Linearizable per key: N concurrent calls with N > max produce exactly
        ``max`` allowed results and a final count of N.

        Args:
            key: Full store key.
            window_ms: Window length.
            max_allowed: Effective max for this request.
            config_name: Recorded with the counter for active limit listings.

        Returns:
            Success(CounterResult) with ``allowed = current_count <= max``.
        """
        ...

    async def schedule_even_distribution(
        self,
        key: str,
        window_ms: int,
        max_allowed: int,
        *,
        config_name: str,
    ) -> Result[CounterResult, StoreUnavailableError]:
        """Enforce a minimum spacing of ``window_ms / max_allowed``.

        A request arriving before the previous accepted request's spacing
        elapsed is rejected (``retry_after_ms`` set) and not counted.
        Accepted requests are counted in the same window counter as
        ``increment_and_check`` so listings and resets behave identically.
        """
        ...

    async def decrement(self, key: str) -> Result[int | None, StoreUnavailableError]:
        """Atomically remove one request from an active window.

        Never goes below zero. Returns the new count, or None when the
        window already expired (nothing is recreated).
        """
        ...

    async def peek(
        self, key: str
    ) -> Result[CounterSnapshot | None, StoreUnavailableError]:
        """Non-mutating read. None when the key has neither window nor block."""
        ...

    async def reset(self, key: str) -> Result[bool, StoreUnavailableError]:
        """Clear counter, block marker and spacing marker for ``key``.

        Returns:
            Success(True) if anything was deleted.
        """
        ...

    async def block(
        self, key: str, duration_ms: int
    ) -> Result[int, StoreUnavailableError]:
        """Mark ``key`` blocked for ``duration_ms``; returns blocked-until epoch ms.

        An existing block is never shortened.
        """
        ...

    async def unblock(self, key: str) -> Result[bool, StoreUnavailableError]:
        """Remove the block marker. Success(True) if one existed."""
        ...

    async def blocked_until(
        self, key: str
    ) -> Result[int | None, StoreUnavailableError]:
        """Epoch ms when the block on ``key`` ends, None if not blocked."""
        ...

    async def list_active(
        self, prefix: str | None = None
    ) -> Result[list[ActiveLimitRecord], StoreUnavailableError]:
        """Enumerate non-expired windows and blocks, optionally by prefix."""
        ...

    async def clear_prefix(self, prefix: str) -> Result[int, StoreUnavailableError]:
        """Delete every key in a namespace, batch by batch.

        Each deletion is atomic on its own, so a cancelled or failed run can
        simply be retried. Returns the number of counters removed.
        """
        ...

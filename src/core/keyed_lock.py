"""Per-key asyncio locks.

Used to serialize configuration writes per configuration name inside one
process. Locks are created on first use and discarded once no coroutine
holds or waits on them, so the registry does not grow with every name ever
written.

Usage:
    locks = KeyedLock()

    async with locks.hold("api"):
        ...  # read-modify-write of config "api"
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """Registry of asyncio locks keyed by string."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Acquire the lock for ``key`` for the duration of the context.

        Args:
            key: Lock identity (configuration name).
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)

"""Redis-backed counter store using atomic Lua scripts.

Every read-modify-write runs inside one Lua script executed with EVALSHA,
which makes increment-and-check linearizable per key across all API
processes sharing the Redis instance.

Key layout (``<key>`` is the full store key, ``<prefix><derived key>``):
    <key>           hash  count, max, config; PEXPIRE = window
    <key>:blocked   str   blocked-until epoch ms; PEXPIRE = block duration
    <key>:evenly    str   last accepted epoch ms; PEXPIRE = spacing

Error handling:
    Redis failures are returned as Failure(StoreUnavailableError). The store
    never decides between fail open and fail closed; the enforcer does.

Note:
    Scripts are read from ``lua_scripts/`` once and their SHAs cached. A
    Redis restart (NOSCRIPT) reloads them transparently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from time import time
from typing import Any, TypeVar

from redis.exceptions import NoScriptError, RedisError

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.errors import StoreUnavailableError
from src.domain.value_objects.counter import (
    ActiveLimitRecord,
    CounterResult,
    CounterSnapshot,
)

BLOCK_SUFFIX = ":blocked"
SPACING_SUFFIX = ":evenly"

T = TypeVar("T")


@dataclass(slots=True)
class _LuaRefs:
    """Holds loaded Lua script SHAs by script name."""

    shas: dict[str, str] = field(default_factory=dict)


class RedisCounterStore:
    """Counter store backed by Redis.

    Args:
        redis_client: An async Redis client (redis.asyncio.Redis compatible).
        scan_batch_size: Keys per SCAN page and per delete batch.
        clock: Returns current epoch seconds (injectable for tests).
    """

    backend = "redis"

    def __init__(
        self,
        *,
        redis_client: Any,
        scan_batch_size: int = 500,
        clock: Callable[[], float] = time,
    ) -> None:
        self.redis = redis_client
        self._scan_batch_size = scan_batch_size
        self._clock = clock
        self._lua = _LuaRefs()
        self._script_lock = asyncio.Lock()

    # ---------------------------------------------------------------------
    # Counting
    # ---------------------------------------------------------------------
    async def increment_and_check(
        self,
        key: str,
        window_ms: int,
        max_allowed: int,
        *,
        config_name: str,
    ) -> Result[CounterResult, StoreUnavailableError]:
        async def op() -> CounterResult:
            allowed, count, reset_time = await self._run_script(
                "increment",
                [key],
                [int(window_ms), int(max_allowed), config_name, self._now_ms()],
            )
            return CounterResult(
                allowed=bool(int(allowed)),
                current_count=int(count),
                reset_time=int(reset_time),
            )

        return await self._guard("increment_and_check", op)

    async def schedule_even_distribution(
        self,
        key: str,
        window_ms: int,
        max_allowed: int,
        *,
        config_name: str,
    ) -> Result[CounterResult, StoreUnavailableError]:
        async def op() -> CounterResult:
            allowed, count, reset_time, retry_after = await self._run_script(
                "even_spacing",
                [key, key + SPACING_SUFFIX],
                [int(window_ms), int(max_allowed), config_name, self._now_ms()],
            )
            return CounterResult(
                allowed=bool(int(allowed)),
                current_count=int(count),
                reset_time=int(reset_time),
                retry_after_ms=int(retry_after),
            )

        return await self._guard("schedule_even_distribution", op)

    async def decrement(self, key: str) -> Result[int | None, StoreUnavailableError]:
        async def op() -> int | None:
            count = int(await self._run_script("decrement", [key], []))
            return None if count < 0 else count

        return await self._guard("decrement", op)

    # ---------------------------------------------------------------------
    # Inspection
    # ---------------------------------------------------------------------
    async def peek(
        self, key: str
    ) -> Result[CounterSnapshot | None, StoreUnavailableError]:
        async def op() -> CounterSnapshot | None:
            pipe = self.redis.pipeline(transaction=False)
            pipe.hgetall(key)
            pipe.pttl(key)
            pipe.get(key + BLOCK_SUFFIX)
            fields, ttl, blocked = await pipe.execute()
            return self._snapshot(_decode_hash(fields), int(ttl), blocked)

        return await self._guard("peek", op)

    async def blocked_until(
        self, key: str
    ) -> Result[int | None, StoreUnavailableError]:
        async def op() -> int | None:
            value = await self.redis.get(key + BLOCK_SUFFIX)
            return int(_decode(value)) if value is not None else None

        return await self._guard("blocked_until", op)

    async def list_active(
        self, prefix: str | None = None
    ) -> Result[list[ActiveLimitRecord], StoreUnavailableError]:
        async def op() -> list[ActiveLimitRecord]:
            base_keys: set[str] = set()
            async for raw in self.redis.scan_iter(
                match=_match_pattern(prefix), count=self._scan_batch_size
            ):
                name = _decode(raw)
                if name.endswith(SPACING_SUFFIX):
                    continue
                if name.endswith(BLOCK_SUFFIX):
                    name = name[: -len(BLOCK_SUFFIX)]
                base_keys.add(name)

            records: list[ActiveLimitRecord] = []
            ordered = sorted(base_keys)
            for start in range(0, len(ordered), self._scan_batch_size):
                batch = ordered[start : start + self._scan_batch_size]
                pipe = self.redis.pipeline(transaction=False)
                for name in batch:
                    pipe.hgetall(name)
                    pipe.pttl(name)
                    pipe.get(name + BLOCK_SUFFIX)
                replies = await pipe.execute(raise_on_error=False)
                for i, name in enumerate(batch):
                    fields, ttl, blocked = replies[3 * i : 3 * i + 3]
                    if isinstance(fields, Exception):
                        continue  # not a counter hash
                    record = self._record(name, _decode_hash(fields), ttl, blocked)
                    if record is not None:
                        records.append(record)
            return records

        return await self._guard("list_active", op)

    # ---------------------------------------------------------------------
    # Administration
    # ---------------------------------------------------------------------
    async def reset(self, key: str) -> Result[bool, StoreUnavailableError]:
        async def op() -> bool:
            deleted = await self.redis.delete(
                key, key + BLOCK_SUFFIX, key + SPACING_SUFFIX
            )
            return int(deleted) > 0

        return await self._guard("reset", op)

    async def block(
        self, key: str, duration_ms: int
    ) -> Result[int, StoreUnavailableError]:
        async def op() -> int:
            until = self._now_ms() + int(duration_ms)
            return int(
                await self._run_script(
                    "block", [key + BLOCK_SUFFIX], [until, int(duration_ms)]
                )
            )

        return await self._guard("block", op)

    async def unblock(self, key: str) -> Result[bool, StoreUnavailableError]:
        async def op() -> bool:
            return int(await self.redis.delete(key + BLOCK_SUFFIX)) > 0

        return await self._guard("unblock", op)

    async def clear_prefix(self, prefix: str) -> Result[int, StoreUnavailableError]:
        async def op() -> int:
            removed = 0
            batch: list[Any] = []
            async for raw in self.redis.scan_iter(
                match=_match_pattern(prefix), count=self._scan_batch_size
            ):
                batch.append(raw)
                if len(batch) >= self._scan_batch_size:
                    removed += await self._delete_counters(batch)
                    batch = []
            if batch:
                removed += await self._delete_counters(batch)
            return removed

        return await self._guard("clear_prefix", op)

    async def _delete_counters(self, raw_keys: list[Any]) -> int:
        await self.redis.delete(*raw_keys)
        return sum(
            1
            for raw in raw_keys
            if not _decode(raw).endswith((BLOCK_SUFFIX, SPACING_SUFFIX))
        )

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _snapshot(
        self, fields: dict[str, str], ttl: int, blocked: Any
    ) -> CounterSnapshot | None:
        blocked_until = int(_decode(blocked)) if blocked is not None else None
        has_window = bool(fields) and ttl > 0
        if not has_window and blocked_until is None:
            return None
        return CounterSnapshot(
            current_count=int(fields.get("count", 0)) if has_window else 0,
            reset_time=self._now_ms() + ttl if has_window else None,
            max_allowed=int(fields["max"]) if "max" in fields else None,
            blocked_until=blocked_until,
        )

    def _record(
        self, key: str, fields: dict[str, str], ttl: Any, blocked: Any
    ) -> ActiveLimitRecord | None:
        if isinstance(ttl, Exception) or isinstance(blocked, Exception):
            return None
        snapshot = self._snapshot(fields, int(ttl), blocked)
        if snapshot is None:
            return None
        return ActiveLimitRecord(
            key=key,
            config_name=fields.get("config", ""),
            current_count=snapshot.current_count,
            max_allowed=snapshot.max_allowed or 0,
            reset_time=snapshot.reset_time or snapshot.blocked_until or 0,
            blocked=snapshot.blocked,
            blocked_until=snapshot.blocked_until,
        )

    async def _guard(
        self, operation: str, op: Callable[[], Awaitable[T]]
    ) -> Result[T, StoreUnavailableError]:
        try:
            return Success(value=await op())
        except (RedisError, OSError) as exc:
            return Failure(
                error=StoreUnavailableError(
                    code=ErrorCode.COUNTER_STORE_UNAVAILABLE,
                    message=f"Redis {operation} failed: {exc}",
                    backend=self.backend,
                    operation=operation,
                )
            )

    async def _run_script(self, name: str, keys: list[str], args: list[Any]) -> Any:
        sha = await self._ensure_script(name)
        try:
            return await self.redis.evalsha(sha, len(keys), *keys, *args)
        except NoScriptError:
            self._lua.shas.pop(name, None)
            sha = await self._ensure_script(name)
            return await self.redis.evalsha(sha, len(keys), *keys, *args)

    async def _ensure_script(self, name: str) -> str:
        """Load a Lua script into Redis and cache the SHA.

        Returns:
            str: Script SHA.
        """
        if name in self._lua.shas:
            return self._lua.shas[name]
        async with self._script_lock:
            if name in self._lua.shas:
                return self._lua.shas[name]
            script = await _read_lua_script(f"lua_scripts/{name}.lua")
            sha = _decode(await self.redis.script_load(script))
            self._lua.shas[name] = sha
            return sha


def _decode(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def _decode_hash(fields: dict[Any, Any] | None) -> dict[str, str]:
    return {_decode(k): _decode(v) for k, v in (fields or {}).items()}


def _match_pattern(prefix: str | None) -> str:
    """SCAN MATCH pattern for a literal prefix."""
    if not prefix:
        return "*"
    escaped = "".join(f"\\{ch}" if ch in "*?[]\\" else ch for ch in prefix)
    return f"{escaped}*"


def _read_lua_script_sync(path: Path) -> str:
    """Synchronous helper to read Lua script (called via run_in_executor)."""
    return path.read_text(encoding="utf-8")


async def _read_lua_script(rel_path: str) -> str:
    """Read Lua script file relative to this module.

    Uses run_in_executor to avoid blocking the event loop on file IO.
    """
    full_path = Path(__file__).parent / rel_path
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(_read_lua_script_sync, full_path))

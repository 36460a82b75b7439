"""Integration tests for RedisCounterStore.

Runs the real Lua scripts against fakeredis. Expiry inside fakeredis uses
wall-clock time, so these tests only assert on window bookkeeping that does
not depend on time passing; expiry itself is covered by the in-memory store
tests driven by FakeClock.
"""

import asyncio

import fakeredis
import pytest

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.infrastructure.rate_limit.redis_counter_store import (
    BLOCK_SUFFIX,
    SPACING_SUFFIX,
    RedisCounterStore,
)

START_MS = 1_700_000_000_000


@pytest.fixture
def store(redis_client, clock):
    return RedisCounterStore(redis_client=redis_client, clock=clock)


async def _hit(store, key="rl:api:ip:1", window_ms=60_000, max_allowed=2):
    result = await store.increment_and_check(
        key, window_ms, max_allowed, config_name="api"
    )
    assert isinstance(result, Success)
    return result.value


class TestIncrementAndCheck:
    """Tests for the increment Lua script."""

    async def test_concurrent_increments_allow_exactly_max(self, store):
        results = await asyncio.gather(
            *(_hit(store, max_allowed=10) for _ in range(50))
        )

        assert sum(result.allowed for result in results) == 10
        assert sorted(result.current_count for result in results) == list(
            range(1, 51)
        )
        snapshot = (await store.peek("rl:api:ip:1")).value
        assert snapshot.current_count == 50

    async def test_counts_up_to_max_then_denies(self, store):
        first = await _hit(store)
        second = await _hit(store)
        third = await _hit(store)

        assert (first.allowed, first.current_count) == (True, 1)
        assert (second.allowed, second.current_count) == (True, 2)
        assert (third.allowed, third.current_count) == (False, 3)
        assert first.reset_time == START_MS + 60_000
        assert START_MS + 59_000 <= third.reset_time <= START_MS + 60_000

    async def test_counter_hash_layout(self, store, redis_client):
        await _hit(store, max_allowed=7)

        fields = await redis_client.hgetall("rl:api:ip:1")
        ttl = await redis_client.pttl("rl:api:ip:1")

        assert fields == {"count": "1", "max": "7", "config": "api"}
        assert 0 < ttl <= 60_000

    async def test_script_reloaded_after_flush(self, store, redis_client):
        await _hit(store)
        await redis_client.script_flush()

        result = await _hit(store)

        assert result.current_count == 2


class TestEvenDistribution:
    """Tests for the even spacing Lua script."""

    async def test_rejects_arrival_before_next_slot(self, store, clock):
        first = await store.schedule_even_distribution(
            "rl:api:ip:1", 1000, 4, config_name="api"
        )
        clock.advance(0.1)
        early = await store.schedule_even_distribution(
            "rl:api:ip:1", 1000, 4, config_name="api"
        )

        assert first.value.allowed is True
        assert early.value.allowed is False
        assert early.value.retry_after_ms == 150
        assert early.value.current_count == 1

    async def test_spacing_marker_written(self, store, redis_client):
        await store.schedule_even_distribution(
            "rl:api:ip:1", 1000, 4, config_name="api"
        )

        assert await redis_client.get("rl:api:ip:1" + SPACING_SUFFIX) == str(START_MS)


class TestDecrement:
    """Tests for the decrement Lua script."""

    async def test_decrement_reduces_count_and_floors_at_zero(self, store):
        await _hit(store)

        assert (await store.decrement("rl:api:ip:1")).value == 0
        assert (await store.decrement("rl:api:ip:1")).value == 0

    async def test_decrement_without_window_is_noop(self, store):
        assert (await store.decrement("rl:api:ip:missing")).value is None

    async def test_window_kept_after_decrement_to_zero(self, store, redis_client):
        await _hit(store)
        await redis_client.pexpire("rl:api:ip:1", 5_000)
        await store.decrement("rl:api:ip:1")

        again = await _hit(store)

        assert again.current_count == 1
        assert again.reset_time <= START_MS + 5_000
        assert 0 < await redis_client.pttl("rl:api:ip:1") <= 5_000

    async def test_spacing_window_kept_after_decrement_to_zero(
        self, store, redis_client, clock
    ):
        await store.schedule_even_distribution(
            "rl:api:ip:1", 60_000, 2, config_name="api"
        )
        await redis_client.pexpire("rl:api:ip:1", 5_000)
        await store.decrement("rl:api:ip:1")
        clock.advance(30)

        again = await store.schedule_even_distribution(
            "rl:api:ip:1", 60_000, 2, config_name="api"
        )

        assert again.value.allowed is True
        assert again.value.current_count == 1
        assert again.value.reset_time <= START_MS + 35_000


class TestBlocking:
    """Tests for block markers."""

    async def test_block_sets_marker_with_ttl(self, store, redis_client):
        result = await store.block("rl:auth:ip:1", 5000)

        assert result.value == START_MS + 5000
        assert await redis_client.get("rl:auth:ip:1" + BLOCK_SUFFIX) == str(
            START_MS + 5000
        )
        assert 0 < await redis_client.pttl("rl:auth:ip:1" + BLOCK_SUFFIX) <= 5000
        assert (await store.blocked_until("rl:auth:ip:1")).value == START_MS + 5000

    async def test_block_never_shortens_existing_block(self, store):
        await store.block("rl:auth:ip:1", 10_000)

        result = await store.block("rl:auth:ip:1", 1000)

        assert result.value == START_MS + 10_000

    async def test_longer_block_extends(self, store):
        await store.block("rl:auth:ip:1", 1000)

        result = await store.block("rl:auth:ip:1", 10_000)

        assert result.value == START_MS + 10_000

    async def test_unblock_reports_whether_block_existed(self, store):
        await store.block("rl:auth:ip:1", 1000)

        assert (await store.unblock("rl:auth:ip:1")).value is True
        assert (await store.unblock("rl:auth:ip:1")).value is False


class TestInspection:
    """Tests for peek(), list_active(), reset() and clear_prefix()."""

    async def test_peek_returns_snapshot(self, store):
        await _hit(store, max_allowed=5)

        snapshot = (await store.peek("rl:api:ip:1")).value

        assert snapshot.current_count == 1
        assert snapshot.max_allowed == 5
        assert snapshot.blocked is False

    async def test_peek_missing_key(self, store):
        assert (await store.peek("rl:api:ip:none")).value is None

    async def test_peek_block_only_key(self, store):
        await store.block("rl:api:ip:1", 1000)

        snapshot = (await store.peek("rl:api:ip:1")).value

        assert snapshot.current_count == 0
        assert snapshot.blocked_until == START_MS + 1000

    async def test_list_active_merges_block_markers(self, store):
        await _hit(store, key="rl:api:ip:1")
        await store.block("rl:api:ip:1", 5000)
        await store.block("rl:api:ip:2", 5000)
        await _hit(store, key="rl:auth:ip:1")

        records = (await store.list_active("rl:api:")).value

        assert sorted(r.key for r in records) == ["rl:api:ip:1", "rl:api:ip:2"]
        by_key = {r.key: r for r in records}
        assert by_key["rl:api:ip:1"].config_name == "api"
        assert by_key["rl:api:ip:1"].blocked is True
        assert by_key["rl:api:ip:2"].current_count == 0

    async def test_list_active_skips_spacing_markers(self, store):
        await store.schedule_even_distribution(
            "rl:api:ip:1", 1000, 4, config_name="api"
        )

        records = (await store.list_active()).value

        assert [r.key for r in records] == ["rl:api:ip:1"]

    async def test_reset_removes_window_and_block(self, store):
        await _hit(store)
        await store.block("rl:api:ip:1", 1000)

        assert (await store.reset("rl:api:ip:1")).value is True
        assert (await store.peek("rl:api:ip:1")).value is None
        assert (await store.reset("rl:api:ip:1")).value is False

    async def test_clear_prefix_counts_live_counters(self, store, redis_client):
        await _hit(store, key="rl:api:ip:1")
        await store.block("rl:api:ip:1", 1000)
        await _hit(store, key="rl:api:ip:2")
        await _hit(store, key="rl:auth:ip:1")

        removed = (await store.clear_prefix("rl:api:")).value

        assert removed == 2
        assert await redis_client.keys("rl:api:*") == []
        assert await redis_client.exists("rl:auth:ip:1") == 1

    async def test_prefix_glob_characters_are_literal(self, store, redis_client):
        await _hit(store, key="rl:api:ip:1")

        assert (await store.clear_prefix("rl:*")).value == 0
        assert await redis_client.exists("rl:api:ip:1") == 1


class TestUnavailable:
    """Redis errors become StoreUnavailableError failures."""

    async def test_connection_failure_returns_failure(self, clock):
        server = fakeredis.FakeServer()
        server.connected = False
        client = fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
        store = RedisCounterStore(redis_client=client, clock=clock)

        result = await store.increment_and_check(
            "rl:api:ip:1", 1000, 1, config_name="api"
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.COUNTER_STORE_UNAVAILABLE
        assert result.error.backend == "redis"
        assert result.error.operation == "increment_and_check"

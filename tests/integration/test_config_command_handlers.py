"""Integration tests for configuration and counter administration handlers.

Tests cover:
- Create: validation, name and prefix conflicts (including nested
  namespaces and concurrent writers), "created" record
- Update: field diff, immutable name, empty diff still audited, not found
- Toggle: always audited, version bump
- Delete: counters cleared, history kept
- Key reset, namespace reset, block and unblock

Architecture:
- Real repositories on in-memory SQLite
- InMemoryCounterStore on a FakeClock
- RecordingEventBus instead of the in-memory event bus
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from freezegun import freeze_time

from src.application.commands.handlers.create_rate_limit_config_handler import (
    CreateRateLimitConfigHandler,
)
from src.application.commands.handlers.delete_rate_limit_config_handler import (
    DeleteRateLimitConfigHandler,
)
from src.application.commands.handlers.rate_limit_key_handlers import (
    BlockRateLimitKeyHandler,
    ResetRateLimitConfigHandler,
    ResetRateLimitKeyHandler,
    UnblockRateLimitKeyHandler,
)
from src.application.commands.handlers.toggle_rate_limit_config_handler import (
    ToggleRateLimitConfigHandler,
)
from src.application.commands.handlers.update_rate_limit_config_handler import (
    UpdateRateLimitConfigHandler,
)
from src.application.commands.rate_limit_commands import (
    BlockRateLimitKey,
    CreateRateLimitConfig,
    DeleteRateLimitConfig,
    ResetRateLimitConfig,
    ResetRateLimitKey,
    ToggleRateLimitConfig,
    UnblockRateLimitKey,
    UpdateRateLimitConfig,
)
from src.application.errors import ApplicationErrorCode
from src.core.result import Failure, Success
from src.domain.enums import ChangeAction, KeyStrategy, RateLimitType
from src.domain.errors import config_prefix_conflict
from src.domain.events.rate_limit_events import (
    RateLimitConfigChanged,
    RateLimitKeyReset,
)
from src.infrastructure.rate_limit.in_memory_counter_store import (
    InMemoryCounterStore,
)

START_MS = 1_700_000_000_000


def _create_command(name="search", **values):
    defaults = {
        "name": name,
        "display_name": name.title(),
        "type": RateLimitType.API,
        "window_ms": 60_000,
        "max": 10,
        "key_strategy": KeyStrategy.IP,
        "created_by": "admin-1",
    }
    defaults.update(values)
    return CreateRateLimitConfig(**defaults)


@pytest.fixture
def store(clock):
    return InMemoryCounterStore(clock=clock)


@pytest.fixture
def run(repos, event_bus, locks, store):
    """Run one command through its handler inside a fresh session."""
    logger = MagicMock()

    async def runner(command):
        async with repos() as (config_repo, change_repo):
            handler = {
                CreateRateLimitConfig: lambda: CreateRateLimitConfigHandler(
                    config_repo, change_repo, event_bus, locks
                ),
                UpdateRateLimitConfig: lambda: UpdateRateLimitConfigHandler(
                    config_repo, change_repo, event_bus, locks
                ),
                ToggleRateLimitConfig: lambda: ToggleRateLimitConfigHandler(
                    config_repo, change_repo, event_bus, locks
                ),
                DeleteRateLimitConfig: lambda: DeleteRateLimitConfigHandler(
                    config_repo, change_repo, store, event_bus, locks, logger
                ),
                ResetRateLimitKey: lambda: ResetRateLimitKeyHandler(
                    config_repo, store, event_bus
                ),
                ResetRateLimitConfig: lambda: ResetRateLimitConfigHandler(
                    config_repo, store, event_bus
                ),
                BlockRateLimitKey: lambda: BlockRateLimitKeyHandler(
                    config_repo, store, logger
                ),
                UnblockRateLimitKey: lambda: UnblockRateLimitKeyHandler(
                    config_repo, store, logger
                ),
            }[type(command)]()
            return await handler.handle(command)

    return runner


async def _history(repos, name):
    async with repos() as (_, change_repo):
        return await change_repo.list_for_config(name)


async def _hit(store, key, max_allowed=10):
    await store.increment_and_check(key, 60_000, max_allowed, config_name="x")


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    """Tests for CreateRateLimitConfigHandler."""

    async def test_creates_config_and_record(self, run, repos, event_bus):
        result = await run(_create_command(reason="new endpoint"))

        assert isinstance(result, Success)
        config = result.value
        assert config.prefix == "rl:search:"
        assert config.version == 1

        records = await _history(repos, "search")
        assert len(records) == 1
        assert records[0].action is ChangeAction.CREATED
        assert records[0].reason == "new endpoint"
        assert records[0].changes["max"] == {"from": None, "to": 10}
        assert event_bus.of_type(RateLimitConfigChanged)[0].action == "created"

    async def test_invalid_config_rejected(self, run, repos):
        result = await run(_create_command(window_ms=0))

        assert isinstance(result, Failure)
        assert result.error.code is ApplicationErrorCode.COMMAND_VALIDATION_FAILED
        assert result.error.details == {"field": "windowMs"}
        assert await _history(repos, "search") == []

    async def test_duplicate_name_conflicts(self, run):
        await run(_create_command())

        result = await run(_create_command(display_name="Again"))

        assert result.error.code is ApplicationErrorCode.CONFLICT

    async def test_duplicate_prefix_conflicts(self, run):
        await run(_create_command("first", prefix="rl:shared:"))

        result = await run(_create_command("second", prefix="rl:shared:"))

        assert result.error.code is ApplicationErrorCode.CONFLICT
        assert "rl:shared:" in result.error.message

    async def test_prefix_without_separator_rejected(self, run):
        result = await run(_create_command("other", prefix="rl:a"))

        assert result.error.code is ApplicationErrorCode.COMMAND_VALIDATION_FAILED
        assert result.error.details == {"field": "prefix"}

    @pytest.mark.parametrize("prefix", ["rl:", "rl:ab:", "rl:ab:ip:"])
    async def test_overlapping_prefix_conflicts(self, run, prefix):
        await run(_create_command("ab"))

        result = await run(_create_command("other", prefix=prefix))

        assert result.error.code is ApplicationErrorCode.CONFLICT
        assert "'ab'" in result.error.message

    async def test_sibling_prefix_allowed(self, run):
        await run(_create_command("ab"))

        result = await run(_create_command("abc"))

        assert result.value.prefix == "rl:abc:"

    async def test_unique_violation_at_save_is_a_conflict(self, event_bus, locks):
        config_repo = AsyncMock()
        config_repo.find_by_name.return_value = None
        config_repo.find_overlapping_prefix.return_value = None
        config_repo.save.return_value = Failure(
            error=config_prefix_conflict("rl:search:")
        )
        change_repo = AsyncMock()
        handler = CreateRateLimitConfigHandler(
            config_repo, change_repo, event_bus, locks
        )

        result = await handler.handle(_create_command())

        assert result.error.code is ApplicationErrorCode.CONFLICT
        change_repo.append.assert_not_awaited()
        config_repo.commit.assert_not_awaited()
        assert event_bus.of_type(RateLimitConfigChanged) == []

    async def test_timestamps_use_current_time(self, run, repos):
        with freeze_time("2026-03-01 09:30:00", real_asyncio=True):
            config = (await run(_create_command())).value

        frozen = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
        assert config.created_at == frozen
        assert config.updated_at == frozen
        assert (await _history(repos, "search"))[0].changed_at == frozen


# =============================================================================
# Update and toggle
# =============================================================================


class TestUpdate:
    """Tests for UpdateRateLimitConfigHandler."""

    async def test_update_records_diff(self, run, repos, event_bus):
        await run(_create_command())

        result = await run(
            UpdateRateLimitConfig(
                config_ref="search",
                changes={"max": 25, "description": "busy"},
                changed_by="admin-2",
                reason="traffic",
            )
        )

        assert result.value.max == 25
        assert result.value.version == 2
        latest = (await _history(repos, "search"))[0]
        assert latest.action is ChangeAction.UPDATED
        assert latest.changed_by == "admin-2"
        assert latest.changes == {
            "description": {"from": None, "to": "busy"},
            "max": {"from": 10, "to": 25},
        }
        changed = event_bus.of_type(RateLimitConfigChanged)[-1]
        assert changed.changed_fields == ("description", "max")

    async def test_update_by_id(self, run):
        created = (await run(_create_command())).value

        result = await run(
            UpdateRateLimitConfig(
                config_ref=str(created.id), changes={"max": 3}, changed_by="admin-1"
            )
        )

        assert result.value.max == 3

    async def test_empty_diff_still_audited(self, run, repos):
        await run(_create_command())

        result = await run(
            UpdateRateLimitConfig(
                config_ref="search", changes={"max": 10}, changed_by="admin-1"
            )
        )

        assert isinstance(result, Success)
        latest = (await _history(repos, "search"))[0]
        assert latest.action is ChangeAction.UPDATED
        assert latest.changes == {}

    async def test_renaming_rejected(self, run, repos):
        await run(_create_command())

        result = await run(
            UpdateRateLimitConfig(
                config_ref="search", changes={"name": "other"}, changed_by="admin-1"
            )
        )

        assert result.error.code is ApplicationErrorCode.COMMAND_VALIDATION_FAILED
        assert result.error.details == {"field": "name"}
        assert len(await _history(repos, "search")) == 1

    async def test_prefix_taken_by_other_config(self, run):
        await run(_create_command("first"))
        await run(_create_command("second"))

        result = await run(
            UpdateRateLimitConfig(
                config_ref="second",
                changes={"prefix": "rl:first:"},
                changed_by="admin-1",
            )
        )

        assert result.error.code is ApplicationErrorCode.CONFLICT

    async def test_prefix_nested_in_other_namespace(self, run, repos):
        await run(_create_command("first"))
        await run(_create_command("second"))

        result = await run(
            UpdateRateLimitConfig(
                config_ref="second",
                changes={"prefix": "rl:first:sub:"},
                changed_by="admin-1",
            )
        )

        assert result.error.code is ApplicationErrorCode.CONFLICT
        assert len(await _history(repos, "second")) == 1

    async def test_own_prefix_can_be_narrowed(self, run):
        await run(_create_command("first"))

        result = await run(
            UpdateRateLimitConfig(
                config_ref="first",
                changes={"prefix": "rl:first:v2:"},
                changed_by="admin-1",
            )
        )

        assert result.value.prefix == "rl:first:v2:"

    async def test_unknown_config(self, run):
        result = await run(
            UpdateRateLimitConfig(
                config_ref="missing", changes={"max": 1}, changed_by="admin-1"
            )
        )

        assert result.error.code is ApplicationErrorCode.NOT_FOUND


class TestToggle:
    """Tests for ToggleRateLimitConfigHandler."""

    async def test_toggle_is_audited_every_time(self, run, repos):
        await run(_create_command())

        first = await run(
            ToggleRateLimitConfig(
                config_ref="search", enabled=False, changed_by="admin-1"
            )
        )
        second = await run(
            ToggleRateLimitConfig(
                config_ref="search", enabled=False, changed_by="admin-1"
            )
        )

        assert first.value.enabled is False
        assert second.value.version == 3
        records = await _history(repos, "search")
        assert [r.action for r in records[:2]] == [
            ChangeAction.TOGGLED,
            ChangeAction.TOGGLED,
        ]
        assert records[1].changes == {"enabled": {"from": True, "to": False}}
        assert records[0].changes == {}


# =============================================================================
# Delete
# =============================================================================


class TestDelete:
    """Tests for DeleteRateLimitConfigHandler."""

    async def test_delete_clears_counters_and_keeps_history(
        self, run, repos, store, event_bus
    ):
        await run(_create_command())
        await _hit(store, "rl:search:ip:1")
        await _hit(store, "rl:search:ip:2")
        await _hit(store, "rl:other:ip:1")

        result = await run(
            DeleteRateLimitConfig(config_ref="search", changed_by="admin-1")
        )

        assert result.value.keys_removed == 2
        assert len((await store.list_active()).value) == 1
        async with repos() as (config_repo, _):
            assert await config_repo.find_by_name("search") is None
        records = await _history(repos, "search")
        assert [r.action for r in records] == [
            ChangeAction.DELETED,
            ChangeAction.CREATED,
        ]
        assert records[0].changes["max"] == {"from": 10, "to": None}
        assert event_bus.of_type(RateLimitKeyReset)[0].keys_removed == 2

    async def test_delete_leaves_sibling_namespace(self, run, store):
        await run(_create_command("ab"))
        await run(_create_command("abc"))
        await _hit(store, "rl:ab:ip:1")
        await _hit(store, "rl:abc:ip:1")

        result = await run(DeleteRateLimitConfig(config_ref="abc", changed_by="a"))

        assert result.value.keys_removed == 1
        remaining = (await store.list_active("rl:ab:")).value
        assert [record.key for record in remaining] == ["rl:ab:ip:1"]

    async def test_name_reusable_after_delete(self, run):
        await run(_create_command())
        await run(DeleteRateLimitConfig(config_ref="search", changed_by="admin-1"))

        result = await run(_create_command())

        assert isinstance(result, Success)

    async def test_delete_unknown(self, run):
        result = await run(
            DeleteRateLimitConfig(config_ref="missing", changed_by="admin-1")
        )

        assert result.error.code is ApplicationErrorCode.NOT_FOUND


# =============================================================================
# Counter administration
# =============================================================================


class TestKeyAdministration:
    """Tests for reset, block and unblock handlers."""

    async def test_reset_key_accepts_derived_and_full_keys(self, run, store):
        await run(_create_command())
        await _hit(store, "rl:search:ip:1")
        await _hit(store, "rl:search:ip:2")

        derived = await run(
            ResetRateLimitKey(config_name="search", key="ip:1", reset_by="admin-1")
        )
        full = await run(
            ResetRateLimitKey(
                config_name="search", key="rl:search:ip:2", reset_by="admin-1"
            )
        )

        assert derived.value.keys_removed == 1
        assert full.value.keys_removed == 1
        assert (await store.list_active()).value == []

    async def test_reset_unknown_key(self, run):
        await run(_create_command())

        result = await run(
            ResetRateLimitKey(config_name="search", key="ip:9", reset_by="admin-1")
        )

        assert result.error.code is ApplicationErrorCode.NOT_FOUND

    async def test_reset_config_namespace(self, run, store, event_bus):
        await run(_create_command())
        await _hit(store, "rl:search:ip:1")
        await _hit(store, "rl:search:ip:2")

        result = await run(ResetRateLimitConfig(config_ref="search", reset_by="a"))

        assert result.value.keys_removed == 2
        assert event_bus.of_type(RateLimitKeyReset)[-1].key is None

    async def test_block_and_unblock(self, run, store):
        await run(_create_command())

        blocked = await run(
            BlockRateLimitKey(
                config_name="search",
                key="ip:1",
                blocked_by="admin-1",
                duration_seconds=60,
            )
        )

        assert blocked.value.blocked_until == START_MS + 60_000
        assert (await store.blocked_until("rl:search:ip:1")).value == (
            START_MS + 60_000
        )

        unblocked = await run(
            UnblockRateLimitKey(
                config_name="search", key="ip:1", unblocked_by="admin-1"
            )
        )
        again = await run(
            UnblockRateLimitKey(
                config_name="search", key="ip:1", unblocked_by="admin-1"
            )
        )

        assert unblocked.value.blocked is False
        assert again.error.code is ApplicationErrorCode.NOT_FOUND

    async def test_block_requires_positive_duration(self, run):
        await run(_create_command())

        result = await run(
            BlockRateLimitKey(
                config_name="search",
                key="ip:1",
                blocked_by="admin-1",
                duration_seconds=0,
            )
        )

        assert result.error.code is ApplicationErrorCode.COMMAND_VALIDATION_FAILED

    async def test_block_unknown_config(self, run):
        result = await run(
            BlockRateLimitKey(config_name="missing", key="ip:1", blocked_by="a")
        )

        assert result.error.code is ApplicationErrorCode.NOT_FOUND

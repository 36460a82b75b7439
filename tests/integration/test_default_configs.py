"""Integration tests for default configuration seeding."""

from src.core.result import Success
from src.domain.enums import ChangeAction, FailureMode, RateLimitType
from src.infrastructure.rate_limit.default_configs import (
    DEFAULT_CONFIGS,
    seed_default_configs,
)
from tests.conftest import create_config


async def test_seeding_is_idempotent(database, repos):
    async with database.get_session() as session:
        first = await seed_default_configs(session)
    async with database.get_session() as session:
        second = await seed_default_configs(session)

    async with repos() as (config_repo, change_repo):
        configs = await config_repo.list()
        history = await change_repo.list_for_config("auth")

    assert first == len(DEFAULT_CONFIGS) == 5
    assert second == 0
    assert [c.name for c in configs] == ["api", "auth", "graphql", "upload", "websocket"]
    assert [r.action for r in history] == [ChangeAction.CREATED]


async def test_defaults_are_valid_and_auth_fails_closed(database, repos):
    async with database.get_session() as session:
        await seed_default_configs(session)

    async with repos() as (config_repo, _):
        configs = {c.name: c for c in await config_repo.list()}

    for config in configs.values():
        assert isinstance(config.validate(), Success)
    auth = configs["auth"]
    assert auth.type is RateLimitType.AUTH
    assert auth.effective_failure_mode is FailureMode.CLOSED
    assert configs["api"].effective_failure_mode is FailureMode.OPEN


async def test_default_skipped_when_namespace_taken(database, repos):
    async with repos() as (config_repo, _):
        await config_repo.save(create_config("legacy", prefix="rl:auth:"))

    async with database.get_session() as session:
        seeded = await seed_default_configs(session)

    async with repos() as (config_repo, _):
        names = [c.name for c in await config_repo.list()]

    assert seeded == len(DEFAULT_CONFIGS) - 1
    assert "auth" not in names
    assert "legacy" in names

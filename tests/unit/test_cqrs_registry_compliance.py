"""CQRS Registry Compliance Tests.

Self-enforcing tests that fail if the registry is incomplete or inconsistent.

Test categories:
1. Completeness - All commands/queries registered exactly once
2. Handler compliance - All handlers are classes with handle()
3. Naming conventions - Commands imperative, queries interrogative
4. Statistics - Registry counts match expectations
5. Container wiring - Every handler has a factory
"""

from dataclasses import is_dataclass
from unittest.mock import MagicMock

import pytest

from src.application.commands.handlers.rate_limit_key_handlers import (
    BlockRateLimitKeyHandler,
)
from src.application.commands.handlers.toggle_rate_limit_config_handler import (
    ToggleRateLimitConfigHandler,
)
from src.application.commands.rate_limit_commands import BlockRateLimitKey
from src.application.cqrs import (
    CachePolicy,
    COMMAND_REGISTRY,
    CQRSCategory,
    QUERY_REGISTRY,
    get_all_commands,
    get_all_queries,
    get_command_metadata,
    get_commands_by_category,
    get_commands_emitting_events,
    get_queries_by_category,
    get_query_metadata,
    get_statistics,
    validate_registry_consistency,
)
from src.application.cqrs.computed_views import (
    get_all_handler_classes,
    get_commands_with_result_dto,
    get_handler_class_for_command,
    get_handler_class_for_query,
    get_queries_by_cache_policy,
)
from src.application.cqrs.metadata import (
    get_handler_dependencies,
    get_handler_factory_name,
)
from src.application.dtos import KeyBlockResult, KeyResetResult
from src.application.queries.handlers.rate_limit_analytics_handlers import (
    GetRateLimitHistoryHandler,
)
from src.application.queries.handlers.rate_limit_config_handlers import (
    ListRateLimitConfigsHandler,
)
from src.application.queries.rate_limit_queries import ListRateLimitConfigs
from src.core.container.events import get_event_bus
from src.core.container.handler_factory import (
    create_handler,
    get_all_handler_factories,
    required_dependencies,
)
from src.infrastructure.persistence.repositories import RateLimitConfigRepository

COMMAND_VERBS = ("Create", "Update", "Toggle", "Delete", "Reset", "Block", "Unblock")
QUERY_VERBS = ("Get", "List")


class TestRegistryCompleteness:
    """Verify all commands and queries are registered."""

    def test_no_duplicate_commands(self) -> None:
        command_classes = [meta.command_class for meta in COMMAND_REGISTRY]
        duplicates = [cmd for cmd in command_classes if command_classes.count(cmd) > 1]
        assert not duplicates, f"Duplicate commands: {duplicates}"

    def test_no_duplicate_queries(self) -> None:
        query_classes = [meta.query_class for meta in QUERY_REGISTRY]
        duplicates = [qry for qry in query_classes if query_classes.count(qry) > 1]
        assert not duplicates, f"Duplicate queries: {duplicates}"

    def test_helpers_match_registry(self) -> None:
        assert len(get_all_commands()) == len(COMMAND_REGISTRY)
        assert len(get_all_queries()) == len(QUERY_REGISTRY)

    def test_registry_is_consistent(self) -> None:
        assert validate_registry_consistency() == []

    def test_every_category_is_used(self) -> None:
        for category in CQRSCategory:
            used = get_commands_by_category(category) or get_queries_by_category(
                category
            )
            assert used, f"Category {category.value} has no operations"


class TestHandlerCompliance:
    """Verify handlers follow the handle() convention."""

    @pytest.mark.parametrize(
        "handler_class",
        get_all_handler_classes(),
        ids=lambda cls: cls.__name__,
    )
    def test_handler_is_class_with_handle(self, handler_class: type) -> None:
        assert isinstance(handler_class, type)
        assert callable(getattr(handler_class, "handle", None)), (
            f"{handler_class.__name__} is missing handle()"
        )

    @pytest.mark.parametrize(
        "meta", COMMAND_REGISTRY, ids=lambda m: m.command_class.__name__
    )
    def test_commands_are_dataclasses(self, meta) -> None:
        assert is_dataclass(meta.command_class)

    @pytest.mark.parametrize("meta", QUERY_REGISTRY, ids=lambda m: m.query_class.__name__)
    def test_queries_are_dataclasses(self, meta) -> None:
        assert is_dataclass(meta.query_class)

    def test_handler_lookup(self) -> None:
        assert get_handler_class_for_command(BlockRateLimitKey) is BlockRateLimitKeyHandler
        assert (
            get_handler_class_for_query(ListRateLimitConfigs)
            is ListRateLimitConfigsHandler
        )
        assert get_handler_class_for_command(str) is None

    def test_handler_dependencies_from_signature(self) -> None:
        assert get_handler_dependencies(ToggleRateLimitConfigHandler) == [
            "config_repo",
            "change_repo",
            "event_bus",
            "locks",
        ]


class TestNamingConventions:
    """Commands start with an imperative verb, queries with Get/List."""

    @pytest.mark.parametrize(
        "meta", COMMAND_REGISTRY, ids=lambda m: m.command_class.__name__
    )
    def test_command_names(self, meta) -> None:
        name = meta.command_class.__name__
        assert name.startswith(COMMAND_VERBS), f"{name} is not imperative"
        assert meta.handler_class.__name__ == f"{name}Handler"

    @pytest.mark.parametrize("meta", QUERY_REGISTRY, ids=lambda m: m.query_class.__name__)
    def test_query_names(self, meta) -> None:
        name = meta.query_class.__name__
        assert name.startswith(QUERY_VERBS), f"{name} is not a Get/List query"
        assert meta.handler_class.__name__ == f"{name}Handler"

    def test_factory_name(self) -> None:
        meta = get_command_metadata(BlockRateLimitKey)
        assert get_handler_factory_name(meta) == "get_block_rate_limit_key_handler"


class TestMetadataFlags:
    """Result DTO, event and cache flags."""

    def test_result_dto_classes(self) -> None:
        dto_classes = {meta.result_dto_class for meta in get_commands_with_result_dto()}
        assert dto_classes == {KeyBlockResult, KeyResetResult}

    def test_block_commands_do_not_emit_events(self) -> None:
        emitting = {meta.command_class.__name__ for meta in get_commands_emitting_events()}
        assert "BlockRateLimitKey" not in emitting
        assert "UnblockRateLimitKey" not in emitting
        assert "ResetRateLimitKey" in emitting

    def test_reference_queries_cached_long(self) -> None:
        cached = {meta.query_class for meta in get_queries_by_cache_policy(CachePolicy.LONG)}
        reference = {
            meta.query_class for meta in get_queries_by_category(CQRSCategory.REFERENCE)
        }
        assert cached == reference

    def test_query_metadata_lookup(self) -> None:
        meta = get_query_metadata(ListRateLimitConfigs)
        assert meta.category == CQRSCategory.CONFIG
        assert get_query_metadata(str) is None


class TestStatistics:
    """Registry statistics."""

    def test_totals(self) -> None:
        stats = get_statistics()

        assert stats["total_commands"] == 8
        assert stats["total_queries"] == 13
        assert stats["total_operations"] == 21
        assert stats["commands_by_category"] == {"config": 4, "counter": 4}
        assert stats["queries_by_category"] == {
            "config": 3,
            "counter": 3,
            "analytics": 4,
            "reference": 3,
        }
        assert stats["commands_requiring_transaction"] == 4


class TestContainerWiring:
    """Every registered handler has a container factory."""

    def test_factory_for_every_handler(self) -> None:
        factories = get_all_handler_factories()

        expected = {cls.__name__ for cls in get_all_handler_classes()}
        assert set(factories) == expected
        assert all(callable(factory) for factory in factories.values())

    async def test_create_handler_wires_repositories_and_singletons(self) -> None:
        session = MagicMock()

        handler = await create_handler(ToggleRateLimitConfigHandler, session)

        assert isinstance(handler._config_repo, RateLimitConfigRepository)
        assert handler._config_repo.session is session
        assert handler._event_bus is get_event_bus()

    async def test_create_handler_honours_overrides(self) -> None:
        locks = object()

        handler = await create_handler(
            ToggleRateLimitConfigHandler, MagicMock(), locks=locks
        )

        assert handler._locks is locks

    def test_required_dependencies_skip_defaulted_parameters(self) -> None:
        dependencies = required_dependencies(GetRateLimitHistoryHandler)

        assert "clock" not in dependencies
        assert dependencies["usage_repo"] == ("UsageSampleRepository", False)

"""Lookups and derived views over COMMAND_REGISTRY and QUERY_REGISTRY.

The registry module imports every handler, so each function imports it
lazily; metadata.py stays importable from the handlers themselves.
"""

from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.application.cqrs.metadata import (
        CachePolicy,
        CommandMetadata,
        CQRSCategory,
        QueryMetadata,
    )


def _registries() -> tuple[list["CommandMetadata"], list["QueryMetadata"]]:
    from src.application.cqrs.registry import COMMAND_REGISTRY, QUERY_REGISTRY

    return COMMAND_REGISTRY, QUERY_REGISTRY


def get_all_commands() -> list[type]:
    return [meta.command_class for meta in _registries()[0]]


def get_all_queries() -> list[type]:
    return [meta.query_class for meta in _registries()[1]]


def get_commands_by_category(category: "CQRSCategory") -> list["CommandMetadata"]:
    return [meta for meta in _registries()[0] if meta.category == category]


def get_queries_by_category(category: "CQRSCategory") -> list["QueryMetadata"]:
    return [meta for meta in _registries()[1] if meta.category == category]


def get_command_metadata(command_class: type) -> "CommandMetadata | None":
    """Registry entry for ``command_class``, or None when unregistered."""
    return next(
        (meta for meta in _registries()[0] if meta.command_class is command_class),
        None,
    )


def get_query_metadata(query_class: type) -> "QueryMetadata | None":
    """Registry entry for ``query_class``, or None when unregistered."""
    return next(
        (meta for meta in _registries()[1] if meta.query_class is query_class),
        None,
    )


def get_commands_with_result_dto() -> list["CommandMetadata"]:
    return [meta for meta in _registries()[0] if meta.has_result_dto]


def get_commands_emitting_events() -> list["CommandMetadata"]:
    return [meta for meta in _registries()[0] if meta.emits_events]


def get_queries_by_cache_policy(cache_policy: "CachePolicy") -> list["QueryMetadata"]:
    return [meta for meta in _registries()[1] if meta.cache_policy == cache_policy]


def get_handler_class_for_command(command_class: type) -> type | None:
    meta = get_command_metadata(command_class)
    return meta.handler_class if meta else None


def get_handler_class_for_query(query_class: type) -> type | None:
    meta = get_query_metadata(query_class)
    return meta.handler_class if meta else None


def get_all_handler_classes() -> list[type]:
    """Distinct handler classes across both registries, in registry order."""
    commands, queries = _registries()
    handlers = [meta.handler_class for meta in commands]
    handlers += [meta.handler_class for meta in queries]
    return list(dict.fromkeys(handlers))


def get_statistics() -> dict[str, int | dict[str, int]]:
    """Counts for documentation and monitoring.

    Example:
        >>> get_statistics()["total_operations"]
        21
    """
    commands, queries = _registries()
    return {
        "total_commands": len(commands),
        "total_queries": len(queries),
        "total_operations": len(commands) + len(queries),
        "commands_by_category": dict(Counter(m.category.value for m in commands)),
        "queries_by_category": dict(Counter(m.category.value for m in queries)),
        "commands_with_result_dto": sum(1 for m in commands if m.has_result_dto),
        "commands_emitting_events": sum(1 for m in commands if m.emits_events),
        "commands_requiring_transaction": sum(
            1 for m in commands if m.requires_transaction
        ),
        "queries_by_cache_policy": dict(
            Counter(m.cache_policy.value for m in queries)
        ),
    }


def validate_registry_consistency() -> list[str]:
    """Problems found in the registries; empty when consistent."""
    commands, queries = _registries()
    errors: list[str] = []

    command_classes = [meta.command_class for meta in commands]
    if len(command_classes) != len(set(command_classes)):
        errors.append("Duplicate command classes in COMMAND_REGISTRY")

    query_classes = [meta.query_class for meta in queries]
    if len(query_classes) != len(set(query_classes)):
        errors.append("Duplicate query classes in QUERY_REGISTRY")

    for meta in [*commands, *queries]:
        if not callable(getattr(meta.handler_class, "handle", None)):
            errors.append(f"{meta.handler_class.__name__} missing handle() method")

    for meta in commands:
        if meta.has_result_dto and meta.result_dto_class is None:
            errors.append(
                f"{meta.command_class.__name__} declares a result DTO without a class"
            )

    return errors

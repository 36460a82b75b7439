"""Registry entry types for commands and queries.

Entries are frozen, keyword-only dataclasses: the registry is declared once
at import time and read by the container, the compliance tests and the
statistics helpers.
"""

import inspect
from dataclasses import dataclass
from enum import Enum


class CQRSCategory(str, Enum):
    """Functional area of a command or query."""

    CONFIG = "config"  # Rate limit configuration CRUD and audit history
    COUNTER = "counter"  # Live counter inspection, reset, block and unblock
    ANALYTICS = "analytics"  # Overview, distribution and usage history
    REFERENCE = "reference"  # Applications, roles and services for overrides


class CachePolicy(str, Enum):
    """Caching hint for query results."""

    NONE = "none"  # Live data, never cached
    LONG = "long"  # Rarely changing reference data


@dataclass(frozen=True, kw_only=True)
class CommandMetadata:
    """Registry entry for a command.

    Attributes:
        command_class: Command dataclass, e.g. ``ResetRateLimitKey``.
        handler_class: Class with ``handle(command)``.
        category: Functional area.
        has_result_dto: Handler returns a DTO rather than the entity itself.
        result_dto_class: The DTO class when ``has_result_dto`` is set.
        emits_events: Handler publishes domain events on success.
        requires_transaction: Handler writes to the database.
        description: One line for generated documentation.
    """

    command_class: type
    handler_class: type
    category: CQRSCategory
    has_result_dto: bool = False
    result_dto_class: type | None = None
    emits_events: bool = True
    requires_transaction: bool = True
    description: str = ""


@dataclass(frozen=True, kw_only=True)
class QueryMetadata:
    """Registry entry for a query.

    Attributes:
        query_class: Query dataclass, e.g. ``ListActiveLimits``.
        handler_class: Class with ``handle(query)``.
        category: Functional area.
        cache_policy: Caching hint for the result.
        description: One line for generated documentation.
    """

    query_class: type
    handler_class: type
    category: CQRSCategory
    cache_policy: CachePolicy = CachePolicy.NONE
    description: str = ""


def get_handler_factory_name(metadata: CommandMetadata | QueryMetadata) -> str:
    """Container factory name for an entry's handler.

    Example:
        ``BlockRateLimitKey`` -> ``get_block_rate_limit_key_handler``
    """
    if isinstance(metadata, CommandMetadata):
        class_name = metadata.command_class.__name__
    else:
        class_name = metadata.query_class.__name__

    snake_case = "".join(
        f"_{char.lower()}" if char.isupper() and i else char.lower()
        for i, char in enumerate(class_name)
    )
    return f"get_{snake_case}_handler"


def get_handler_dependencies(handler_class: type) -> list[str]:
    """Parameter names of ``handler_class.__init__`` after ``self``."""
    init_method = getattr(handler_class, "__init__", None)
    if init_method is None:
        return []
    try:
        return list(inspect.signature(init_method).parameters)[1:]
    except (ValueError, TypeError):
        return []

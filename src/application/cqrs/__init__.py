"""Command and query registry.

COMMAND_REGISTRY and QUERY_REGISTRY list every use case with its handler;
the container builds one FastAPI dependency per handler from them and the
compliance tests check them for drift.
"""

from src.application.cqrs.metadata import (
    CachePolicy,
    CommandMetadata,
    CQRSCategory,
    QueryMetadata,
)
from src.application.cqrs.registry import (
    COMMAND_REGISTRY,
    QUERY_REGISTRY,
)
from src.application.cqrs.computed_views import (
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

__all__ = [
    "CachePolicy",
    "CommandMetadata",
    "CQRSCategory",
    "QueryMetadata",
    "COMMAND_REGISTRY",
    "QUERY_REGISTRY",
    "get_all_commands",
    "get_all_queries",
    "get_command_metadata",
    "get_commands_by_category",
    "get_commands_emitting_events",
    "get_queries_by_category",
    "get_query_metadata",
    "get_statistics",
    "validate_registry_consistency",
]

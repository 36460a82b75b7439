"""Application services shared by command and query handlers."""

from src.application.services.active_limits import (
    UNKNOWN_CONFIG,
    attribute_records,
    top_by_count,
)
from src.application.services.config_lookup import (
    config_not_found,
    find_config,
    parse_config_id,
    resolve_config_name,
    store_key_for,
)

__all__ = [
    "UNKNOWN_CONFIG",
    "attribute_records",
    "top_by_count",
    "config_not_found",
    "find_config",
    "parse_config_id",
    "resolve_config_name",
    "store_key_for",
]

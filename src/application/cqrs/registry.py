"""CQRS Registry - Single Source of Truth for Commands and Queries.

This registry catalogs ALL commands and queries in the system with their metadata.
Used for:
- Container auto-wiring (handler_factory for every registered handler)
- Validation tests (verify no drift between commands/handlers)
- Gap detection (missing handlers, result DTOs, etc.)

Adding new commands/queries:
1. Define command/query dataclass in rate_limit_commands.py / rate_limit_queries.py
2. Create handler class in handlers/ directory
3. Add entry to COMMAND_REGISTRY or QUERY_REGISTRY below
4. Run tests - they'll tell you what's missing
"""

from src.application.cqrs.metadata import (
    CachePolicy,
    CommandMetadata,
    CQRSCategory,
    QueryMetadata,
)

# ═══════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════
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

# ═══════════════════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════════════════
from src.application.queries.rate_limit_queries import (
    GetRateLimitConfig,
    GetRateLimitConfigHistory,
    GetRateLimitHistory,
    GetRateLimitKeyStatus,
    GetRateLimitOverview,
    GetRateLimitStats,
    GetTopLimitedKeys,
    GetUsageDistribution,
    ListActiveLimits,
    ListApplications,
    ListRateLimitConfigs,
    ListRoles,
    ListServices,
)
from src.application.queries.handlers.rate_limit_analytics_handlers import (
    GetRateLimitHistoryHandler,
    GetRateLimitOverviewHandler,
    GetTopLimitedKeysHandler,
    GetUsageDistributionHandler,
)
from src.application.queries.handlers.rate_limit_config_handlers import (
    GetRateLimitConfigHandler,
    GetRateLimitConfigHistoryHandler,
    ListRateLimitConfigsHandler,
)
from src.application.queries.handlers.rate_limit_monitoring_handlers import (
    GetRateLimitKeyStatusHandler,
    GetRateLimitStatsHandler,
    ListActiveLimitsHandler,
)
from src.application.queries.handlers.reference_data_handlers import (
    ListApplicationsHandler,
    ListRolesHandler,
    ListServicesHandler,
)

# ═══════════════════════════════════════════════════════════════════════════
# Result DTOs
# ═══════════════════════════════════════════════════════════════════════════
from src.application.dtos import KeyBlockResult, KeyResetResult


# ═══════════════════════════════════════════════════════════════════════════
# COMMAND REGISTRY
# ═══════════════════════════════════════════════════════════════════════════

COMMAND_REGISTRY: list[CommandMetadata] = [
    # ═══════════════════════════════════════════════════════════════════════
    # Configuration Commands (4 commands)
    # ═══════════════════════════════════════════════════════════════════════
    CommandMetadata(
        command_class=CreateRateLimitConfig,
        handler_class=CreateRateLimitConfigHandler,
        category=CQRSCategory.CONFIG,
        has_result_dto=False,  # Returns RateLimitConfig entity
        emits_events=True,
        requires_transaction=True,
        description="Create a configuration and its CREATED change record",
    ),
    CommandMetadata(
        command_class=UpdateRateLimitConfig,
        handler_class=UpdateRateLimitConfigHandler,
        category=CQRSCategory.CONFIG,
        has_result_dto=False,
        emits_events=True,
        requires_transaction=True,
        description="Apply a partial update and record the field diff",
    ),
    CommandMetadata(
        command_class=ToggleRateLimitConfig,
        handler_class=ToggleRateLimitConfigHandler,
        category=CQRSCategory.CONFIG,
        has_result_dto=False,
        emits_events=True,
        requires_transaction=True,
        description="Enable or disable a configuration",
    ),
    CommandMetadata(
        command_class=DeleteRateLimitConfig,
        handler_class=DeleteRateLimitConfigHandler,
        category=CQRSCategory.CONFIG,
        has_result_dto=True,
        result_dto_class=KeyResetResult,
        emits_events=True,
        requires_transaction=True,
        description="Delete a configuration and clear its live counters",
    ),
    # ═══════════════════════════════════════════════════════════════════════
    # Counter Commands (4 commands)
    # ═══════════════════════════════════════════════════════════════════════
    CommandMetadata(
        command_class=ResetRateLimitKey,
        handler_class=ResetRateLimitKeyHandler,
        category=CQRSCategory.COUNTER,
        has_result_dto=True,
        result_dto_class=KeyResetResult,
        emits_events=True,
        requires_transaction=False,  # Counter store only
        description="Clear one key's counter, block marker and spacing marker",
    ),
    CommandMetadata(
        command_class=ResetRateLimitConfig,
        handler_class=ResetRateLimitConfigHandler,
        category=CQRSCategory.COUNTER,
        has_result_dto=True,
        result_dto_class=KeyResetResult,
        emits_events=True,
        requires_transaction=False,
        description="Clear every key under a configuration's prefix",
    ),
    CommandMetadata(
        command_class=BlockRateLimitKey,
        handler_class=BlockRateLimitKeyHandler,
        category=CQRSCategory.COUNTER,
        has_result_dto=True,
        result_dto_class=KeyBlockResult,
        emits_events=False,
        requires_transaction=False,
        description="Manually block a key for a duration",
    ),
    CommandMetadata(
        command_class=UnblockRateLimitKey,
        handler_class=UnblockRateLimitKeyHandler,
        category=CQRSCategory.COUNTER,
        has_result_dto=True,
        result_dto_class=KeyBlockResult,
        emits_events=False,
        requires_transaction=False,
        description="Remove a key's block marker",
    ),
]


# ═══════════════════════════════════════════════════════════════════════════
# QUERY REGISTRY
# ═══════════════════════════════════════════════════════════════════════════

QUERY_REGISTRY: list[QueryMetadata] = [
    # ═══════════════════════════════════════════════════════════════════════
    # Configuration Queries (3 queries)
    # ═══════════════════════════════════════════════════════════════════════
    QueryMetadata(
        query_class=GetRateLimitConfig,
        handler_class=GetRateLimitConfigHandler,
        category=CQRSCategory.CONFIG,
        description="Get one configuration by id or name",
    ),
    QueryMetadata(
        query_class=ListRateLimitConfigs,
        handler_class=ListRateLimitConfigsHandler,
        category=CQRSCategory.CONFIG,
        description="List configurations filtered by type, enabled flag and search",
    ),
    QueryMetadata(
        query_class=GetRateLimitConfigHistory,
        handler_class=GetRateLimitConfigHistoryHandler,
        category=CQRSCategory.CONFIG,
        description="Change records for one configuration, newest first",
    ),
    # ═══════════════════════════════════════════════════════════════════════
    # Counter Queries (3 queries)
    # ═══════════════════════════════════════════════════════════════════════
    QueryMetadata(
        query_class=ListActiveLimits,
        handler_class=ListActiveLimitsHandler,
        category=CQRSCategory.COUNTER,
        description="Live counters attributed to configurations",
    ),
    QueryMetadata(
        query_class=GetRateLimitKeyStatus,
        handler_class=GetRateLimitKeyStatusHandler,
        category=CQRSCategory.COUNTER,
        description="Count, TTL and block state for one key",
    ),
    QueryMetadata(
        query_class=GetRateLimitStats,
        handler_class=GetRateLimitStatsHandler,
        category=CQRSCategory.COUNTER,
        description="Active keys, blocked keys and requests per configuration",
    ),
    # ═══════════════════════════════════════════════════════════════════════
    # Analytics Queries (4 queries)
    # ═══════════════════════════════════════════════════════════════════════
    QueryMetadata(
        query_class=GetRateLimitOverview,
        handler_class=GetRateLimitOverviewHandler,
        category=CQRSCategory.ANALYTICS,
        description="Dashboard overview across all configurations",
    ),
    QueryMetadata(
        query_class=GetTopLimitedKeys,
        handler_class=GetTopLimitedKeysHandler,
        category=CQRSCategory.ANALYTICS,
        description="Keys with the highest live counts",
    ),
    QueryMetadata(
        query_class=GetUsageDistribution,
        handler_class=GetUsageDistributionHandler,
        category=CQRSCategory.ANALYTICS,
        description="Live keys grouped into utilization bands",
    ),
    QueryMetadata(
        query_class=GetRateLimitHistory,
        handler_class=GetRateLimitHistoryHandler,
        category=CQRSCategory.ANALYTICS,
        description="Bucketed usage samples and change counts over a time range",
    ),
    # ═══════════════════════════════════════════════════════════════════════
    # Reference Data Queries (3 queries)
    # ═══════════════════════════════════════════════════════════════════════
    QueryMetadata(
        query_class=ListApplications,
        handler_class=ListApplicationsHandler,
        category=CQRSCategory.REFERENCE,
        cache_policy=CachePolicy.LONG,
        description="Applications available for override targets",
    ),
    QueryMetadata(
        query_class=ListRoles,
        handler_class=ListRolesHandler,
        category=CQRSCategory.REFERENCE,
        cache_policy=CachePolicy.LONG,
        description="Roles, optionally filtered by application",
    ),
    QueryMetadata(
        query_class=ListServices,
        handler_class=ListServicesHandler,
        category=CQRSCategory.REFERENCE,
        cache_policy=CachePolicy.LONG,
        description="Services available for component overrides",
    ),
]

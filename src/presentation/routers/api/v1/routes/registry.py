"""API Route Registry - Single Source of Truth for all routes.

This module contains ROUTE_REGISTRY, the authoritative list of all API endpoints.
The registry is used to generate FastAPI routes, auth and CSRF dependencies,
the route -> rate limit config rules, and OpenAPI metadata at application startup.

Registry structure:
    - 20 endpoints across 5 resource categories, all under /admin/rate-limits
    - Each entry is a RouteMetadata instance with complete route metadata
    - Handlers reference actual functions from router modules
    - Every route is ADMIN; mutating routes get the CSRF check
    - Every route is itself rate limited by the "api" configuration

Usage:
    from src.presentation.routers.api.v1.routes.registry import ROUTE_REGISTRY
    from src.presentation.routers.api.v1.routes.generator import register_routes_from_registry

    router = APIRouter(prefix="/api/v1")
    register_routes_from_registry(router, ROUTE_REGISTRY)
"""

from src.presentation.routers.api.v1.admin.rate_limits import (
    block_key,
    create_config,
    delete_config,
    get_analytics,
    get_config,
    get_config_history,
    get_csrf_token,
    get_history,
    get_key_status,
    get_stats,
    list_active_limits,
    list_applications,
    list_configs,
    list_roles,
    list_services,
    reset_config,
    reset_key,
    toggle_config,
    unblock_key,
    update_config,
)
from src.presentation.routers.api.v1.routes.metadata import (
    AuthLevel,
    AuthPolicy,
    CachePolicy,
    ErrorSpec,
    HTTPMethod,
    IdempotencyLevel,
    RouteMetadata,
)
from src.schemas.rate_limit_schemas import (
    ActiveLimitListResponse,
    ApplicationResponse,
    ConfigHistoryResponse,
    ConfigListResponse,
    ConfigResponse,
    CsrfTokenResponse,
    HistoryResponse,
    KeyBlockResponse,
    KeyResetResponse,
    KeyStatusResponse,
    OverviewResponse,
    RoleResponse,
    ServiceResponse,
    StatsResponse,
)

ADMIN = AuthPolicy(level=AuthLevel.ADMIN)
BASE = "/admin/rate-limits"
# Admin traffic is throttled like any other API traffic
ADMIN_RATE_LIMIT = "api"

_AUTH_ERRORS = [
    ErrorSpec(status=401, description="Missing or invalid bearer token"),
    ErrorSpec(status=403, description="Admin role required"),
]
_MUTATION_ERRORS = [
    ErrorSpec(status=401, description="Missing or invalid bearer token"),
    ErrorSpec(status=403, description="Admin role required or CSRF token invalid"),
]
_CONFIG_NOT_FOUND = ErrorSpec(status=404, description="Configuration not found")
_STORE_UNAVAILABLE = ErrorSpec(status=503, description="Counter store unavailable")

# =============================================================================
# ROUTE_REGISTRY - Single Source of Truth
# =============================================================================

ROUTE_REGISTRY: list[RouteMetadata] = [
    # =========================================================================
    # Configurations (8 endpoints)
    # =========================================================================
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/configs",
        handler=list_configs,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="List configurations",
        description="Filter by `type`, `enabled` and a case-insensitive `search`.",
        operation_id="list_rate_limit_configs",
        response_model=ConfigListResponse,
        errors=[ErrorSpec(status=400, description="Invalid filter"), *_AUTH_ERRORS],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.POST,
        path=f"{BASE}/configs",
        handler=create_config,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="Create configuration",
        description="Create a configuration and record a `created` change.",
        operation_id="create_rate_limit_config",
        response_model=ConfigResponse,
        status_code=201,
        errors=[
            ErrorSpec(status=400, description="Validation error"),
            *_MUTATION_ERRORS,
            ErrorSpec(status=409, description="Name or prefix already in use"),
        ],
        idempotency=IdempotencyLevel.NON_IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/configs/{{config_id}}",
        handler=get_config,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="Get configuration",
        description="`config_id` is the configuration name or its UUID.",
        operation_id="get_rate_limit_config",
        response_model=ConfigResponse,
        errors=[*_AUTH_ERRORS, _CONFIG_NOT_FOUND],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.PUT,
        path=f"{BASE}/configs/{{config_id}}",
        handler=update_config,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="Update configuration",
        description=(
            "Partial update: only fields present in the body change. "
            "`changeReason` is stored on the change record."
        ),
        operation_id="update_rate_limit_config",
        response_model=ConfigResponse,
        errors=[
            ErrorSpec(status=400, description="Validation error or immutable field"),
            *_MUTATION_ERRORS,
            _CONFIG_NOT_FOUND,
            ErrorSpec(status=409, description="Prefix already in use"),
        ],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.DELETE,
        path=f"{BASE}/configs/{{config_id}}",
        handler=delete_config,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="Delete configuration",
        description="Hard delete; live counters under the prefix are cleared.",
        operation_id="delete_rate_limit_config",
        response_model=None,
        status_code=204,
        errors=[*_MUTATION_ERRORS, _CONFIG_NOT_FOUND],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.POST,
        path=f"{BASE}/configs/{{config_id}}/toggle",
        handler=toggle_config,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="Enable or disable configuration",
        operation_id="toggle_rate_limit_config",
        response_model=ConfigResponse,
        errors=[*_MUTATION_ERRORS, _CONFIG_NOT_FOUND],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/configs/{{config_id}}/history",
        handler=get_config_history,
        resource="rate_limit_configs",
        tags=["Rate Limit Configs"],
        summary="Configuration change history",
        description="Newest first; available after the configuration is deleted.",
        operation_id="get_rate_limit_config_history",
        response_model=ConfigHistoryResponse,
        errors=_AUTH_ERRORS,
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.POST,
        path=f"{BASE}/configs/{{config_id}}/reset",
        handler=reset_config,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="Reset all keys of a configuration",
        operation_id="reset_rate_limit_config",
        response_model=KeyResetResponse,
        errors=[*_MUTATION_ERRORS, _CONFIG_NOT_FOUND, _STORE_UNAVAILABLE],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    # =========================================================================
    # Live counters (6 endpoints)
    # =========================================================================
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/active",
        handler=list_active_limits,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="List tracked keys",
        description="Sorted by current count, highest first.",
        operation_id="list_active_rate_limits",
        response_model=ActiveLimitListResponse,
        errors=[*_AUTH_ERRORS, _STORE_UNAVAILABLE],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.NO_STORE,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/status/{{config_name}}/{{key:path}}",
        handler=get_key_status,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="Key status",
        description="Count, TTL, reset time and block state of one key.",
        operation_id="get_rate_limit_key_status",
        response_model=KeyStatusResponse,
        errors=[*_AUTH_ERRORS, _CONFIG_NOT_FOUND, _STORE_UNAVAILABLE],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.NO_STORE,
    ),
    RouteMetadata(
        method=HTTPMethod.POST,
        path=f"{BASE}/reset/{{config_name}}/{{key:path}}",
        handler=reset_key,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="Reset one key",
        operation_id="reset_rate_limit_key",
        response_model=KeyResetResponse,
        errors=[
            *_MUTATION_ERRORS,
            ErrorSpec(status=404, description="Configuration or key not found"),
            _STORE_UNAVAILABLE,
        ],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.POST,
        path=f"{BASE}/block",
        handler=block_key,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="Block one key",
        description="`duration` in seconds, default 3600.",
        operation_id="block_rate_limit_key",
        response_model=KeyBlockResponse,
        errors=[
            ErrorSpec(status=400, description="Validation error"),
            *_MUTATION_ERRORS,
            _CONFIG_NOT_FOUND,
            _STORE_UNAVAILABLE,
        ],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.POST,
        path=f"{BASE}/unblock",
        handler=unblock_key,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="Unblock one key",
        operation_id="unblock_rate_limit_key",
        response_model=KeyBlockResponse,
        errors=[
            *_MUTATION_ERRORS,
            ErrorSpec(status=404, description="Configuration not found or key not blocked"),
            _STORE_UNAVAILABLE,
        ],
        idempotency=IdempotencyLevel.IDEMPOTENT,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/stats",
        handler=get_stats,
        resource="rate_limit_counters",
        tags=["Rate Limit Monitoring"],
        summary="Key counts per configuration",
        operation_id="get_rate_limit_stats",
        response_model=StatsResponse,
        errors=[*_AUTH_ERRORS, _STORE_UNAVAILABLE],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.NO_STORE,
    ),
    # =========================================================================
    # Reference data (3 endpoints)
    # =========================================================================
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/applications",
        handler=list_applications,
        resource="rate_limit_reference",
        tags=["Rate Limit Reference Data"],
        summary="List applications",
        operation_id="list_rate_limit_applications",
        response_model=list[ApplicationResponse],
        errors=_AUTH_ERRORS,
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.PRIVATE,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/roles",
        handler=list_roles,
        resource="rate_limit_reference",
        tags=["Rate Limit Reference Data"],
        summary="List roles",
        operation_id="list_rate_limit_roles",
        response_model=list[RoleResponse],
        errors=_AUTH_ERRORS,
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.PRIVATE,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/services",
        handler=list_services,
        resource="rate_limit_reference",
        tags=["Rate Limit Reference Data"],
        summary="List services",
        operation_id="list_rate_limit_services",
        response_model=list[ServiceResponse],
        errors=_AUTH_ERRORS,
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.PRIVATE,
    ),
    # =========================================================================
    # Analytics (2 endpoints)
    # =========================================================================
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/analytics",
        handler=get_analytics,
        resource="rate_limit_analytics",
        tags=["Rate Limit Analytics"],
        summary="Dashboard overview",
        description="`timeRange` is one of 1h, 6h, 24h, 7d, 30d.",
        operation_id="get_rate_limit_analytics",
        response_model=OverviewResponse,
        errors=[ErrorSpec(status=400, description="Invalid timeRange"), *_AUTH_ERRORS],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.NO_STORE,
    ),
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/history",
        handler=get_history,
        resource="rate_limit_analytics",
        tags=["Rate Limit Analytics"],
        summary="Historical trends",
        description=(
            "Buckets are hourly for ranges up to 6h and daily beyond; "
            "`granularity` is accepted but does not override that."
        ),
        operation_id="get_rate_limit_history",
        response_model=HistoryResponse,
        errors=[ErrorSpec(status=400, description="Invalid timeRange"), *_AUTH_ERRORS],
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
    ),
    # =========================================================================
    # Security (1 endpoint)
    # =========================================================================
    RouteMetadata(
        method=HTTPMethod.GET,
        path=f"{BASE}/csrf-token",
        handler=get_csrf_token,
        resource="rate_limit_security",
        tags=["Rate Limit Admin Security"],
        summary="Issue CSRF token",
        description="Sets the CSRF cookie; echo the value in `X-CSRF-Token`.",
        operation_id="get_rate_limit_csrf_token",
        response_model=CsrfTokenResponse,
        errors=_AUTH_ERRORS,
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=ADMIN,
        rate_limit_config=ADMIN_RATE_LIMIT,
        cache_policy=CachePolicy.NO_STORE,
    ),
]

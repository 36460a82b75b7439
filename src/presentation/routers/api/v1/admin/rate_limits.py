"""Rate limit admin resource handlers.

Handler functions for the rate limit control surface.
Routes are registered via ROUTE_REGISTRY in routes/registry.py, which also
attaches the admin role and CSRF dependencies.

Handlers:
    Configurations:
        list_configs, get_config, create_config, update_config,
        delete_config, toggle_config, get_config_history, reset_config
    Live counters:
        list_active_limits, get_key_status, reset_key, block_key,
        unblock_key, get_stats
    Reference data:
        list_applications, list_roles, list_services
    Analytics:
        get_analytics, get_history
    Security:
        get_csrf_token
"""

from typing import Annotated

from fastapi import Depends, Path, Query, Request, Response, status
from fastapi.responses import JSONResponse

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
    DeleteRateLimitConfig,
    ResetRateLimitConfig,
    ResetRateLimitKey,
    ToggleRateLimitConfig,
    UnblockRateLimitKey,
    UpdateRateLimitConfig,
)
from src.application.errors import ApplicationError
from src.application.queries.handlers.rate_limit_analytics_handlers import (
    GetRateLimitHistoryHandler,
    GetRateLimitOverviewHandler,
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
from src.application.queries.rate_limit_queries import (
    DEFAULT_ACTIVE_LIMIT,
    GetRateLimitConfig,
    GetRateLimitConfigHistory,
    GetRateLimitHistory,
    GetRateLimitKeyStatus,
    GetRateLimitOverview,
    GetRateLimitStats,
    ListActiveLimits,
    ListApplications,
    ListRateLimitConfigs,
    ListRoles,
    ListServices,
)
from src.core.config import settings
from src.core.container import handler_factory
from src.core.result import Failure, Success
from src.domain.enums import Granularity, RateLimitType, TimeRange
from src.presentation.routers.api.middleware.auth_dependencies import (
    AdminUser,
    issue_csrf_token,
)
from src.presentation.routers.api.middleware.trace_middleware import get_trace_id
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder
from src.schemas.rate_limit_schemas import (
    ActiveLimitListResponse,
    ActiveLimitResponse,
    ApplicationResponse,
    BlockRequest,
    ChangeRecordResponse,
    ConfigCreateRequest,
    ConfigHistoryResponse,
    ConfigListResponse,
    ConfigResponse,
    ConfigToggleRequest,
    ConfigUpdateRequest,
    CsrfTokenResponse,
    HistoryResponse,
    KeyBlockResponse,
    KeyResetResponse,
    KeyStatusResponse,
    OverviewResponse,
    RoleResponse,
    ServiceResponse,
    StatsResponse,
    UnblockRequest,
)

ConfigRef = Annotated[str, Path(description="Configuration name or UUID")]
ConfigName = Annotated[str, Path(description="Configuration name")]
RateLimitKey = Annotated[str, Path(description="Derived key or full store key")]


def _error_response(error: ApplicationError, request: Request) -> JSONResponse:
    return ErrorResponseBuilder.from_application_error(
        error=error,
        request=request,
        trace_id=get_trace_id() or "",
    )


# =============================================================================
# Configurations
# =============================================================================


async def list_configs(
    request: Request,
    current_user: AdminUser,
    type: Annotated[
        RateLimitType | None,
        Query(description="Only this traffic class"),
    ] = None,
    enabled: Annotated[
        bool | None,
        Query(description="Only enabled (true) or disabled (false) configs"),
    ] = None,
    search: Annotated[
        str | None,
        Query(description="Substring of name, display name or description"),
    ] = None,
    handler: ListRateLimitConfigsHandler = Depends(
        handler_factory(ListRateLimitConfigsHandler)
    ),
) -> ConfigListResponse | JSONResponse:
    """List rate limit configurations.

    GET /api/v1/admin/rate-limits/configs → 200 OK
    """
    result = await handler.handle(
        ListRateLimitConfigs(type=type, enabled=enabled, search=search)
    )

    match result:
        case Success(value=configs):
            return ConfigListResponse.from_entities(configs)
        case Failure(error=error):
            return _error_response(error, request)


async def get_config(
    request: Request,
    current_user: AdminUser,
    config_id: ConfigRef,
    handler: GetRateLimitConfigHandler = Depends(
        handler_factory(GetRateLimitConfigHandler)
    ),
) -> ConfigResponse | JSONResponse:
    """Get one configuration by name or UUID.

    GET /api/v1/admin/rate-limits/configs/{config_id} → 200 OK
    """
    result = await handler.handle(GetRateLimitConfig(config_ref=config_id))

    match result:
        case Success(value=config):
            return ConfigResponse.from_entity(config)
        case Failure(error=error):
            return _error_response(error, request)


async def create_config(
    request: Request,
    current_user: AdminUser,
    data: ConfigCreateRequest,
    handler: CreateRateLimitConfigHandler = Depends(
        handler_factory(CreateRateLimitConfigHandler)
    ),
) -> ConfigResponse | JSONResponse:
    """Create a configuration.

    POST /api/v1/admin/rate-limits/configs → 201 Created

    Returns:
        ConfigResponse on success.
        JSONResponse with RFC 7807 error (400 invalid, 409 name or prefix taken).
    """
    result = await handler.handle(data.to_command(created_by=current_user.user_id))

    match result:
        case Success(value=config):
            return ConfigResponse.from_entity(config)
        case Failure(error=error):
            return _error_response(error, request)


async def update_config(
    request: Request,
    current_user: AdminUser,
    config_id: ConfigRef,
    data: ConfigUpdateRequest,
    handler: UpdateRateLimitConfigHandler = Depends(
        handler_factory(UpdateRateLimitConfigHandler)
    ),
) -> ConfigResponse | JSONResponse:
    """Apply a partial update.

    PUT /api/v1/admin/rate-limits/configs/{config_id} → 200 OK

    Only fields present in the body change. ``changeReason`` is stored on
    the change record.
    """
    command = UpdateRateLimitConfig(
        config_ref=config_id,
        changes=data.to_changes(),
        changed_by=current_user.user_id,
        reason=data.change_reason,
    )
    result = await handler.handle(command)

    match result:
        case Success(value=config):
            return ConfigResponse.from_entity(config)
        case Failure(error=error):
            return _error_response(error, request)


async def delete_config(
    request: Request,
    current_user: AdminUser,
    config_id: ConfigRef,
    reason: Annotated[
        str | None,
        Query(description="Recorded on the change record"),
    ] = None,
    handler: DeleteRateLimitConfigHandler = Depends(
        handler_factory(DeleteRateLimitConfigHandler)
    ),
) -> Response:
    """Delete a configuration and clear its counters.

    DELETE /api/v1/admin/rate-limits/configs/{config_id} → 204 No Content
    """
    result = await handler.handle(
        DeleteRateLimitConfig(
            config_ref=config_id,
            changed_by=current_user.user_id,
            reason=reason,
        )
    )

    match result:
        case Success():
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        case Failure(error=error):
            return _error_response(error, request)


async def toggle_config(
    request: Request,
    current_user: AdminUser,
    config_id: ConfigRef,
    data: ConfigToggleRequest,
    handler: ToggleRateLimitConfigHandler = Depends(
        handler_factory(ToggleRateLimitConfigHandler)
    ),
) -> ConfigResponse | JSONResponse:
    """Enable or disable a configuration.

    POST /api/v1/admin/rate-limits/configs/{config_id}/toggle → 200 OK
    """
    result = await handler.handle(
        ToggleRateLimitConfig(
            config_ref=config_id,
            enabled=data.enabled,
            changed_by=current_user.user_id,
            reason=data.change_reason,
        )
    )

    match result:
        case Success(value=config):
            return ConfigResponse.from_entity(config)
        case Failure(error=error):
            return _error_response(error, request)


async def get_config_history(
    request: Request,
    current_user: AdminUser,
    config_id: ConfigRef,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    handler: GetRateLimitConfigHistoryHandler = Depends(
        handler_factory(GetRateLimitConfigHistoryHandler)
    ),
) -> ConfigHistoryResponse | JSONResponse:
    """Change records of one configuration, newest first.

    GET /api/v1/admin/rate-limits/configs/{config_id}/history → 200 OK

    Records outlive the configuration, so history of a deleted config is
    still available by name.
    """
    result = await handler.handle(
        GetRateLimitConfigHistory(config_ref=config_id, limit=limit)
    )

    match result:
        case Success(value=records):
            return ConfigHistoryResponse(
                config_name=records[0].config_name if records else config_id,
                changes=[ChangeRecordResponse.from_entity(r) for r in records],
                total_count=len(records),
            )
        case Failure(error=error):
            return _error_response(error, request)


async def reset_config(
    request: Request,
    current_user: AdminUser,
    config_id: ConfigRef,
    handler: ResetRateLimitConfigHandler = Depends(
        handler_factory(ResetRateLimitConfigHandler)
    ),
) -> KeyResetResponse | JSONResponse:
    """Clear every key of one configuration.

    POST /api/v1/admin/rate-limits/configs/{config_id}/reset → 200 OK
    """
    result = await handler.handle(
        ResetRateLimitConfig(config_ref=config_id, reset_by=current_user.user_id)
    )

    match result:
        case Success(value=reset):
            return KeyResetResponse.from_dto(reset)
        case Failure(error=error):
            return _error_response(error, request)


# =============================================================================
# Live counters
# =============================================================================


async def list_active_limits(
    request: Request,
    current_user: AdminUser,
    config_name: Annotated[
        str | None,
        Query(alias="configName", description="Only keys of this configuration"),
    ] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = DEFAULT_ACTIVE_LIMIT,
    handler: ListActiveLimitsHandler = Depends(
        handler_factory(ListActiveLimitsHandler)
    ),
) -> ActiveLimitListResponse | JSONResponse:
    """Tracked keys sorted by current count (highest first).

    GET /api/v1/admin/rate-limits/active → 200 OK
    """
    result = await handler.handle(
        ListActiveLimits(config_name=config_name, limit=limit)
    )

    match result:
        case Success(value=limits):
            return ActiveLimitListResponse(
                active_limits=[ActiveLimitResponse.from_dto(a) for a in limits],
                total_count=len(limits),
            )
        case Failure(error=error):
            return _error_response(error, request)


async def get_key_status(
    request: Request,
    current_user: AdminUser,
    config_name: ConfigName,
    key: RateLimitKey,
    handler: GetRateLimitKeyStatusHandler = Depends(
        handler_factory(GetRateLimitKeyStatusHandler)
    ),
) -> KeyStatusResponse | JSONResponse:
    """Live state of one key.

    GET /api/v1/admin/rate-limits/status/{config_name}/{key} → 200 OK

    An untracked key reports ``state: fresh`` with a zero count.
    """
    result = await handler.handle(
        GetRateLimitKeyStatus(config_name=config_name, key=key)
    )

    match result:
        case Success(value=key_status):
            return KeyStatusResponse.from_dto(key_status)
        case Failure(error=error):
            return _error_response(error, request)


async def reset_key(
    request: Request,
    current_user: AdminUser,
    config_name: ConfigName,
    key: RateLimitKey,
    handler: ResetRateLimitKeyHandler = Depends(
        handler_factory(ResetRateLimitKeyHandler)
    ),
) -> KeyResetResponse | JSONResponse:
    """Clear one key's counter, block and spacing state.

    POST /api/v1/admin/rate-limits/reset/{config_name}/{key} → 200 OK
    """
    result = await handler.handle(
        ResetRateLimitKey(
            config_name=config_name, key=key, reset_by=current_user.user_id
        )
    )

    match result:
        case Success(value=reset):
            return KeyResetResponse.from_dto(reset)
        case Failure(error=error):
            return _error_response(error, request)


async def block_key(
    request: Request,
    current_user: AdminUser,
    data: BlockRequest,
    handler: BlockRateLimitKeyHandler = Depends(
        handler_factory(BlockRateLimitKeyHandler)
    ),
) -> KeyBlockResponse | JSONResponse:
    """Manually block one key.

    POST /api/v1/admin/rate-limits/block → 200 OK
    """
    result = await handler.handle(
        BlockRateLimitKey(
            config_name=data.config_name,
            key=data.key,
            blocked_by=current_user.user_id,
            duration_seconds=data.duration,
            reason=data.reason,
        )
    )

    match result:
        case Success(value=blocked):
            return KeyBlockResponse.from_dto(blocked)
        case Failure(error=error):
            return _error_response(error, request)


async def unblock_key(
    request: Request,
    current_user: AdminUser,
    data: UnblockRequest,
    handler: UnblockRateLimitKeyHandler = Depends(
        handler_factory(UnblockRateLimitKeyHandler)
    ),
) -> KeyBlockResponse | JSONResponse:
    """Remove a key's block marker.

    POST /api/v1/admin/rate-limits/unblock → 200 OK
    """
    result = await handler.handle(
        UnblockRateLimitKey(
            config_name=data.config_name,
            key=data.key,
            unblocked_by=current_user.user_id,
        )
    )

    match result:
        case Success(value=unblocked):
            return KeyBlockResponse.from_dto(unblocked)
        case Failure(error=error):
            return _error_response(error, request)


async def get_stats(
    request: Request,
    current_user: AdminUser,
    handler: GetRateLimitStatsHandler = Depends(
        handler_factory(GetRateLimitStatsHandler)
    ),
) -> StatsResponse | JSONResponse:
    """Active and blocked key counts per configuration.

    GET /api/v1/admin/rate-limits/stats → 200 OK
    """
    result = await handler.handle(GetRateLimitStats())

    match result:
        case Success(value=stats):
            return StatsResponse.from_dtos(stats)
        case Failure(error=error):
            return _error_response(error, request)


# =============================================================================
# Reference data
# =============================================================================


async def list_applications(
    request: Request,
    current_user: AdminUser,
    handler: ListApplicationsHandler = Depends(
        handler_factory(ListApplicationsHandler)
    ),
) -> list[ApplicationResponse] | JSONResponse:
    """GET /api/v1/admin/rate-limits/applications → 200 OK"""
    result = await handler.handle(ListApplications())

    match result:
        case Success(value=applications):
            return [ApplicationResponse.from_entity(a) for a in applications]
        case Failure(error=error):
            return _error_response(error, request)


async def list_roles(
    request: Request,
    current_user: AdminUser,
    application_id: Annotated[
        str | None,
        Query(alias="applicationId", description="Only roles of this application"),
    ] = None,
    handler: ListRolesHandler = Depends(handler_factory(ListRolesHandler)),
) -> list[RoleResponse] | JSONResponse:
    """GET /api/v1/admin/rate-limits/roles → 200 OK"""
    result = await handler.handle(ListRoles(application_id=application_id))

    match result:
        case Success(value=roles):
            return [RoleResponse.from_entity(r) for r in roles]
        case Failure(error=error):
            return _error_response(error, request)


async def list_services(
    request: Request,
    current_user: AdminUser,
    handler: ListServicesHandler = Depends(handler_factory(ListServicesHandler)),
) -> list[ServiceResponse] | JSONResponse:
    """GET /api/v1/admin/rate-limits/services → 200 OK"""
    result = await handler.handle(ListServices())

    match result:
        case Success(value=services):
            return [ServiceResponse.from_entity(s) for s in services]
        case Failure(error=error):
            return _error_response(error, request)


# =============================================================================
# Analytics
# =============================================================================


async def get_analytics(
    request: Request,
    current_user: AdminUser,
    time_range: Annotated[
        TimeRange,
        Query(alias="timeRange", description="1h, 6h, 24h, 7d or 30d"),
    ] = TimeRange.LAST_24_HOURS,
    handler: GetRateLimitOverviewHandler = Depends(
        handler_factory(GetRateLimitOverviewHandler)
    ),
) -> OverviewResponse | JSONResponse:
    """Dashboard overview.

    GET /api/v1/admin/rate-limits/analytics?timeRange=24h → 200 OK
    """
    result = await handler.handle(GetRateLimitOverview(time_range=time_range))

    match result:
        case Success(value=overview):
            return OverviewResponse.from_dto(overview)
        case Failure(error=error):
            return _error_response(error, request)


async def get_history(
    request: Request,
    current_user: AdminUser,
    time_range: Annotated[
        TimeRange,
        Query(alias="timeRange", description="1h, 6h, 24h, 7d or 30d"),
    ] = TimeRange.LAST_7_DAYS,
    granularity: Annotated[
        Granularity | None,
        Query(description="Accepted; hour up to 6h and day beyond always apply"),
    ] = None,
    config_name: Annotated[
        str | None,
        Query(alias="configName", description="Only this configuration"),
    ] = None,
    handler: GetRateLimitHistoryHandler = Depends(
        handler_factory(GetRateLimitHistoryHandler)
    ),
) -> HistoryResponse | JSONResponse:
    """Historical trends.

    GET /api/v1/admin/rate-limits/history?timeRange=7d → 200 OK

    An unknown ``timeRange`` is rejected with 400 by request validation.
    """
    result = await handler.handle(
        GetRateLimitHistory(
            time_range=time_range,
            granularity=granularity,
            config_name=config_name,
        )
    )

    match result:
        case Success(value=history):
            return HistoryResponse.from_dto(history)
        case Failure(error=error):
            return _error_response(error, request)


# =============================================================================
# Security
# =============================================================================


async def get_csrf_token(
    response: Response,
    current_user: AdminUser,
) -> CsrfTokenResponse:
    """Issue a CSRF token for the double-submit check.

    GET /api/v1/admin/rate-limits/csrf-token → 200 OK

    The token is set as a cookie and returned in the body; mutating admin
    requests must echo it in the X-CSRF-Token header.
    """
    token = issue_csrf_token()
    response.set_cookie(
        key=settings.csrf_cookie_name,
        value=token,
        httponly=False,
        samesite="strict",
        secure=settings.is_production,
    )
    return CsrfTokenResponse(csrf_token=token)

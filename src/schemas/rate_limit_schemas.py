"""Rate limit admin request/response schemas.

Pydantic models for the rate limit admin API. The wire format is camelCase
(``windowMs``, ``keyStrategy``, ...); Python attributes stay snake_case.
Kept separate from domain entities - these are HTTP-layer concerns.

RESTful Endpoints (under /api/v1/admin/rate-limits):
    GET    /configs                    - List configurations
    POST   /configs                    - Create configuration
    GET    /configs/{config_id}        - Get configuration
    PUT    /configs/{config_id}        - Update configuration
    DELETE /configs/{config_id}        - Delete configuration
    POST   /configs/{config_id}/toggle - Enable/disable configuration
    GET    /configs/{config_id}/history - Change records
    POST   /configs/{config_id}/reset  - Reset all keys of a configuration
    GET    /active                     - Tracked keys
    GET    /status/{config_name}/{key} - One key's state
    POST   /reset/{config_name}/{key}  - Reset one key
    POST   /block, /unblock            - Manual block / unblock
    GET    /stats                      - Key counts per configuration
    GET    /applications, /roles, /services - Reference data
    GET    /analytics, /history        - Dashboard analytics
    GET    /csrf-token                 - CSRF token
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.application.commands.rate_limit_commands import (
    DEFAULT_BLOCK_SECONDS,
    CreateRateLimitConfig,
)
from src.application.dtos import (
    ActiveLimit,
    ConfigKeyStats,
    KeyBlockResult,
    KeyResetResult,
    KeyStatus,
    RateLimitHistory,
    RateLimitOverview,
    UsageBand,
)
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.entities.reference_data import Application, Role, Service
from src.domain.enums import (
    ChangeAction,
    FailureMode,
    Granularity,
    KeyStrategy,
    LimitState,
    RateLimitType,
)
from src.domain.value_objects.limit_override import (
    ApplicationLimit,
    ComponentLimit,
    EnvironmentOverride,
    RoleLimit,
)


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases.

    Accepts both ``windowMs`` and ``window_ms`` on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Override payloads (shared by requests and responses)
# =============================================================================


class ApplicationLimitSchema(CamelModel):
    application_id: str = Field(..., description="Application identifier")
    max: int = Field(..., description="Max requests per window for this app")

    def to_domain(self) -> ApplicationLimit:
        return ApplicationLimit(application_id=self.application_id, max=self.max)


class RoleLimitSchema(CamelModel):
    role_id: str = Field(..., description="Role identifier")
    max: int = Field(..., description="Max requests per window for this role")

    def to_domain(self) -> RoleLimit:
        return RoleLimit(role_id=self.role_id, max=self.max)


class ComponentLimitSchema(CamelModel):
    service_id: str = Field(..., description="Service identifier")
    procedure_name: str | None = Field(
        None,
        description="Procedure name (empty applies to the whole service)",
    )
    max: int = Field(..., description="Max requests per window")

    def to_domain(self) -> ComponentLimit:
        return ComponentLimit(
            service_id=self.service_id,
            procedure_name=self.procedure_name or None,
            max=self.max,
        )


class EnvironmentOverrideSchema(CamelModel):
    enabled: bool = Field(True, description="ANDed with the config's enabled flag")
    max: int | None = Field(None, description="Replaces the base max when set")
    window_ms: int | None = Field(None, description="Replaces the base window")

    def to_domain(self) -> EnvironmentOverride:
        return EnvironmentOverride(
            enabled=self.enabled, max=self.max, window_ms=self.window_ms
        )


# Request attribute -> converter into the domain value the entity stores.
_OVERRIDE_CONVERTERS: dict[str, Any] = {
    "application_limits": lambda items: [i.to_domain() for i in items],
    "role_limits": lambda items: [i.to_domain() for i in items],
    "component_limits": lambda items: [i.to_domain() for i in items],
    "environment_overrides": lambda items: {
        env: override.to_domain() for env, override in items.items()
    },
}


# =============================================================================
# Configuration Requests
# =============================================================================


class ConfigCreateRequest(CamelModel):
    """Request schema for creating a configuration.

    POST /api/v1/admin/rate-limits/configs
    Returns: 201 Created
    """

    name: str = Field(..., description="Unique slug, immutable after creation")
    display_name: str = Field(..., description="Human-readable name")
    type: RateLimitType = Field(..., description="Traffic class")
    window_ms: int = Field(..., description="Window length in milliseconds")
    max: int = Field(..., description="Requests allowed per window")
    key_strategy: KeyStrategy = Field(..., description="Bucket key strategy")
    description: str | None = Field(None, description="Free text")
    prefix: str | None = Field(
        None, description="Counter key namespace, ending with ':' (default rl:<name>:)"
    )
    custom_key_generator: str | None = Field(
        None,
        description="Key template, required when keyStrategy is custom",
    )
    skip_successful_requests: bool = Field(False)
    skip_failed_requests: bool = Field(False)
    exec_evenly: bool = Field(False, description="Space requests evenly")
    block_duration_ms: int = Field(0, description="Lockout after hitting the limit")
    message: str | None = Field(None, description="Message for throttled callers")
    failure_mode: FailureMode | None = Field(
        None,
        description="Store outage policy (default: closed for auth, else open)",
    )
    application_limits: list[ApplicationLimitSchema] = Field(default_factory=list)
    role_limits: list[RoleLimitSchema] = Field(default_factory=list)
    component_limits: list[ComponentLimitSchema] = Field(default_factory=list)
    environment_overrides: dict[str, EnvironmentOverrideSchema] = Field(
        default_factory=dict
    )
    enabled: bool = Field(True)
    change_reason: str | None = Field(None, description="Recorded in the history")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "api",
                "displayName": "Public API",
                "type": "api",
                "windowMs": 60000,
                "max": 1000,
                "keyStrategy": "ip",
                "roleLimits": [{"roleId": "premium", "max": 5000}],
                "environmentOverrides": {"development": {"max": 100000}},
            }
        },
    )

    def to_command(self, created_by: str) -> CreateRateLimitConfig:
        """Convert request to CreateRateLimitConfig command."""
        return CreateRateLimitConfig(
            name=self.name,
            display_name=self.display_name,
            type=self.type,
            window_ms=self.window_ms,
            max=self.max,
            key_strategy=self.key_strategy,
            created_by=created_by,
            description=self.description,
            prefix=self.prefix,
            custom_key_generator=self.custom_key_generator,
            skip_successful_requests=self.skip_successful_requests,
            skip_failed_requests=self.skip_failed_requests,
            exec_evenly=self.exec_evenly,
            block_duration_ms=self.block_duration_ms,
            message=self.message,
            failure_mode=self.failure_mode,
            application_limits=[a.to_domain() for a in self.application_limits],
            role_limits=[r.to_domain() for r in self.role_limits],
            component_limits=[c.to_domain() for c in self.component_limits],
            environment_overrides={
                env: o.to_domain() for env, o in self.environment_overrides.items()
            },
            enabled=self.enabled,
            reason=self.change_reason,
        )


class ConfigUpdateRequest(CamelModel):
    """Request schema for a partial configuration update.

    PUT /api/v1/admin/rate-limits/configs/{config_id}

    Only fields present in the body are applied. ``name`` is accepted so
    that an attempt to rename is reported as an immutable-field error.
    """

    name: str | None = None
    display_name: str | None = None
    type: RateLimitType | None = None
    window_ms: int | None = None
    max: int | None = None
    key_strategy: KeyStrategy | None = None
    description: str | None = None
    prefix: str | None = None
    custom_key_generator: str | None = None
    skip_successful_requests: bool | None = None
    skip_failed_requests: bool | None = None
    exec_evenly: bool | None = None
    block_duration_ms: int | None = None
    message: str | None = None
    failure_mode: FailureMode | None = None
    application_limits: list[ApplicationLimitSchema] | None = None
    role_limits: list[RoleLimitSchema] | None = None
    component_limits: list[ComponentLimitSchema] | None = None
    environment_overrides: dict[str, EnvironmentOverrideSchema] | None = None
    enabled: bool | None = None
    change_reason: str | None = Field(None, description="Recorded in the history")

    def to_changes(self) -> dict[str, Any]:
        """Entity attribute -> new value for every field the client sent."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set - {"change_reason"}:
            value = getattr(self, name)
            converter = _OVERRIDE_CONVERTERS.get(name)
            if converter is not None:
                # null clears the overrides of that dimension
                empty: Any = {} if name == "environment_overrides" else []
                value = converter(value if value is not None else empty)
            changes[name] = value
        return changes


class ConfigToggleRequest(CamelModel):
    """POST /api/v1/admin/rate-limits/configs/{config_id}/toggle"""

    enabled: bool = Field(..., description="New enabled state")
    change_reason: str | None = Field(None, description="Recorded in the history")


# =============================================================================
# Configuration Responses
# =============================================================================


class ConfigResponse(CamelModel):
    """Response schema for a single configuration."""

    id: UUID
    name: str
    display_name: str
    type: RateLimitType
    window_ms: int
    max: int
    key_strategy: KeyStrategy
    prefix: str
    description: str | None = None
    custom_key_generator: str | None = None
    skip_successful_requests: bool
    skip_failed_requests: bool
    exec_evenly: bool
    block_duration_ms: int
    message: str
    failure_mode: FailureMode | None = None
    effective_failure_mode: FailureMode
    application_limits: list[ApplicationLimitSchema]
    role_limits: list[RoleLimitSchema]
    component_limits: list[ComponentLimitSchema]
    environment_overrides: dict[str, EnvironmentOverrideSchema]
    enabled: bool
    version: int
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, config: RateLimitConfig) -> "ConfigResponse":
        """Convert domain entity to response schema."""
        return cls(
            id=config.id,
            name=config.name,
            display_name=config.display_name,
            type=config.type,
            window_ms=config.window_ms,
            max=config.max,
            key_strategy=config.key_strategy,
            prefix=config.prefix,
            description=config.description,
            custom_key_generator=config.custom_key_generator,
            skip_successful_requests=config.skip_successful_requests,
            skip_failed_requests=config.skip_failed_requests,
            exec_evenly=config.exec_evenly,
            block_duration_ms=config.block_duration_ms,
            message=config.message,
            failure_mode=config.failure_mode,
            effective_failure_mode=config.effective_failure_mode,
            application_limits=[
                ApplicationLimitSchema(application_id=a.application_id, max=a.max)
                for a in config.application_limits
            ],
            role_limits=[
                RoleLimitSchema(role_id=r.role_id, max=r.max)
                for r in config.role_limits
            ],
            component_limits=[
                ComponentLimitSchema(
                    service_id=c.service_id,
                    procedure_name=c.procedure_name,
                    max=c.max,
                )
                for c in config.component_limits
            ],
            environment_overrides={
                env: EnvironmentOverrideSchema(
                    enabled=o.enabled, max=o.max, window_ms=o.window_ms
                )
                for env, o in config.environment_overrides.items()
            },
            enabled=config.enabled,
            version=config.version,
            created_by=config.created_by,
            updated_by=config.updated_by,
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class ConfigListResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/configs"""

    configs: list[ConfigResponse]
    total_count: int

    @classmethod
    def from_entities(cls, configs: list[RateLimitConfig]) -> "ConfigListResponse":
        return cls(
            configs=[ConfigResponse.from_entity(c) for c in configs],
            total_count=len(configs),
        )


class ChangeRecordResponse(CamelModel):
    """One audited configuration change."""

    id: UUID
    config_name: str
    config_display_name: str
    config_type: RateLimitType
    action: ChangeAction
    changed_by: str
    changes: dict[str, dict[str, Any]]
    changed_fields: list[str]
    reason: str | None = None
    changed_at: datetime

    @classmethod
    def from_entity(cls, record: ConfigChangeRecord) -> "ChangeRecordResponse":
        return cls(
            id=record.id,
            config_name=record.config_name,
            config_display_name=record.config_display_name,
            config_type=record.config_type,
            action=record.action,
            changed_by=record.changed_by,
            changes=record.changes,
            changed_fields=record.changed_fields,
            reason=record.reason,
            changed_at=record.changed_at,
        )


class ConfigHistoryResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/configs/{config_id}/history"""

    config_name: str
    changes: list[ChangeRecordResponse]
    total_count: int


# =============================================================================
# Counter administration
# =============================================================================


class BlockRequest(CamelModel):
    """POST /api/v1/admin/rate-limits/block"""

    config_name: str = Field(..., description="Configuration owning the key")
    key: str = Field(..., description="Derived key or full store key")
    duration: int = Field(
        DEFAULT_BLOCK_SECONDS,
        gt=0,
        description="Block length in seconds",
    )
    reason: str | None = Field(None, description="Why the key is blocked")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "configName": "auth",
                "key": "ip:203.0.113.7",
                "duration": 3600,
                "reason": "Credential stuffing",
            }
        },
    )


class UnblockRequest(CamelModel):
    """POST /api/v1/admin/rate-limits/unblock"""

    config_name: str = Field(..., description="Configuration owning the key")
    key: str = Field(..., description="Derived key or full store key")


class KeyResetResponse(CamelModel):
    """Outcome of a key or configuration reset."""

    success: bool = True
    config_name: str
    key: str | None = None
    keys_removed: int
    message: str

    @classmethod
    def from_dto(cls, dto: KeyResetResult) -> "KeyResetResponse":
        target = f"key '{dto.key}'" if dto.key else "all keys"
        return cls(
            config_name=dto.config_name,
            key=dto.key,
            keys_removed=dto.keys_removed,
            message=f"Reset {target} of '{dto.config_name}'",
        )


class KeyBlockResponse(CamelModel):
    """Outcome of a manual block or unblock."""

    success: bool = True
    config_name: str
    key: str
    blocked: bool
    blocked_until: int | None = Field(None, description="Epoch ms")

    @classmethod
    def from_dto(cls, dto: KeyBlockResult) -> "KeyBlockResponse":
        return cls(
            config_name=dto.config_name,
            key=dto.key,
            blocked=dto.blocked,
            blocked_until=dto.blocked_until,
        )


class KeyStatusResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/status/{config_name}/{key}"""

    config_name: str
    key: str
    count: int
    max: int
    ttl: int = Field(..., description="Seconds until the window resets")
    reset_time: int | None = Field(None, description="Epoch ms of the reset")
    blocked: bool
    block_ttl: int = Field(..., description="Seconds until the block ends")
    state: LimitState

    @classmethod
    def from_dto(cls, dto: KeyStatus) -> "KeyStatusResponse":
        return cls(
            config_name=dto.config_name,
            key=dto.key,
            count=dto.count,
            max=dto.max_allowed,
            ttl=dto.ttl,
            reset_time=dto.reset_time,
            blocked=dto.blocked,
            block_ttl=dto.block_ttl,
            state=dto.state,
        )


class ActiveLimitResponse(CamelModel):
    """One tracked key."""

    key: str
    config_name: str
    current_count: int
    max_allowed: int
    reset_time: int
    blocked: bool
    blocked_until: int | None = None
    utilization: float

    @classmethod
    def from_dto(cls, dto: ActiveLimit) -> "ActiveLimitResponse":
        return cls(
            key=dto.key,
            config_name=dto.config_name,
            current_count=dto.current_count,
            max_allowed=dto.max_allowed,
            reset_time=dto.reset_time,
            blocked=dto.blocked,
            blocked_until=dto.blocked_until,
            utilization=dto.utilization,
        )


class ActiveLimitListResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/active"""

    active_limits: list[ActiveLimitResponse]
    total_count: int


class ConfigKeyStatsResponse(CamelModel):
    config_name: str
    prefix: str
    enabled: bool
    active_keys: int
    blocked_keys: int
    total_requests: int

    @classmethod
    def from_dto(cls, dto: ConfigKeyStats) -> "ConfigKeyStatsResponse":
        return cls(
            config_name=dto.config_name,
            prefix=dto.prefix,
            enabled=dto.enabled,
            active_keys=dto.active_keys,
            blocked_keys=dto.blocked_keys,
            total_requests=dto.total_requests,
        )


class StatsResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/stats"""

    configs: list[ConfigKeyStatsResponse]
    total_active_keys: int
    total_blocked_keys: int

    @classmethod
    def from_dtos(cls, stats: list[ConfigKeyStats]) -> "StatsResponse":
        return cls(
            configs=[ConfigKeyStatsResponse.from_dto(s) for s in stats],
            total_active_keys=sum(s.active_keys for s in stats),
            total_blocked_keys=sum(s.blocked_keys for s in stats),
        )


# =============================================================================
# Reference data
# =============================================================================


class ApplicationResponse(CamelModel):
    id: str
    name: str
    description: str | None = None

    @classmethod
    def from_entity(cls, app: Application) -> "ApplicationResponse":
        return cls(id=app.id, name=app.name, description=app.description)


class RoleResponse(CamelModel):
    id: str
    name: str
    application_id: str | None = None

    @classmethod
    def from_entity(cls, role: Role) -> "RoleResponse":
        return cls(id=role.id, name=role.name, application_id=role.application_id)


class ServiceResponse(CamelModel):
    id: str
    name: str
    procedures: list[str]

    @classmethod
    def from_entity(cls, service: Service) -> "ServiceResponse":
        return cls(id=service.id, name=service.name, procedures=service.procedures)


# =============================================================================
# Analytics
# =============================================================================


class UsageBandResponse(CamelModel):
    label: str = Field(..., description="Utilization band, e.g. '75-89'")
    count: int

    @classmethod
    def from_dto(cls, dto: UsageBand) -> "UsageBandResponse":
        return cls(label=dto.label, count=dto.count)


class OverviewResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/analytics"""

    time_range: str
    total_configs: int
    enabled_configs: int
    configs_by_type: dict[str, int]
    active_limits_count: int
    blocked_keys_count: int
    top_limited_keys: list[ActiveLimitResponse]
    usage_distribution: list[UsageBandResponse]
    recent_changes: list[ChangeRecordResponse]

    @classmethod
    def from_dto(cls, dto: RateLimitOverview) -> "OverviewResponse":
        return cls(
            time_range=dto.time_range,
            total_configs=dto.total_configs,
            enabled_configs=dto.enabled_configs,
            configs_by_type={
                rate_limit_type.value: count
                for rate_limit_type, count in dto.configs_by_type.items()
            },
            active_limits_count=dto.active_limits_count,
            blocked_keys_count=dto.blocked_keys_count,
            top_limited_keys=[
                ActiveLimitResponse.from_dto(k) for k in dto.top_limited_keys
            ],
            usage_distribution=[
                UsageBandResponse.from_dto(b) for b in dto.usage_distribution
            ],
            recent_changes=[
                ChangeRecordResponse.from_entity(r) for r in dto.recent_changes
            ],
        )


class ConfigStatsBucketResponse(CamelModel):
    bucket_start: datetime
    changes: int
    configs_changed: int
    created: int
    deleted: int


class UsageBucketResponse(CamelModel):
    bucket_start: datetime
    requests: int
    blocked: int
    errors: int


class HistorySummaryResponse(CamelModel):
    total_changes: int
    most_changed_config: str | None = None
    most_active_editor: str | None = None
    total_requests: int
    total_blocked: int


class HistoryResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/history"""

    start_date: datetime
    end_date: datetime
    granularity: Granularity
    config_stats: list[ConfigStatsBucketResponse]
    usage_data: list[UsageBucketResponse]
    changes: list[ChangeRecordResponse]
    summary: HistorySummaryResponse

    @classmethod
    def from_dto(cls, dto: RateLimitHistory) -> "HistoryResponse":
        return cls(
            start_date=dto.start_date,
            end_date=dto.end_date,
            granularity=dto.granularity,
            config_stats=[
                ConfigStatsBucketResponse(
                    bucket_start=b.bucket_start,
                    changes=b.changes,
                    configs_changed=b.configs_changed,
                    created=b.created,
                    deleted=b.deleted,
                )
                for b in dto.config_stats
            ],
            usage_data=[
                UsageBucketResponse(
                    bucket_start=b.bucket_start,
                    requests=b.requests,
                    blocked=b.blocked,
                    errors=b.errors,
                )
                for b in dto.usage_data
            ],
            changes=[ChangeRecordResponse.from_entity(r) for r in dto.changes],
            summary=HistorySummaryResponse(
                total_changes=dto.summary.total_changes,
                most_changed_config=dto.summary.most_changed_config,
                most_active_editor=dto.summary.most_active_editor,
                total_requests=dto.summary.total_requests,
                total_blocked=dto.summary.total_blocked,
            ),
        )


# =============================================================================
# CSRF
# =============================================================================


class CsrfTokenResponse(CamelModel):
    """GET /api/v1/admin/rate-limits/csrf-token

    The same value is set in the CSRF cookie; send it back in the
    X-CSRF-Token header on every mutating request.
    """

    csrf_token: str

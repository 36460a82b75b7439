"""Rate limit configuration domain entity.

A named, versioned rule describing how one class of traffic is throttled:
window and max, how the bucket key is derived, behaviour flags, per
dimension max overrides and per environment overrides.

Architecture:
    - Pure domain entity (no infrastructure dependencies)
    - Validation returns Result types (railway-oriented programming)
    - Mutations return the field-level diff that becomes the audit record
    - Enforcement consumes ``resolve_effective()``, never the raw entity

Usage:
    from uuid_extensions import uuid7

    config = RateLimitConfig(
        id=uuid7(),
        name="api",
        display_name="Public API",
        type=RateLimitType.API,
        window_ms=60_000,
        max=100,
        key_strategy=KeyStrategy.IP,
    )
    match config.validate():
        case Failure(error=error):
            ...

    effective = config.resolve_effective("production")
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeAlias
from uuid import UUID

from pydantic.alias_generators import to_camel

from src.core.enums import Environment, ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.enums import FailureMode, KeyStrategy, RateLimitType
from src.domain.validators import default_prefix, validate_config_name, validate_prefix
from src.domain.value_objects.effective_config import EffectiveRateLimitConfig
from src.domain.value_objects.key_template import KeyTemplate
from src.domain.value_objects.limit_override import (
    ApplicationLimit,
    ApplicationOverrideProvider,
    ComponentLimit,
    ComponentOverrideProvider,
    EnvironmentOverride,
    OverrideProvider,
    RoleLimit,
    RoleOverrideProvider,
)

DEFAULT_MESSAGE = "Too many requests, please try again later."

# Fields excluded from audit diffs (identity and bookkeeping).
_UNAUDITED = frozenset(
    {"id", "version", "created_at", "updated_at", "created_by", "updated_by"}
)
IMMUTABLE_FIELDS = frozenset({"id", "name", "created_at", "created_by"})

FieldChanges: TypeAlias = dict[str, dict[str, Any]]


@dataclass
class RateLimitConfig:
    """Rate limit configuration.

    Attributes:
        id: Unique identifier (UUIDv7).
        name: Unique slug, immutable after creation.
        display_name: Human-readable name.
        type: Traffic class (drives failure mode default).
        window_ms: Window length in milliseconds.
        max: Requests allowed per window.
        key_strategy: How the bucket key is derived.
        prefix: Counter key namespace (``rl:<name>:`` unless overridden).
        description: Free text.
        custom_key_generator: Key template, required iff strategy is custom.
        skip_successful_requests: Do not count responses below 400.
        skip_failed_requests: Do not count responses of 400 and above.
        exec_evenly: Enforce ``window_ms / max`` spacing instead of bursts.
        block_duration_ms: Extra lockout after the limit is hit (0 = none).
        message: Text returned to throttled callers.
        failure_mode: Store outage policy; None = type default.
        application_limits: Per-application max overrides.
        role_limits: Per-role max overrides.
        component_limits: Per-service-procedure max overrides.
        environment_overrides: Environment name -> override.
        enabled: Master switch.
        version: Incremented on every mutation.
        created_by: Admin who created the config.
        updated_by: Admin who last changed the config.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: UUID
    name: str
    display_name: str
    type: RateLimitType
    window_ms: int
    max: int
    key_strategy: KeyStrategy
    prefix: str = ""
    description: str | None = None
    custom_key_generator: str | None = None
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False
    exec_evenly: bool = False
    block_duration_ms: int = 0
    message: str = DEFAULT_MESSAGE
    failure_mode: FailureMode | None = None
    application_limits: list[ApplicationLimit] = field(default_factory=list)
    role_limits: list[RoleLimit] = field(default_factory=list)
    component_limits: list[ComponentLimit] = field(default_factory=list)
    environment_overrides: dict[str, EnvironmentOverride] = field(
        default_factory=dict
    )
    enabled: bool = True
    version: int = 1
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.prefix:
            self.prefix = default_prefix(self.name)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> Result[None, ValidationError]:
        """Check every invariant of a storable configuration.

        Returns:
            Success(None), or Failure(ValidationError) for the first violation.
        """
        try:
            validate_config_name(self.name)
        except ValueError as e:
            return _invalid(ErrorCode.INVALID_CONFIG_NAME, str(e), "name")
        if not self.display_name or not self.display_name.strip():
            return _invalid(
                ErrorCode.VALIDATION_FAILED, "Display name is required", "displayName"
            )
        if not _positive(self.window_ms):
            return _invalid(
                ErrorCode.INVALID_WINDOW,
                "windowMs must be a positive integer",
                "windowMs",
            )
        if not _positive(self.max):
            return _invalid(
                ErrorCode.INVALID_MAX_REQUESTS, "max must be a positive integer", "max"
            )
        if isinstance(self.block_duration_ms, bool) or self.block_duration_ms < 0:
            return _invalid(
                ErrorCode.VALIDATION_FAILED,
                "blockDurationMs must be zero or positive",
                "blockDurationMs",
            )
        try:
            validate_prefix(self.prefix)
        except ValueError as e:
            return _invalid(ErrorCode.VALIDATION_FAILED, str(e), "prefix")
        if not self.message or not self.message.strip():
            return _invalid(
                ErrorCode.VALIDATION_FAILED, "Message must not be empty", "message"
            )

        if self.key_strategy is KeyStrategy.CUSTOM:
            if not self.custom_key_generator:
                return _invalid(
                    ErrorCode.INVALID_CUSTOM_KEY_GENERATOR,
                    "customKeyGenerator is required when keyStrategy is custom",
                    "customKeyGenerator",
                )
            match KeyTemplate.parse(self.custom_key_generator):
                case Failure(error=error):
                    return Failure(error=error)
        elif self.custom_key_generator:
            return _invalid(
                ErrorCode.INVALID_CUSTOM_KEY_GENERATOR,
                "customKeyGenerator is only allowed when keyStrategy is custom",
                "customKeyGenerator",
            )

        return self._validate_overrides()

    def _validate_overrides(self) -> Result[None, ValidationError]:
        for app in self.application_limits:
            if not app.application_id or not _positive(app.max):
                return _invalid(
                    ErrorCode.INVALID_OVERRIDE,
                    "Application limits need an applicationId and a positive max",
                    "applicationLimits",
                )
        for role in self.role_limits:
            if not role.role_id or not _positive(role.max):
                return _invalid(
                    ErrorCode.INVALID_OVERRIDE,
                    "Role limits need a roleId and a positive max",
                    "roleLimits",
                )
        for comp in self.component_limits:
            if not comp.service_id or not _positive(comp.max):
                return _invalid(
                    ErrorCode.INVALID_OVERRIDE,
                    "Component limits need a serviceId and a positive max",
                    "componentLimits",
                )

        known = {env.value for env in Environment}
        for env_name, override in self.environment_overrides.items():
            if env_name not in known:
                return _invalid(
                    ErrorCode.INVALID_OVERRIDE,
                    f"Unknown environment '{env_name}' "
                    f"(expected one of {', '.join(sorted(known))})",
                    "environmentOverrides",
                )
            if override.max is not None and not _positive(override.max):
                return _invalid(
                    ErrorCode.INVALID_OVERRIDE,
                    f"environmentOverrides.{env_name}.max must be positive",
                    "environmentOverrides",
                )
            if override.window_ms is not None and not _positive(override.window_ms):
                return _invalid(
                    ErrorCode.INVALID_OVERRIDE,
                    f"environmentOverrides.{env_name}.windowMs must be positive",
                    "environmentOverrides",
                )
        return Success(value=None)

    # -------------------------------------------------------------------------
    # Mutations (each returns the audit diff)
    # -------------------------------------------------------------------------

    def apply_changes(
        self,
        changes: Mapping[str, Any],
        *,
        changed_by: str,
        now: datetime | None = None,
    ) -> Result[FieldChanges, ValidationError]:
        """Merge a partial update into the configuration.

        The candidate state is validated before anything is assigned, so a
        rejected patch leaves the entity untouched. Switching away from the
        custom strategy clears a generator the patch did not mention.

        Args:
            changes: Entity attribute name -> new value (already typed).
            changed_by: Admin subject recorded as ``updated_by``.
            now: Modification time (defaults to current UTC time).

        Returns:
            Success(diff) keyed by wire field name, possibly empty, or
            Failure(ValidationError) for immutable or invalid fields.
        """
        immutable = IMMUTABLE_FIELDS.intersection(changes)
        if immutable:
            field_name = sorted(immutable)[0]
            return _invalid(
                ErrorCode.IMMUTABLE_FIELD,
                f"Field '{to_camel(field_name)}' cannot be changed",
                to_camel(field_name),
            )

        patch = dict(changes)
        if (
            patch.get("key_strategy", self.key_strategy) is not KeyStrategy.CUSTOM
            and "custom_key_generator" not in patch
        ):
            patch["custom_key_generator"] = None

        candidate = replace(self, **patch)
        match candidate.validate():
            case Failure(error=error):
                return Failure(error=error)

        before = self.audit_snapshot()
        for name, value in patch.items():
            setattr(self, name, value)
        diff = diff_snapshots(before, self.audit_snapshot())
        self._touch(changed_by, now)
        return Success(value=diff)

    def set_enabled(
        self, enabled: bool, *, changed_by: str, now: datetime | None = None
    ) -> FieldChanges:
        """Flip the master switch; returns the (possibly empty) diff."""
        diff: FieldChanges = {}
        if self.enabled != enabled:
            diff["enabled"] = {"from": self.enabled, "to": enabled}
        self.enabled = enabled
        self._touch(changed_by, now)
        return diff

    def _touch(self, changed_by: str, now: datetime | None) -> None:
        self.version += 1
        self.updated_by = changed_by
        self.updated_at = now or datetime.now(UTC)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def effective_failure_mode(self) -> FailureMode:
        """Configured failure mode, else CLOSED for auth and OPEN otherwise."""
        if self.failure_mode is not None:
            return self.failure_mode
        if self.type is RateLimitType.AUTH:
            return FailureMode.CLOSED
        return FailureMode.OPEN

    def resolve_effective(self, environment: str) -> EffectiveRateLimitConfig:
        """Merge the stored config with its override for ``environment``.

        Environment ``max``/``window_ms`` replace the base values when set;
        ``enabled`` is the base flag AND the environment flag.
        """
        override = self.environment_overrides.get(environment)
        enabled = self.enabled
        window_ms = self.window_ms
        max_requests = self.max
        if override is not None:
            enabled = enabled and override.enabled
            window_ms = override.window_ms or window_ms
            max_requests = override.max or max_requests

        return EffectiveRateLimitConfig(
            name=self.name,
            type=self.type,
            environment=environment,
            enabled=enabled,
            window_ms=window_ms,
            max=max_requests,
            key_strategy=self.key_strategy,
            custom_key_generator=self.custom_key_generator,
            prefix=self.prefix,
            skip_successful_requests=self.skip_successful_requests,
            skip_failed_requests=self.skip_failed_requests,
            exec_evenly=self.exec_evenly,
            block_duration_ms=self.block_duration_ms,
            message=self.message,
            failure_mode=self.effective_failure_mode,
            providers=self._providers(),
        )

    def _providers(self) -> tuple[OverrideProvider, ...]:
        providers: list[OverrideProvider] = []
        if self.component_limits:
            providers.append(ComponentOverrideProvider(tuple(self.component_limits)))
        if self.role_limits:
            providers.append(RoleOverrideProvider(tuple(self.role_limits)))
        if self.application_limits:
            providers.append(
                ApplicationOverrideProvider(tuple(self.application_limits))
            )
        return tuple(providers)

    def audit_snapshot(self) -> dict[str, Any]:
        """JSON-compatible audited field values keyed by wire name."""
        snapshot: dict[str, Any] = {}
        for f in fields(self):
            if f.name in _UNAUDITED:
                continue
            snapshot[to_camel(f.name)] = _to_wire(getattr(self, f.name))
        return snapshot


def diff_snapshots(before: Mapping[str, Any], after: Mapping[str, Any]) -> FieldChanges:
    """Field-level diff between two audit snapshots.

    Returns:
        Wire field name -> ``{"from": old, "to": new}`` for changed fields.
    """
    return {
        name: {"from": before.get(name), "to": after.get(name)}
        for name in sorted(set(before) | set(after))
        if before.get(name) != after.get(name)
    }


def _to_wire(value: Any) -> Any:
    """Convert a field value to its JSON wire shape (camelCase keys)."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_to_wire(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_wire(v) for k, v in value.items()}
    if hasattr(value, "__dataclass_fields__"):
        return {to_camel(k): _to_wire(v) for k, v in asdict(value).items()}
    return value


def _positive(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _invalid(code: ErrorCode, message: str, field_name: str) -> Failure[ValidationError]:
    return Failure(error=ValidationError(code=code, message=message, field=field_name))

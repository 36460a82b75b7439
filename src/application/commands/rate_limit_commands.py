"""Rate limit administration commands (CQRS write operations).

Commands represent admin intent to change configurations or counter state.
All commands are immutable (frozen=True) and use keyword-only arguments
(kw_only=True).

Pattern:
- Commands are data containers (no logic)
- Handlers execute business logic
- Commands don't return values (handlers return Result types)

Config references (``config_ref``) accept a config name or its UUID.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from src.domain.enums import FailureMode, KeyStrategy, RateLimitType
from src.domain.value_objects.limit_override import (
    ApplicationLimit,
    ComponentLimit,
    EnvironmentOverride,
    RoleLimit,
)

DEFAULT_BLOCK_SECONDS = 3600


@dataclass(frozen=True, kw_only=True)
class CreateRateLimitConfig:
    """Create a new configuration.

    Attributes mirror RateLimitConfig; ``prefix`` and ``message`` fall back
    to ``rl:<name>:`` and the default throttle message when None.

    Example:
        >>> command = CreateRateLimitConfig(
        ...     name="api",
        ...     display_name="Public API",
        ...     type=RateLimitType.API,
        ...     window_ms=60_000,
        ...     max=100,
        ...     key_strategy=KeyStrategy.IP,
        ...     created_by="admin-1",
        ... )
        >>> result = await handler.handle(command)
    """

    name: str
    display_name: str
    type: RateLimitType
    window_ms: int
    max: int
    key_strategy: KeyStrategy
    created_by: str
    description: str | None = None
    prefix: str | None = None
    custom_key_generator: str | None = None
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False
    exec_evenly: bool = False
    block_duration_ms: int = 0
    message: str | None = None
    failure_mode: FailureMode | None = None
    application_limits: list[ApplicationLimit] = field(default_factory=list)
    role_limits: list[RoleLimit] = field(default_factory=list)
    component_limits: list[ComponentLimit] = field(default_factory=list)
    environment_overrides: dict[str, EnvironmentOverride] = field(
        default_factory=dict
    )
    enabled: bool = True
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateRateLimitConfig:
    """Merge a partial update into a configuration.

    Attributes:
        config_ref: Config name or UUID.
        changes: Entity attribute name -> new value (only fields sent).
        changed_by: Admin subject.
        reason: Optional change reason recorded in the audit history.
    """

    config_ref: str
    changes: Mapping[str, Any]
    changed_by: str
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class ToggleRateLimitConfig:
    """Enable or disable a configuration (audited like any update)."""

    config_ref: str
    enabled: bool
    changed_by: str
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class DeleteRateLimitConfig:
    """Hard-delete a configuration and clear its counter namespace."""

    config_ref: str
    changed_by: str
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class ResetRateLimitKey:
    """Clear the counter, block and spacing state of one key.

    Attributes:
        config_name: Configuration owning the key.
        key: Derived key (``ip:10.0.0.1``) or full store key.
        reset_by: Admin subject.
    """

    config_name: str
    key: str
    reset_by: str


@dataclass(frozen=True, kw_only=True)
class ResetRateLimitConfig:
    """Clear every key in one configuration's namespace."""

    config_ref: str
    reset_by: str


@dataclass(frozen=True, kw_only=True)
class BlockRateLimitKey:
    """Manually block one key.

    Attributes:
        config_name: Configuration owning the key.
        key: Derived key or full store key.
        duration_seconds: Block length (default one hour).
        blocked_by: Admin subject.
        reason: Free text for the log.
    """

    config_name: str
    key: str
    blocked_by: str
    duration_seconds: int = DEFAULT_BLOCK_SECONDS
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class UnblockRateLimitKey:
    """Remove a block marker from one key."""

    config_name: str
    key: str
    unblocked_by: str

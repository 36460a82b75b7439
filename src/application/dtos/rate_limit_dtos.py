"""Rate limit DTOs (Data Transfer Objects).

Result dataclasses returned by rate limit command and query handlers.
The presentation layer converts them into camelCase response schemas.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.enums import Granularity, LimitState, RateLimitType


# ═══════════════════════════════════════════════════════════════
# Counter administration
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class KeyResetResult:
    """Outcome of a key or namespace reset.

    Attributes:
        config_name: Configuration whose namespace was touched.
        key: Reset key, None for a whole-namespace reset.
        keys_removed: Counters deleted.
    """

    config_name: str
    key: str | None
    keys_removed: int


@dataclass(frozen=True, kw_only=True)
class KeyBlockResult:
    """Outcome of a manual block or unblock."""

    config_name: str
    key: str
    blocked: bool
    blocked_until: int | None = None


@dataclass(frozen=True, kw_only=True)
class KeyStatus:
    """Live state of one key.

    Attributes:
        config_name: Configuration owning the key.
        key: Derived key.
        count: Requests counted in the current window (0 when fresh).
        max_allowed: Base max of the configuration.
        ttl: Seconds until the window resets (0 when fresh).
        reset_time: Epoch ms of the window reset, None when fresh.
        blocked: Whether a block marker is active.
        block_ttl: Seconds until the block ends (0 when not blocked).
        state: Window lifecycle state.
    """

    config_name: str
    key: str
    count: int
    max_allowed: int
    ttl: int
    reset_time: int | None
    blocked: bool
    block_ttl: int
    state: LimitState


@dataclass(frozen=True, kw_only=True)
class ActiveLimit:
    """One tracked key, relative to its configuration prefix."""

    key: str
    config_name: str
    current_count: int
    max_allowed: int
    reset_time: int
    blocked: bool = False
    blocked_until: int | None = None
    utilization: float = 0.0


@dataclass(frozen=True, kw_only=True)
class ConfigKeyStats:
    """Active and blocked key counts of one configuration."""

    config_name: str
    prefix: str
    enabled: bool
    active_keys: int = 0
    blocked_keys: int = 0
    total_requests: int = 0


# ═══════════════════════════════════════════════════════════════
# Analytics
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class UsageBand:
    """Active limits whose utilization falls in one percentage band."""

    label: str
    count: int


@dataclass(frozen=True, kw_only=True)
class RateLimitOverview:
    """Dashboard overview for one time range."""

    time_range: str
    total_configs: int
    enabled_configs: int
    configs_by_type: dict[RateLimitType, int]
    active_limits_count: int
    blocked_keys_count: int
    top_limited_keys: list[ActiveLimit]
    usage_distribution: list[UsageBand]
    recent_changes: list[ConfigChangeRecord]


@dataclass(frozen=True, kw_only=True)
class ConfigStatsBucket:
    """Configuration activity inside one history bucket."""

    bucket_start: datetime
    changes: int = 0
    configs_changed: int = 0
    created: int = 0
    deleted: int = 0


@dataclass(frozen=True, kw_only=True)
class UsageBucket:
    """Request volume inside one history bucket."""

    bucket_start: datetime
    requests: int = 0
    blocked: int = 0
    errors: int = 0


@dataclass(frozen=True, kw_only=True)
class HistorySummary:
    total_changes: int = 0
    most_changed_config: str | None = None
    most_active_editor: str | None = None
    total_requests: int = 0
    total_blocked: int = 0


@dataclass(frozen=True, kw_only=True)
class RateLimitHistory:
    """Historical trends for one time range."""

    start_date: datetime
    end_date: datetime
    granularity: Granularity
    config_stats: list[ConfigStatsBucket] = field(default_factory=list)
    usage_data: list[UsageBucket] = field(default_factory=list)
    changes: list[ConfigChangeRecord] = field(default_factory=list)
    summary: HistorySummary = field(default_factory=HistorySummary)

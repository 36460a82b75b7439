"""Rate limit queries (CQRS read operations).

Queries represent requests for configuration, live counter and analytics
information. They are immutable dataclasses with question-like names.
Queries NEVER change state.

Pattern:
- Queries are data containers (no logic)
- Handlers fetch and return data
- Queries never change state
"""

from dataclasses import dataclass

from src.domain.enums import Granularity, RateLimitType, TimeRange

DEFAULT_ACTIVE_LIMIT = 100
DEFAULT_TOP_LIMIT = 10


# ═══════════════════════════════════════════════════════════════
# Configurations
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class GetRateLimitConfig:
    """Get one configuration by name or UUID.

    Example:
        >>> result = await handler.handle(GetRateLimitConfig(config_ref="api"))
    """

    config_ref: str


@dataclass(frozen=True, kw_only=True)
class ListRateLimitConfigs:
    """List configurations.

    Attributes:
        type: Only this traffic class.
        enabled: Only enabled (True) or disabled (False) configurations.
        search: Case-insensitive substring of name, display name or description.
    """

    type: RateLimitType | None = None
    enabled: bool | None = None
    search: str | None = None


@dataclass(frozen=True, kw_only=True)
class GetRateLimitConfigHistory:
    """Change records of one configuration, newest first.

    Works for deleted configurations as long as records exist.
    """

    config_ref: str
    limit: int = 100


# ═══════════════════════════════════════════════════════════════
# Live counters
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class ListActiveLimits:
    """Tracked keys sorted by current count (highest first).

    Attributes:
        config_name: Only keys of this configuration.
        limit: Maximum entries returned.
    """

    config_name: str | None = None
    limit: int = DEFAULT_ACTIVE_LIMIT


@dataclass(frozen=True, kw_only=True)
class GetRateLimitKeyStatus:
    """Live state of one key of one configuration."""

    config_name: str
    key: str


@dataclass(frozen=True, kw_only=True)
class GetRateLimitStats:
    """Active and blocked key counts per configuration."""


# ═══════════════════════════════════════════════════════════════
# Analytics
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class GetRateLimitOverview:
    """Dashboard overview; recent changes are limited to ``time_range``."""

    time_range: TimeRange = TimeRange.LAST_24_HOURS


@dataclass(frozen=True, kw_only=True)
class GetTopLimitedKeys:
    limit: int = DEFAULT_TOP_LIMIT


@dataclass(frozen=True, kw_only=True)
class GetUsageDistribution:
    """Active limits bucketed by utilization band."""


@dataclass(frozen=True, kw_only=True)
class GetRateLimitHistory:
    """Historical trends.

    Attributes:
        time_range: Look-back window.
        granularity: Requested bucket width. Accepted for compatibility; the
            fixed policy (hour up to 6h, day beyond) always decides.
        config_name: Only this configuration.
    """

    time_range: TimeRange = TimeRange.LAST_7_DAYS
    granularity: Granularity | None = None
    config_name: str | None = None


# ═══════════════════════════════════════════════════════════════
# Reference data
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class ListApplications:
    pass


@dataclass(frozen=True, kw_only=True)
class ListRoles:
    application_id: str | None = None


@dataclass(frozen=True, kw_only=True)
class ListServices:
    pass

"""Application DTOs returned by command and query handlers."""

from src.application.dtos.rate_limit_dtos import (
    ActiveLimit,
    ConfigKeyStats,
    ConfigStatsBucket,
    HistorySummary,
    KeyBlockResult,
    KeyResetResult,
    KeyStatus,
    RateLimitHistory,
    RateLimitOverview,
    UsageBand,
    UsageBucket,
)

__all__ = [
    "ActiveLimit",
    "ConfigKeyStats",
    "ConfigStatsBucket",
    "HistorySummary",
    "KeyBlockResult",
    "KeyResetResult",
    "KeyStatus",
    "RateLimitHistory",
    "RateLimitOverview",
    "UsageBand",
    "UsageBucket",
]

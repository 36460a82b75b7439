"""Queries - Read operations that fetch data.

Queries represent a request for information. They are immutable dataclasses
with question-like names (GetRateLimitConfig, ListActiveLimits).

Each query has a corresponding handler that fetches and returns the requested
data. Queries NEVER change state.
"""

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

__all__ = [
    # Configuration queries
    "GetRateLimitConfig",
    "GetRateLimitConfigHistory",
    "ListRateLimitConfigs",
    # Live counter queries
    "GetRateLimitKeyStatus",
    "GetRateLimitStats",
    "ListActiveLimits",
    # Analytics queries
    "GetRateLimitHistory",
    "GetRateLimitOverview",
    "GetTopLimitedKeys",
    "GetUsageDistribution",
    # Reference data queries
    "ListApplications",
    "ListRoles",
    "ListServices",
]

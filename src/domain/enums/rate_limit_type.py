"""Rate limit configuration types.

Classifies a configuration by the kind of traffic it protects. The type
drives defaults (failure mode) and groups configurations in analytics.

Usage:
    from src.domain.enums import RateLimitType

    if config.type is RateLimitType.AUTH:
        ...
"""

from enum import Enum


class RateLimitType(str, Enum):
    """Traffic class protected by a rate limit configuration.

    String Enum:
        Values are the persisted wire contract and must not change.
    """

    API = "api"
    """General REST API traffic. Fails open on store outage by default."""

    AUTH = "auth"
    """Authentication endpoints (login, token exchange).

    Security-critical: fails CLOSED on store outage by default so a Redis
    outage cannot be used to lift brute force protection.
    """

    UPLOAD = "upload"
    """File upload endpoints."""

    GRAPHQL = "graphql"
    """GraphQL endpoint traffic."""

    WEBSOCKET = "websocket"
    """WebSocket connection establishment."""

    CUSTOM = "custom"
    """Anything else, usually paired with a custom key generator."""

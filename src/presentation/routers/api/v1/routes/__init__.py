"""Route registry: metadata types, ROUTE_REGISTRY, the FastAPI route
generator and the derived rate limit route rules."""

from src.presentation.routers.api.v1.routes.metadata import (
    AuthLevel,
    AuthPolicy,
    CachePolicy,
    ErrorSpec,
    HTTPMethod,
    IdempotencyLevel,
    RouteMetadata,
)

__all__ = [
    "AuthLevel",
    "AuthPolicy",
    "CachePolicy",
    "ErrorSpec",
    "HTTPMethod",
    "IdempotencyLevel",
    "RouteMetadata",
]

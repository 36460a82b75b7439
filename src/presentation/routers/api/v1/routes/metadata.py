"""Types for the route registry.

ROUTE_REGISTRY is a list of RouteMetadata. From it the generator builds the
FastAPI routes (auth and CSRF dependencies, OpenAPI error responses,
Cache-Control) and derivations builds the route -> rate limit config rules
consulted by RateLimitMiddleware.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def is_mutating(self) -> bool:
        return self is not HTTPMethod.GET


class AuthLevel(str, Enum):
    """Who may call a route.

    ADMIN requires the configured admin role; on mutating methods it also
    requires the double-submit CSRF token.
    """

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


@dataclass(frozen=True, kw_only=True)
class AuthPolicy:
    """Authentication policy for a route.

    Attributes:
        level: Required authentication level.
        csrf_exempt: Skip the CSRF check on a mutating admin route.
        rationale: Why the route is exempt, when it is.
    """

    level: AuthLevel
    csrf_exempt: bool = False
    rationale: str | None = None


class IdempotencyLevel(str, Enum):
    """RFC 7231 retry semantics: SAFE (GET), IDEMPOTENT, NON_IDEMPOTENT."""

    SAFE = "safe"
    IDEMPOTENT = "idempotent"
    NON_IDEMPOTENT = "non_idempotent"


@dataclass(frozen=True, kw_only=True)
class ErrorSpec:
    """One documented error response; ``model`` defaults to ProblemDetails."""

    status: int
    description: str
    model: type[BaseModel] | None = None


class CachePolicy(str, Enum):
    """Cache-Control emitted on GET responses."""

    NONE = "none"
    PRIVATE = "private"
    NO_STORE = "no_store"  # live counters, tokens


@dataclass(frozen=True, kw_only=True)
class RouteMetadata:
    """Everything the application knows about one endpoint.

    Attributes:
        method: HTTP method.
        path: Path under the v1 prefix, with placeholders
            (``/admin/rate-limits/reset/{config_name}/{key:path}``).
        handler: Endpoint coroutine.
        resource: Resource group, e.g. ``rate_limit_counters``.
        tags: OpenAPI tags.
        summary: OpenAPI summary.
        description: OpenAPI description (markdown).
        operation_id: Stable OpenAPI operation id.
        response_model: Success response model.
        status_code: Success status.
        errors: Documented error responses.
        idempotency: Retry semantics.
        auth_policy: Authentication policy.
        rate_limit_config: Configuration enforced on this route by
            RateLimitMiddleware; None falls back to the path prefix map.
        cache_policy: Cache-Control for GET responses.
        deprecated: Marked deprecated in OpenAPI.
    """

    method: HTTPMethod
    path: str
    handler: Callable[..., Awaitable[Any]]

    resource: str
    tags: Sequence[str]

    summary: str
    description: str | None = None
    operation_id: str | None = None

    response_model: Any = None
    status_code: int = 200
    errors: list[ErrorSpec] | None = None

    idempotency: IdempotencyLevel
    auth_policy: AuthPolicy
    rate_limit_config: str | None = None
    cache_policy: CachePolicy = CachePolicy.NONE

    deprecated: bool = False

    @property
    def requires_csrf(self) -> bool:
        return (
            self.auth_policy.level is AuthLevel.ADMIN
            and self.method.is_mutating
            and not self.auth_policy.csrf_exempt
        )

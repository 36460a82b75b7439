"""Rate limit middleware for FastAPI.

This middleware intercepts HTTP requests and enforces the stored rate limit
configuration that governs each route. It handles:
- Config selection (route registry first, then the path prefix map)
- Request context (client IP, verified JWT identity, service/procedure path)
- HTTP 429 responses with RFC 7807 bodies and RateLimit headers
- HTTP 503 when a fail-closed configuration cannot reach the counter store
- Skip flags (successful/failed responses removed from the count)
- Fail-open semantics for unexpected errors in the rate limit path

Architecture:
    Presentation Layer middleware that uses RateLimitEnforcer
    (infrastructure) from the container.

Usage:
    # In main.py
    from src.presentation.routers.api.middleware.rate_limit_middleware import RateLimitMiddleware

    app.add_middleware(RateLimitMiddleware)
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from src.core.config import settings
from src.core.result import Success
from src.domain.value_objects.rate_limit_decision import (
    DecisionOutcome,
    RateLimitDecision,
)
from src.domain.value_objects.request_context import UNKNOWN_IP, RequestContext
from src.presentation.routers.api.middleware.auth_dependencies import CurrentUser
from src.presentation.routers.api.middleware.trace_middleware import get_trace_id

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.token_validation_protocol import (
        TokenValidationProtocol,
    )
    from src.infrastructure.rate_limit import RateLimitEnforcer
    from src.presentation.routers.api.v1.routes.derivations import (
        RouteRateLimitRule,
    )

# Headers never exposed to custom key templates.
_PRIVATE_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Starlette middleware enforcing rate limit configurations.

    Fail-Open Design:
        Unexpected errors while checking allow the request. Counter store
        outages follow each configuration's failure mode instead (the
        enforcer decides; only fail-closed configurations deny).

    Response Headers:
        - Retry-After: Seconds until retry allowed (on 429/503)
        - X-RateLimit-Limit: Effective max for this request
        - X-RateLimit-Remaining: Requests left in the window
        - X-RateLimit-Reset: Epoch seconds when the window resets
        - X-RateLimit-Config: Configuration that was applied
        - X-RateLimit-Source: Dimension that supplied the max

    Args:
        app: The ASGI application to wrap.
        rules: Route rules (defaults to those derived from ROUTE_REGISTRY).
    """

    def __init__(
        self,
        app: ASGIApp,
        rules: Sequence["RouteRateLimitRule"] | None = None,
    ) -> None:
        super().__init__(app)
        self._rules = rules
        self._enforcer: RateLimitEnforcer | None = None
        self._token_service: TokenValidationProtocol | None = None
        self._logger: LoggerProtocol | None = None

    # -------------------------------------------------------------------------
    # Lazy container access
    # -------------------------------------------------------------------------

    def _get_rules(self) -> Sequence["RouteRateLimitRule"]:
        if self._rules is None:
            from src.presentation.routers.api.v1 import API_V1_PREFIX
            from src.presentation.routers.api.v1.routes.derivations import (
                build_route_rate_limit_rules,
            )
            from src.presentation.routers.api.v1.routes.registry import (
                ROUTE_REGISTRY,
            )

            self._rules = build_route_rate_limit_rules(ROUTE_REGISTRY, API_V1_PREFIX)
        return self._rules

    def _get_enforcer(self) -> "RateLimitEnforcer":
        if self._enforcer is None:
            from src.core.container import get_enforcer

            self._enforcer = get_enforcer()
        return self._enforcer

    def _get_token_service(self) -> "TokenValidationProtocol":
        if self._token_service is None:
            from src.core.container import get_token_service

            self._token_service = get_token_service()
        return self._token_service

    def _get_logger(self) -> "LoggerProtocol":
        if self._logger is None:
            from src.core.container import get_logger

            self._logger = get_logger()
        return self._logger

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Intercept request and enforce its rate limit configuration.

        Returns:
            Response: 429/503 denial, or the downstream response with
            RateLimit headers attached.
        """
        path = request.url.path
        if self._should_skip(path):
            return await call_next(request)

        config_name: str | None = None
        try:
            from src.presentation.routers.api.v1.routes.derivations import (
                resolve_rate_limit_config,
            )

            config_name = resolve_rate_limit_config(
                self._get_rules(),
                settings.rate_limit_route_prefixes,
                request.method,
                path,
            )
            if config_name is None:
                return await call_next(request)

            context = self.build_context(request)
            decision = await self._get_enforcer().check(config_name, context)
        except Exception as exc:
            self._log_fail_open(request, config_name, exc)
            return await call_next(request)

        if decision is None or decision.outcome is DecisionOutcome.DISABLED:
            return await call_next(request)

        if not decision.allowed:
            return self._build_denied_response(request, decision)

        response = await call_next(request)
        if decision.counted:
            self._attach_headers(response, decision)

        try:
            await self._get_enforcer().record_outcome(decision, response.status_code)
        except Exception as exc:
            self._log_fail_open(request, config_name, exc)

        return response

    def _should_skip(self, path: str) -> bool:
        """Health checks, docs and the root are never rate limited."""
        skip_prefixes = (
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/favicon.ico",
        )
        return path in ("/", "/health") or path.startswith(skip_prefixes)

    # -------------------------------------------------------------------------
    # Request context
    # -------------------------------------------------------------------------

    def build_context(self, request: Request) -> RequestContext:
        """Collect everything key derivation and overrides may use."""
        caller = self._get_caller(request)
        service_id, procedure_name = _service_procedure(request.url.path)
        headers: Mapping[str, str] = {
            name.lower(): value
            for name, value in request.headers.items()
            if name.lower() not in _PRIVATE_HEADERS
        }
        query = {
            name: request.query_params.getlist(name)[0]
            for name in request.query_params.keys()
        }
        return RequestContext(
            ip=self._get_client_ip(request),
            method=request.method.upper(),
            path=request.url.path,
            user_id=caller.user_id if caller else None,
            application_id=caller.application_id if caller else None,
            role_id=caller.role_id if caller else None,
            service_id=service_id,
            procedure_name=procedure_name,
            headers=headers,
            query=query,
        )

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request.

        Forwarded headers are honoured only when the deployment says the
        reverse proxy sets them (RATE_LIMIT_TRUST_FORWARDED).
        """
        if settings.rate_limit_trust_forwarded:
            forwarded_for = request.headers.get("X-Forwarded-For")
            if forwarded_for:
                # First address is the client, the rest is the proxy chain
                first = forwarded_for.split(",")[0].strip()
                if first:
                    return first

            real_ip = request.headers.get("X-Real-IP")
            if real_ip and real_ip.strip():
                return real_ip.strip()

        if request.client and request.client.host:
            return request.client.host

        return UNKNOWN_IP

    def _get_caller(self, request: Request) -> CurrentUser | None:
        """Verified identity from the bearer token, or None.

        Unlike the admin dependencies this never rejects: an invalid token
        simply means an anonymous caller (keys fall back to IP).
        """
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.lower().startswith("bearer "):
            return None

        token = auth_header[7:].strip()
        match self._get_token_service().validate_access_token(token):
            case Success(value=claims):
                try:
                    return CurrentUser.from_claims(claims)
                except KeyError:
                    return None
        return None

    # -------------------------------------------------------------------------
    # Responses
    # -------------------------------------------------------------------------

    def _attach_headers(self, response: Response, decision: RateLimitDecision) -> None:
        response.headers["X-RateLimit-Limit"] = str(decision.max_allowed)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = str(decision.reset_seconds)
        response.headers["X-RateLimit-Config"] = decision.config_name
        response.headers["X-RateLimit-Source"] = decision.source

    def _build_denied_response(
        self,
        request: Request,
        decision: RateLimitDecision,
    ) -> JSONResponse:
        """Build the HTTP 429 (or fail-closed 503) response.

        Returns RFC 7807 compliant problem details with the throttling
        facts a client needs to back off.
        """
        retry_after = decision.retry_after_seconds
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Reset": str(decision.reset_seconds),
            "X-RateLimit-Config": decision.config_name,
            "X-RateLimit-Source": decision.source,
        }

        if decision.outcome is DecisionOutcome.STORE_FAILED_CLOSED:
            status_code = 503
            content = {
                "type": f"{settings.api_base_url}/errors/service-unavailable",
                "title": "Service Unavailable",
                "status": status_code,
                "detail": "Rate limiting is temporarily unavailable. Please retry later.",
                "instance": request.url.path,
                "code": "counter_store_unavailable",
                "config": decision.config_name,
                "resetTime": decision.reset_time,
                "retryAfter": retry_after,
            }
        else:
            status_code = 429
            headers["X-RateLimit-Limit"] = str(decision.max_allowed)
            headers["X-RateLimit-Remaining"] = str(decision.remaining)
            content = {
                "type": f"{settings.api_base_url}/errors/rate-limit-exceeded",
                "title": "Too Many Requests",
                "status": status_code,
                "detail": decision.message,
                "instance": request.url.path,
                "code": f"rate_limit_{decision.outcome.value}",
                "config": decision.config_name,
                "current": decision.current_count,
                "max": decision.max_allowed,
                "resetTime": decision.reset_time,
                "retryAfter": retry_after,
            }

        trace_id = get_trace_id()
        if trace_id:
            content["trace_id"] = trace_id

        return JSONResponse(status_code=status_code, content=content, headers=headers)

    def _log_fail_open(
        self,
        request: Request,
        config_name: str | None,
        exc: Exception,
    ) -> None:
        """Log a fail-open event for monitoring."""
        self._get_logger().error(
            "rate_limit_middleware_fail_open",
            error=exc,
            config=config_name,
            method=request.method,
            path=request.url.path,
            result="fail_open",
        )


def _service_procedure(path: str) -> tuple[str | None, str | None]:
    """Pick service and procedure from ``.../services/<id>/procedures/<name>``."""
    parts = [p for p in path.split("/") if p]
    for index, part in enumerate(parts[:-1]):
        if part != "services":
            continue
        service_id = parts[index + 1]
        procedure_name = None
        if index + 3 < len(parts) and parts[index + 2] == "procedures":
            procedure_name = parts[index + 3]
        return service_id, procedure_name
    return None, None

"""Unit tests for RateLimitMiddleware.

Tests cover:
- Client IP extraction (X-Forwarded-For, X-Real-IP, peer, trust switch)
- Caller identity from a verified bearer token
- Service/procedure extraction from the path
- Private headers hidden from custom key templates
- 429 and fail-closed 503 responses (body and headers)
- Fail-open on unexpected enforcer errors
- Skip-list paths and unmatched routes

Architecture:
- Requests built from raw ASGI scopes for context tests
- A minimal Starlette app with a stub enforcer for dispatch tests
"""

from unittest.mock import MagicMock

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

import src.core.container as container
from src.core.config import settings
from src.domain.value_objects.rate_limit_decision import (
    DecisionOutcome,
    RateLimitDecision,
)
from src.infrastructure.security.jwt_service import JWTService
from src.presentation.routers.api.middleware.rate_limit_middleware import (
    RateLimitMiddleware,
    _service_procedure,
)

SECRET = "unit-test-secret-key-with-32-bytes-min"


def _request(path="/api/v1/x", headers=None, client=("192.0.2.10", 5000), query=b""):
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": query,
        "headers": [
            (name.lower().encode(), value.encode())
            for name, value in (headers or {}).items()
        ],
        "client": client,
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


@pytest.fixture
def middleware():
    instance = RateLimitMiddleware(app=MagicMock(), rules=[])
    instance._token_service = JWTService(SECRET)
    return instance


# =============================================================================
# Request context
# =============================================================================


class TestClientIp:
    """Tests for client IP resolution."""

    def test_first_forwarded_address_wins(self, middleware):
        request = _request(headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})
        assert middleware.build_context(request).ip == "203.0.113.7"

    def test_real_ip_used_without_forwarded_for(self, middleware):
        request = _request(headers={"X-Real-IP": " 198.51.100.4 "})
        assert middleware.build_context(request).ip == "198.51.100.4"

    def test_peer_address_fallback(self, middleware):
        assert middleware.build_context(_request()).ip == "192.0.2.10"

    def test_unknown_without_peer(self, middleware):
        assert middleware.build_context(_request(client=None)).ip == "unknown"

    def test_forwarded_headers_ignored_when_untrusted(self, middleware, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_trust_forwarded", False)
        request = _request(headers={"X-Forwarded-For": "203.0.113.7"})

        assert middleware.build_context(request).ip == "192.0.2.10"


class TestCallerIdentity:
    """Tests for JWT-derived identity."""

    def test_valid_token_populates_identity(self, middleware):
        token = JWTService(SECRET).generate_access_token(
            "user-1", ["premium"], application_id="app-9"
        )
        request = _request(headers={"Authorization": f"Bearer {token}"})

        context = middleware.build_context(request)

        assert context.user_id == "user-1"
        assert context.application_id == "app-9"
        assert context.role_id == "premium"

    def test_invalid_token_is_anonymous(self, middleware):
        request = _request(headers={"Authorization": "Bearer not-a-jwt"})

        context = middleware.build_context(request)

        assert context.user_id is None
        assert context.application_id is None

    def test_private_headers_excluded(self, middleware):
        request = _request(
            headers={"Authorization": "Bearer x", "Cookie": "a=b", "X-Tenant": "acme"},
            query=b"region=eu&region=us",
        )

        context = middleware.build_context(request)

        assert "authorization" not in context.headers
        assert "cookie" not in context.headers
        assert context.headers["x-tenant"] == "acme"
        assert context.query == {"region": "eu"}


class TestServiceProcedure:
    """Tests for _service_procedure()."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/api/v1/services/billing/procedures/export", ("billing", "export")),
            ("/api/v1/services/billing", ("billing", None)),
            ("/api/v1/services/billing/other/x", ("billing", None)),
            ("/api/v1/services", (None, None)),
            ("/api/v1/things", (None, None)),
        ],
    )
    def test_extraction(self, path, expected):
        assert _service_procedure(path) == expected


# =============================================================================
# Dispatch
# =============================================================================


class StubEnforcer:
    """Enforcer double returning a fixed decision."""

    def __init__(self, decision=None, error=None):
        self.decision = decision
        self.error = error
        self.checked = []
        self.recorded = []

    async def check(self, config_name, context):
        self.checked.append((config_name, context))
        if self.error:
            raise self.error
        return self.decision

    async def record_outcome(self, decision, status_code):
        self.recorded.append(status_code)


def _decision(**values):
    defaults = {
        "config_name": "auth",
        "key": "ip:testclient",
        "store_key": "rl:auth:ip:testclient",
        "max_allowed": 10,
        "now_ms": 1_700_000_000_000,
        "reset_time": 1_700_000_030_000,
        "message": "Slow down",
    }
    defaults.update(values)
    return RateLimitDecision(**defaults)


@pytest.fixture
def make_client(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(container, "get_logger", lambda: logger)
    monkeypatch.setattr(
        settings, "rate_limit_route_prefixes", [("/api/v1/auth", "auth")]
    )

    def factory(enforcer):
        monkeypatch.setattr(container, "get_enforcer", lambda: enforcer)

        async def endpoint(request):
            return PlainTextResponse("ok")

        app = Starlette(
            routes=[
                Route("/api/v1/auth/login", endpoint),
                Route("/api/v1/other", endpoint),
                Route("/health", endpoint),
            ]
        )
        app.add_middleware(RateLimitMiddleware, rules=[])
        return TestClient(app), logger

    return factory


class TestDispatch:
    """Tests for RateLimitMiddleware.dispatch()."""

    def test_allowed_request_gets_headers(self, make_client):
        enforcer = StubEnforcer(
            _decision(
                allowed=True,
                outcome=DecisionOutcome.ALLOWED,
                counted=True,
                current_count=3,
            )
        )
        client, _ = make_client(enforcer)

        response = client.get("/api/v1/auth/login")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "7"
        assert response.headers["X-RateLimit-Reset"] == "1700000030"
        assert response.headers["X-RateLimit-Config"] == "auth"
        assert enforcer.recorded == [200]

    def test_limited_request_gets_429_problem(self, make_client):
        enforcer = StubEnforcer(
            _decision(
                allowed=False,
                outcome=DecisionOutcome.LIMITED,
                counted=True,
                current_count=11,
            )
        )
        client, _ = make_client(enforcer)

        response = client.get("/api/v1/auth/login")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        body = response.json()
        assert body["title"] == "Too Many Requests"
        assert body["code"] == "rate_limit_limited"
        assert body["detail"] == "Slow down"
        assert body["current"] == 11
        assert body["max"] == 10
        assert body["retryAfter"] == 30
        assert body["resetTime"] == 1_700_000_030_000
        assert enforcer.recorded == []

    def test_fail_closed_returns_503(self, make_client):
        enforcer = StubEnforcer(
            _decision(allowed=False, outcome=DecisionOutcome.STORE_FAILED_CLOSED)
        )
        client, _ = make_client(enforcer)

        response = client.get("/api/v1/auth/login")

        assert response.status_code == 503
        assert response.json()["code"] == "counter_store_unavailable"
        assert "X-RateLimit-Limit" not in response.headers

    def test_enforcer_error_fails_open(self, make_client):
        client, logger = make_client(StubEnforcer(error=RuntimeError("boom")))

        response = client.get("/api/v1/auth/login")

        assert response.status_code == 200
        assert logger.error.call_args.args[0] == "rate_limit_middleware_fail_open"

    def test_unmatched_route_not_checked(self, make_client):
        enforcer = StubEnforcer()
        client, _ = make_client(enforcer)

        assert client.get("/api/v1/other").status_code == 200
        assert client.get("/health").status_code == 200
        assert enforcer.checked == []

    def test_missing_config_passes_through(self, make_client):
        enforcer = StubEnforcer(decision=None)
        client, _ = make_client(enforcer)

        response = client.get("/api/v1/auth/login")

        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers

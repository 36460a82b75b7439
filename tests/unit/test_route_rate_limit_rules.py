"""Unit tests for route -> rate limit config resolution.

Tests cover:
- Settings parsing of RATE_LIMIT_ROUTE_PREFIXES (longest prefix first)
- Registry rules: literal and parameterized templates, {key:path} spans
- Prefix fallback for traffic outside the registry
- Every registry route is rate limited
"""

import pytest
from pydantic import ValidationError

from src.core.config import Settings
from src.presentation.routers.api.v1.routes.derivations import (
    build_route_rate_limit_rules,
    resolve_rate_limit_config,
)
from src.presentation.routers.api.v1.routes.metadata import (
    AuthLevel,
    AuthPolicy,
    HTTPMethod,
    IdempotencyLevel,
    RouteMetadata,
)
from src.presentation.routers.api.v1.routes.registry import ROUTE_REGISTRY

BASE = "/api/v1/admin/rate-limits"


def _settings(**values):
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        redis_url="redis://localhost:6379/15",
        secret_key="x" * 32,
        **values,
    )


async def _noop():
    return None


def _route(method, path, config_name):
    return RouteMetadata(
        method=method,
        path=path,
        handler=_noop,
        resource="things",
        tags=["Things"],
        summary="Thing",
        operation_id=f"{method.value.lower()}_{path.strip('/').replace('/', '_')}",
        idempotency=IdempotencyLevel.SAFE,
        auth_policy=AuthPolicy(level=AuthLevel.PUBLIC),
        rate_limit_config=config_name,
    )


# =============================================================================
# Settings
# =============================================================================


class TestRoutePrefixSettings:
    """Tests for Settings.parse_route_prefixes."""

    def test_default_mapping(self):
        prefixes = _settings().rate_limit_route_prefixes

        assert ("/api/v1/auth", "auth") in prefixes
        assert ("/ws", "websocket") in prefixes

    def test_sorted_longest_first_and_trailing_slash_trimmed(self):
        prefixes = _settings(
            rate_limit_route_prefixes="/a=short, /a/b/c/=long ,/a/b=mid"
        ).rate_limit_route_prefixes

        assert prefixes == [("/a/b/c", "long"), ("/a/b", "mid"), ("/a", "short")]

    @pytest.mark.parametrize("raw", ["/a", "=auth", "/a="])
    def test_malformed_entry_rejected(self, raw):
        with pytest.raises(ValidationError):
            _settings(rate_limit_route_prefixes=raw)


# =============================================================================
# Rule matching
# =============================================================================


class TestResolveRateLimitConfig:
    """Tests for resolve_rate_limit_config()."""

    @pytest.fixture
    def rules(self):
        return build_route_rate_limit_rules(
            [
                _route(HTTPMethod.GET, "/things/{thing_id}", "param"),
                _route(HTTPMethod.GET, "/things/special", "literal"),
                _route(HTTPMethod.GET, "/status/{name}/{key:path}", "spanning"),
            ]
        )

    def test_literal_beats_parameter(self, rules):
        assert resolve_rate_limit_config(rules, [], "GET", "/api/v1/things/special") == (
            "literal"
        )
        assert resolve_rate_limit_config(rules, [], "GET", "/api/v1/things/42") == (
            "param"
        )

    def test_parameter_does_not_span_slashes(self, rules):
        assert resolve_rate_limit_config(rules, [], "GET", "/api/v1/things/4/2") is None

    def test_path_parameter_spans_slashes(self, rules):
        path = "/api/v1/status/api/ip:10.0.0.1/extra"
        assert resolve_rate_limit_config(rules, [], "GET", path) == "spanning"

    def test_method_must_match(self, rules):
        assert resolve_rate_limit_config(rules, [], "POST", "/api/v1/things/42") is None

    def test_prefix_fallback(self, rules):
        prefixes = [("/api/v1/auth/admin", "strict"), ("/api/v1/auth", "auth")]

        assert (
            resolve_rate_limit_config(rules, prefixes, "POST", "/api/v1/auth/login")
            == "auth"
        )
        assert (
            resolve_rate_limit_config(rules, prefixes, "POST", "/api/v1/auth/admin/x")
            == "strict"
        )
        assert resolve_rate_limit_config(rules, prefixes, "GET", "/api/v1/auth") == (
            "auth"
        )

    def test_prefix_requires_segment_boundary(self, rules):
        prefixes = [("/api/v1/auth", "auth")]
        assert (
            resolve_rate_limit_config(rules, prefixes, "GET", "/api/v1/authors") is None
        )


class TestRegistryRules:
    """Registry-wide rate limit coverage."""

    def test_every_registry_route_has_a_rule(self):
        rules = build_route_rate_limit_rules(ROUTE_REGISTRY)
        assert len(rules) == len(ROUTE_REGISTRY)

    def test_admin_routes_use_api_config(self):
        rules = build_route_rate_limit_rules(ROUTE_REGISTRY)

        assert resolve_rate_limit_config(rules, [], "GET", f"{BASE}/configs") == "api"
        assert (
            resolve_rate_limit_config(
                rules, [], "POST", f"{BASE}/reset/auth/ip:10.0.0.1"
            )
            == "api"
        )


class TestRegistryConventions:
    """Method, idempotency and auth conventions across ROUTE_REGISTRY."""

    @pytest.mark.parametrize(
        "route", ROUTE_REGISTRY, ids=lambda r: f"{r.method.value} {r.path}"
    )
    def test_only_gets_are_safe(self, route):
        is_safe = route.idempotency is IdempotencyLevel.SAFE
        assert is_safe == (route.method is HTTPMethod.GET)

    @pytest.mark.parametrize(
        "route", ROUTE_REGISTRY, ids=lambda r: f"{r.method.value} {r.path}"
    )
    def test_mutating_admin_routes_require_csrf(self, route):
        if route.auth_policy.level is AuthLevel.ADMIN and route.method.is_mutating:
            assert route.requires_csrf

    def test_operation_ids_unique(self):
        operation_ids = [r.operation_id for r in ROUTE_REGISTRY if r.operation_id]
        assert len(operation_ids) == len(set(operation_ids))

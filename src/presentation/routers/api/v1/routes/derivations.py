"""Derive runtime configurations from route metadata registry.

This module generates runtime configuration from the declarative Route
Metadata Registry so the middleware and the routes can never drift apart.

Rate limit config resolution is two-tier:

    Tier 1 (registry.py): ``RouteMetadata.rate_limit_config`` names the
        configuration that applies to one endpoint.

    Tier 2 (settings): ``RATE_LIMIT_ROUTE_PREFIXES`` maps path prefixes to
        configuration names for traffic that is not in the registry
        (upstream auth, uploads, GraphQL, websockets behind the gateway).

What a configuration *means* (window, max, key strategy, overrides) is
never in code: it is the stored RateLimitConfig, editable at runtime
through the admin API.

Functions:
    build_route_rate_limit_rules: Compile registry entries into match rules
    resolve_rate_limit_config: Pick the config name for "METHOD path"
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from src.presentation.routers.api.v1.routes.metadata import RouteMetadata

_PARAM = re.compile(r"\{[^}/]+\}")
_PARAM_SPLIT = re.compile(r"(\{[^}/]+\})")


@dataclass(frozen=True, slots=True)
class RouteRateLimitRule:
    """A registry route compiled for request matching.

    Attributes:
        method: HTTP method.
        template: Full path template (e.g. "/api/v1/admin/rate-limits/configs/{config_id}").
        pattern: Compiled regex matching concrete paths of the template.
        config_name: Rate limit configuration applied to the route.
    """

    method: str
    template: str
    pattern: re.Pattern[str]
    config_name: str

    def matches(self, method: str, path: str) -> bool:
        return self.method == method and self.pattern.fullmatch(path) is not None


def build_route_rate_limit_rules(
    registry: Sequence[RouteMetadata],
    prefix: str = "/api/v1",
) -> list[RouteRateLimitRule]:
    """Build rate limit match rules from the route registry.

    Routes without ``rate_limit_config`` are left to the prefix fallback.
    Static templates sort before parameterized ones so that
    ``/configs/{config_id}`` never shadows a literal sibling.

    Args:
        registry: List of route metadata entries from ROUTE_REGISTRY.
        prefix: Router prefix the registry paths are mounted under.

    Returns:
        Rules in match order.

    Example:
        >>> rules = build_route_rate_limit_rules(ROUTE_REGISTRY)
        >>> resolve_rate_limit_config(rules, [], "GET", "/api/v1/admin/rate-limits/stats")
        'api'
    """
    rules: list[RouteRateLimitRule] = []
    for entry in registry:
        if entry.rate_limit_config is None:
            continue
        template = f"{prefix}{entry.path}"
        regex = "".join(_segment_regex(part) for part in _PARAM_SPLIT.split(template))
        rules.append(
            RouteRateLimitRule(
                method=entry.method.value,
                template=template,
                pattern=re.compile(regex),
                config_name=entry.rate_limit_config,
            )
        )
    rules.sort(key=lambda rule: len(_PARAM.findall(rule.template)))
    return rules


def resolve_rate_limit_config(
    rules: Sequence[RouteRateLimitRule],
    prefixes: Sequence[tuple[str, str]],
    method: str,
    path: str,
) -> str | None:
    """Pick the configuration that governs one request.

    Args:
        rules: Registry rules (from build_route_rate_limit_rules).
        prefixes: (path prefix, config name) pairs, longest prefix first.
        method: Request method.
        path: Request path.

    Returns:
        Config name, or None when the request is not rate limited.
    """
    for rule in rules:
        if rule.matches(method, path):
            return rule.config_name
    for path_prefix, config_name in prefixes:
        if path == path_prefix or path.startswith(path_prefix.rstrip("/") + "/"):
            return config_name
    return None


def _segment_regex(part: str) -> str:
    """Regex for one piece of a path template ("{key:path}" spans slashes)."""
    if not _PARAM.fullmatch(part):
        return re.escape(part)
    return ".+" if part.endswith(":path}") else "[^/]+"

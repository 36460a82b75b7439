"""Per-dimension max overrides and their precedence.

A configuration may override its ``max`` for a specific application, role
or service procedure. Each dimension is an ``OverrideProvider``; providers
are evaluated in ``OVERRIDE_PRECEDENCE`` order and the first one that
matches the request supplies the single effective max. Nothing is summed or
averaged.

Overrides may reference applications, roles or services that no longer
exist. Such entries simply never match, which is the same as no override.

Adding a dimension means adding a provider and a slot in the precedence
tuple; enforcement code does not change.
"""

from dataclasses import dataclass
from typing import Protocol

from src.domain.value_objects.request_context import RequestContext

GLOBAL_SOURCE = "global"


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplicationLimit:
    """Max override for one calling application."""

    application_id: str
    max: int


@dataclass(frozen=True, slots=True, kw_only=True)
class RoleLimit:
    """Max override for one caller role."""

    role_id: str
    max: int


@dataclass(frozen=True, slots=True, kw_only=True)
class ComponentLimit:
    """Max override for one service procedure.

    An empty ``procedure_name`` applies to every procedure of the service,
    below any entry that names the procedure exactly.
    """

    service_id: str
    procedure_name: str | None
    max: int


@dataclass(frozen=True, slots=True, kw_only=True)
class EnvironmentOverride:
    """Per-environment gate and window override.

    Attributes:
        enabled: ANDed with the config's own ``enabled`` flag.
        max: Replaces the base max in this environment when set.
        window_ms: Replaces the base window in this environment when set.
    """

    enabled: bool = True
    max: int | None = None
    window_ms: int | None = None


class OverrideProvider(Protocol):
    """One override dimension."""

    source: str

    def match(self, context: RequestContext) -> int | None:
        """Return the override max for this request, or None."""
        ...


@dataclass(frozen=True, slots=True)
class ComponentOverrideProvider:
    limits: tuple[ComponentLimit, ...]
    source: str = "component"

    def match(self, context: RequestContext) -> int | None:
        if not context.service_id:
            return None
        service_wide: int | None = None
        for limit in self.limits:
            if limit.service_id != context.service_id:
                continue
            if not limit.procedure_name:
                service_wide = limit.max if service_wide is None else service_wide
            elif limit.procedure_name == context.procedure_name:
                return limit.max
        return service_wide


@dataclass(frozen=True, slots=True)
class RoleOverrideProvider:
    limits: tuple[RoleLimit, ...]
    source: str = "role"

    def match(self, context: RequestContext) -> int | None:
        if not context.role_id:
            return None
        for limit in self.limits:
            if limit.role_id == context.role_id:
                return limit.max
        return None


@dataclass(frozen=True, slots=True)
class ApplicationOverrideProvider:
    limits: tuple[ApplicationLimit, ...]
    source: str = "application"

    def match(self, context: RequestContext) -> int | None:
        if not context.application_id:
            return None
        for limit in self.limits:
            if limit.application_id == context.application_id:
                return limit.max
        return None


OVERRIDE_PRECEDENCE: tuple[str, ...] = ("component", "role", "application")


def resolve_max(
    providers: tuple[OverrideProvider, ...],
    context: RequestContext,
    default: int,
) -> tuple[int, str]:
    """Pick the effective max for a request.

    Args:
        providers: Providers already ordered by precedence.
        context: Request being checked.
        default: Global max of the effective configuration.

    Returns:
        (max, source) where source names the winning dimension or ``global``.
    """
    for provider in providers:
        override = provider.match(context)
        if override is not None:
            return override, provider.source
    return default, GLOBAL_SOURCE

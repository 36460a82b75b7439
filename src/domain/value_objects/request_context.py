"""Request context value objects.

``RequestContext`` is everything the rate limit subsystem is allowed to know
about an inbound request. It is built once per request by the middleware
from the peer address, forwarded headers, a verified bearer token and the
route path, and then handed to key derivation and override resolution.

``RequestContextView`` is the restricted, read-only surface exposed to
custom key templates. Templates can only name the fields listed in
``RequestContextView.FIELDS`` plus ``headers.<name>`` and ``query.<name>``.

Usage:
    context = RequestContext(
        ip="203.0.113.7",
        method="GET",
        path="/api/v1/services/svc-1/procedures/export",
        application_id="app-1",
        service_id="svc-1",
        procedure_name="export",
    )
    RequestContextView(context).lookup("headers.x-tenant-id")
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar

UNKNOWN_IP = "unknown"


@dataclass(frozen=True, slots=True, kw_only=True)
class RequestContext:
    """Identity and routing facts about one inbound request.

    Attributes:
        ip: Client address (first trusted forwarded address or the peer).
        method: HTTP method, upper case.
        path: Request path without query string.
        user_id: Subject of the verified bearer token.
        application_id: Calling application (``app_id`` claim).
        role_id: Caller role (``role_id`` claim, else the first of ``roles``).
        service_id: Service segment of ``/services/{id}/procedures/{name}``.
        procedure_name: Procedure segment of the same path.
        headers: Request headers with lower-cased names.
        query: Query string parameters (first value per name).
    """

    ip: str = UNKNOWN_IP
    method: str = "GET"
    path: str = "/"
    user_id: str | None = None
    application_id: str | None = None
    role_id: str | None = None
    service_id: str | None = None
    procedure_name: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)

    @property
    def ip_key(self) -> str:
        """Bucket key used by the IP strategy and every fallback."""
        return f"ip:{self.ip or UNKNOWN_IP}"


class RequestContextView:
    """Read-only projection of a RequestContext for custom key templates."""

    FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "ip",
            "method",
            "path",
            "user_id",
            "application_id",
            "role_id",
            "service_id",
            "procedure_name",
        }
    )
    MAPPINGS: ClassVar[frozenset[str]] = frozenset({"headers", "query"})

    __slots__ = ("_values", "_headers", "_query")

    def __init__(self, context: RequestContext) -> None:
        self._values = MappingProxyType(
            {name: getattr(context, name) for name in self.FIELDS}
        )
        self._headers = MappingProxyType(
            {k.lower(): v for k, v in context.headers.items()}
        )
        self._query = MappingProxyType(dict(context.query))

    @classmethod
    def is_valid_name(cls, name: str) -> bool:
        """Whether ``name`` is a field a template may reference."""
        if name in cls.FIELDS:
            return True
        mapping, sep, item = name.partition(".")
        return (
            bool(sep)
            and mapping in cls.MAPPINGS
            and bool(item)
            and all(ch.isalnum() or ch in "-_" for ch in item)
        )

    def lookup(self, name: str) -> str | None:
        """Resolve a template field name to its value.

        Args:
            name: ``ip``, ``user_id``, ``headers.x-tenant-id``, ``query.page``, ...

        Returns:
            The value, or None when the request does not carry it.

        Raises:
            KeyError: If ``name`` is not an allowed field.
        """
        if name in self.FIELDS:
            return self._values[name]
        mapping, _, item = name.partition(".")
        if mapping == "headers":
            return self._headers.get(item.lower())
        if mapping == "query":
            return self._query.get(item)
        raise KeyError(name)

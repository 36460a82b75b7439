"""Reference entities used to build overrides.

Applications, roles and services are owned by other parts of the platform.
The rate limit admin surface only reads them to populate override forms;
overrides store plain identifiers and tolerate entries that disappear.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, kw_only=True)
class Application:
    """A client application that calls the API."""

    id: str
    name: str
    description: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Role:
    """A caller role, optionally scoped to one application."""

    id: str
    name: str
    application_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Service:
    """A service and the procedure names it exposes."""

    id: str
    name: str
    procedures: list[str] = field(default_factory=list)

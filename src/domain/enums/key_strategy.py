"""Key derivation strategies.

Determines which request dimension a configuration counts against.

Key Formats:
    APPLICATION: app:{application_id}
    ROLE: role:{role_id}
    COMPONENT: comp:{service_id}:{procedure_name} (or comp:{service_id})
    IP: ip:{address}
    CUSTOM: output of the configured key template

Every strategy except IP falls back to ``ip:{address}`` when its dimension
is missing from the request.
"""

from enum import Enum


class KeyStrategy(str, Enum):
    """How a bucket key is derived from a request."""

    APPLICATION = "application"
    """Count per calling application (JWT ``app_id`` claim)."""

    ROLE = "role"
    """Count per caller role (JWT ``role_id`` claim)."""

    COMPONENT = "component"
    """Count per service procedure (``/services/{id}/procedures/{name}``)."""

    IP = "ip"
    """Count per client address (first trusted forwarded address)."""

    CUSTOM = "custom"
    """Count per value of the configured key template."""

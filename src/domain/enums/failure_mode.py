"""Counter store failure handling modes."""

from enum import Enum


class FailureMode(str, Enum):
    """What enforcement does when the counter store is unreachable.

    Configurations may leave the mode unset; the type default applies
    (CLOSED for auth, OPEN for everything else).
    """

    OPEN = "open"
    """Allow the request and log a warning."""

    CLOSED = "closed"
    """Reject the request (HTTP 503)."""

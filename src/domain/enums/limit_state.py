"""Lifecycle states of a key within one counting window.

Transitions:
    FRESH -> COUNTING -> AT_LIMIT -> [BLOCKED] -> EXPIRED -> FRESH

COUNTING -> AT_LIMIT is irreversible inside a window. BLOCKED only ends
when both the window and the block duration have elapsed.
"""

from enum import Enum


class LimitState(str, Enum):
    """Observed state of one rate limit key."""

    FRESH = "fresh"
    """No active window (never seen, expired or reset)."""

    COUNTING = "counting"
    """Active window with 0 < count <= max."""

    AT_LIMIT = "at_limit"
    """Active window with count > max."""

    BLOCKED = "blocked"
    """Extra lockout after the limit was hit (or an admin block)."""

    @classmethod
    def of(
        cls, *, current_count: int | None, max_allowed: int, blocked: bool
    ) -> "LimitState":
        """Derive the state from a counter snapshot.

        Args:
            current_count: Count in the active window, None when no window exists.
            max_allowed: Effective max for the key.
            blocked: Whether a block marker is active.

        Returns:
            LimitState for the key.
        """
        if blocked:
            return cls.BLOCKED
        if not current_count:
            return cls.FRESH
        if current_count > max_allowed:
            return cls.AT_LIMIT
        return cls.COUNTING

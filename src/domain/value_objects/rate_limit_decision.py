"""Result of checking one request against one configuration."""

import math
from dataclasses import dataclass
from enum import Enum


class DecisionOutcome(str, Enum):
    """Why a request was allowed or denied."""

    ALLOWED = "allowed"
    LIMITED = "limited"
    """Window max exceeded."""
    SPACED = "spaced"
    """Arrived before the even-spacing slot opened."""
    BLOCKED = "blocked"
    """Key carries a block marker; not counted."""
    DISABLED = "disabled"
    """Effective config disabled (pass-through)."""
    STORE_FAILED_OPEN = "store_failed_open"
    STORE_FAILED_CLOSED = "store_failed_closed"


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitDecision:
    """Enforcement decision for one request.

    Attributes:
        allowed: Whether the request may proceed.
        outcome: Reason for the decision.
        config_name: Configuration that was applied.
        key: Derived bucket key (without prefix).
        store_key: Full counter store key.
        current_count: Count after this request (0 when not counted).
        max_allowed: Effective max for this request.
        source: Dimension that supplied the max (component, role, ...).
        reset_time: Epoch ms when the window or block ends.
        now_ms: Store time when the decision was made.
        message: Config message for throttled callers.
        counted: Whether this request incremented the counter.
        skip_successful_requests: Copied from the effective config.
        skip_failed_requests: Copied from the effective config.
    """

    allowed: bool
    outcome: DecisionOutcome
    config_name: str
    key: str = ""
    store_key: str = ""
    current_count: int = 0
    max_allowed: int = 0
    source: str = "global"
    reset_time: int = 0
    now_ms: int = 0
    message: str = ""
    counted: bool = False
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False

    @property
    def remaining(self) -> int:
        return max(self.max_allowed - self.current_count, 0)

    @property
    def retry_after_seconds(self) -> int:
        """Whole seconds until the caller may retry (at least 1 when denied)."""
        if self.allowed:
            return 0
        return max(math.ceil((self.reset_time - self.now_ms) / 1000), 1)

    @property
    def reset_seconds(self) -> int:
        """Epoch seconds of ``reset_time`` (X-RateLimit-Reset)."""
        return math.ceil(self.reset_time / 1000) if self.reset_time else 0

    @property
    def store_failure(self) -> bool:
        return self.outcome in (
            DecisionOutcome.STORE_FAILED_OPEN,
            DecisionOutcome.STORE_FAILED_CLOSED,
        )

    def should_decrement(self, status_code: int) -> bool:
        """Whether the response outcome removes this request from the count."""
        if not (self.allowed and self.counted):
            return False
        if status_code < 400:
            return self.skip_successful_requests
        return self.skip_failed_requests

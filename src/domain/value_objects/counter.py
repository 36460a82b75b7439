"""Counter store value objects.

Times are epoch milliseconds as reported by the store's own clock, so a
Redis-backed store and its clients never disagree about when a window ends.
"""

from dataclasses import dataclass

from src.domain.enums import LimitState


@dataclass(frozen=True, slots=True, kw_only=True)
class CounterResult:
    """Outcome of one increment-and-check (or even-spacing) call.

    Attributes:
        allowed: ``current_count <= max`` (spacing: the arrival was not early).
        current_count: Count in the window after this call.
        reset_time: Epoch ms when the window rolls over.
        retry_after_ms: For spacing rejections, ms until the next slot opens.
    """

    allowed: bool
    current_count: int
    reset_time: int
    retry_after_ms: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class CounterSnapshot:
    """Non-mutating view of one key.

    Attributes:
        current_count: Count in the active window (0 when only a block exists).
        reset_time: Epoch ms when the window rolls over (None without a window).
        max_allowed: Max recorded on the last increment.
        blocked_until: Epoch ms when a block marker expires, if any.
    """

    current_count: int
    reset_time: int | None
    max_allowed: int | None = None
    blocked_until: int | None = None

    @property
    def blocked(self) -> bool:
        return self.blocked_until is not None

    def state(self, max_allowed: int | None = None) -> LimitState:
        """LimitState of the key, judged against ``max_allowed`` when given."""
        limit = max_allowed if max_allowed is not None else self.max_allowed
        return LimitState.of(
            current_count=self.current_count,
            max_allowed=limit or 0,
            blocked=self.blocked,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ActiveLimitRecord:
    """One tracked bucket, materialized from the counter store.

    Attributes:
        key: Full store key (config prefix + derived key).
        config_name: Configuration that created the bucket.
        current_count: Requests counted in the window.
        max_allowed: Effective max recorded for the bucket.
        reset_time: Epoch ms when the window rolls over.
        blocked: Whether a block marker is active.
        blocked_until: Epoch ms when the block ends.
    """

    key: str
    config_name: str
    current_count: int
    max_allowed: int
    reset_time: int
    blocked: bool = False
    blocked_until: int | None = None

    @property
    def utilization(self) -> float:
        """Percentage of the max consumed (can exceed 100)."""
        if self.max_allowed <= 0:
            return 0.0
        return self.current_count * 100.0 / self.max_allowed

    def relative_key(self, prefix: str) -> str:
        """Key with the config prefix stripped (``ip:1.2.3.4``)."""
        return self.key[len(prefix) :] if self.key.startswith(prefix) else self.key

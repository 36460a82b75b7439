"""Domain enums for the rate limit subsystem.

All domain enums live in src/domain/enums/ for discoverability. String
enums double as the persisted wire contract.

Available Enums:
    - RateLimitType: Traffic class of a configuration
    - KeyStrategy: Bucket key derivation strategy
    - FailureMode: Counter store outage handling
    - LimitState: Per-key window lifecycle
    - TimeRange / Granularity: Analytics windows and bucket widths
    - ChangeAction: Kind of audited configuration mutation
"""

from src.domain.enums.change_action import ChangeAction
from src.domain.enums.failure_mode import FailureMode
from src.domain.enums.key_strategy import KeyStrategy
from src.domain.enums.limit_state import LimitState
from src.domain.enums.rate_limit_type import RateLimitType
from src.domain.enums.time_range import Granularity, TimeRange

__all__ = [
    "ChangeAction",
    "FailureMode",
    "Granularity",
    "KeyStrategy",
    "LimitState",
    "RateLimitType",
    "TimeRange",
]

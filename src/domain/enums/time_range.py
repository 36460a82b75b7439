"""Analytics time ranges and bucket granularity."""

from datetime import timedelta
from enum import Enum


class Granularity(str, Enum):
    """Width of one history bucket."""

    HOUR = "hour"
    DAY = "day"

    @property
    def step(self) -> timedelta:
        """Bucket width as a timedelta."""
        return timedelta(hours=1) if self is Granularity.HOUR else timedelta(days=1)


class TimeRange(str, Enum):
    """Look-back windows accepted by analytics and history."""

    LAST_HOUR = "1h"
    LAST_6_HOURS = "6h"
    LAST_24_HOURS = "24h"
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"

    @property
    def duration(self) -> timedelta:
        """Length of the range."""
        return {
            TimeRange.LAST_HOUR: timedelta(hours=1),
            TimeRange.LAST_6_HOURS: timedelta(hours=6),
            TimeRange.LAST_24_HOURS: timedelta(hours=24),
            TimeRange.LAST_7_DAYS: timedelta(days=7),
            TimeRange.LAST_30_DAYS: timedelta(days=30),
        }[self]

    @property
    def granularity(self) -> Granularity:
        """Fixed bucket policy: hourly up to 6h, daily beyond."""
        if self.duration <= timedelta(hours=6):
            return Granularity.HOUR
        return Granularity.DAY

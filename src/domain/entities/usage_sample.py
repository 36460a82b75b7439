"""Hourly usage rollup for analytics.

Usage samples are written by the usage recorder from enforcement events.
They are approximate and never consulted by enforcement.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, kw_only=True)
class UsageSample:
    """Request volume of one configuration in one hour.

    Attributes:
        config_name: Configuration the requests were checked against.
        bucket_start: Start of the hour (UTC, minute/second zeroed).
        request_count: Requests checked.
        blocked_count: Requests denied.
        error_count: Allowed requests whose response status was 400 or above.
    """

    config_name: str
    bucket_start: datetime
    request_count: int = 0
    blocked_count: int = 0
    error_count: int = 0

    def merge(self, other: "UsageSample") -> None:
        """Add another sample's counts into this one."""
        self.request_count += other.request_count
        self.blocked_count += other.blocked_count
        self.error_count += other.error_count

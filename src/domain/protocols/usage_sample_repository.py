"""UsageSampleRepository protocol (port)."""

from datetime import datetime
from typing import Protocol

from src.domain.entities.usage_sample import UsageSample


class UsageSampleRepository(Protocol):
    """Hourly usage rollup persistence."""

    async def add_counts(self, samples: list[UsageSample]) -> None:
        """Add each sample's counts to the stored row for its (config, hour).

        Rows are created when missing.
        """
        ...

    async def list_between(
        self,
        start: datetime,
        end: datetime,
        *,
        config_name: str | None = None,
    ) -> list[UsageSample]:
        """Hourly samples with ``start <= bucket_start <= end``, oldest first."""
        ...

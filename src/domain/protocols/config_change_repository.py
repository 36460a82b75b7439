"""ConfigChangeRepository protocol (port).

Append-only: there is no update or delete.
"""

from datetime import datetime
from typing import Protocol

from src.domain.entities.config_change_record import ConfigChangeRecord


class ConfigChangeRepository(Protocol):
    """Audit record persistence."""

    async def append(self, record: ConfigChangeRecord) -> None:
        """Insert one record."""
        ...

    async def list_for_config(
        self, config_name: str, *, limit: int = 100
    ) -> list[ConfigChangeRecord]:
        """Records of one configuration, newest first."""
        ...

    async def list_between(
        self,
        start: datetime,
        end: datetime,
        *,
        config_name: str | None = None,
        limit: int | None = None,
    ) -> list[ConfigChangeRecord]:
        """Records with ``start <= changed_at <= end``, newest first."""
        ...

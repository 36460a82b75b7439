"""RateLimitConfigRepository protocol (port).

Exclusive write path for configurations. Command handlers pair every write
with a ConfigChangeRecord in the same session, so audit records can never
be skipped.
"""

from typing import Protocol
from uuid import UUID

from src.core.errors import ConflictError
from src.core.result import Result
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.enums import RateLimitType


class RateLimitConfigRepository(Protocol):
    """Configuration persistence.

    Methods:
        find_by_name: Lookup by unique name
        find_by_id: Lookup by UUID
        find_overlapping_prefix: Namespace collision check
        lock_by_name: Lookup with a row lock for read-modify-write
        list: Filtered listing
        save: Insert a new configuration
        update: Persist changes to an existing configuration
        delete: Hard delete
        commit: End the unit of work
    """

    async def find_by_name(self, name: str) -> RateLimitConfig | None: ...

    async def find_by_id(self, config_id: UUID) -> RateLimitConfig | None: ...

    async def find_overlapping_prefix(
        self, prefix: str, *, exclude_id: UUID | None = None
    ) -> RateLimitConfig | None:
        """Config whose namespace overlaps ``prefix`` (equal, enclosing or nested).

        Args:
            prefix: Candidate namespace.
            exclude_id: Configuration being updated (its own prefix never conflicts).
        """
        ...

    async def lock_by_name(self, name: str) -> RateLimitConfig | None:
        """Load a configuration and lock its row until the session ends.

        Databases without row locks (SQLite) return the row unlocked; the
        in-process keyed lock still serializes writers.
        """
        ...

    async def list(
        self,
        *,
        type: RateLimitType | None = None,
        enabled: bool | None = None,
        search: str | None = None,
    ) -> list[RateLimitConfig]:
        """List configurations ordered by name.

        Args:
            type: Only this traffic class.
            enabled: Only enabled (True) or disabled (False) configurations.
            search: Case-insensitive substring of name, display name or description.
        """
        ...

    async def save(self, config: RateLimitConfig) -> Result[None, ConflictError]:
        """Stage an insert.

        Returns:
            Failure(ConflictError) when the name or prefix unique constraint
            rejects the row; the session is rolled back.
        """
        ...

    async def update(self, config: RateLimitConfig) -> Result[None, ConflictError]:
        ...

    async def delete(self, config_id: UUID) -> None: ...

    async def commit(self) -> None:
        """Commit the unit of work (config write plus its change record).

        Called while the per-name lock is still held so the next writer sees
        the committed row.
        """
        ...

"""Configuration change audit record.

Append-only history of configuration mutations. Exactly one record is
written for every successful create, update, toggle and delete, in the same
transaction as the mutation. Records are never updated or deleted; they are
the sole input to historical trend reporting.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from src.domain.enums import ChangeAction, RateLimitType


@dataclass(frozen=True, slots=True, kw_only=True)
class ConfigChangeRecord:
    """Immutable audit record of one configuration mutation.

    Attributes:
        id: Record identifier (UUIDv7, time ordered).
        config_name: Name of the mutated configuration.
        config_display_name: Display name at the time of the change.
        config_type: Type at the time of the change.
        action: created, updated, toggled or deleted.
        changed_by: Admin subject that made the change.
        changed_at: When the change was committed.
        reason: Optional free text supplied by the admin.
        changes: Wire field name -> ``{"from": old, "to": new}``.
    """

    id: UUID
    config_name: str
    config_display_name: str
    config_type: RateLimitType
    action: ChangeAction
    changed_by: str
    changes: dict[str, dict[str, Any]] = field(default_factory=dict)
    reason: str | None = None
    changed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def changed_fields(self) -> list[str]:
        return sorted(self.changes)

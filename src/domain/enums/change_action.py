"""Configuration change actions recorded in the audit history."""

from enum import Enum


class ChangeAction(str, Enum):
    """Kind of mutation captured by a ConfigChangeRecord."""

    CREATED = "created"
    UPDATED = "updated"
    TOGGLED = "toggled"
    DELETED = "deleted"

"""Commands - Write operations that change state.

Commands represent admin intent to perform an action. They are immutable
dataclasses with imperative names (CreateRateLimitConfig, ResetRateLimitKey).

Each command has a corresponding handler that contains the business logic
to execute the command.
"""

from src.application.commands.rate_limit_commands import (
    BlockRateLimitKey,
    CreateRateLimitConfig,
    DeleteRateLimitConfig,
    ResetRateLimitConfig,
    ResetRateLimitKey,
    ToggleRateLimitConfig,
    UnblockRateLimitKey,
    UpdateRateLimitConfig,
)

__all__ = [
    # Configuration commands
    "CreateRateLimitConfig",
    "DeleteRateLimitConfig",
    "ToggleRateLimitConfig",
    "UpdateRateLimitConfig",
    # Counter commands
    "BlockRateLimitKey",
    "ResetRateLimitConfig",
    "ResetRateLimitKey",
    "UnblockRateLimitKey",
]

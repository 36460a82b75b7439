"""UpdateRateLimitConfig command handler.

Flow:
1. Resolve the reference to a name and take the per-name lock
2. Load the row with a row lock (FOR UPDATE)
3. Apply the patch (validated as a whole before anything changes), then
   reject a prefix that overlaps another config's namespace
4. Persist + one "updated" change record, even for an empty diff
5. Commit, then publish RateLimitConfigChanged

Concurrent edits of the same name are serialized; the later writer wins
and its record shows the earlier writer's values as ``from``.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from uuid_extensions import uuid7

from src.application.commands.rate_limit_commands import UpdateRateLimitConfig
from src.application.errors import ApplicationError, from_domain_error
from src.application.services import config_not_found, resolve_config_name
from src.core.keyed_lock import KeyedLock
from src.core.result import Failure, Result, Success
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import DEFAULT_MESSAGE, RateLimitConfig
from src.domain.enums import ChangeAction
from src.domain.errors import config_prefix_conflict
from src.domain.events.rate_limit_events import RateLimitConfigChanged
from src.domain.protocols import (
    ConfigChangeRepository,
    EventBusProtocol,
    RateLimitConfigRepository,
)
from src.domain.validators import default_prefix


class UpdateRateLimitConfigHandler:
    """Handler for partial configuration updates."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        change_repo: ConfigChangeRepository,
        event_bus: EventBusProtocol,
        locks: KeyedLock,
    ) -> None:
        self._config_repo = config_repo
        self._change_repo = change_repo
        self._event_bus = event_bus
        self._locks = locks

    async def handle(
        self, cmd: UpdateRateLimitConfig
    ) -> Result[RateLimitConfig, ApplicationError]:
        """Handle update command.

        Returns:
            Success(updated config), or Failure(ApplicationError) with
            NOT_FOUND, COMMAND_VALIDATION_FAILED or CONFLICT.
        """
        match await resolve_config_name(self._config_repo, cmd.config_ref):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=name):
                pass

        now = datetime.now(UTC)
        async with self._locks.hold(name):
            config = await self._config_repo.lock_by_name(name)
            if config is None:
                return Failure(error=from_domain_error(config_not_found(cmd.config_ref)))

            previous_prefix = config.prefix
            changes = self._normalize(config, cmd.changes)
            match config.apply_changes(changes, changed_by=cmd.changed_by, now=now):
                case Failure(error=error):
                    return Failure(error=from_domain_error(error))
                case Success(value=diff):
                    pass

            if config.prefix != previous_prefix:
                owner = await self._config_repo.find_overlapping_prefix(
                    config.prefix, exclude_id=config.id
                )
                if owner is not None:
                    return Failure(
                        error=from_domain_error(
                            config_prefix_conflict(config.prefix, owner.name)
                        )
                    )

            match await self._config_repo.update(config):
                case Failure(error=error):
                    return Failure(error=from_domain_error(error))
            await self._change_repo.append(
                ConfigChangeRecord(
                    id=uuid7(),
                    config_name=config.name,
                    config_display_name=config.display_name,
                    config_type=config.type,
                    action=ChangeAction.UPDATED,
                    changed_by=cmd.changed_by,
                    changes=diff,
                    reason=cmd.reason,
                    changed_at=now,
                )
            )
            await self._config_repo.commit()

        await self._event_bus.publish(
            RateLimitConfigChanged(
                config_name=config.name,
                action=ChangeAction.UPDATED.value,
                changed_by=cmd.changed_by,
                changed_fields=tuple(sorted(diff)),
            )
        )
        return Success(value=config)

    @staticmethod
    def _normalize(
        config: RateLimitConfig, changes: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Drop no-op identity fields and restore defaults for cleared values."""
        patch = dict(changes)
        if patch.get("name") == config.name:
            del patch["name"]
        if "prefix" in patch and not patch["prefix"]:
            patch["prefix"] = default_prefix(config.name)
        if "message" in patch and not patch["message"]:
            patch["message"] = DEFAULT_MESSAGE
        return patch

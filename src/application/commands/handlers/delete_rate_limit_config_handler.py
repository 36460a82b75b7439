"""DeleteRateLimitConfig command handler.

Flow:
1. Under the per-name lock: hard delete + one "deleted" change record
   holding every audited field as ``from``, commit
2. Clear the config's prefix in the counter store so stale counters cannot
   leak into a future config that reuses the prefix
3. Publish RateLimitConfigChanged and RateLimitKeyReset

A counter store outage does not undo the delete: the leftover counters
expire with their windows, and the failure is logged.
"""

from datetime import UTC, datetime

from uuid_extensions import uuid7

from src.application.commands.rate_limit_commands import DeleteRateLimitConfig
from src.application.dtos import KeyResetResult
from src.application.errors import ApplicationError, from_domain_error
from src.application.services import config_not_found, resolve_config_name
from src.core.keyed_lock import KeyedLock
from src.core.result import Failure, Result, Success
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import diff_snapshots
from src.domain.enums import ChangeAction
from src.domain.events.rate_limit_events import (
    RateLimitConfigChanged,
    RateLimitKeyReset,
)
from src.domain.protocols import (
    ConfigChangeRepository,
    CounterStoreProtocol,
    EventBusProtocol,
    LoggerProtocol,
    RateLimitConfigRepository,
)


class DeleteRateLimitConfigHandler:
    """Handler for configuration deletion."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        change_repo: ConfigChangeRepository,
        counter_store: CounterStoreProtocol,
        event_bus: EventBusProtocol,
        locks: KeyedLock,
        logger: LoggerProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._change_repo = change_repo
        self._counter_store = counter_store
        self._event_bus = event_bus
        self._locks = locks
        self._logger = logger

    async def handle(
        self, cmd: DeleteRateLimitConfig
    ) -> Result[KeyResetResult, ApplicationError]:
        """Handle delete command.

        Returns:
            Success(KeyResetResult) with the number of counters cleared, or
            Failure(ApplicationError) with NOT_FOUND.
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

            changes = diff_snapshots(config.audit_snapshot(), {})
            await self._config_repo.delete(config.id)
            await self._change_repo.append(
                ConfigChangeRecord(
                    id=uuid7(),
                    config_name=config.name,
                    config_display_name=config.display_name,
                    config_type=config.type,
                    action=ChangeAction.DELETED,
                    changed_by=cmd.changed_by,
                    changes=changes,
                    reason=cmd.reason,
                    changed_at=now,
                )
            )
            await self._config_repo.commit()

            keys_removed = 0
            match await self._counter_store.clear_prefix(config.prefix):
                case Success(value=removed):
                    keys_removed = removed
                case Failure(error=error):
                    self._logger.warning(
                        "rate_limit_prefix_clear_failed",
                        config=config.name,
                        prefix=config.prefix,
                        error=error.message,
                    )

        await self._event_bus.publish(
            RateLimitConfigChanged(
                config_name=config.name,
                action=ChangeAction.DELETED.value,
                changed_by=cmd.changed_by,
                changed_fields=tuple(sorted(changes)),
            )
        )
        await self._event_bus.publish(
            RateLimitKeyReset(
                config_name=config.name,
                key=None,
                keys_removed=keys_removed,
                reset_by=cmd.changed_by,
            )
        )
        return Success(
            value=KeyResetResult(
                config_name=config.name, key=None, keys_removed=keys_removed
            )
        )

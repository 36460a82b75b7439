"""ToggleRateLimitConfig command handler.

Convenience update restricted to ``enabled``; audited with action
"toggled" even when the flag already had the requested value.
"""

from datetime import UTC, datetime

from uuid_extensions import uuid7

from src.application.commands.rate_limit_commands import ToggleRateLimitConfig
from src.application.errors import ApplicationError, from_domain_error
from src.application.services import config_not_found, resolve_config_name
from src.core.keyed_lock import KeyedLock
from src.core.result import Failure, Result, Success
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.enums import ChangeAction
from src.domain.events.rate_limit_events import RateLimitConfigChanged
from src.domain.protocols import (
    ConfigChangeRepository,
    EventBusProtocol,
    RateLimitConfigRepository,
)


class ToggleRateLimitConfigHandler:
    """Handler for enabling/disabling a configuration."""

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
        self, cmd: ToggleRateLimitConfig
    ) -> Result[RateLimitConfig, ApplicationError]:
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

            diff = config.set_enabled(cmd.enabled, changed_by=cmd.changed_by, now=now)
            match await self._config_repo.update(config):
                case Failure(error=error):
                    return Failure(error=from_domain_error(error))
            await self._change_repo.append(
                ConfigChangeRecord(
                    id=uuid7(),
                    config_name=config.name,
                    config_display_name=config.display_name,
                    config_type=config.type,
                    action=ChangeAction.TOGGLED,
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
                action=ChangeAction.TOGGLED.value,
                changed_by=cmd.changed_by,
                changed_fields=tuple(sorted(diff)),
            )
        )
        return Success(value=config)

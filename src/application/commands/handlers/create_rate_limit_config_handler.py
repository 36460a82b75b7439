"""CreateRateLimitConfig command handler.

Flow:
1. Build the entity and validate every invariant
2. Under the per-name lock: check name uniqueness and that the prefix does
   not overlap another config's namespace
3. Save config + one "created" change record, commit (a unique-constraint
   conflict from a concurrent writer comes back as CONFLICT)
4. Publish RateLimitConfigChanged
5. Return the stored config

Architecture:
- Application layer ONLY imports from domain/core (entities, protocols, events)
- NO infrastructure imports (repositories are injected via protocols)
"""

from datetime import UTC, datetime

from uuid_extensions import uuid7

from src.application.commands.rate_limit_commands import CreateRateLimitConfig
from src.application.errors import ApplicationError, from_domain_error
from src.core.keyed_lock import KeyedLock
from src.core.result import Failure, Result, Success
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import (
    DEFAULT_MESSAGE,
    RateLimitConfig,
    diff_snapshots,
)
from src.domain.enums import ChangeAction
from src.domain.errors import config_name_conflict, config_prefix_conflict
from src.domain.events.rate_limit_events import RateLimitConfigChanged
from src.domain.protocols import (
    ConfigChangeRepository,
    EventBusProtocol,
    RateLimitConfigRepository,
)


class CreateRateLimitConfigHandler:
    """Handler for configuration creation."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        change_repo: ConfigChangeRepository,
        event_bus: EventBusProtocol,
        locks: KeyedLock,
    ) -> None:
        """Initialize handler with dependencies.

        Args:
            config_repo: Configuration persistence.
            change_repo: Audit record persistence (same session).
            event_bus: Event bus for publishing domain events.
            locks: Per-name write locks shared by all config writers.
        """
        self._config_repo = config_repo
        self._change_repo = change_repo
        self._event_bus = event_bus
        self._locks = locks

    async def handle(
        self, cmd: CreateRateLimitConfig
    ) -> Result[RateLimitConfig, ApplicationError]:
        """Handle create command.

        Returns:
            Success(RateLimitConfig), or Failure(ApplicationError) with
            COMMAND_VALIDATION_FAILED or CONFLICT.
        """
        now = datetime.now(UTC)
        config = RateLimitConfig(
            id=uuid7(),
            name=cmd.name,
            display_name=cmd.display_name,
            type=cmd.type,
            window_ms=cmd.window_ms,
            max=cmd.max,
            key_strategy=cmd.key_strategy,
            prefix=cmd.prefix or "",
            description=cmd.description,
            custom_key_generator=cmd.custom_key_generator,
            skip_successful_requests=cmd.skip_successful_requests,
            skip_failed_requests=cmd.skip_failed_requests,
            exec_evenly=cmd.exec_evenly,
            block_duration_ms=cmd.block_duration_ms,
            message=cmd.message or DEFAULT_MESSAGE,
            failure_mode=cmd.failure_mode,
            application_limits=list(cmd.application_limits),
            role_limits=list(cmd.role_limits),
            component_limits=list(cmd.component_limits),
            environment_overrides=dict(cmd.environment_overrides),
            enabled=cmd.enabled,
            created_by=cmd.created_by,
            updated_by=cmd.created_by,
            created_at=now,
            updated_at=now,
        )
        match config.validate():
            case Failure(error=error):
                return Failure(error=from_domain_error(error))

        async with self._locks.hold(config.name):
            if await self._config_repo.find_by_name(config.name) is not None:
                return Failure(
                    error=from_domain_error(config_name_conflict(config.name))
                )
            owner = await self._config_repo.find_overlapping_prefix(config.prefix)
            if owner is not None:
                return Failure(
                    error=from_domain_error(
                        config_prefix_conflict(config.prefix, owner.name)
                    )
                )

            changes = diff_snapshots({}, config.audit_snapshot())
            match await self._config_repo.save(config):
                case Failure(error=error):
                    return Failure(error=from_domain_error(error))
            await self._change_repo.append(
                ConfigChangeRecord(
                    id=uuid7(),
                    config_name=config.name,
                    config_display_name=config.display_name,
                    config_type=config.type,
                    action=ChangeAction.CREATED,
                    changed_by=cmd.created_by,
                    changes=changes,
                    reason=cmd.reason,
                    changed_at=now,
                )
            )
            await self._config_repo.commit()

        await self._event_bus.publish(
            RateLimitConfigChanged(
                config_name=config.name,
                action=ChangeAction.CREATED.value,
                changed_by=cmd.created_by,
                changed_fields=tuple(sorted(changes)),
            )
        )
        return Success(value=config)

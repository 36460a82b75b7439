"""Counter administration command handlers.

Manual reset, namespace reset, block and unblock. Configuration rows are
only read here; counter state is changed exclusively through atomic
counter store operations.
"""

from src.application.commands.rate_limit_commands import (
    BlockRateLimitKey,
    ResetRateLimitConfig,
    ResetRateLimitKey,
    UnblockRateLimitKey,
)
from src.application.dtos import KeyBlockResult, KeyResetResult
from src.application.errors import ApplicationError, from_domain_error
from src.application.services import find_config, store_key_for
from src.core.enums import ErrorCode
from src.core.errors import NotFoundError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.events.rate_limit_events import RateLimitKeyReset
from src.domain.protocols import (
    CounterStoreProtocol,
    EventBusProtocol,
    LoggerProtocol,
    RateLimitConfigRepository,
)


def _key_not_found(config_name: str, key: str) -> ApplicationError:
    return from_domain_error(
        NotFoundError(
            code=ErrorCode.RATE_LIMIT_KEY_NOT_FOUND,
            message=f"No rate limit state for key '{key}' in config '{config_name}'",
            resource_type="RateLimitKey",
            resource_id=key,
        )
    )


class ResetRateLimitKeyHandler:
    """Clears one key's counter, block and spacing markers."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
        event_bus: EventBusProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store
        self._event_bus = event_bus

    async def handle(
        self, cmd: ResetRateLimitKey
    ) -> Result[KeyResetResult, ApplicationError]:
        """Handle reset command.

        Returns:
            Success(KeyResetResult), or Failure with NOT_FOUND (unknown
            config or nothing stored for the key) or STORE_UNAVAILABLE.
        """
        match await find_config(self._config_repo, cmd.config_name):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=config):
                pass

        match await self._counter_store.reset(store_key_for(config, cmd.key)):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=deleted):
                pass
        if not deleted:
            return Failure(error=_key_not_found(config.name, cmd.key))

        await self._event_bus.publish(
            RateLimitKeyReset(
                config_name=config.name,
                key=cmd.key,
                keys_removed=1,
                reset_by=cmd.reset_by,
            )
        )
        return Success(
            value=KeyResetResult(config_name=config.name, key=cmd.key, keys_removed=1)
        )


class ResetRateLimitConfigHandler:
    """Clears every key in one configuration's namespace.

    Deletion runs batch by batch; each batch is atomic, so a cancelled or
    failed reset can simply be repeated.
    """

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
        event_bus: EventBusProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store
        self._event_bus = event_bus

    async def handle(
        self, cmd: ResetRateLimitConfig
    ) -> Result[KeyResetResult, ApplicationError]:
        match await find_config(self._config_repo, cmd.config_ref):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=config):
                pass

        match await self._counter_store.clear_prefix(config.prefix):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=removed):
                pass

        await self._event_bus.publish(
            RateLimitKeyReset(
                config_name=config.name,
                key=None,
                keys_removed=removed,
                reset_by=cmd.reset_by,
            )
        )
        return Success(
            value=KeyResetResult(config_name=config.name, key=None, keys_removed=removed)
        )


class BlockRateLimitKeyHandler:
    """Places a manual block marker on one key."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store
        self._logger = logger

    async def handle(
        self, cmd: BlockRateLimitKey
    ) -> Result[KeyBlockResult, ApplicationError]:
        if cmd.duration_seconds <= 0:
            return Failure(
                error=from_domain_error(
                    ValidationError(
                        code=ErrorCode.VALIDATION_FAILED,
                        message="duration must be a positive number of seconds",
                        field="duration",
                    )
                )
            )
        match await find_config(self._config_repo, cmd.config_name):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=config):
                pass

        store_key = store_key_for(config, cmd.key)
        match await self._counter_store.block(store_key, cmd.duration_seconds * 1000):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=until):
                pass

        self._logger.info(
            "rate_limit_key_blocked",
            config=config.name,
            key=cmd.key,
            blocked_until=until,
            blocked_by=cmd.blocked_by,
            reason=cmd.reason,
        )
        return Success(
            value=KeyBlockResult(
                config_name=config.name, key=cmd.key, blocked=True, blocked_until=until
            )
        )


class UnblockRateLimitKeyHandler:
    """Removes a block marker from one key."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store
        self._logger = logger

    async def handle(
        self, cmd: UnblockRateLimitKey
    ) -> Result[KeyBlockResult, ApplicationError]:
        match await find_config(self._config_repo, cmd.config_name):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=config):
                pass

        match await self._counter_store.unblock(store_key_for(config, cmd.key)):
            case Failure(error=error):
                return Failure(error=from_domain_error(error))
            case Success(value=removed):
                pass
        if not removed:
            return Failure(error=_key_not_found(config.name, cmd.key))

        self._logger.info(
            "rate_limit_key_unblocked",
            config=config.name,
            key=cmd.key,
            unblocked_by=cmd.unblocked_by,
        )
        return Success(
            value=KeyBlockResult(config_name=config.name, key=cmd.key, blocked=False)
        )

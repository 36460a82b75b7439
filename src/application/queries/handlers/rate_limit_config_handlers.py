"""Configuration query handlers.

Reads go straight to the repository; the effective-config cache used by
enforcement is not involved, so admins always see committed state.
"""

from src.application.errors import ApplicationError, from_domain_error
from src.application.queries.rate_limit_queries import (
    GetRateLimitConfig,
    GetRateLimitConfigHistory,
    ListRateLimitConfigs,
)
from src.application.services import config_not_found, find_config, parse_config_id
from src.core.result import Failure, Result, Success
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.protocols import ConfigChangeRepository, RateLimitConfigRepository


class GetRateLimitConfigHandler:
    """Handler for fetching one configuration."""

    def __init__(self, config_repo: RateLimitConfigRepository) -> None:
        self._config_repo = config_repo

    async def handle(
        self, query: GetRateLimitConfig
    ) -> Result[RateLimitConfig, ApplicationError]:
        match await find_config(self._config_repo, query.config_ref):
            case Success(value=config):
                return Success(value=config)
            case Failure(error=error):
                return Failure(error=from_domain_error(error))


class ListRateLimitConfigsHandler:
    """Handler for listing configurations with optional filters."""

    def __init__(self, config_repo: RateLimitConfigRepository) -> None:
        self._config_repo = config_repo

    async def handle(
        self, query: ListRateLimitConfigs
    ) -> Result[list[RateLimitConfig], ApplicationError]:
        search = query.search.strip() if query.search else None
        configs = await self._config_repo.list(
            type=query.type, enabled=query.enabled, search=search or None
        )
        return Success(value=configs)


class GetRateLimitConfigHistoryHandler:
    """Handler for one configuration's change records.

    A name reference also finds the history of a deleted configuration.
    """

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        change_repo: ConfigChangeRepository,
    ) -> None:
        self._config_repo = config_repo
        self._change_repo = change_repo

    async def handle(
        self, query: GetRateLimitConfigHistory
    ) -> Result[list[ConfigChangeRecord], ApplicationError]:
        name = query.config_ref
        if parse_config_id(query.config_ref) is not None:
            match await find_config(self._config_repo, query.config_ref):
                case Failure(error=error):
                    return Failure(error=from_domain_error(error))
                case Success(value=config):
                    name = config.name

        records = await self._change_repo.list_for_config(name, limit=query.limit)
        if not records and await self._config_repo.find_by_name(name) is None:
            return Failure(error=from_domain_error(config_not_found(query.config_ref)))
        return Success(value=records)

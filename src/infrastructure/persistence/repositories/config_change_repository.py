"""ConfigChangeRepository - SQLAlchemy implementation (append-only)."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.enums import ChangeAction, RateLimitType
from src.infrastructure.persistence.base import as_utc
from src.infrastructure.persistence.models.rate_limit_config import (
    RateLimitConfigChangeModel,
)


class ConfigChangeRepository:
    """SQLAlchemy implementation of ConfigChangeRepository protocol.

    There is deliberately no update or delete method.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(self, record: ConfigChangeRecord) -> None:
        self.session.add(
            RateLimitConfigChangeModel(
                id=record.id,
                config_name=record.config_name,
                config_display_name=record.config_display_name,
                config_type=record.config_type.value,
                action=record.action.value,
                changed_by=record.changed_by,
                changed_at=record.changed_at,
                created_at=record.changed_at,
                reason=record.reason,
                changes=record.changes,
            )
        )
        await self.session.flush()

    async def list_for_config(
        self, config_name: str, *, limit: int = 100
    ) -> list[ConfigChangeRecord]:
        stmt = (
            select(RateLimitConfigChangeModel)
            .where(RateLimitConfigChangeModel.config_name == config_name)
            .order_by(
                RateLimitConfigChangeModel.changed_at.desc(),
                RateLimitConfigChangeModel.id.desc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(m) for m in result.scalars().all()]

    async def list_between(
        self,
        start: datetime,
        end: datetime,
        *,
        config_name: str | None = None,
        limit: int | None = None,
    ) -> list[ConfigChangeRecord]:
        stmt = (
            select(RateLimitConfigChangeModel)
            .where(RateLimitConfigChangeModel.changed_at >= start)
            .where(RateLimitConfigChangeModel.changed_at <= end)
            .order_by(
                RateLimitConfigChangeModel.changed_at.desc(),
                RateLimitConfigChangeModel.id.desc(),
            )
        )
        if config_name is not None:
            stmt = stmt.where(RateLimitConfigChangeModel.config_name == config_name)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [self._to_domain(m) for m in result.scalars().all()]

    @staticmethod
    def _to_domain(model: RateLimitConfigChangeModel) -> ConfigChangeRecord:
        return ConfigChangeRecord(
            id=model.id,
            config_name=model.config_name,
            config_display_name=model.config_display_name,
            config_type=RateLimitType(model.config_type),
            action=ChangeAction(model.action),
            changed_by=model.changed_by,
            changed_at=as_utc(model.changed_at),
            reason=model.reason,
            changes=dict(model.changes or {}),
        )

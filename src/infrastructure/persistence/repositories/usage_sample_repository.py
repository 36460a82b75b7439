"""UsageSampleRepository - SQLAlchemy implementation."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities.usage_sample import UsageSample
from src.infrastructure.persistence.base import as_utc
from src.infrastructure.persistence.models.rate_limit_config import (
    RateLimitUsageSampleModel,
)


class UsageSampleRepository:
    """SQLAlchemy implementation of UsageSampleRepository protocol.

    Note:
        ``add_counts`` reads then writes each (config, hour) row. Two
        processes inserting the same new hour concurrently trip the unique
        constraint; the flush fails and the caller keeps its buffer for the
        next attempt, which then finds the row.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add_counts(self, samples: list[UsageSample]) -> None:
        for sample in samples:
            stmt = select(RateLimitUsageSampleModel).where(
                RateLimitUsageSampleModel.config_name == sample.config_name,
                RateLimitUsageSampleModel.bucket_start == sample.bucket_start,
            )
            model = (await self.session.execute(stmt)).scalar_one_or_none()
            if model is None:
                self.session.add(
                    RateLimitUsageSampleModel(
                        config_name=sample.config_name,
                        bucket_start=sample.bucket_start,
                        created_at=sample.bucket_start,
                        request_count=sample.request_count,
                        blocked_count=sample.blocked_count,
                        error_count=sample.error_count,
                    )
                )
            else:
                model.request_count += sample.request_count
                model.blocked_count += sample.blocked_count
                model.error_count += sample.error_count
        await self.session.flush()

    async def list_between(
        self,
        start: datetime,
        end: datetime,
        *,
        config_name: str | None = None,
    ) -> list[UsageSample]:
        stmt = (
            select(RateLimitUsageSampleModel)
            .where(RateLimitUsageSampleModel.bucket_start >= start)
            .where(RateLimitUsageSampleModel.bucket_start <= end)
            .order_by(RateLimitUsageSampleModel.bucket_start)
        )
        if config_name is not None:
            stmt = stmt.where(RateLimitUsageSampleModel.config_name == config_name)
        result = await self.session.execute(stmt)
        return [
            UsageSample(
                config_name=m.config_name,
                bucket_start=as_utc(m.bucket_start),
                request_count=m.request_count,
                blocked_count=m.blocked_count,
                error_count=m.error_count,
            )
            for m in result.scalars().all()
        ]

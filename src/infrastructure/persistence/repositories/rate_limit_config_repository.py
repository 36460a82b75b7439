"""RateLimitConfigRepository - SQLAlchemy implementation.

Adapter for hexagonal architecture. Maps between the domain
RateLimitConfig entity and RateLimitConfigModel; override lists are stored
as JSON documents with wire (camelCase) keys.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import String, delete, func, literal, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.enums import FailureMode, KeyStrategy, RateLimitType
from src.domain.errors import config_name_conflict, config_prefix_conflict
from src.domain.value_objects.limit_override import (
    ApplicationLimit,
    ComponentLimit,
    EnvironmentOverride,
    RoleLimit,
)
from src.infrastructure.persistence.base import as_utc
from src.infrastructure.persistence.models.rate_limit_config import (
    RateLimitConfigModel,
)


class RateLimitConfigRepository:
    """SQLAlchemy implementation of RateLimitConfigRepository protocol.

    Attributes:
        session: SQLAlchemy async session for database operations.

    Note:
        Writes only flush. Command handlers call ``commit()`` once the config
        write and its change record are both staged, so they share one
        transaction.

    Example:
        >>> async with database.get_session() as session:
        ...     repo = RateLimitConfigRepository(session)
        ...     config = await repo.find_by_name("api")
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_name(self, name: str) -> RateLimitConfig | None:
        return await self._one(
            select(RateLimitConfigModel).where(RateLimitConfigModel.name == name)
        )

    async def find_by_id(self, config_id: UUID) -> RateLimitConfig | None:
        return await self._one(
            select(RateLimitConfigModel).where(RateLimitConfigModel.id == config_id)
        )

    async def find_overlapping_prefix(
        self, prefix: str, *, exclude_id: UUID | None = None
    ) -> RateLimitConfig | None:
        """First config whose prefix equals, contains or is nested in ``prefix``.

        Counter namespaces are matched by string prefix, so any overlap would
        let one configuration's reset clear another's counters.
        """
        column = RateLimitConfigModel.prefix
        candidate = literal(prefix, String)
        stmt = (
            select(RateLimitConfigModel)
            .where(
                or_(
                    column.startswith(prefix, autoescape=True),
                    func.substr(candidate, 1, func.length(column)) == column,
                )
            )
            .order_by(RateLimitConfigModel.name)
            .limit(1)
        )
        if exclude_id is not None:
            stmt = stmt.where(RateLimitConfigModel.id != exclude_id)
        return await self._one(stmt)

    async def lock_by_name(self, name: str) -> RateLimitConfig | None:
        """Load by name with SELECT ... FOR UPDATE (a no-op on SQLite)."""
        return await self._one(
            select(RateLimitConfigModel)
            .where(RateLimitConfigModel.name == name)
            .with_for_update()
        )

    async def list(
        self,
        *,
        type: RateLimitType | None = None,
        enabled: bool | None = None,
        search: str | None = None,
    ) -> list[RateLimitConfig]:
        stmt = select(RateLimitConfigModel).order_by(RateLimitConfigModel.name)
        if type is not None:
            stmt = stmt.where(RateLimitConfigModel.type == type.value)
        if enabled is not None:
            stmt = stmt.where(RateLimitConfigModel.enabled.is_(enabled))
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    RateLimitConfigModel.name.ilike(pattern),
                    RateLimitConfigModel.display_name.ilike(pattern),
                    RateLimitConfigModel.description.ilike(pattern),
                )
            )
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def save(self, config: RateLimitConfig) -> Result[None, ConflictError]:
        model = RateLimitConfigModel(id=config.id, created_at=config.created_at)
        self._apply(model, config)
        self.session.add(model)
        return await self._flush_unique(config)

    async def update(self, config: RateLimitConfig) -> Result[None, ConflictError]:
        model = await self.session.get(RateLimitConfigModel, config.id)
        if model is None:
            raise LookupError(f"Rate limit config {config.id} does not exist")
        self._apply(model, config)
        return await self._flush_unique(config)

    async def delete(self, config_id: UUID) -> None:
        await self.session.execute(
            delete(RateLimitConfigModel).where(RateLimitConfigModel.id == config_id)
        )
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def _flush_unique(
        self, config: RateLimitConfig
    ) -> Result[None, ConflictError]:
        """Flush, mapping unique-constraint violations to a ConflictError.

        Another writer (a second process, or a create under a different name
        lock) can insert the same name or prefix between the pre-checks and
        this flush. The session is rolled back so nothing half-written stays
        staged.
        """
        try:
            await self.session.flush()
        except IntegrityError as error:
            await self.session.rollback()
            if "prefix" in str(error.orig).lower():
                return Failure(error=config_prefix_conflict(config.prefix))
            return Failure(error=config_name_conflict(config.name))
        return Success(value=None)

    # ---------------------------------------------------------------------
    # Mapping
    # ---------------------------------------------------------------------
    async def _one(self, stmt: Any) -> RateLimitConfig | None:
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model is not None else None

    @staticmethod
    def _apply(model: RateLimitConfigModel, config: RateLimitConfig) -> None:
        model.name = config.name
        model.display_name = config.display_name
        model.description = config.description
        model.type = config.type.value
        model.window_ms = config.window_ms
        model.max_requests = config.max
        model.key_strategy = config.key_strategy.value
        model.custom_key_generator = config.custom_key_generator
        model.skip_successful_requests = config.skip_successful_requests
        model.skip_failed_requests = config.skip_failed_requests
        model.exec_evenly = config.exec_evenly
        model.block_duration_ms = config.block_duration_ms
        model.prefix = config.prefix
        model.message = config.message
        model.failure_mode = config.failure_mode.value if config.failure_mode else None
        model.application_limits = [
            {"applicationId": a.application_id, "max": a.max}
            for a in config.application_limits
        ]
        model.role_limits = [
            {"roleId": r.role_id, "max": r.max} for r in config.role_limits
        ]
        model.component_limits = [
            {"serviceId": c.service_id, "procedureName": c.procedure_name, "max": c.max}
            for c in config.component_limits
        ]
        model.environment_overrides = {
            env: {"enabled": o.enabled, "max": o.max, "windowMs": o.window_ms}
            for env, o in config.environment_overrides.items()
        }
        model.enabled = config.enabled
        model.version = config.version
        model.created_by = config.created_by
        model.updated_by = config.updated_by
        model.updated_at = config.updated_at

    @staticmethod
    def _to_domain(model: RateLimitConfigModel) -> RateLimitConfig:
        return RateLimitConfig(
            id=model.id,
            name=model.name,
            display_name=model.display_name,
            description=model.description,
            type=RateLimitType(model.type),
            window_ms=model.window_ms,
            max=model.max_requests,
            key_strategy=KeyStrategy(model.key_strategy),
            custom_key_generator=model.custom_key_generator,
            skip_successful_requests=model.skip_successful_requests,
            skip_failed_requests=model.skip_failed_requests,
            exec_evenly=model.exec_evenly,
            block_duration_ms=model.block_duration_ms,
            prefix=model.prefix,
            message=model.message,
            failure_mode=FailureMode(model.failure_mode) if model.failure_mode else None,
            application_limits=[
                ApplicationLimit(application_id=a["applicationId"], max=a["max"])
                for a in model.application_limits or []
            ],
            role_limits=[
                RoleLimit(role_id=r["roleId"], max=r["max"])
                for r in model.role_limits or []
            ],
            component_limits=[
                ComponentLimit(
                    service_id=c["serviceId"],
                    procedure_name=c.get("procedureName"),
                    max=c["max"],
                )
                for c in model.component_limits or []
            ],
            environment_overrides={
                env: EnvironmentOverride(
                    enabled=o.get("enabled", True),
                    max=o.get("max"),
                    window_ms=o.get("windowMs"),
                )
                for env, o in (model.environment_overrides or {}).items()
            },
            enabled=model.enabled,
            version=model.version,
            created_by=model.created_by,
            updated_by=model.updated_by,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

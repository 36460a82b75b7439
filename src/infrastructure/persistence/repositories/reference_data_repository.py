"""ReferenceDataRepository - SQLAlchemy implementation (read-only)."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities.reference_data import Application, Role, Service
from src.infrastructure.persistence.models.reference_data import (
    ApplicationModel,
    RoleModel,
    ServiceModel,
)


class ReferenceDataRepository:
    """Lists applications, roles and services by slug, ordered by name."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_applications(self) -> list[Application]:
        result = await self.session.execute(
            select(ApplicationModel).order_by(ApplicationModel.name)
        )
        return [
            Application(id=m.slug, name=m.name, description=m.description)
            for m in result.scalars().all()
        ]

    async def list_roles(self) -> list[Role]:
        result = await self.session.execute(select(RoleModel).order_by(RoleModel.name))
        return [
            Role(id=m.slug, name=m.name, application_id=m.application_slug)
            for m in result.scalars().all()
        ]

    async def list_services(self) -> list[Service]:
        result = await self.session.execute(
            select(ServiceModel).order_by(ServiceModel.name)
        )
        return [
            Service(id=m.slug, name=m.name, procedures=list(m.procedures or []))
            for m in result.scalars().all()
        ]

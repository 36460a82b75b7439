"""Reference data query handlers (applications, roles, services)."""

from src.application.errors import ApplicationError
from src.application.queries.rate_limit_queries import (
    ListApplications,
    ListRoles,
    ListServices,
)
from src.core.result import Result, Success
from src.domain.entities.reference_data import Application, Role, Service
from src.domain.protocols import ReferenceDataRepository


class ListApplicationsHandler:
    def __init__(self, reference_repo: ReferenceDataRepository) -> None:
        self._reference_repo = reference_repo

    async def handle(
        self, query: ListApplications
    ) -> Result[list[Application], ApplicationError]:
        return Success(value=await self._reference_repo.list_applications())


class ListRolesHandler:
    def __init__(self, reference_repo: ReferenceDataRepository) -> None:
        self._reference_repo = reference_repo

    async def handle(self, query: ListRoles) -> Result[list[Role], ApplicationError]:
        roles = await self._reference_repo.list_roles()
        if query.application_id is not None:
            roles = [r for r in roles if r.application_id == query.application_id]
        return Success(value=roles)


class ListServicesHandler:
    def __init__(self, reference_repo: ReferenceDataRepository) -> None:
        self._reference_repo = reference_repo

    async def handle(
        self, query: ListServices
    ) -> Result[list[Service], ApplicationError]:
        return Success(value=await self._reference_repo.list_services())

"""ReferenceDataRepository protocol (port).

Read-only access to applications, roles and services owned by the wider
platform, used to build override forms.
"""

from typing import Protocol

from src.domain.entities.reference_data import Application, Role, Service


class ReferenceDataRepository(Protocol):
    async def list_applications(self) -> list[Application]: ...

    async def list_roles(self) -> list[Role]: ...

    async def list_services(self) -> list[Service]: ...

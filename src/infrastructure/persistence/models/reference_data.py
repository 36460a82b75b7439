"""Reference tables owned by the wider platform.

The rate limit service only reads them. They are mapped here so a
standalone deployment (and the test suite) can create and seed them.
"""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel, JSONType


class ApplicationModel(BaseMutableModel):
    __tablename__ = "applications"

    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class RoleModel(BaseMutableModel):
    __tablename__ = "roles"

    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    application_slug: Mapped[str | None] = mapped_column(
        String(100), ForeignKey("applications.slug", ondelete="SET NULL"), nullable=True
    )


class ServiceModel(BaseMutableModel):
    __tablename__ = "services"

    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    procedures: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

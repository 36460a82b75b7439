"""Rate limit configuration database models.

Tables:
    rate_limit_configs          current configurations (mutable)
    rate_limit_config_changes   append-only audit records
    rate_limit_usage_samples    hourly usage rollups

Override lists and environment overrides are stored as JSON documents
using the wire (camelCase) field names, so the stored document matches
the admin API contract.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel, BaseMutableModel, JSONType


class RateLimitConfigModel(BaseMutableModel):
    """One rate limit configuration.

    Constraints:
        - name unique (one configuration per name)
        - prefix unique (no counter namespace collisions)
    """

    __tablename__ = "rate_limit_configs"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    window_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    max_requests: Mapped[int] = mapped_column("max", Integer, nullable=False)

    key_strategy: Mapped[str] = mapped_column(String(20), nullable=False)
    custom_key_generator: Mapped[str | None] = mapped_column(Text, nullable=True)

    skip_successful_requests: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    skip_failed_requests: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    exec_evenly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    block_duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    prefix: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    failure_mode: Mapped[str | None] = mapped_column(String(10), nullable=True)

    application_limits: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    role_limits: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    component_limits: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    environment_overrides: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<RateLimitConfigModel(name={self.name!r}, max={self.max_requests}, "
            f"window_ms={self.window_ms}, enabled={self.enabled})>"
        )


class RateLimitConfigChangeModel(BaseModel):
    """Immutable audit record (no updated_at).

    ``config_name`` is not a foreign key: records outlive deleted configs.
    """

    __tablename__ = "rate_limit_config_changes"

    config_name: Mapped[str] = mapped_column(String(100), nullable=False)
    config_display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    config_type: Mapped[str] = mapped_column(String(20), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    changes: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    __table_args__ = (
        Index("ix_rate_limit_config_changes_changed_at", "changed_at"),
        Index("ix_rate_limit_config_changes_config_name", "config_name", "changed_at"),
    )


class RateLimitUsageSampleModel(BaseModel):
    """Hourly usage counters per configuration."""

    __tablename__ = "rate_limit_usage_samples"

    config_name: Mapped[str] = mapped_column(String(100), nullable=False)
    bucket_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    blocked_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "config_name", "bucket_start", name="uq_rate_limit_usage_sample_bucket"
        ),
        Index("ix_rate_limit_usage_samples_bucket_start", "bucket_start"),
    )

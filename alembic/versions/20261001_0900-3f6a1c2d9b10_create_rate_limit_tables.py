"""create_rate_limit_tables

Revision ID: 3f6a1c2d9b10
Revises:
Create Date: 2026-10-01 09:00:00.000000+00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f6a1c2d9b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps(mutable: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]
    if mutable:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    """Create configuration, audit, usage and reference tables."""
    op.create_table(
        "rate_limit_configs",
        *_timestamps(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("window_ms", sa.Integer(), nullable=False),
        sa.Column("max", sa.Integer(), nullable=False),
        sa.Column("key_strategy", sa.String(length=20), nullable=False),
        sa.Column("custom_key_generator", sa.Text(), nullable=True),
        sa.Column("skip_successful_requests", sa.Boolean(), nullable=False),
        sa.Column("skip_failed_requests", sa.Boolean(), nullable=False),
        sa.Column("exec_evenly", sa.Boolean(), nullable=False),
        sa.Column("block_duration_ms", sa.Integer(), nullable=False),
        sa.Column("prefix", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("failure_mode", sa.String(length=10), nullable=True),
        sa.Column("application_limits", JSON_TYPE, nullable=False),
        sa.Column("role_limits", JSON_TYPE, nullable=False),
        sa.Column("component_limits", JSON_TYPE, nullable=False),
        sa.Column("environment_overrides", JSON_TYPE, nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("prefix"),
    )
    op.create_index(
        "ix_rate_limit_configs_type", "rate_limit_configs", ["type"], unique=False
    )

    op.create_table(
        "rate_limit_config_changes",
        *_timestamps(mutable=False),
        sa.Column("config_name", sa.String(length=100), nullable=False),
        sa.Column("config_display_name", sa.String(length=200), nullable=False),
        sa.Column("config_type", sa.String(length=20), nullable=False),
        sa.Column("action", sa.String(length=20), nullable=False),
        sa.Column("changed_by", sa.String(length=255), nullable=False),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("changes", JSON_TYPE, nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_rate_limit_config_changes_changed_at",
        "rate_limit_config_changes",
        ["changed_at"],
    )
    op.create_index(
        "ix_rate_limit_config_changes_config_name",
        "rate_limit_config_changes",
        ["config_name", "changed_at"],
    )

    op.create_table(
        "rate_limit_usage_samples",
        *_timestamps(mutable=False),
        sa.Column("config_name", sa.String(length=100), nullable=False),
        sa.Column("bucket_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("request_count", sa.Integer(), nullable=False),
        sa.Column("blocked_count", sa.Integer(), nullable=False),
        sa.Column("error_count", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "config_name", "bucket_start", name="uq_rate_limit_usage_sample_bucket"
        ),
    )
    op.create_index(
        "ix_rate_limit_usage_samples_bucket_start",
        "rate_limit_usage_samples",
        ["bucket_start"],
    )

    # Reference tables (owned by the platform; created here for standalone runs)
    op.create_table(
        "applications",
        *_timestamps(),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "roles",
        *_timestamps(),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("application_slug", sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(
            ["application_slug"], ["applications.slug"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "services",
        *_timestamps(),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("procedures", JSON_TYPE, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )


def downgrade() -> None:
    """Drop all rate limit tables."""
    op.drop_table("services")
    op.drop_table("roles")
    op.drop_table("applications")
    op.drop_index(
        "ix_rate_limit_usage_samples_bucket_start",
        table_name="rate_limit_usage_samples",
    )
    op.drop_table("rate_limit_usage_samples")
    op.drop_index(
        "ix_rate_limit_config_changes_config_name",
        table_name="rate_limit_config_changes",
    )
    op.drop_index(
        "ix_rate_limit_config_changes_changed_at",
        table_name="rate_limit_config_changes",
    )
    op.drop_table("rate_limit_config_changes")
    op.drop_index("ix_rate_limit_configs_type", table_name="rate_limit_configs")
    op.drop_table("rate_limit_configs")

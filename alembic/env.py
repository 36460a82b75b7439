"""Alembic environment for the async engine.

The database URL comes from Settings, not alembic.ini. After an online
upgrade the default rate limit configurations are seeded (idempotent);
pass ``-x seed=false`` to skip that.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, async_engine_from_config, async_sessionmaker

from alembic import context
from src.core.config import settings
from src.infrastructure.persistence import BaseModel

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

config.set_main_option("sqlalchemy.url", settings.database_url)

# Registers every table on BaseModel.metadata for autogenerate
import src.infrastructure.persistence.models  # noqa: E402, F401

target_metadata = BaseModel.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


def _should_seed() -> bool:
    # revision --autogenerate also runs online; never write data then
    if getattr(config.cmd_opts, "autogenerate", False):
        return False
    flag = context.get_x_argument(as_dictionary=True).get("seed", "true")
    return flag.strip().lower() not in {"0", "false", "no", "n"}


async def _seed_defaults(engine: AsyncEngine) -> None:
    from src.infrastructure.rate_limit.default_configs import seed_default_configs

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        await seed_default_configs(session)


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    if _should_seed():
        await _seed_defaults(connectable)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

"""Alembic environment — async migration runner for Drawboard.

Design Decisions:
    - Database URL taken from drawboard.config.Settings: the same env var, .env file
      and postgresql:// -> postgresql+asyncpg:// rewrite the server uses
    - drawboard.models imported so Base.metadata is complete for autogenerate
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from drawboard.config import Settings
from drawboard.db.base import Base
import drawboard.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
database_url = Settings().database_url


def _configure_and_run(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


async def _run_online() -> None:
    engine = create_async_engine(database_url, poolclass=pool.NullPool)

    def _migrate(connection: Connection) -> None:
        _configure_and_run(connection=connection)

    async with engine.connect() as connection:
        await connection.run_sync(_migrate)
    await engine.dispose()


if context.is_offline_mode():
    _configure_and_run(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_run_online())

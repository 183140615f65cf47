"""
Alembic environment configuration for async migrations.

Runs migrations through the async engine for either supported driver
(aiosqlite or asyncpg). The target URL comes from ``-x database_url=...``
on the alembic command line, falling back to the DATABASE_URL environment
variable the API settings read. SQLite connections use batch mode so that
later ALTER-style revisions work on it.

CHANGELOG:
- 2026-10-19: Accept -x database_url, enable batch mode on SQLite
- 2026-10-19: Initial creation
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from dayapi.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """Resolve the database URL for this migration run.

    Raises:
        RuntimeError: If neither ``-x database_url`` nor DATABASE_URL is set.
    """
    url = context.get_x_argument(as_dictionary=True).get("database_url")
    url = url or os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "Pass -x database_url=... or set the DATABASE_URL environment variable"
        )
    return url


def run_migrations_offline() -> None:
    """Emit migration SQL to stdout without connecting."""
    url = get_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())

"""
Alembic Migration Environment
===============================

What:  Runs StackIt schema migrations, offline (SQL script) or online.
How:   The URL is read from DATABASE_URL through `stackit.config.settings`;
       alembic.ini deliberately leaves `sqlalchemy.url` empty. Online runs
       open a short-lived async engine with NullPool and hand the sync
       connection to Alembic.

    alembic upgrade head          # apply
    alembic upgrade head --sql    # print SQL instead
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import stackit.models  # noqa: F401  (fills Base.metadata)
from stackit.config import settings
from stackit.database import Base

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

DATABASE_URL = settings.database_url


def _migration_options(dialect_name: str) -> dict:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        # SQLite cannot ALTER most constraints in place
        "render_as_batch": dialect_name == "sqlite",
    }


def migrate_offline() -> None:
    dialect_name = DATABASE_URL.split(":", 1)[0].split("+", 1)[0]
    context.configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_migration_options(dialect_name),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate_with(connection: Connection) -> None:
    context.configure(connection=connection, **_migration_options(connection.dialect.name))
    with context.begin_transaction():
        context.run_migrations()


async def migrate_online() -> None:
    engine = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate_with)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    asyncio.run(migrate_online())

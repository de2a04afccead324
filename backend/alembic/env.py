"""
Alembic Migration Environment
===============================

What:  Runs GAD schema migrations.
How:   The URL is always DATABASE_URL as loaded by gad.config (alembic.ini
       carries none). Online runs open an async engine and hand Alembic a
       sync connection through run_sync().
Who:   `alembic upgrade head` from the backend/ directory.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import gad.models  # noqa: F401
from gad.config import settings
from gad.database import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# students, role_tags, users, user_role_tags
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Print the migration SQL instead of executing it (alembic upgrade --sql)."""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def apply_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def migrate() -> None:
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(apply_migrations)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(migrate())

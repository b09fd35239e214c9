"""Alembic environment for the users schema.

At service startup the migration runner hands over an open connection through
``config.attributes["connection"]``. From the ``alembic`` command line the URL is
taken from the rendered application configuration instead.
"""

import asyncio

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

from ewallet_ums.entities.core.user import UserTable  # noqa: F401
from ewallet_ums.runtime.context import get_config
from ewallet_ums.runtime.environment import setup_environment

config = context.config
target_metadata = SQLModel.metadata


def _database_url() -> str:
    setup_environment()
    return get_config().database.connection_string


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
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


async def run_async_migrations() -> None:
    engine = create_async_engine(_database_url())
    try:
        async with engine.begin() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await engine.dispose()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        do_run_migrations(connection)
        return
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

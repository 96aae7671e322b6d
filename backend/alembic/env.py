"""Alembic environment — migrations for rankline's ordered tables.

Invariants:
    - The database URL comes from rankline Settings, so migrations and the API
      always agree on the target (DATABASE_URL, .env, then the built-in default)
    - `alembic -x database_url=...` overrides Settings for one run
    - SQLite runs in batch mode: ALTER on an ordered table becomes copy-and-move

Design Decisions:
    - Fresh Settings() instead of get_settings(): the cached instance may predate
      an environment change made by the caller (tests, one-off scripts)
    - compare_type=True: a rank column widened from INTEGER to BIGINT shows up in
      autogenerate, since rank bounds follow the column type
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import make_url, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from rankline.config import Settings
from rankline.db.base import Base
from rankline.models.list_item import ListItem  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("database_url")
    return override or Settings().database_url


def _configure(dialect: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=dialect == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    url = make_url(_database_url())
    _configure(
        url.get_backend_name(), url=url,
        literal_binds=True, dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection.dialect.name, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())

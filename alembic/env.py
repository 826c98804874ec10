import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from calendar_booking.config import settings  # noqa: E402
from calendar_booking.db.base import Base  # noqa: E402

# tables register on Base.metadata when their models are imported
import calendar_booking.core.users.models  # noqa: E402,F401
import calendar_booking.core.bookings.models  # noqa: E402,F401

target_metadata = Base.metadata

_ASYNC_SCHEMES = {
    "postgresql://": "postgresql+asyncpg://",
    "postgresql+psycopg2://": "postgresql+asyncpg://",
    "postgresql+asyncpg://": "postgresql+asyncpg://",
}


def _database_url() -> str:
    # an empty sqlalchemy.url in alembic.ini means "use DATABASE_URL"
    return config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL


def _async_url(url: str) -> str:
    for prefix, replacement in _ASYNC_SCHEMES.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    raise ValueError(f"Migrations need a PostgreSQL URL, got: {url[:25]}...")


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = create_async_engine(_async_url(_database_url()), poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(_migrate)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())

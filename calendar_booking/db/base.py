# calendar_booking/db/base.py

from __future__ import annotations

import contextlib
import logging
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from calendar_booking.config import settings

log = logging.getLogger(__name__)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class Base(DeclarativeBase):
    """Declarative base for users and bookings."""


def _build_engine() -> AsyncEngine:
    if settings.ENVIRONMENT == "test":
        log.info("ENVIRONMENT=test: bookings go to an in-memory aiosqlite database")
        # one shared connection, otherwise every session would get its own empty database
        return create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if not settings.DATABASE_URL.startswith("postgresql+asyncpg://"):
        log.error("Refusing DATABASE_URL without the asyncpg driver: %s", settings.DATABASE_URL[:25])
        raise ValueError("DATABASE_URL must start with 'postgresql+asyncpg://'")
    log.info("Bookings database: %s...", settings.DATABASE_URL[:25])
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.ENVIRONMENT == "dev",
        pool_pre_ping=True,
    )


engine: AsyncEngine = _build_engine()

async_session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request.

    Committed when the endpoint returns, rolled back when it raises.
    """
    session = async_session_factory()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError:
        log.exception("Database error in request session %s, rolling back", id(session))
        await session.rollback()
        raise
    except Exception:
        # HTTPException from the endpoint lands here too
        log.debug("Request session %s rolled back", id(session))
        await session.rollback()
        raise
    finally:
        await session.close()


@contextlib.asynccontextmanager
async def async_session_context() -> AsyncIterator[AsyncSession]:
    """Session for scripts and tests, committed on clean exit."""
    session: AsyncSession = async_session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        log.exception("Session %s rolled back", id(session))
        await session.rollback()
        raise
    finally:
        await session.close()


def _import_models() -> None:
    # mapped classes register themselves on Base.metadata at import
    import calendar_booking.core.bookings.models  # noqa: F401
    import calendar_booking.core.users.models  # noqa: F401


async def create_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.debug("Created tables: %s", ", ".join(Base.metadata.tables))


async def drop_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    log.debug("Dropped all tables")


__all__ = [
    "Base", "engine", "async_session_factory",
    "get_async_db_session", "async_session_context",
    "create_db_and_tables", "drop_db_and_tables",
]

import os
import sys
from datetime import datetime

import pytest
import pytest_asyncio

# Ensure Python path includes project root for `import calendar_booking`
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import calendar_booking.conftest  # noqa: F401,E402  (sets ENVIRONMENT/DATABASE_URL/JWT_SECRET_KEY)

from calendar_booking.core.bookings.memory import InMemoryBookingRepository, InMemoryOwnerDirectory  # noqa: E402
from calendar_booking.core.bookings.service import BookingsService  # noqa: E402
from calendar_booking.core.users.models import User  # noqa: E402
from calendar_booking.db.base import (  # noqa: E402
    async_session_context,
    create_db_and_tables,
    drop_db_and_tables,
    engine,
)

# Fixed "now" for engine tests (naive UTC)
NOW = datetime(2030, 1, 10, 12, 0, 0)


@pytest.fixture
def owners() -> InMemoryOwnerDirectory:
    return InMemoryOwnerDirectory([
        User(id=1, username="alice", first_name="Alice", timezone_id="Europe/Berlin"),
        User(id=2, username="bob", first_name="Bob", timezone_id="Asia/Tokyo"),
        User(id=3, username="broken", first_name="Broken", timezone_id="Mars/Olympus_Mons"),
    ])


@pytest.fixture
def store(owners) -> InMemoryBookingRepository:
    return InMemoryBookingRepository(owners)


@pytest.fixture
def service(store, owners) -> BookingsService:
    return BookingsService(store, owners, max_occurrences=100, horizon_months=3, now_provider=lambda: NOW)


@pytest_asyncio.fixture
async def setup_db():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()
    # the next test runs on a fresh event loop, so drop the pooled connection
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(setup_db):
    async with async_session_context() as session:
        yield session

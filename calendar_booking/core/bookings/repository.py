# calendar_booking/core/bookings/repository.py

"""SQLAlchemy-backed booking store."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from calendar_booking.core.users.models import User

from .base import BaseBookingRepository
from .models import Booking

log = logging.getLogger(__name__)


class SqlBookingRepository(BaseBookingRepository):
    """
    Async booking repository.
    Receives the AsyncSession via dependency injection; commit is left to the
    session owner (request dependency or context manager).
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session

    async def get_by_owner_id(self, owner_id: int) -> List[Booking]:
        log.debug("Loading bookings for owner_id=%s", owner_id)
        stmt = (
            select(Booking)
            .where(Booking.owner_id == owner_id)
            .order_by(Booking.start_time)
        )
        result = await self.db.scalars(stmt)
        return list(result.all())

    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        log.debug("Getting booking by id=%s", booking_id)
        return await self.db.get(Booking, booking_id)

    async def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        await self.db.refresh(booking)
        log.info("Stored booking id=%d for owner_id=%s", booking.id, booking.owner_id)
        return booking

    async def add_many(self, bookings: Sequence[Booking]) -> List[Booking]:
        items = list(bookings)
        if not items:
            return items
        try:
            # savepoint: a failed batch leaves the rest of the session untouched
            async with self.db.begin_nested():
                self.db.add_all(items)
                await self.db.flush()
        except SQLAlchemyError:
            log.exception("Batch insert of %d bookings failed, savepoint rolled back", len(items))
            raise
        log.info("Stored %d bookings in one batch for owner_id=%s", len(items), items[0].owner_id)
        return items

    async def update(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        await self.db.refresh(booking)
        log.info("Updated booking id=%d", booking.id)
        return booking

    async def delete(self, booking: Booking) -> None:
        await self.db.delete(booking)
        await self.db.flush()
        log.info("Deleted booking id=%d", booking.id)

    async def search(self, keyword: str, owner_id: Optional[int] = None) -> List[Booking]:
        if keyword is None or not keyword.strip():
            return []
        needle = keyword.strip().lower()
        log.debug("Searching bookings for %r (owner_id=%s)", needle, owner_id)
        stmt = (
            select(Booking)
            .join(User, User.id == Booking.owner_id)
            .where(
                or_(
                    func.lower(Booking.title).contains(needle, autoescape=True),
                    func.lower(Booking.description).contains(needle, autoescape=True),
                    func.lower(Booking.location).contains(needle, autoescape=True),
                    func.lower(Booking.attendees).contains(needle, autoescape=True),
                    func.lower(User.username).contains(needle, autoescape=True),
                )
            )
            .order_by(Booking.start_time)
        )
        if owner_id is not None:
            stmt = stmt.where(Booking.owner_id == owner_id)
        result = await self.db.scalars(stmt)
        return list(result.all())


__all__ = ["SqlBookingRepository"]

# calendar_booking/core/bookings/memory.py

from __future__ import annotations

import itertools
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from calendar_booking.core.users.models import User

from .base import BaseBookingRepository, BaseOwnerDirectory
from .models import Booking
from .time_validator import utc_now

log = logging.getLogger(__name__)


class InMemoryOwnerDirectory(BaseOwnerDirectory):
    """Owner lookup over a plain dict; for tests and local tooling."""

    def __init__(self, owners: Iterable[User] = ()) -> None:
        self._owners: Dict[int, User] = {owner.id: owner for owner in owners}

    def put(self, owner: User) -> User:
        self._owners[owner.id] = owner
        return owner

    def get(self, owner_id: int) -> Optional[User]:
        return self._owners.get(owner_id)

    async def get_owner_by_id(self, owner_id: int) -> Optional[User]:
        return self.get(owner_id)


class InMemoryBookingRepository(BaseBookingRepository):
    """
    Process-local booking store.
    Keeps bookings in a list and hands out sequential ids, mimicking the
    SQL repository without a database.
    """

    def __init__(self, owners: Optional[InMemoryOwnerDirectory] = None) -> None:
        self._bookings: List[Booking] = []
        self._ids = itertools.count(1)
        self._owners = owners
        log.info("Initialized InMemoryBookingRepository")

    def _stamp(self, booking: Booking) -> Booking:
        booking.id = next(self._ids)
        if booking.title is None:
            booking.title = ""
        if booking.created_at is None:
            booking.created_at = utc_now()
        return booking

    async def get_by_owner_id(self, owner_id: int) -> List[Booking]:
        owned = [b for b in self._bookings if b.owner_id == owner_id]
        return sorted(owned, key=lambda b: b.start_time)

    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        return next((b for b in self._bookings if b.id == booking_id), None)

    async def add(self, booking: Booking) -> Booking:
        self._bookings.append(self._stamp(booking))
        log.debug("InMemory: stored booking id=%d", booking.id)
        return booking

    async def add_many(self, bookings: Sequence[Booking]) -> List[Booking]:
        stored = [self._stamp(b) for b in bookings]
        self._bookings.extend(stored)
        log.debug("InMemory: stored %d bookings", len(stored))
        return stored

    async def update(self, booking: Booking) -> Booking:
        # objects are shared with callers, so the mutation is already visible
        if booking not in self._bookings:
            raise LookupError(f"Booking id={booking.id} is not stored")
        return booking

    async def delete(self, booking: Booking) -> None:
        before = len(self._bookings)
        self._bookings = [b for b in self._bookings if b.id != booking.id]
        if len(self._bookings) == before:
            log.warning("InMemory: booking id=%s not found for deletion", booking.id)

    async def search(self, keyword: str, owner_id: Optional[int] = None) -> List[Booking]:
        if keyword is None or not keyword.strip():
            return []
        needle = keyword.strip().lower()
        hits = []
        for booking in self._bookings:
            if owner_id is not None and booking.owner_id != owner_id:
                continue
            owner = self._owners.get(booking.owner_id) if self._owners is not None else None
            haystack = [
                booking.title,
                booking.description,
                booking.location,
                booking.attendees,
                owner.username if owner else None,
            ]
            if any(field and needle in field.lower() for field in haystack):
                hits.append(booking)
        return sorted(hits, key=lambda b: b.start_time)


__all__ = ["InMemoryOwnerDirectory", "InMemoryBookingRepository"]

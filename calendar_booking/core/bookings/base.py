# calendar_booking/core/bookings/base.py
"""
Abstract storage interfaces consumed by the booking engine.
All methods are asynchronous.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from calendar_booking.core.users.models import User

from .models import Booking


class BaseOwnerDirectory(ABC):
    """Lookup of booking owners (needed for their timezone)."""

    @abstractmethod
    async def get_owner_by_id(self, owner_id: int) -> Optional[User]:
        ...


class BaseBookingRepository(ABC):
    """
    Booking store.

    Implementations raise on storage faults; the engine turns those into
    ``REPOSITORY_FAILURE`` results.
    """

    @abstractmethod
    async def get_by_owner_id(self, owner_id: int) -> List[Booking]:
        """
        Return every booking of the owner, ordered by start time.

        Args:
            owner_id (int): Owning user id.

        Returns:
            List[Booking]: Bookings ordered by ``start_time``.
        """
        ...

    @abstractmethod
    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        ...

    @abstractmethod
    async def add(self, booking: Booking) -> Booking:
        ...

    @abstractmethod
    async def add_many(self, bookings: Sequence[Booking]) -> List[Booking]:
        """
        Persist several bookings as one unit: either all of them are stored or none.

        Args:
            bookings (Sequence[Booking]): New, not yet persisted bookings.

        Returns:
            List[Booking]: The stored bookings with ids assigned, in input order.
        """
        ...

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        ...

    @abstractmethod
    async def delete(self, booking: Booking) -> None:
        ...

    @abstractmethod
    async def search(self, keyword: str, owner_id: Optional[int] = None) -> List[Booking]:
        """
        Case-insensitive substring search over title, description, location,
        attendees and the owner's username.

        A blank keyword matches nothing.
        """
        ...


__all__ = ["BaseOwnerDirectory", "BaseBookingRepository"]

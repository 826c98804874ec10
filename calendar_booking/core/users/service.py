# calendar_booking/core/users/service.py

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calendar_booking.core.bookings.base import BaseOwnerDirectory
from calendar_booking.core.bookings.time_validator import InvalidTimezoneError, resolve_timezone
from calendar_booking.core.users.models import User

log = logging.getLogger(__name__)


class UsersService(BaseOwnerDirectory):
    """
    Async service for booking owners.
    Doubles as the owner directory the booking engine reads timezones from.
    """
    model = User

    def __init__(self, db_session: AsyncSession):
        """
        Args:
            db_session (AsyncSession): Active SQLAlchemy session.
        """
        self.db: AsyncSession = db_session

    async def get_owner_by_id(self, owner_id: int) -> Optional[User]:
        log.debug("Getting owner by id=%s", owner_id)
        return await self.db.get(User, owner_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        return (await self.db.scalars(stmt)).one_or_none()

    async def create_user(
        self,
        username: str,
        first_name: str,
        timezone_id: str,
        last_name: str | None = None,
    ) -> User:
        """
        Registers a booking owner with a fixed timezone.

        Args:
            username (str): Unique login name.
            first_name (str): Given name.
            timezone_id (str): IANA timezone id, e.g. ``Europe/Berlin``.
            last_name (str | None, optional): Family name.

        Returns:
            User: The stored user.

        Raises:
            ValueError: If the username is taken or the timezone id is unknown.
        """
        try:
            resolve_timezone(timezone_id)
        except InvalidTimezoneError as exc:
            log.warning("Rejecting user %r: %s", username, exc)
            raise ValueError(f"Invalid time zone ID: {timezone_id}") from exc

        if await self.get_by_username(username) is not None:
            raise ValueError(f"Username already exists: {username}")

        user = User(
            username=username,
            first_name=first_name,
            last_name=last_name,
            timezone_id=timezone_id,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        log.info("Created user %r", user)
        return user

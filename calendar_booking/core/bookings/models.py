# calendar_booking/core/bookings/models.py

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from calendar_booking.db.base import Base

from .schemas import (
    CATEGORY_MAX_LENGTH,
    COLOR_CODE_MAX_LENGTH,
    LOCATION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from .time_validator import utc_now


class Booking(Base):
    """
    ORM model for a single, non-recurring booking.

    Recurring requests are materialised into independent rows at creation
    time, so no series id or rule is stored here.
    Times are naive UTC.
    """
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False, default="")
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(LOCATION_MAX_LENGTH), nullable=True)
    # Free text, comma separated names/emails
    attendees: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(CATEGORY_MAX_LENGTH), nullable=True)
    color_code: Mapped[Optional[str]] = mapped_column(String(COLOR_CODE_MAX_LENGTH), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_bookings_owner_start", "owner_id", "start_time"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        start_str = self.start_time.strftime("%Y-%m-%dT%H:%M:%S")
        end_str = self.end_time.strftime("%Y-%m-%dT%H:%M:%S")
        return f"<Booking id={self.id} owner_id={self.owner_id} {start_str}..{end_str}>"

# calendar_booking/core/bookings/schemas.py
"""
Pydantic schemas for bookings.

Used in:
    * calendar_booking/core/bookings/service.py   - incoming requests for the engine
    * calendar_booking/core/bookings/recurrence.py - recurrence rule consumed once per create
    * calendar_booking/api/v1/bookings.py          - public REST endpoints
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


# column sizes of the bookings table
TITLE_MAX_LENGTH = 256
LOCATION_MAX_LENGTH = 256
CATEGORY_MAX_LENGTH = 64
COLOR_CODE_MAX_LENGTH = 16


class RecurrenceKind(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecurrenceRule(BaseModel):
    """How a booking repeats. Expanded once at creation time, never stored."""

    kind: RecurrenceKind = Field(RecurrenceKind.NONE, description="none / daily / weekly / monthly")
    interval: int | None = Field(None, description="Step count between occurrences (defaults to 1)")
    end_date: datetime | None = Field(
        None, description="Last date an occurrence may fall on (defaults to start + 3 months)"
    )


class BookingBase(BaseModel):
    """Shared booking metadata."""

    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH, description="Booking title")
    description: str | None = Field(None, description="Free-form description")
    location: str | None = Field(None, max_length=LOCATION_MAX_LENGTH, description="Where the booking takes place")
    attendees: str | None = Field(None, description="Comma separated attendee names or emails")
    category: str | None = Field(None, max_length=CATEGORY_MAX_LENGTH, description="Booking category (meeting, personal, ...)")
    color_code: str | None = Field(None, max_length=COLOR_CODE_MAX_LENGTH, description="Display color, e.g. #3366ff")

    @field_validator("attendees", mode="before")
    @classmethod
    def join_attendee_list(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item).strip() for item in value if str(item).strip())
        return value


class BookingRequest(BookingBase):
    """Create/update payload. Times are naive UTC once they reach the engine."""

    start_time: datetime = Field(..., description="Start of the booking")
    end_time: datetime = Field(..., description="End of the booking")
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)


class CategoryUpdate(BaseModel):
    category: str | None = Field(None, max_length=CATEGORY_MAX_LENGTH, description="New category, or null to clear")
    color_code: str | None = Field(None, max_length=COLOR_CODE_MAX_LENGTH, description="New color, or null to clear")


class BookingOut(BookingBase):
    """Booking as returned to callers."""

    id: int = Field(..., description="Booking id")
    owner_id: int = Field(..., description="Owning user id")
    title: str = Field("", max_length=TITLE_MAX_LENGTH, description="Booking title")
    start_time: datetime
    end_time: datetime

    model_config = {"from_attributes": True}


__all__: list[str] = [
    "RecurrenceKind", "RecurrenceRule", "BookingRequest",
    "CategoryUpdate", "BookingOut",
]

# calendar_booking/core/bookings/result.py
"""
Typed outcomes of booking operations.

Every operation of :class:`~calendar_booking.core.bookings.service.BookingsService`
returns either ``Ok(value)`` or ``Err(kind, message)``; failures are values,
not exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    USER_NOT_FOUND = "user_not_found"
    INVALID_TIME_RANGE = "invalid_time_range"
    INVALID_RECURRENCE = "invalid_recurrence"
    PAST_START = "past_start"
    PAST_END = "past_end"
    INVALID_TIMEZONE = "invalid_timezone"
    VALIDATION_ERROR = "validation_error"
    OVERLAP_CONFLICT = "overlap_conflict"
    NO_FUTURE_OCCURRENCES = "no_future_occurrences"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    REPOSITORY_FAILURE = "repository_failure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]

__all__ = ["ErrorKind", "Ok", "Err", "Result"]

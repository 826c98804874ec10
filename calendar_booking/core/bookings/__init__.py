"""
Booking engine package.

* ``validate_booking_window``: owner-local past/valid classification (time_validator.py).
* ``expand_occurrences``: recurrence rule to bounded list of occurrences (recurrence.py).
* ``overlaps`` / ``find_overlapping``: half-open overlap checks (overlap.py).
* ``BookingsService``: orchestration over the storage interfaces in base.py.
"""
from __future__ import annotations

from .overlap import find_overlapping, intervals_overlap, overlaps
from .recurrence import Occurrence, add_months, expand_occurrences
from .result import Err, ErrorKind, Ok, Result
from .schemas import BookingRequest, RecurrenceKind, RecurrenceRule
from .service import BookingsService
from .time_validator import TimeVerdict, TimeVerdictKind, validate_booking_window

__all__: list[str] = [
    "BookingRequest", "RecurrenceKind", "RecurrenceRule",
    "Occurrence", "add_months", "expand_occurrences",
    "intervals_overlap", "overlaps", "find_overlapping",
    "TimeVerdict", "TimeVerdictKind", "validate_booking_window",
    "Err", "ErrorKind", "Ok", "Result",
    "BookingsService",
]

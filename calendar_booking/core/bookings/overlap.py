# calendar_booking/core/bookings/overlap.py
"""Half-open interval overlap checks against an owner's bookings."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .models import Booking


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """
    ``[start_a, end_a)`` and ``[start_b, end_b)`` share an instant.

    Back-to-back intervals (``end_a == start_b``) do not overlap.
    """
    return start_a < end_b and end_a > start_b


def find_overlapping(
    candidate_start: datetime,
    candidate_end: datetime,
    existing: Iterable[Booking],
    exclude_id: Optional[int] = None,
) -> List[Booking]:
    """Return the bookings in ``existing`` that overlap the candidate, skipping ``exclude_id``."""
    return [
        booking
        for booking in existing
        if (exclude_id is None or booking.id != exclude_id)
        and intervals_overlap(candidate_start, candidate_end, booking.start_time, booking.end_time)
    ]


def overlaps(
    candidate_start: datetime,
    candidate_end: datetime,
    existing: Iterable[Booking],
    exclude_id: Optional[int] = None,
) -> bool:
    return any(
        (exclude_id is None or booking.id != exclude_id)
        and intervals_overlap(candidate_start, candidate_end, booking.start_time, booking.end_time)
        for booking in existing
    )


__all__ = ["intervals_overlap", "find_overlapping", "overlaps"]

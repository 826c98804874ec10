from datetime import datetime

from calendar_booking.core.bookings.models import Booking
from calendar_booking.core.bookings.overlap import find_overlapping, intervals_overlap, overlaps


def _booking(booking_id, start_hour, end_hour):
    return Booking(
        id=booking_id,
        owner_id=1,
        start_time=datetime(2031, 5, 1, start_hour),
        end_time=datetime(2031, 5, 1, end_hour),
    )


EXISTING = [_booking(1, 9, 10), _booking(2, 13, 15)]


def test_partial_overlap_detected():
    assert overlaps(datetime(2031, 5, 1, 9, 30), datetime(2031, 5, 1, 11), EXISTING)
    assert [b.id for b in find_overlapping(datetime(2031, 5, 1, 14), datetime(2031, 5, 1, 16), EXISTING)] == [2]


def test_containment_both_ways():
    assert overlaps(datetime(2031, 5, 1, 8), datetime(2031, 5, 1, 16), EXISTING)
    assert overlaps(datetime(2031, 5, 1, 13, 30), datetime(2031, 5, 1, 14), EXISTING)


def test_back_to_back_is_not_an_overlap():
    assert not overlaps(datetime(2031, 5, 1, 10), datetime(2031, 5, 1, 13), EXISTING)
    assert not intervals_overlap(
        datetime(2031, 5, 1, 10), datetime(2031, 5, 1, 11),
        datetime(2031, 5, 1, 9), datetime(2031, 5, 1, 10),
    )


def test_excluded_booking_is_ignored():
    assert not overlaps(datetime(2031, 5, 1, 9), datetime(2031, 5, 1, 10), EXISTING, exclude_id=1)
    assert find_overlapping(datetime(2031, 5, 1, 9), datetime(2031, 5, 1, 14), EXISTING, exclude_id=1) == [EXISTING[1]]


def test_empty_collection():
    assert not overlaps(datetime(2031, 5, 1, 9), datetime(2031, 5, 1, 10), [])

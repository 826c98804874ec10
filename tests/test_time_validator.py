from datetime import datetime, timedelta, timezone

import pytest

from calendar_booking.core.bookings.time_validator import (
    InvalidTimezoneError,
    TimeVerdictKind,
    as_naive_utc,
    owner_local_to_utc,
    resolve_timezone,
    to_owner_local,
    validate_booking_window,
)

NOW = datetime(2030, 1, 10, 12, 0)  # naive UTC


def test_future_window_is_valid():
    verdict = validate_booking_window(NOW + timedelta(hours=1), NOW + timedelta(hours=2), "Europe/Berlin", now=NOW)
    assert verdict.is_valid
    assert verdict.kind is TimeVerdictKind.VALID
    assert verdict.detail is None


def test_past_start_embeds_owner_local_now():
    verdict = validate_booking_window(NOW - timedelta(hours=1), NOW + timedelta(hours=1), "Asia/Tokyo", now=NOW)
    assert verdict.kind is TimeVerdictKind.PAST_START
    # 12:00 UTC is 21:00 in Tokyo
    assert verdict.detail == (
        "Cannot book appointments in the past. "
        "Current time in your timezone (Asia/Tokyo): 2030-01-10 21:00"
    )


def test_start_equal_to_now_is_past():
    verdict = validate_booking_window(NOW, NOW + timedelta(hours=1), "UTC", now=NOW)
    assert verdict.kind is TimeVerdictKind.PAST_START


def test_past_end_reported_when_start_is_future():
    verdict = validate_booking_window(NOW + timedelta(hours=1), NOW - timedelta(minutes=5), "Europe/Berlin", now=NOW)
    assert verdict.kind is TimeVerdictKind.PAST_END
    assert verdict.detail.startswith("Appointment end time cannot be in the past.")
    assert "(Europe/Berlin): 2030-01-10 13:00" in verdict.detail


@pytest.mark.parametrize("tz_id", [None, "", "   ", "Mars/Olympus_Mons"])
def test_unusable_timezone(tz_id):
    verdict = validate_booking_window(NOW + timedelta(hours=1), NOW + timedelta(hours=2), tz_id, now=NOW)
    assert verdict.kind is TimeVerdictKind.INVALID_TIMEZONE
    assert verdict.detail == "Invalid timezone configuration for user"


def test_unprojectable_instant_is_a_validation_error():
    verdict = validate_booking_window(datetime.max, datetime.max, "Asia/Tokyo", now=NOW)
    assert verdict.kind is TimeVerdictKind.VALIDATION_ERROR
    assert verdict.detail == "Error validating appointment time"


def test_resolve_timezone_rejects_unknown_ids():
    assert resolve_timezone("America/New_York").key == "America/New_York"
    with pytest.raises(InvalidTimezoneError):
        resolve_timezone("Not/AZone")


def test_local_and_utc_conversions():
    # Berlin is UTC+1 in January, UTC+2 in July
    assert owner_local_to_utc(datetime(2030, 1, 15, 10, 0), "Europe/Berlin") == datetime(2030, 1, 15, 9, 0)
    assert owner_local_to_utc(datetime(2030, 7, 15, 10, 0), "Europe/Berlin") == datetime(2030, 7, 15, 8, 0)
    assert to_owner_local(datetime(2030, 7, 15, 8, 0), "Europe/Berlin") == datetime(2030, 7, 15, 10, 0)


def test_aware_values_are_normalised_to_naive_utc():
    aware = datetime(2030, 1, 15, 10, 0, tzinfo=timezone(timedelta(hours=3)))
    assert as_naive_utc(aware) == datetime(2030, 1, 15, 7, 0)
    assert owner_local_to_utc(aware, "Europe/Berlin") == datetime(2030, 1, 15, 7, 0)
    assert as_naive_utc(datetime(2030, 1, 15, 7, 0)) == datetime(2030, 1, 15, 7, 0)

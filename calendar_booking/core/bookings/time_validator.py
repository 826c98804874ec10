# calendar_booking/core/bookings/time_validator.py
"""
Owner-local time checks.

All instants handled by the booking engine are naive UTC. "Now" and the
requested window are projected into the owner's timezone and compared as
local wall-clock values. Nothing here logs or touches storage, so it can be
called once per occurrence in a tight loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOCAL_NOW_FORMAT = "%Y-%m-%d %H:%M"

INVALID_TIMEZONE_MESSAGE = "Invalid timezone configuration for user"
VALIDATION_ERROR_MESSAGE = "Error validating appointment time"


class TimeVerdictKind(str, Enum):
    VALID = "valid"
    PAST_START = "past_start"
    PAST_END = "past_end"
    INVALID_TIMEZONE = "invalid_timezone"
    VALIDATION_ERROR = "validation_error"


@dataclass(frozen=True)
class TimeVerdict:
    kind: TimeVerdictKind
    detail: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.kind is TimeVerdictKind.VALID


VALID = TimeVerdict(TimeVerdictKind.VALID)


class InvalidTimezoneError(ValueError):
    """Raised when a timezone id cannot be resolved."""


def resolve_timezone(timezone_id: Optional[str]) -> ZoneInfo:
    """
    Resolve an IANA timezone id.

    Raises:
        InvalidTimezoneError: for ``None``, blank or unknown ids.
    """
    if timezone_id is None or not str(timezone_id).strip():
        raise InvalidTimezoneError("Timezone id is empty")
    try:
        return ZoneInfo(timezone_id)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as exc:
        raise InvalidTimezoneError(f"Unknown timezone id: {timezone_id}") from exc


def as_naive_utc(value: datetime) -> datetime:
    """Aware values are converted to UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _project(utc_value: datetime, tz: ZoneInfo) -> datetime:
    return as_naive_utc(utc_value).replace(tzinfo=timezone.utc).astimezone(tz).replace(tzinfo=None)


def to_owner_local(utc_value: datetime, timezone_id: str) -> datetime:
    """Naive UTC -> naive wall-clock time in the owner's zone."""
    return _project(utc_value, resolve_timezone(timezone_id))


def owner_local_to_utc(local_value: datetime, timezone_id: str) -> datetime:
    """Naive wall-clock time in the owner's zone -> naive UTC."""
    if local_value.tzinfo is not None:
        return as_naive_utc(local_value)
    tz = resolve_timezone(timezone_id)
    return local_value.replace(tzinfo=tz).astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def validate_booking_window(
    start_utc: datetime,
    end_utc: datetime,
    timezone_id: Optional[str],
    now: Optional[datetime] = None,
) -> TimeVerdict:
    """
    Classify a candidate interval against the owner's local "now".

    Args:
        start_utc: Start of the interval (naive UTC).
        end_utc: End of the interval (naive UTC).
        timezone_id: Owner's IANA timezone id.
        now: Current instant (naive UTC). Read from the clock when omitted.

    Returns:
        TimeVerdict: ``VALID``, ``PAST_START``/``PAST_END`` with a detail that
        embeds the owner's local time, ``INVALID_TIMEZONE`` or
        ``VALIDATION_ERROR``. Never raises.
    """
    try:
        tz = resolve_timezone(timezone_id)
    except InvalidTimezoneError:
        return TimeVerdict(TimeVerdictKind.INVALID_TIMEZONE, INVALID_TIMEZONE_MESSAGE)

    try:
        local_now = _project(now if now is not None else utc_now(), tz)
        local_start = _project(start_utc, tz)
        local_end = _project(end_utc, tz)
    except Exception:
        return TimeVerdict(TimeVerdictKind.VALIDATION_ERROR, VALIDATION_ERROR_MESSAGE)

    stamp = local_now.strftime(LOCAL_NOW_FORMAT)
    if local_start <= local_now:
        return TimeVerdict(
            TimeVerdictKind.PAST_START,
            f"Cannot book appointments in the past. "
            f"Current time in your timezone ({timezone_id}): {stamp}",
        )
    if local_end <= local_now:
        return TimeVerdict(
            TimeVerdictKind.PAST_END,
            f"Appointment end time cannot be in the past. "
            f"Current time in your timezone ({timezone_id}): {stamp}",
        )
    return VALID


__all__ = [
    "TimeVerdictKind", "TimeVerdict", "InvalidTimezoneError",
    "resolve_timezone", "as_naive_utc", "to_owner_local", "owner_local_to_utc",
    "utc_now", "validate_booking_window",
]

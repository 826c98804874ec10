# calendar_booking/core/bookings/recurrence.py
"""
Materialisation of a recurrence rule into concrete occurrences.

The expander is a plain generator: it knows nothing about "now" or about
existing bookings. Callers validate and conflict-check each occurrence as it
is produced, so a past occurrence can be skipped while an overlap can abort
the whole request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from .schemas import RecurrenceKind, RecurrenceRule

MAX_OCCURRENCES = 100
DEFAULT_HORIZON_MONTHS = 3


@dataclass(frozen=True)
class Occurrence:
    """One independent booking candidate. Carries no recurrence metadata."""

    start: datetime
    end: datetime


def add_months(value: datetime, months: int) -> datetime:
    """
    Shift ``value`` by whole calendar months.

    The day of month is clamped to the last valid day of the target month
    (Jan 31 + 1 month -> Feb 28/29) and the time of day is kept.
    """
    return value + relativedelta(months=months)


def resolve_interval(rule: RecurrenceRule) -> int:
    return 1 if rule.interval is None else rule.interval


def resolve_end_date(
    start: datetime,
    rule: RecurrenceRule,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> datetime:
    if rule.end_date is not None:
        return rule.end_date
    return add_months(start, horizon_months)


def _calendar_date(utc_value: datetime, local_tz: Optional[tzinfo]) -> date:
    if local_tz is None:
        return utc_value.date()
    try:
        return utc_value.replace(tzinfo=timezone.utc).astimezone(local_tz).date()
    except OverflowError:
        # past either end of the calendar once shifted
        return date.max if utc_value.year > 1 else date.min


def _nth_occurrence(start: datetime, kind: RecurrenceKind, interval: int, index: int) -> datetime:
    # Steps are computed from the series start so month clamping never accumulates
    if kind == RecurrenceKind.DAILY:
        return start + timedelta(days=interval * index)
    if kind == RecurrenceKind.WEEKLY:
        return start + timedelta(days=7 * interval * index)
    if kind == RecurrenceKind.MONTHLY:
        return add_months(start, interval * index)
    raise ValueError(f"Unsupported recurrence kind: {kind}")


def expand_occurrences(
    start: datetime,
    end: datetime,
    rule: RecurrenceRule,
    max_occurrences: int = MAX_OCCURRENCES,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    local_tz: Optional[tzinfo] = None,
) -> Iterator[Occurrence]:
    """
    Yield the occurrences described by ``rule``, in chronological order.

    Args:
        start: Start of the first occurrence.
        end: End of the first occurrence; ``end - start`` is copied to every occurrence.
        rule: Recurrence rule. ``kind == none`` yields ``(start, end)`` only.
        max_occurrences: Safety cap on the number of yielded occurrences.
        horizon_months: Horizon used when the rule has no end date.
        local_tz: Zone whose calendar dates the end-date cutoff compares.
            Naive UTC dates are compared when omitted.

    The sequence stops once an occurrence falls on a date after the rule's end
    date, once the cap is reached, or as soon as a computed next occurrence is
    not strictly after the current one (zero or negative steps).
    """
    if rule.kind == RecurrenceKind.NONE:
        yield Occurrence(start, end)
        return

    duration = end - start
    interval = resolve_interval(rule)
    last_date = _calendar_date(resolve_end_date(start, rule, horizon_months), local_tz)

    occurrence = start
    emitted = 0
    while _calendar_date(occurrence, local_tz) <= last_date and emitted < max_occurrences:
        yield Occurrence(occurrence, occurrence + duration)
        emitted += 1
        try:
            following = _nth_occurrence(start, rule.kind, interval, emitted)
        except (OverflowError, ValueError):
            # ran off the end of the calendar
            return
        if following <= occurrence:
            return
        occurrence = following


__all__ = [
    "MAX_OCCURRENCES", "DEFAULT_HORIZON_MONTHS", "Occurrence",
    "add_months", "resolve_interval", "resolve_end_date", "expand_occurrences",
]

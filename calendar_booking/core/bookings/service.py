# calendar_booking/core/bookings/service.py

"""Service-layer for Bookings: creation of (recurring) bookings and their upkeep."""

from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Union

from calendar_booking.config import settings

from .base import BaseBookingRepository, BaseOwnerDirectory
from .models import Booking
from .overlap import find_overlapping, overlaps
from .recurrence import expand_occurrences, resolve_interval
from .result import Err, ErrorKind, Ok, Result
from .schemas import BookingRequest, RecurrenceKind
from .time_validator import (
    TimeVerdictKind,
    as_naive_utc,
    resolve_timezone,
    utc_now,
    validate_booking_window,
)

log = logging.getLogger(__name__)

_VERDICT_ERRORS = {
    TimeVerdictKind.PAST_START: ErrorKind.PAST_START,
    TimeVerdictKind.PAST_END: ErrorKind.PAST_END,
    TimeVerdictKind.INVALID_TIMEZONE: ErrorKind.INVALID_TIMEZONE,
    TimeVerdictKind.VALIDATION_ERROR: ErrorKind.VALIDATION_ERROR,
}

Logger = Union[logging.Logger, logging.LoggerAdapter]


def _repository_guard(action: str) -> Callable:
    """Turn unexpected faults of a service method into a REPOSITORY_FAILURE result."""

    def decorator(func: Callable[..., Awaitable[Result]]) -> Callable[..., Awaitable[Result]]:
        @functools.wraps(func)
        async def wrapper(self: "BookingsService", *args, **kwargs) -> Result:
            try:
                return await func(self, *args, **kwargs)
            except Exception as exc:
                self.log.exception("Error while trying to %s: %s", action, exc)
                return Err(ErrorKind.REPOSITORY_FAILURE, str(exc))

        return wrapper

    return decorator


class BookingsService:
    """
    Async booking orchestrator.

    Composes the time validator, the recurrence expander and the overlap
    detector with the storage collaborators. Every public method returns an
    ``Ok``/``Err`` result and never raises.
    """

    def __init__(
        self,
        bookings: BaseBookingRepository,
        owners: BaseOwnerDirectory,
        logger: Optional[Logger] = None,
        max_occurrences: Optional[int] = None,
        horizon_months: Optional[int] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            bookings (BaseBookingRepository): Booking store.
            owners (BaseOwnerDirectory): Owner lookup (for timezones).
            logger (Logger | None, optional): Logger to report through. Defaults to the module logger.
            max_occurrences (int | None, optional): Safety cap per recurring request.
                Defaults to ``settings.BOOKING_MAX_OCCURRENCES``.
            horizon_months (int | None, optional): Horizon for rules without end date.
                Defaults to ``settings.BOOKING_DEFAULT_HORIZON_MONTHS``.
            now_provider (Callable | None, optional): Returns the current instant as naive UTC.
        """
        self.bookings = bookings
        self.owners = owners
        self.log: Logger = logger or log
        self.max_occurrences = max_occurrences or settings.BOOKING_MAX_OCCURRENCES
        self.horizon_months = horizon_months or settings.BOOKING_DEFAULT_HORIZON_MONTHS
        self._now = now_provider or utc_now

    # ------------------------------------------------------------------ #
    #                               create                               #
    # ------------------------------------------------------------------ #

    @_repository_guard("create booking")
    async def create_booking(self, request: BookingRequest, owner_id: int) -> Result[Booking]:
        """
        Creates a booking, materialising a recurring request into independent bookings.

        Args:
            request (BookingRequest): Requested window (naive UTC) and metadata.
            owner_id (int): Owner of the new booking(s).

        Returns:
            Result[Booking]: ``Ok`` with the booking (first occurrence for a
            series) or ``Err`` with the reason nothing was stored.
        """
        owner = await self.owners.get_owner_by_id(owner_id)
        if owner is None:
            self.log.warning("Create booking: owner_id=%s not found", owner_id)
            return Err(ErrorKind.USER_NOT_FOUND, "User not found")

        start = as_naive_utc(request.start_time)
        end = as_naive_utc(request.end_time)
        # a reversed range is reported as such even when it also lies in the past
        if start >= end:
            return Err(ErrorKind.INVALID_TIME_RANGE, "StartTime must be before EndTime")

        now = self._now()
        verdict = validate_booking_window(start, end, owner.timezone_id, now=now)
        if not verdict.is_valid:
            self.log.info(
                "Create booking rejected for owner_id=%s: %s", owner_id, verdict.kind.value
            )
            return Err(_VERDICT_ERRORS[verdict.kind], verdict.detail or "")

        rule = request.recurrence
        if rule.kind != RecurrenceKind.NONE and resolve_interval(rule) < 1:
            return Err(ErrorKind.INVALID_RECURRENCE, "Recurrence interval must be a positive integer")
        if rule.end_date is not None:
            rule = rule.model_copy(update={"end_date": as_naive_utc(rule.end_date)})

        existing = await self.bookings.get_by_owner_id(owner_id)

        if rule.kind == RecurrenceKind.NONE:
            conflicts = find_overlapping(start, end, existing)
            if conflicts:
                self.log.info(
                    "Booking %s..%s for owner_id=%s overlaps booking ids %s",
                    start, end, owner_id, [b.id for b in conflicts],
                )
                return Err(ErrorKind.OVERLAP_CONFLICT, "Appointment time overlaps with existing appointment")
            booking = await self.bookings.add(self._materialize(request, owner_id, start, end))
            self.log.info("Created booking id=%s for owner_id=%s", booking.id, owner_id)
            return Ok(booking)

        self.log.info(
            "Expanding %s recurrence for owner_id=%s from %s (interval=%s, end_date=%s)",
            rule.kind.value, owner_id, start, resolve_interval(rule), rule.end_date,
        )
        planned: List[Booking] = []
        skipped = 0
        # the end date is a day on the owner's calendar; the verdict above proved the zone resolves
        occurrences = expand_occurrences(
            start, end, rule, self.max_occurrences, self.horizon_months,
            local_tz=resolve_timezone(owner.timezone_id),
        )
        for occurrence in occurrences:
            occurrence_verdict = validate_booking_window(
                occurrence.start, occurrence.end, owner.timezone_id, now=now
            )
            if not occurrence_verdict.is_valid:
                skipped += 1
                self.log.debug("Skipping occurrence %s: %s", occurrence.start, occurrence_verdict.kind.value)
                continue

            day = occurrence.start.strftime("%Y-%m-%d")
            if overlaps(occurrence.start, occurrence.end, existing):
                self.log.info("Recurring booking for owner_id=%s conflicts on %s", owner_id, day)
                return Err(
                    ErrorKind.OVERLAP_CONFLICT,
                    f"Recurring appointment on {day} overlaps with existing appointment",
                )
            if overlaps(occurrence.start, occurrence.end, planned):
                self.log.info("Recurring booking for owner_id=%s overlaps itself on %s", owner_id, day)
                return Err(
                    ErrorKind.OVERLAP_CONFLICT,
                    f"Recurring appointment on {day} overlaps with an earlier occurrence of the same series",
                )
            planned.append(self._materialize(request, owner_id, occurrence.start, occurrence.end))

        if not planned:
            return Err(
                ErrorKind.NO_FUTURE_OCCURRENCES,
                "No future appointments could be created. All occurrences are in the past.",
            )

        stored = await self.bookings.add_many(planned)
        self.log.info(
            "Created %d recurring bookings for owner_id=%s (%d skipped as past)",
            len(stored), owner_id, skipped,
        )
        return Ok(stored[0])

    @staticmethod
    def _materialize(request: BookingRequest, owner_id: int, start: datetime, end: datetime) -> Booking:
        return Booking(
            owner_id=owner_id,
            title=request.title or "",
            start_time=start,
            end_time=end,
            description=request.description,
            location=request.location,
            attendees=request.attendees,
            category=request.category,
            color_code=request.color_code,
        )

    # ------------------------------------------------------------------ #
    #                       update / delete                              #
    # ------------------------------------------------------------------ #

    async def _owned_booking(self, booking_id: int, requester_id: int) -> Union[Booking, Err]:
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None:
            self.log.warning("Booking id=%s not found", booking_id)
            return Err(ErrorKind.NOT_FOUND, "Not found")
        if booking.owner_id != requester_id:
            self.log.warning("User %s tried to modify booking id=%s of user %s", requester_id, booking_id, booking.owner_id)
            return Err(ErrorKind.UNAUTHORIZED, "Unauthorized")
        return booking

    @_repository_guard("update booking")
    async def update_booking(self, booking_id: int, request: BookingRequest, requester_id: int) -> Result[Booking]:
        """
        Moves a booking and replaces its metadata. The title is kept when the
        request has none; recurrence fields of the request are ignored.
        """
        booking = await self._owned_booking(booking_id, requester_id)
        if isinstance(booking, Err):
            return booking

        start = as_naive_utc(request.start_time)
        end = as_naive_utc(request.end_time)
        if start >= end:
            return Err(ErrorKind.INVALID_TIME_RANGE, "StartTime must be before EndTime")

        others = await self.bookings.get_by_owner_id(booking.owner_id)
        if overlaps(start, end, others, exclude_id=booking.id):
            return Err(ErrorKind.OVERLAP_CONFLICT, "Appointment time overlaps with existing appointment")

        booking.title = request.title if request.title is not None else booking.title
        booking.start_time = start
        booking.end_time = end
        booking.description = request.description
        booking.location = request.location
        booking.attendees = request.attendees
        booking.category = request.category
        booking.color_code = request.color_code

        await self.bookings.update(booking)
        self.log.info("Updated booking id=%s", booking.id)
        return Ok(booking)

    @_repository_guard("update booking category")
    async def update_booking_category(
        self,
        booking_id: int,
        category: Optional[str],
        color_code: Optional[str],
        requester_id: int,
    ) -> Result[Booking]:
        booking = await self._owned_booking(booking_id, requester_id)
        if isinstance(booking, Err):
            return booking
        booking.category = category
        booking.color_code = color_code
        await self.bookings.update(booking)
        return Ok(booking)

    @_repository_guard("delete booking")
    async def delete_booking(self, booking_id: int, requester_id: int) -> Result[None]:
        """Deletes one booking; other occurrences created by the same request stay."""
        booking = await self._owned_booking(booking_id, requester_id)
        if isinstance(booking, Err):
            return booking
        await self.bookings.delete(booking)
        self.log.info("Deleted booking id=%s", booking_id)
        return Ok(None)

    # ------------------------------------------------------------------ #
    #                               reads                                #
    # ------------------------------------------------------------------ #

    @_repository_guard("search bookings")
    async def search_bookings(self, keyword: Optional[str], owner_id: Optional[int] = None) -> Result[List[Booking]]:
        # blank keyword means "no search performed"
        if keyword is None or not keyword.strip():
            return Ok([])
        return Ok(await self.bookings.search(keyword, owner_id))

    @_repository_guard("list bookings")
    async def list_bookings(self, owner_id: int) -> Result[List[Booking]]:
        return Ok(await self.bookings.get_by_owner_id(owner_id))

    @_repository_guard("get booking")
    async def get_booking(self, booking_id: int, requester_id: int) -> Result[Booking]:
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None or booking.owner_id != requester_id:
            return Err(ErrorKind.NOT_FOUND, "Appointment not found")
        return Ok(booking)

    @_repository_guard("list bookings in range")
    async def list_bookings_in_range(self, owner_id: int, start: datetime, end: datetime) -> Result[List[Booking]]:
        """Bookings touching ``[start, end]`` (inclusive on both ends), ordered by start."""
        start = as_naive_utc(start)
        end = as_naive_utc(end)
        if start > end:
            return Err(ErrorKind.INVALID_TIME_RANGE, "Start date must be before end date")
        owned = await self.bookings.get_by_owner_id(owner_id)
        in_range = [b for b in owned if b.start_time <= end and b.end_time >= start]
        return Ok(sorted(in_range, key=lambda b: b.start_time))


__all__ = ["BookingsService"]

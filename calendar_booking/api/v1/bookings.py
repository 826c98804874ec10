# calendar_booking/api/v1/bookings.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from calendar_booking.core.auth.security import get_current_user
from calendar_booking.core.bookings.models import Booking
from calendar_booking.core.bookings.repository import SqlBookingRepository
from calendar_booking.core.bookings.result import Err, ErrorKind
from calendar_booking.core.bookings.schemas import BookingOut, BookingRequest, CategoryUpdate
from calendar_booking.core.bookings.service import BookingsService
from calendar_booking.core.bookings.time_validator import (
    InvalidTimezoneError,
    owner_local_to_utc,
    to_owner_local,
)
from calendar_booking.core.users.models import User
from calendar_booking.core.users.service import UsersService
from calendar_booking.db.base import get_async_db_session

router = APIRouter(
    prefix="/v1/bookings",
    tags=["Bookings"],
    dependencies=[Depends(get_current_user)],
)
log = logging.getLogger(__name__)

# Unprocessable Content
HTTP_422_UNPROCESSABLE = 422

_ERROR_STATUS = {
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_TIME_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_RECURRENCE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PAST_START: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PAST_END: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_TIMEZONE: HTTP_422_UNPROCESSABLE,
    ErrorKind.VALIDATION_ERROR: HTTP_422_UNPROCESSABLE,
    ErrorKind.OVERLAP_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NO_FUTURE_OCCURRENCES: status.HTTP_409_CONFLICT,
    ErrorKind.REPOSITORY_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_bookings_service(db: AsyncSession = Depends(get_async_db_session)) -> BookingsService:
    return BookingsService(SqlBookingRepository(db), UsersService(db), logger=log)


def _raise_for(err: Err) -> NoReturn:
    raise HTTPException(
        status_code=_ERROR_STATUS.get(err.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"error": err.kind.value, "message": err.message},
    )


def _invalid_timezone(user: User) -> HTTPException:
    log.error("User %s has an unusable timezone id %r", user.id, user.timezone_id)
    return HTTPException(
        status_code=HTTP_422_UNPROCESSABLE,
        detail={"error": ErrorKind.INVALID_TIMEZONE.value, "message": "Invalid timezone configuration for user"},
    )


# --- wall-clock <-> UTC at the edge; the engine only sees UTC ---
def _request_to_utc(payload: BookingRequest, user: User) -> BookingRequest:
    try:
        update = {
            "start_time": owner_local_to_utc(payload.start_time, user.timezone_id),
            "end_time": owner_local_to_utc(payload.end_time, user.timezone_id),
        }
        if payload.recurrence.end_date is not None:
            update["recurrence"] = payload.recurrence.model_copy(
                update={"end_date": owner_local_to_utc(payload.recurrence.end_date, user.timezone_id)}
            )
    except InvalidTimezoneError as exc:
        raise _invalid_timezone(user) from exc
    return payload.model_copy(update=update)


def _to_out(booking: Booking, user: User) -> BookingOut:
    out = BookingOut.model_validate(booking)
    try:
        return out.model_copy(update={
            "start_time": to_owner_local(booking.start_time, user.timezone_id),
            "end_time": to_owner_local(booking.end_time, user.timezone_id),
        })
    except InvalidTimezoneError as exc:
        raise _invalid_timezone(user) from exc


@router.get("/", response_model=List[BookingOut], summary="List my bookings")
async def list_my_bookings(
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> List[BookingOut]:
    result = await service.list_bookings(current_user.id)
    if isinstance(result, Err):
        _raise_for(result)
    return [_to_out(b, current_user) for b in result.value]


@router.post(
    "/",
    response_model=BookingOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a booking",
    description=(
        "Times are wall-clock values in the caller's timezone. A recurring request "
        "is materialised into independent bookings; the first one is returned."
    ),
)
async def create_booking(
    payload: BookingRequest,
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> BookingOut:
    log.info("API: user %s creating booking (recurrence=%s)", current_user.id, payload.recurrence.kind.value)
    result = await service.create_booking(_request_to_utc(payload, current_user), current_user.id)
    if isinstance(result, Err):
        _raise_for(result)
    return _to_out(result.value, current_user)


@router.get("/search", response_model=List[BookingOut], summary="Search my bookings")
async def search_my_bookings(
    keyword: str = Query("", description="Case-insensitive text to look for"),
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> List[BookingOut]:
    result = await service.search_bookings(keyword, current_user.id)
    if isinstance(result, Err):
        _raise_for(result)
    return [_to_out(b, current_user) for b in result.value]


@router.get("/range", response_model=List[BookingOut], summary="List my bookings inside a window")
async def list_bookings_in_range(
    start: datetime = Query(..., description="Window start, caller's wall-clock time"),
    end: datetime = Query(..., description="Window end, caller's wall-clock time"),
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> List[BookingOut]:
    try:
        start_utc = owner_local_to_utc(start, current_user.timezone_id)
        end_utc = owner_local_to_utc(end, current_user.timezone_id)
    except InvalidTimezoneError as exc:
        raise _invalid_timezone(current_user) from exc
    result = await service.list_bookings_in_range(current_user.id, start_utc, end_utc)
    if isinstance(result, Err):
        _raise_for(result)
    return [_to_out(b, current_user) for b in result.value]


@router.get("/{booking_id}", response_model=BookingOut, summary="Get one of my bookings")
async def get_my_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> BookingOut:
    result = await service.get_booking(booking_id, current_user.id)
    if isinstance(result, Err):
        _raise_for(result)
    return _to_out(result.value, current_user)


@router.put("/{booking_id}", response_model=BookingOut, summary="Move or edit a booking")
async def update_booking(
    booking_id: int,
    payload: BookingRequest,
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> BookingOut:
    result = await service.update_booking(booking_id, _request_to_utc(payload, current_user), current_user.id)
    if isinstance(result, Err):
        _raise_for(result)
    return _to_out(result.value, current_user)


@router.put("/{booking_id}/category", response_model=BookingOut, summary="Change category and color")
async def update_booking_category(
    booking_id: int,
    payload: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> BookingOut:
    result = await service.update_booking_category(
        booking_id, payload.category, payload.color_code, current_user.id
    )
    if isinstance(result, Err):
        _raise_for(result)
    return _to_out(result.value, current_user)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a booking")
async def delete_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingsService = Depends(get_bookings_service),
) -> Response:
    result = await service.delete_booking(booking_id, current_user.id)
    if isinstance(result, Err):
        _raise_for(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

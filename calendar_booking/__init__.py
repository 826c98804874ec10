# calendar_booking/__init__.py
"""
Calendar booking backend.

The booking engine lives in ``calendar_booking.core.bookings``;
``calendar_booking.api`` and ``calendar_booking.db`` are the HTTP and
persistence glue around it.
"""
__all__: list[str] = ["core", "api", "db"]

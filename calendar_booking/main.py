from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from calendar_booking.api.v1.bookings import router as bookings_router
from calendar_booking.api.v1.health import router as health_router
from calendar_booking.config import settings

logging.basicConfig(level=settings.LOG_LEVEL.upper())
log = logging.getLogger(__name__)

description = """
Calendar booking backend.

Bookings are stored in UTC and shown in the owner's timezone. Recurring
requests (daily / weekly / monthly) are expanded into independent bookings
at creation time.
"""
tags_metadata = [
    {"name": "Bookings", "description": "Create, move, search and delete bookings."},
    {"name": "Health", "description": "Liveness and database probe."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    log.info("FastAPI application startup complete.")
    yield
    log.info("FastAPI application shutdown.")


app = FastAPI(
    title="Booking API",
    description=description,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(bookings_router)
app.include_router(health_router)

log.info("FastAPI application configured. Environment: %s", settings.ENVIRONMENT)


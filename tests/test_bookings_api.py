from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from calendar_booking.config import settings
from calendar_booking.core.auth.security import get_current_user
from calendar_booking.core.bookings.time_validator import owner_local_to_utc, to_owner_local
from calendar_booking.core.users.models import User
from calendar_booking.core.users.service import UsersService
from calendar_booking.db.base import async_session_context
from calendar_booking.main import app

TZ = "Europe/Berlin"


def _local(days: int, hour: int = 10) -> datetime:
    """Wall-clock time in the owner's zone, `days` from today."""
    today = datetime.now(ZoneInfo(TZ)).replace(tzinfo=None)
    return (today + timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)


def _payload(start: datetime, hours: int = 1, **extra) -> dict:
    body = {"start_time": start.isoformat(), "end_time": (start + timedelta(hours=hours)).isoformat()}
    body.update(extra)
    return body


@pytest_asyncio.fixture
async def owner(setup_db) -> User:
    async with async_session_context() as session:
        user = await UsersService(session).create_user("alice", "Alice", TZ)
    return user


@pytest_asyncio.fixture
async def client(owner):
    async def fake_user():
        async with async_session_context() as session:
            return await session.get(User, owner.id)

    app.dependency_overrides[get_current_user] = fake_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_create_returns_owner_local_times(client):
    start = _local(3)
    res = await client.post("/v1/bookings/", json=_payload(start, title="Dentist", attendees=["Ann", "Ben"]))

    assert res.status_code == 201
    body = res.json()
    assert body["title"] == "Dentist"
    assert body["attendees"] == "Ann, Ben"
    assert body["start_time"] == start.isoformat()
    assert body["end_time"] == (start + timedelta(hours=1)).isoformat()

    listed = await client.get("/v1/bookings/")
    assert [b["id"] for b in listed.json()] == [body["id"]]


@pytest.mark.asyncio
async def test_create_errors_map_to_status_codes(client):
    start = _local(3)
    assert (await client.post("/v1/bookings/", json=_payload(start))).status_code == 201

    conflict = await client.post("/v1/bookings/", json=_payload(start + timedelta(minutes=30)))
    assert conflict.status_code == 409
    assert conflict.json()["detail"]["error"] == "overlap_conflict"

    past = await client.post("/v1/bookings/", json=_payload(_local(-2)))
    assert past.status_code == 400
    assert past.json()["detail"]["error"] == "past_start"
    assert f"({TZ})" in past.json()["detail"]["message"]

    reversed_range = {"start_time": start.isoformat(), "end_time": (start - timedelta(hours=1)).isoformat()}
    bad = await client.post("/v1/bookings/", json=reversed_range)
    assert bad.status_code == 400
    assert bad.json()["detail"]["error"] == "invalid_time_range"

    zero = await client.post(
        "/v1/bookings/",
        json=_payload(_local(10), recurrence={"kind": "daily", "interval": 0}),
    )
    assert zero.status_code == 400
    assert zero.json()["detail"]["error"] == "invalid_recurrence"


@pytest.mark.asyncio
async def test_recurring_request_creates_every_occurrence(client):
    start = _local(5, hour=8)
    # local midnight of the last day still admits that day's occurrence
    end_date = (start + timedelta(days=2)).replace(hour=0)
    res = await client.post(
        "/v1/bookings/",
        json=_payload(start, title="Standup", recurrence={"kind": "daily", "end_date": end_date.isoformat()}),
    )
    assert res.status_code == 201

    # occurrences are 24h apart in UTC, so a DST switch shifts their local hour
    first_utc = owner_local_to_utc(start, TZ)
    expected = [to_owner_local(first_utc + timedelta(days=d), TZ) for d in range(3)]
    listed = (await client.get("/v1/bookings/")).json()
    assert [b["start_time"] for b in listed] == [e.isoformat() for e in expected]

    window = await client.get(
        "/v1/bookings/range",
        params={"start": expected[1].isoformat(), "end": (expected[1] + timedelta(minutes=30)).isoformat()},
    )
    assert window.status_code == 200
    assert [b["start_time"] for b in window.json()] == [expected[1].isoformat()]


@pytest.mark.asyncio
async def test_search_update_category_delete(client):
    created = (await client.post("/v1/bookings/", json=_payload(_local(4), title="Board Review", location="HQ"))).json()

    assert (await client.get("/v1/bookings/search", params={"keyword": "review"})).json()[0]["id"] == created["id"]
    assert (await client.get("/v1/bookings/search", params={"keyword": " "})).json() == []

    moved_start = _local(4, hour=14)
    moved = await client.put(f"/v1/bookings/{created['id']}", json=_payload(moved_start, location="Annex"))
    assert moved.status_code == 200
    assert moved.json()["title"] == "Board Review"
    assert moved.json()["location"] == "Annex"
    assert moved.json()["start_time"] == moved_start.isoformat()

    recolored = await client.put(
        f"/v1/bookings/{created['id']}/category", json={"category": "work", "color_code": "#336699"}
    )
    assert recolored.status_code == 200
    assert recolored.json()["color_code"] == "#336699"

    assert (await client.get(f"/v1/bookings/{created['id']}")).status_code == 200
    assert (await client.delete(f"/v1/bookings/{created['id']}")).status_code == 204
    missing = await client.get(f"/v1/bookings/{created['id']}")
    assert missing.status_code == 404
    assert (await client.delete(f"/v1/bookings/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_foreign_booking_is_forbidden(client):
    created = (await client.post("/v1/bookings/", json=_payload(_local(6)))).json()
    async with async_session_context() as session:
        intruder = await UsersService(session).create_user("mallory", "Mallory", "UTC")

    async def other_user():
        return intruder

    app.dependency_overrides[get_current_user] = other_user
    res = await client.delete(f"/v1/bookings/{created['id']}")
    assert res.status_code == 403
    assert res.json()["detail"]["error"] == "unauthorized"


@pytest.mark.asyncio
async def test_bearer_token_is_verified(owner):
    token = jwt.encode({"sub": str(owner.id)}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.get("/v1/bookings/")).status_code == 401
        bad = await ac.get("/v1/bookings/", headers={"Authorization": "Bearer not-a-jwt"})
        assert bad.status_code == 401
        ok = await ac.get("/v1/bookings/", headers={"Authorization": f"Bearer {token}"})
        assert ok.status_code == 200
        assert ok.json() == []

        ghost = jwt.encode({"sub": "999"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        assert (await ac.get("/v1/bookings/", headers={"Authorization": f"Bearer {ghost}"})).status_code == 404


@pytest.mark.asyncio
async def test_healthz(setup_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        res = await ac.get("/healthz")
    assert res.status_code == 200
    assert res.json() == {"environment": "test", "db": "ok", "status": "ok"}


@pytest.mark.asyncio
async def test_over_long_fields_are_rejected_before_storage(client):
    too_long = await client.post("/v1/bookings/", json=_payload(_local(7), title="x" * 257))
    assert too_long.status_code == 422
    assert (await client.get("/v1/bookings/")).json() == []

    created = (await client.post("/v1/bookings/", json=_payload(_local(7), title="x" * 256))).json()
    recolor = await client.put(
        f"/v1/bookings/{created['id']}/category", json={"category": "work", "color_code": "#" + "f" * 16}
    )
    assert recolor.status_code == 422


@pytest.mark.asyncio
async def test_owner_with_unusable_timezone_gets_422(setup_db, recwarn):
    async with async_session_context() as session:
        lost = User(username="lost", first_name="Lost", timezone_id="Mars/Olympus_Mons")
        session.add(lost)

    async def lost_user():
        return lost

    app.dependency_overrides[get_current_user] = lost_user
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            res = await ac.post("/v1/bookings/", json=_payload(_local(3)))
    finally:
        app.dependency_overrides.clear()

    assert res.status_code == 422
    assert res.json()["detail"]["error"] == "invalid_timezone"
    assert not [w for w in recwarn if "HTTP_422" in str(w.message)]

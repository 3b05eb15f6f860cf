"""
Shared test fixtures.

Backend payloads are built as plain camelCase dicts, the way the REST
API sends them, and parsed through the real entities.  HTTP traffic is
mocked with respx or an ``httpx.MockTransport`` so tests run without a
backend.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio

from fleetdesk.config import Settings
from fleetdesk.domain.entities import Booking, User
from fleetdesk.infrastructure.http_client import ApiClient
from fleetdesk.infrastructure.repositories import BookingRepository
from fleetdesk.infrastructure.session import Session, SessionStore

BASE_URL = "http://backend.test/api"


# ── Payload factories ─────────────────────────────────────────────────


def user_payload(user_id: str = "u-1", role: str = "customer", **extra: Any) -> dict:
    payload = {
        "_id": user_id,
        "email": f"{user_id}@example.com",
        "role": role,
        "profile": {"firstName": "Ada", "lastName": "Lovelace", "phone": "+1 555 0100"},
    }
    payload.update(extra)
    return payload


def vehicle_payload(vehicle_id: str = "v-1", **extra: Any) -> dict:
    payload = {
        "_id": vehicle_id,
        "make": "Toyota",
        "modelName": "Corolla",
        "year": 2022,
        "licensePlate": "ABC-123",
        "type": "sedan",
        "pricing": {"baseRate": 100, "rateType": "daily", "currency": "USD"},
        "availability": True,
        "status": "active",
    }
    payload.update(extra)
    return payload


def booking_payload(
    booking_id: str = "b-1",
    status: str = "pending",
    total: Optional[float] = 115.0,
    start: Optional[datetime] = None,
    updated_at: Optional[datetime] = None,
    **extra: Any,
) -> dict:
    start = start or datetime(2030, 1, 10, 9, 0)
    payload = {
        "_id": booking_id,
        "vehicle": vehicle_payload(),
        "customer": user_payload("c-1", "customer"),
        "scheduledDate": {
            "start": start.isoformat(),
            "end": (start + timedelta(days=1)).isoformat(),
        },
        "status": status,
    }
    if total is not None:
        payload["pricing"] = {"baseAmount": total, "totalAmount": total}
    if updated_at is not None:
        payload["updatedAt"] = updated_at.isoformat()
    payload.update(extra)
    return payload


def make_booking(booking_id: str = "b-1", status: str = "pending", **kwargs: Any) -> Booking:
    return Booking.model_validate(booking_payload(booking_id, status, **kwargs))


def envelope(data: Any = None, message: str = "ok") -> dict:
    return {"success": True, "data": data, "message": message}


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        api_base_url=BASE_URL,
        request_timeout_seconds=1.0,
        session_file=str(tmp_path / "session.json"),
    )


@pytest.fixture
def session_store(test_settings) -> SessionStore:
    return SessionStore(test_settings.session_file)


def sign_in(store: SessionStore, role: str, user_id: str = "u-1") -> Session:
    session = Session(token=f"token-{user_id}", user=User.model_validate(user_payload(user_id, role)))
    store.set(session)
    return session


@pytest_asyncio.fixture
async def api(test_settings, session_store):
    client = ApiClient(
        test_settings,
        session_store,
        http=httpx.AsyncClient(base_url=BASE_URL),
    )
    yield client
    await client.aclose()


@pytest.fixture
def bookings(api, session_store) -> BookingRepository:
    return BookingRepository(api, session_store)

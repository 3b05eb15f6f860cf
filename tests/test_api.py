"""
Integration tests for the REST API endpoints.

The app runs in-process over ``ASGITransport``; the rental backend it
talks to is a small in-memory fake served through ``httpx.MockTransport``.
"""

import json
import re
from datetime import datetime, timedelta

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fleetdesk.api.app import create_app
from tests.conftest import BASE_URL, booking_payload, envelope, sign_in, user_payload, vehicle_payload


class FakeBackend:
    """Just enough of the rental REST API for the screens under test."""

    def __init__(self):
        self.bookings = {
            "b-1": booking_payload("b-1", "pending"),
            "b-2": booking_payload("b-2", "completed", total=230.0),
        }
        self.vehicles = {"v-1": vehicle_payload("v-1")}
        self.requests: list[httpx.Request] = []
        self.down = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("backend unreachable", request=request)
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        method = request.method

        if method == "POST" and path == "/auth/login":
            body = json.loads(request.content)
            if body["password"] != "Secret1!x":
                return httpx.Response(401, json={"success": False, "message": "Invalid credentials"})
            return httpx.Response(
                200,
                json=envelope({"token": "t-1", "user": user_payload("o-1", "vehicle_owner")}),
            )
        if method == "POST" and path == "/auth/logout":
            return httpx.Response(200, json=envelope(None))
        if method == "GET" and path == "/auth/profile":
            return httpx.Response(200, json=envelope(user_payload("c-1", "customer")))
        if method == "PUT" and path == "/auth/change-password":
            return httpx.Response(200, json=envelope(None, "Password changed"))
        if method == "GET" and path.startswith("/bookings/") and path.endswith("bookings"):
            return httpx.Response(200, json=envelope(list(self.bookings.values())))
        if method == "GET" and path == "/users/drivers":
            return httpx.Response(200, json=envelope([user_payload("d-1", "driver")]))
        if method == "GET" and path == "/vehicles/owner/my-vehicles":
            return httpx.Response(200, json=envelope(list(self.vehicles.values())))

        match = re.fullmatch(r"/bookings/([\w-]+)", path)
        if match and method == "GET":
            return httpx.Response(200, json=envelope(self.bookings[match.group(1)]))
        if match and method == "PUT":
            booking = self.bookings[match.group(1)]
            booking["status"] = json.loads(request.content)["status"]
            return httpx.Response(200, json=envelope(booking))

        match = re.fullmatch(r"/vehicles/([\w-]+)", path)
        if match and method == "GET":
            vehicle = self.vehicles.get(match.group(1))
            if vehicle is None:
                return httpx.Response(404, json={"success": False, "message": "Vehicle not found"})
            return httpx.Response(200, json=envelope(vehicle))

        return httpx.Response(404, json={"success": False, "message": "Not found"})


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def app(test_settings, backend):
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend), base_url=BASE_URL)
    return create_app(test_settings, http=http)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await app.state.api.aclose()


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_protected_screen_without_session_redirects_to_login(client, backend):
    resp = await client.get("/api/v1/dashboard/owner")
    assert resp.status_code == 401
    assert resp.json()["redirect"] == "/auth/login"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_wrong_role_is_forbidden(client, app, backend):
    sign_in(app.state.session, "customer", "c-1")
    resp = await client.get("/api/v1/dashboard/owner/bookings")
    assert resp.status_code == 403
    assert resp.json()["redirect"] == "/unauthorized"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_login_lands_on_role_dashboard(client, app):
    resp = await client.post(
        "/api/v1/auth/login", json={"email": "owner@example.com", "password": "Secret1!x"}
    )
    assert resp.status_code == 200
    assert resp.json() == {"message": "Login successful!", "redirect": "/dashboard/owner"}
    assert app.state.session.token == "t-1"


@pytest.mark.asyncio
async def test_login_form_errors_are_per_field(client, backend):
    resp = await client.post("/api/v1/auth/login", json={"email": "nope", "password": "x"})
    assert resp.status_code == 422
    assert set(resp.json()["fields"]) == {"email", "password"}
    assert backend.requests == []


@pytest.mark.asyncio
async def test_logout_clears_session(client, app):
    sign_in(app.state.session, "customer", "c-1")
    resp = await client.post("/api/v1/auth/logout")
    assert resp.json()["redirect"] == "/auth/login"
    assert not app.state.session.is_authenticated


@pytest.mark.asyncio
async def test_owner_dashboard(client, app):
    sign_in(app.state.session, "vehicle_owner", "o-1")
    resp = await client.get("/api/v1/dashboard/owner")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_vehicles"] == 1
    assert body["active_bookings"] == 1
    assert body["total_revenue"] == 230.0


@pytest.mark.asyncio
async def test_owner_bookings_filter(client, app):
    sign_in(app.state.session, "vehicle_owner", "o-1")
    resp = await client.get("/api/v1/dashboard/owner/bookings", params={"status": "active"})
    body = resp.json()
    assert [b["id"] for b in body["bookings"]] == ["b-1"]
    assert body["counts"]["all"] == 2
    assert body["drivers"][0]["id"] == "d-1"


@pytest.mark.asyncio
async def test_unknown_status_filter_is_rejected(client, app):
    sign_in(app.state.session, "vehicle_owner", "o-1")
    resp = await client.get("/api/v1/dashboard/owner/bookings", params={"status": "teleporting"})
    assert resp.status_code == 422
    assert "status" in resp.json()["fields"]


@pytest.mark.asyncio
async def test_owner_accepts_booking(client, app, backend):
    sign_in(app.state.session, "vehicle_owner", "o-1")
    resp = await client.post("/api/v1/dashboard/owner/bookings/b-1/accept")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Booking accepted"
    assert resp.json()["data"]["status"] == "confirmed"
    puts = [r for r in backend.requests if r.method == "PUT"]
    assert len(puts) == 1


@pytest.mark.asyncio
async def test_accepting_twice_is_a_conflict(client, app, backend):
    sign_in(app.state.session, "vehicle_owner", "o-1")
    await client.post("/api/v1/dashboard/owner/bookings/b-1/accept")
    resp = await client.post("/api/v1/dashboard/owner/bookings/b-1/accept")
    assert resp.status_code == 409
    assert resp.json()["kind"] == "invalid_transition"
    assert len([r for r in backend.requests if r.method == "PUT"]) == 1


@pytest.mark.asyncio
async def test_driver_cannot_start_pending_trip(client, app, backend):
    sign_in(app.state.session, "driver", "d-1")
    resp = await client.post("/api/v1/dashboard/driver/trips/b-1/start")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot start a booking that is pending"
    assert not [r for r in backend.requests if r.method == "PUT"]


@pytest.mark.asyncio
async def test_customer_quote(client, app):
    sign_in(app.state.session, "customer", "c-1")
    start = datetime(2030, 3, 1, 10, 0)
    resp = await client.get(
        "/api/v1/dashboard/customer/vehicles/v-1/quote",
        params={"start": start.isoformat(), "end": (start + timedelta(days=3)).isoformat()},
    )
    assert resp.status_code == 200
    assert resp.json() == {"base": 300, "tax": 30, "service_fee": 15, "total": 345, "units": 3}


@pytest.mark.asyncio
async def test_missing_vehicle_is_404(client, app):
    sign_in(app.state.session, "customer", "c-1")
    resp = await client.get("/api/v1/dashboard/customer/vehicles/v-404")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_backend_down_is_retryable(client, app, backend):
    sign_in(app.state.session, "customer", "c-1")
    backend.down = True
    resp = await client.get("/api/v1/dashboard/customer")
    assert resp.status_code == 503
    assert resp.json()["retryable"] is True


@pytest.mark.asyncio
async def test_expired_token_logs_out(client, app, backend):
    sign_in(app.state.session, "customer", "c-1")

    def expired(request):
        return httpx.Response(401, json={"success": False, "message": "Token expired"})

    app.state.api.http = httpx.AsyncClient(transport=httpx.MockTransport(expired), base_url=BASE_URL)
    resp = await client.get("/api/v1/dashboard/customer/bookings")
    assert resp.status_code == 401
    assert resp.json()["redirect"] == "/auth/login"
    assert not app.state.session.is_authenticated


@pytest.mark.asyncio
async def test_settings_profile_for_any_role(client, app):
    sign_in(app.state.session, "customer", "c-1")
    resp = await client.get("/api/v1/auth/profile")
    assert resp.status_code == 200
    assert resp.json()["id"] == "c-1"


@pytest.mark.asyncio
async def test_change_password(client, app, backend):
    sign_in(app.state.session, "driver", "d-1")
    resp = await client.put(
        "/api/v1/auth/change-password",
        json={"current_password": "Secret1!x", "new_password": "Another1!x"},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Password changed successfully"
    sent = json.loads(backend.requests[-1].content)
    assert sent == {"currentPassword": "Secret1!x", "newPassword": "Another1!x"}

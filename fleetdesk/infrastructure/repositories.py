"""
Repository Pattern -- abstracts the REST backend so views stay transport-agnostic.

Each repository receives the shared ``ApiClient`` and exposes
domain-relevant operations only.  Payloads are parsed into domain
entities here; nothing past this layer sees raw JSON.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel

from fleetdesk.domain.entities import Booking, User, Vehicle
from fleetdesk.domain.enums import BOOKING_TRANSITIONS, BookingAction, Role
from fleetdesk.domain.errors import (
    ApiError,
    InvalidTransitionError,
    NetworkError,
    ValidationError,
)
from fleetdesk.domain.forms import (
    BookingForm,
    ChangePasswordForm,
    LoginForm,
    RegisterForm,
    VehicleForm,
)

from .http_client import ApiClient
from .locks import InFlightGuard
from .session import Session, SessionStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        logger.warning("Malformed %s payload: %s", model.__name__, exc)
        raise ApiError("Unexpected response from the server") from exc


def parse_list(model: type[M], data: Any) -> list[M]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ApiError("Unexpected response from the server")
    return [parse(model, item) for item in data]


class BookingRepository:
    ROLE_PATHS: dict[Role, str] = {
        Role.CUSTOMER: "/bookings/my-bookings",
        Role.OWNER: "/bookings/owner/bookings",
        Role.DRIVER: "/bookings/driver/bookings",
    }

    def __init__(self, api: ApiClient, session: Optional[SessionStore] = None):
        self.api = api
        self._lists: dict[tuple[Role, str], list[Booking]] = {}
        self._known: dict[str, Booking] = {}
        self._generation = 0
        self._guard = InFlightGuard()
        if session is not None:
            session.subscribe(lambda _session: self.reset())

    # ── Reads ─────────────────────────────────────────────────────────

    async def list_for_role(
        self, role: Role, user_id: str, *, refresh: bool = False
    ) -> list[Booking]:
        """Bookings visible to *role*; served from cache until invalidated."""
        key = (Role(role), user_id)
        if not refresh and key in self._lists:
            return list(self._lists[key])

        generation = self._generation
        bookings = parse_list(Booking, await self.api.get(self.ROLE_PATHS[key[0]]))
        # A transition finished while this list was on the wire: keep it uncached.
        if generation == self._generation:
            self._lists[key] = bookings
            for booking in bookings:
                self._known[booking.id] = booking
        return list(bookings)

    async def get(self, booking_id: str) -> Booking:
        booking = parse(Booking, await self.api.get(f"/bookings/{booking_id}"))
        self._known[booking.id] = booking
        return booking

    def known(self, booking_id: str) -> Optional[Booking]:
        return self._known.get(booking_id)

    # ── Writes ────────────────────────────────────────────────────────

    async def create(self, form: BookingForm) -> Booking:
        booking = parse(Booking, await self.api.post("/bookings", json=form.to_payload()))
        self._known[booking.id] = booking
        self.invalidate()
        logger.info("Booking %s created for vehicle %s", booking.id, form.vehicle_id)
        return booking

    async def transition(
        self,
        booking_id: str,
        action: BookingAction,
        payload: Optional[dict[str, Any]] = None,
    ) -> Booking:
        """Apply *action* to a booking; one request per booking id at a time."""
        action = BookingAction(action)
        return await self._guard.run(
            booking_id,
            action,
            lambda: self._apply(booking_id, action, payload or {}),
        )

    async def _apply(
        self, booking_id: str, action: BookingAction, payload: dict[str, Any]
    ) -> Booking:
        current = self._known.get(booking_id) or await self.get(booking_id)
        target = current.check(action)
        path, body = self._request_for(booking_id, action, payload)

        try:
            data = await self.api.put(path, json=body)
        except ApiError as exc:
            self._forget(booking_id)
            if exc.server_fault:
                logger.warning(
                    "Backend failed %s on booking %s: %s", action.value, booking_id, exc.message
                )
                raise
            logger.info(
                "Backend refused %s on booking %s: %s", action.value, booking_id, exc.message
            )
            raise InvalidTransitionError(exc.message) from exc

        if data is None:
            booking = current.model_copy(update={"status": target})
        else:
            booking = parse(Booking, data)
        self._known[booking.id] = booking
        self.invalidate(booking_id)
        logger.info(
            "Booking %s: %s -> %s", booking_id, current.status.value, booking.status.value
        )
        return booking

    @staticmethod
    def _request_for(
        booking_id: str, action: BookingAction, payload: dict[str, Any]
    ) -> tuple[str, Optional[dict[str, Any]]]:
        base = f"/bookings/{booking_id}"
        if action in (BookingAction.ACCEPT, BookingAction.REJECT):
            _, target = BOOKING_TRANSITIONS[action]
            return base, {"status": target.value}
        if action is BookingAction.ASSIGN_DRIVER:
            driver_id = payload.get("driver_id")
            if not driver_id:
                raise ValidationError(fields={"driver_id": "Driver is required"})
            return base, {"driver": driver_id}
        if action is BookingAction.CANCEL:
            return f"{base}/cancel", {"cancelReason": payload.get("reason")}
        if action is BookingAction.START:
            return f"{base}/start", None
        return f"{base}/complete", None

    # ── Cache ─────────────────────────────────────────────────────────

    def invalidate(self, booking_id: Optional[str] = None) -> None:
        """Drop cached lists: all of them, or those containing *booking_id*."""
        self._generation += 1
        if booking_id is None:
            self._lists.clear()
            return
        stale = [
            key
            for key, bookings in self._lists.items()
            if any(b.id == booking_id for b in bookings)
        ]
        for key in stale:
            del self._lists[key]
        if stale:
            logger.debug("Invalidated %d cached list(s) for booking %s", len(stale), booking_id)

    def reset(self) -> None:
        self._known.clear()
        self.invalidate()

    def _forget(self, booking_id: str) -> None:
        self._known.pop(booking_id, None)
        self.invalidate(booking_id)


class VehicleRepository:
    def __init__(self, api: ApiClient):
        self.api = api

    async def list_all(self, **filters: Any) -> list[Vehicle]:
        params = {k: v for k, v in filters.items() if v is not None}
        return parse_list(Vehicle, await self.api.get("/vehicles", params=params or None))

    async def get(self, vehicle_id: str) -> Vehicle:
        return parse(Vehicle, await self.api.get(f"/vehicles/{vehicle_id}"))

    async def list_mine(self) -> list[Vehicle]:
        return parse_list(Vehicle, await self.api.get("/vehicles/owner/my-vehicles"))

    async def create(self, form: VehicleForm) -> Vehicle:
        vehicle = parse(Vehicle, await self.api.post("/vehicles", json=form.to_payload()))
        logger.info("Vehicle %s created", vehicle.id)
        return vehicle

    async def update(self, vehicle_id: str, form: VehicleForm) -> Vehicle:
        return parse(
            Vehicle, await self.api.put(f"/vehicles/{vehicle_id}", json=form.to_payload())
        )

    async def delete(self, vehicle_id: str) -> None:
        await self.api.delete(f"/vehicles/{vehicle_id}")
        logger.info("Vehicle %s deleted", vehicle_id)


class AuthRepository:
    def __init__(self, api: ApiClient, session: SessionStore):
        self.api = api
        self.session = session

    async def login(self, form: LoginForm) -> Session:
        data = await self.api.post("/auth/login", json=form.to_payload(), authenticated=False)
        session = parse(Session, data)
        self.session.set(session)
        return session

    async def register(self, form: RegisterForm) -> Session:
        data = await self.api.post(
            "/auth/register", json=form.to_payload(), authenticated=False
        )
        session = parse(Session, data)
        self.session.set(session)
        return session

    async def logout(self) -> None:
        """Tell the backend, then always drop the local session."""
        if not self.session.is_authenticated:
            return
        try:
            await self.api.post("/auth/logout")
        except NetworkError as exc:
            logger.warning("Logout request failed, clearing the local session: %s", exc.message)
            raise
        finally:
            self.session.clear()

    async def profile(self) -> User:
        return parse(User, await self.api.get("/auth/profile"))

    async def update_profile(self, data: dict[str, Any]) -> User:
        user = parse(User, await self.api.put("/auth/profile", json=data))
        token = self.session.token
        if token:
            self.session.set(Session(token=token, user=user))
        return user

    async def change_password(self, form: ChangePasswordForm) -> None:
        await self.api.put("/auth/change-password", json=form.to_payload())


class UserRepository:
    def __init__(self, api: ApiClient):
        self.api = api

    async def drivers(self) -> list[User]:
        return parse_list(User, await self.api.get("/users/drivers"))

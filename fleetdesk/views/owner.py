"""Vehicle-owner screens: dashboard, incoming bookings, fleet."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Union

from fleetdesk.domain.dashboard import DashboardSummary, summarize
from fleetdesk.domain.entities import Booking, User, Vehicle
from fleetdesk.domain.enums import BookingAction, BookingStatus, Role, StatusGroup, VehicleStatus
from fleetdesk.domain.filters import filter_bookings, filter_vehicles, status_counts
from fleetdesk.domain.forms import VehicleForm, validate_form
from fleetdesk.domain.result import Ok, Result
from fleetdesk.infrastructure.repositories import (
    BookingRepository,
    UserRepository,
    VehicleRepository,
)
from fleetdesk.infrastructure.session import SessionStore

from .base import ViewController


@dataclass(frozen=True)
class OwnerDashboard:
    total_vehicles: int
    active_bookings: int
    total_revenue: float
    monthly_revenue: float
    summary: DashboardSummary


class OwnerDashboardView(ViewController):
    roles = (Role.OWNER,)

    def __init__(
        self,
        session: SessionStore,
        vehicles: VehicleRepository,
        bookings: BookingRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(session)
        self.vehicles = vehicles
        self.bookings = bookings
        self.clock = clock
        self.state: Optional[OwnerDashboard] = None

    async def load(self, refresh: bool = False) -> Result[OwnerDashboard]:
        result = await self._latest("dashboard", lambda: self._fetch(refresh))
        if isinstance(result, Ok):
            self.state = result.value
        return result

    async def _fetch(self, refresh: bool) -> OwnerDashboard:
        vehicles, bookings = await asyncio.gather(
            self.vehicles.list_mine(),
            self.bookings.list_for_role(Role.OWNER, self.user_id, refresh=refresh),
        )
        summary = summarize(bookings, self.clock())
        return OwnerDashboard(
            total_vehicles=len(vehicles),
            active_bookings=summary.active,
            total_revenue=summary.total_earnings,
            monthly_revenue=summary.month_earnings,
            summary=summary,
        )


@dataclass
class OwnerBookingsState:
    bookings: list[Booking] = field(default_factory=list)
    drivers: list[User] = field(default_factory=list)


class OwnerBookingsView(ViewController):
    roles = (Role.OWNER,)

    def __init__(
        self,
        session: SessionStore,
        bookings: BookingRepository,
        users: UserRepository,
    ):
        super().__init__(session)
        self.bookings = bookings
        self.users = users
        self.state = OwnerBookingsState()

    async def load(self, refresh: bool = False) -> Result[OwnerBookingsState]:
        result = await self._latest("bookings", lambda: self._fetch(refresh))
        if isinstance(result, Ok):
            self.state = result.value
        return result

    async def _fetch(self, refresh: bool) -> OwnerBookingsState:
        bookings, drivers = await asyncio.gather(
            self.bookings.list_for_role(Role.OWNER, self.user_id, refresh=refresh),
            self.users.drivers(),
        )
        return OwnerBookingsState(bookings=bookings, drivers=drivers)

    def visible(
        self,
        status: Union[StatusGroup, BookingStatus] = StatusGroup.ALL,
        search: str = "",
    ) -> list[Booking]:
        return filter_bookings(self.state.bookings, status, search)

    def counts(self) -> dict[str, int]:
        return status_counts(self.state.bookings)

    async def accept(self, booking_id: str) -> Result[Booking]:
        return await self._transition(
            self.bookings, booking_id, BookingAction.ACCEPT, "Booking accepted"
        )

    async def reject(self, booking_id: str) -> Result[Booking]:
        return await self._transition(
            self.bookings, booking_id, BookingAction.REJECT, "Booking rejected"
        )

    async def assign_driver(self, booking_id: str, driver_id: str) -> Result[Booking]:
        driver = next((d for d in self.state.drivers if d.id == driver_id), None)
        name = (driver.full_name if driver else "") or "Driver"
        return await self._transition(
            self.bookings,
            booking_id,
            BookingAction.ASSIGN_DRIVER,
            f"{name} assigned successfully",
            payload={"driver_id": driver_id},
        )


class OwnerVehiclesView(ViewController):
    roles = (Role.OWNER,)

    def __init__(self, session: SessionStore, vehicles: VehicleRepository):
        super().__init__(session)
        self.vehicles = vehicles
        self.state: list[Vehicle] = []

    async def load(self, refresh: bool = False) -> Result[list[Vehicle]]:
        result = await self._latest("vehicles", self.vehicles.list_mine)
        if isinstance(result, Ok):
            self.state = result.value
        return result

    def visible(
        self, status: Optional[VehicleStatus] = None, search: str = ""
    ) -> list[Vehicle]:
        return filter_vehicles(self.state, status, search)

    async def create(self, data: dict[str, Any]) -> Result[Vehicle]:
        async def run() -> Vehicle:
            form = validate_form(VehicleForm, data)
            return await self.vehicles.create(form)

        return await self._mutate(run(), "Vehicle added successfully", reload=True)

    async def delete(self, vehicle_id: str) -> Result[None]:
        return await self._mutate(
            self.vehicles.delete(vehicle_id), "Vehicle deleted successfully", reload=True
        )

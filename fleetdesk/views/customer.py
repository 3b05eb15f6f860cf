"""Customer screens: dashboard, own bookings, vehicle browsing and booking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Union

from fleetdesk.domain.dashboard import DashboardSummary, current_booking, summarize
from fleetdesk.domain.entities import Booking, Vehicle
from fleetdesk.domain.enums import (
    BOOKING_TRANSITIONS,
    BookingAction,
    BookingStatus,
    Role,
    StatusGroup,
    VehicleStatus,
)
from fleetdesk.domain.filters import filter_bookings, filter_vehicles
from fleetdesk.domain.forms import BookingForm, validate_form
from fleetdesk.domain.pricing import PricingCalculator, Quote
from fleetdesk.domain.result import Ok, Result
from fleetdesk.infrastructure.repositories import BookingRepository, VehicleRepository
from fleetdesk.infrastructure.session import SessionStore

from .base import ViewController


def can_cancel(booking: Booking) -> bool:
    allowed, _ = BOOKING_TRANSITIONS[BookingAction.CANCEL]
    return booking.status in allowed


@dataclass
class CustomerDashboard:
    summary: DashboardSummary = field(default_factory=DashboardSummary)
    current: Optional[Booking] = None
    recent: list[Booking] = field(default_factory=list)


class CustomerDashboardView(ViewController):
    roles = (Role.CUSTOMER,)

    def __init__(
        self,
        session: SessionStore,
        bookings: BookingRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(session)
        self.bookings = bookings
        self.clock = clock
        self.state = CustomerDashboard()

    async def load(self, refresh: bool = False) -> Result[CustomerDashboard]:
        result = await self._latest("dashboard", lambda: self._fetch(refresh))
        if isinstance(result, Ok):
            self.state = result.value
        return result

    async def _fetch(self, refresh: bool) -> CustomerDashboard:
        bookings = await self.bookings.list_for_role(
            Role.CUSTOMER, self.user_id, refresh=refresh
        )
        return CustomerDashboard(
            summary=summarize(bookings, self.clock()),
            current=current_booking(bookings),
            recent=bookings[:5],
        )


class CustomerBookingsView(ViewController):
    roles = (Role.CUSTOMER,)

    def __init__(self, session: SessionStore, bookings: BookingRepository):
        super().__init__(session)
        self.bookings = bookings
        self.state: list[Booking] = []

    async def load(self, refresh: bool = False) -> Result[list[Booking]]:
        result = await self._latest(
            "bookings",
            lambda: self.bookings.list_for_role(
                Role.CUSTOMER, self.user_id, refresh=refresh
            ),
        )
        if isinstance(result, Ok):
            self.state = result.value
        return result

    def visible(
        self,
        group: Union[StatusGroup, BookingStatus] = StatusGroup.ALL,
        search: str = "",
    ) -> list[Booking]:
        return filter_bookings(self.state, group, search)

    async def cancel(self, booking_id: str, reason: Optional[str] = None) -> Result[Booking]:
        return await self._transition(
            self.bookings,
            booking_id,
            BookingAction.CANCEL,
            "Booking cancelled successfully",
            payload={"reason": reason},
        )


class CustomerVehiclesView(ViewController):
    roles = (Role.CUSTOMER,)

    def __init__(
        self,
        session: SessionStore,
        vehicles: VehicleRepository,
        bookings: BookingRepository,
        pricing: Optional[PricingCalculator] = None,
    ):
        super().__init__(session)
        self.vehicles = vehicles
        self.bookings = bookings
        self.pricing = pricing or PricingCalculator()
        self.state: list[Vehicle] = []

    async def load(self, refresh: bool = False) -> Result[list[Vehicle]]:
        result = await self._latest("vehicles", self.vehicles.list_all)
        if isinstance(result, Ok):
            self.state = result.value
        return result

    def visible(self, search: str = "") -> list[Vehicle]:
        """Vehicles that can be booked right now."""
        return [
            v
            for v in filter_vehicles(self.state, VehicleStatus.ACTIVE, search)
            if v.availability
        ]

    async def vehicle(self, vehicle_id: str) -> Result[Vehicle]:
        return await self._latest("vehicle", lambda: self.vehicles.get(vehicle_id))

    def quote(
        self, vehicle: Vehicle, start: Optional[datetime], end: Optional[datetime]
    ) -> Quote:
        return self.pricing.quote(
            vehicle.pricing.base_rate, vehicle.pricing.rate_type, start, end
        )

    async def book(self, data: dict[str, Any]) -> Result[Booking]:
        async def run() -> Booking:
            form = validate_form(BookingForm, data)
            return await self.bookings.create(form)

        return await self._mutate(run(), "Booking created successfully")

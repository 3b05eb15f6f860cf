"""Driver screens: dashboard and assigned trips."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Union

from fleetdesk.domain.dashboard import DashboardSummary, summarize
from fleetdesk.domain.entities import Booking
from fleetdesk.domain.enums import ACTIVE_STATUSES, BookingAction, BookingStatus, Role, StatusGroup
from fleetdesk.domain.filters import filter_bookings
from fleetdesk.domain.result import Ok, Result
from fleetdesk.infrastructure.repositories import BookingRepository
from fleetdesk.infrastructure.session import SessionStore

from .base import ViewController


@dataclass
class DriverState:
    bookings: list[Booking] = field(default_factory=list)
    summary: DashboardSummary = field(default_factory=DashboardSummary)

    @property
    def assigned(self) -> list[Booking]:
        """Trips still to drive or under way."""
        return [
            b
            for b in self.bookings
            if b.status in ACTIVE_STATUSES and b.status != BookingStatus.PENDING
        ]


class _DriverView(ViewController):
    roles = (Role.DRIVER,)

    def __init__(
        self,
        session: SessionStore,
        bookings: BookingRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(session)
        self.bookings = bookings
        self.clock = clock
        self.state = DriverState()

    async def load(self, refresh: bool = False) -> Result[DriverState]:
        result = await self._latest("trips", lambda: self._fetch(refresh))
        if isinstance(result, Ok):
            self.state = result.value
        return result

    async def _fetch(self, refresh: bool) -> DriverState:
        bookings = await self.bookings.list_for_role(
            Role.DRIVER, self.user_id, refresh=refresh
        )
        return DriverState(bookings=bookings, summary=summarize(bookings, self.clock()))


class DriverDashboardView(_DriverView):
    """Counters and earnings; the trip list itself lives on the trips screen."""


class DriverTripsView(_DriverView):
    def visible(
        self, status: Union[StatusGroup, BookingStatus] = StatusGroup.ALL
    ) -> list[Booking]:
        return filter_bookings(self.state.bookings, status)

    def trip(self, booking_id: str) -> Optional[Booking]:
        return next((b for b in self.state.bookings if b.id == booking_id), None)

    async def start(self, booking_id: str) -> Result[Booking]:
        return await self._transition(
            self.bookings, booking_id, BookingAction.START, "Trip started successfully"
        )

    async def complete(self, booking_id: str) -> Result[Booking]:
        return await self._transition(
            self.bookings, booking_id, BookingAction.COMPLETE, "Trip completed successfully"
        )

"""Client-side list filtering and search for the booking and vehicle screens."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from .entities import Booking, Vehicle
from .enums import STATUS_GROUPS, BookingStatus, StatusGroup, VehicleStatus


def _haystack_for(booking: Booking) -> list[str]:
    vehicle = booking.vehicle_record
    customer = booking.customer_record
    return [
        booking.id,
        vehicle.display_name if vehicle else "",
        vehicle.license_plate if vehicle else "",
        customer.full_name if customer else "",
    ]


def matches_search(fields: Iterable[str], search: str) -> bool:
    """Case-insensitive substring match of *search* in any of *fields*."""
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in (field or "").lower() for field in fields)


def filter_bookings(
    bookings: Iterable[Booking],
    group: Union[StatusGroup, BookingStatus] = StatusGroup.ALL,
    search: str = "",
) -> list[Booking]:
    """Return the bookings in *group* that match *search*, as a new list.

    *group* is either a status group (``active`` spans three statuses) or a
    single status for screens that filter on one exact status.
    """
    if isinstance(group, BookingStatus):
        wanted = frozenset({group})
    else:
        wanted = STATUS_GROUPS[StatusGroup(group)]
    return [
        b
        for b in bookings
        if b.status in wanted and matches_search(_haystack_for(b), search)
    ]


def filter_vehicles(
    vehicles: Iterable[Vehicle],
    status: Optional[VehicleStatus] = None,
    search: str = "",
) -> list[Vehicle]:
    return [
        v
        for v in vehicles
        if (status is None or v.status == status)
        and matches_search((v.make, v.model, v.license_plate), search)
    ]


def status_counts(bookings: Iterable[Booking]) -> dict[str, int]:
    """Count bookings per status, plus an ``all`` total."""
    bookings = list(bookings)
    counts = {status.value: 0 for status in BookingStatus}
    for booking in bookings:
        counts[booking.status.value] += 1
    counts["all"] = len(bookings)
    return counts


def parse_status_filter(value: str) -> Union[StatusGroup, BookingStatus]:
    """Read a filter query value: a status group first, else one exact status."""
    try:
        return StatusGroup(value)
    except ValueError:
        return BookingStatus(value)

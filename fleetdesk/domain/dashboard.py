"""
Dashboard aggregation over a raw booking list.

Pure functions only: the same bookings and the same ``now`` always give
the same summary, whatever order the list arrives in.  Every sum adds
amounts in a canonical (booking id) order so float rounding cannot
depend on list order either.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .clock import on_clock_of
from .entities import Booking
from .enums import ACTIVE_STATUSES, BookingStatus


@dataclass(frozen=True)
class DashboardSummary:
    active: int = 0
    completed: int = 0
    upcoming: int = 0
    confirmed: int = 0
    in_progress: int = 0
    today_earnings: float = 0.0
    month_earnings: float = 0.0
    total_earnings: float = 0.0


def _same_day(moment: Optional[datetime], now: datetime) -> bool:
    if moment is None:
        return False
    return on_clock_of(moment, now).date() == now.date()


def _same_month(moment: Optional[datetime], now: datetime) -> bool:
    if moment is None:
        return False
    local = on_clock_of(moment, now)
    return (local.year, local.month) == (now.year, now.month)


def _earnings(bookings: Iterable[Booking]) -> float:
    ordered = sorted(bookings, key=lambda b: (b.id, b.total_amount))
    return round(sum(b.total_amount for b in ordered), 2)


def summarize(bookings: Iterable[Booking], now: datetime) -> DashboardSummary:
    """Derive the dashboard counters and earnings from *bookings*."""
    bookings = list(bookings)
    completed = [b for b in bookings if b.status == BookingStatus.COMPLETED]

    return DashboardSummary(
        active=sum(1 for b in bookings if b.status in ACTIVE_STATUSES),
        completed=len(completed),
        upcoming=sum(
            1
            for b in bookings
            if b.status == BookingStatus.CONFIRMED
            and on_clock_of(b.scheduled_date.start, now) > now
        ),
        confirmed=sum(1 for b in bookings if b.status == BookingStatus.CONFIRMED),
        in_progress=sum(
            1 for b in bookings if b.status == BookingStatus.IN_PROGRESS
        ),
        today_earnings=_earnings(b for b in completed if _same_day(b.updated_at, now)),
        month_earnings=_earnings(
            b for b in completed if _same_month(b.updated_at, now)
        ),
        total_earnings=_earnings(completed),
    )


def current_booking(bookings: Iterable[Booking]) -> Optional[Booking]:
    """The trip to feature: the first one under way, else the first confirmed."""
    bookings = list(bookings)
    for wanted in (BookingStatus.IN_PROGRESS, BookingStatus.CONFIRMED):
        for booking in bookings:
            if booking.status == wanted:
                return booking
    return None

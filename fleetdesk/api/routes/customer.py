"""
Customer screens
================

GET  /api/v1/dashboard/customer                        -- counters and the current trip
GET  /api/v1/dashboard/customer/bookings               -- own bookings, filtered
POST /api/v1/dashboard/customer/bookings               -- book a vehicle
POST /api/v1/dashboard/customer/bookings/{id}/cancel   -- pending | confirmed -> cancelled
GET  /api/v1/dashboard/customer/vehicles               -- bookable vehicles
GET  /api/v1/dashboard/customer/vehicles/{id}          -- one vehicle
GET  /api/v1/dashboard/customer/vehicles/{id}/quote    -- price for a rental window
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request

from fleetdesk.api.dependencies import (
    mounted,
    render,
    render_mutation,
    render_with,
    status_filter,
)
from fleetdesk.api.middleware import limiter
from fleetdesk.api.schemas import CancelBookingRequest
from fleetdesk.config import settings
from fleetdesk.views.customer import (
    CustomerBookingsView,
    CustomerDashboardView,
    CustomerVehiclesView,
    can_cancel,
)

router = APIRouter(prefix="/dashboard/customer", tags=["customer"])

dashboard_view = mounted(lambda s: CustomerDashboardView(s.session, s.bookings))
bookings_view = mounted(lambda s: CustomerBookingsView(s.session, s.bookings))
vehicles_view = mounted(
    lambda s: CustomerVehiclesView(
        s.session,
        s.vehicles,
        s.bookings,
        s.pricing,
    )
)


@router.get("", summary="Customer dashboard")
@limiter.limit(settings.rate_limit)
async def dashboard(request: Request, view: CustomerDashboardView = Depends(dashboard_view)):
    return render(await view.load())


@router.get("/bookings", summary="The customer's bookings")
@limiter.limit(settings.rate_limit)
async def list_bookings(
    request: Request,
    filter: str = "all",
    q: str = "",
    view: CustomerBookingsView = Depends(bookings_view),
):
    wanted = status_filter(filter)
    return render_with(
        await view.load(),
        lambda _bookings: [
            {"booking": b, "can_cancel": can_cancel(b)} for b in view.visible(wanted, q)
        ],
    )


@router.post("/bookings", status_code=201, summary="Book a vehicle")
@limiter.limit(settings.rate_limit)
async def create_booking(
    request: Request,
    data: dict[str, Any] = Body(...),
    view: CustomerVehiclesView = Depends(vehicles_view),
):
    return render_mutation(await view.book(data), view)


@router.post("/bookings/{booking_id}/cancel", summary="Cancel a booking")
@limiter.limit(settings.rate_limit)
async def cancel_booking(
    request: Request,
    booking_id: str,
    body: Optional[CancelBookingRequest] = None,
    view: CustomerBookingsView = Depends(bookings_view),
):
    reason = body.reason if body else None
    return render_mutation(await view.cancel(booking_id, reason), view)


@router.get("/vehicles", summary="Vehicles available to book")
@limiter.limit(settings.rate_limit)
async def list_vehicles(
    request: Request, q: str = "", view: CustomerVehiclesView = Depends(vehicles_view)
):
    return render_with(await view.load(), lambda _vehicles: view.visible(q))


@router.get("/vehicles/{vehicle_id}", summary="Vehicle details")
@limiter.limit(settings.rate_limit)
async def get_vehicle(
    request: Request,
    vehicle_id: str,
    view: CustomerVehiclesView = Depends(vehicles_view),
):
    return render(await view.vehicle(vehicle_id))


@router.get("/vehicles/{vehicle_id}/quote", summary="Price a rental window")
@limiter.limit(settings.rate_limit)
async def quote_vehicle(
    request: Request,
    vehicle_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    view: CustomerVehiclesView = Depends(vehicles_view),
):
    return render_with(
        await view.vehicle(vehicle_id),
        lambda vehicle: view.quote(vehicle, start, end),
    )

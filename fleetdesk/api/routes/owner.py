"""
Vehicle-owner screens
=====================

GET    /api/v1/dashboard/owner                              -- fleet and revenue summary
GET    /api/v1/dashboard/owner/bookings                     -- bookings, drivers, status counts
POST   /api/v1/dashboard/owner/bookings/{id}/accept         -- pending -> confirmed
POST   /api/v1/dashboard/owner/bookings/{id}/reject         -- pending | confirmed -> cancelled
POST   /api/v1/dashboard/owner/bookings/{id}/assign-driver  -- attach a driver
GET    /api/v1/dashboard/owner/vehicles                     -- own fleet
POST   /api/v1/dashboard/owner/vehicles                     -- add a vehicle
DELETE /api/v1/dashboard/owner/vehicles/{id}                -- remove a vehicle
"""

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
from fleetdesk.api.schemas import AssignDriverRequest
from fleetdesk.config import settings
from fleetdesk.domain.enums import VehicleStatus
from fleetdesk.domain.errors import ValidationError
from fleetdesk.views.owner import OwnerBookingsView, OwnerDashboardView, OwnerVehiclesView

router = APIRouter(prefix="/dashboard/owner", tags=["owner"])

dashboard_view = mounted(
    lambda s: OwnerDashboardView(s.session, s.vehicles, s.bookings)
)
bookings_view = mounted(lambda s: OwnerBookingsView(s.session, s.bookings, s.users))
vehicles_view = mounted(lambda s: OwnerVehiclesView(s.session, s.vehicles))


@router.get("", summary="Owner dashboard")
@limiter.limit(settings.rate_limit)
async def dashboard(
    request: Request, view: OwnerDashboardView = Depends(dashboard_view)
):
    return render(await view.load())


@router.get("/bookings", summary="Bookings on the owner's fleet")
@limiter.limit(settings.rate_limit)
async def list_bookings(
    request: Request,
    status: str = "all",
    q: str = "",
    view: OwnerBookingsView = Depends(bookings_view),
):
    wanted = status_filter(status)
    return render_with(
        await view.load(),
        lambda state: {
            "bookings": view.visible(wanted, q),
            "counts": view.counts(),
            "drivers": state.drivers,
        },
    )


@router.post("/bookings/{booking_id}/accept", summary="Accept a pending booking")
@limiter.limit(settings.rate_limit)
async def accept_booking(
    request: Request,
    booking_id: str,
    view: OwnerBookingsView = Depends(bookings_view),
):
    return render_mutation(await view.accept(booking_id), view)


@router.post("/bookings/{booking_id}/reject", summary="Reject a booking")
@limiter.limit(settings.rate_limit)
async def reject_booking(
    request: Request,
    booking_id: str,
    view: OwnerBookingsView = Depends(bookings_view),
):
    return render_mutation(await view.reject(booking_id), view)


@router.post("/bookings/{booking_id}/assign-driver", summary="Assign a driver")
@limiter.limit(settings.rate_limit)
async def assign_driver(
    request: Request,
    booking_id: str,
    body: AssignDriverRequest,
    view: OwnerBookingsView = Depends(bookings_view),
):
    await view.load()
    return render_mutation(await view.assign_driver(booking_id, body.driver_id), view)


@router.get("/vehicles", summary="The owner's vehicles")
@limiter.limit(settings.rate_limit)
async def list_vehicles(
    request: Request,
    status: Optional[str] = None,
    q: str = "",
    view: OwnerVehiclesView = Depends(vehicles_view),
):
    wanted = None
    if status and status != "all":
        try:
            wanted = VehicleStatus(status)
        except ValueError as exc:
            raise ValidationError(fields={"status": f"Unknown status filter: {status}"}) from exc
    return render_with(await view.load(), lambda _vehicles: view.visible(wanted, q))


@router.post("/vehicles", status_code=201, summary="Add a vehicle")
@limiter.limit(settings.rate_limit)
async def create_vehicle(
    request: Request,
    data: dict[str, Any] = Body(...),
    view: OwnerVehiclesView = Depends(vehicles_view),
):
    return render_mutation(await view.create(data), view)


@router.delete("/vehicles/{vehicle_id}", summary="Delete a vehicle")
@limiter.limit(settings.rate_limit)
async def delete_vehicle(
    request: Request,
    vehicle_id: str,
    view: OwnerVehiclesView = Depends(vehicles_view),
):
    return render_mutation(await view.delete(vehicle_id), view)

"""
Driver screens
==============

GET  /api/v1/dashboard/driver                     -- trip counters and earnings
GET  /api/v1/dashboard/driver/trips               -- assigned trips, filtered by status
POST /api/v1/dashboard/driver/trips/{id}/start    -- confirmed -> in_progress
POST /api/v1/dashboard/driver/trips/{id}/complete -- in_progress -> completed
"""

from fastapi import APIRouter, Depends, Request

from fleetdesk.api.dependencies import mounted, render_mutation, render_with, status_filter
from fleetdesk.api.middleware import limiter
from fleetdesk.config import settings
from fleetdesk.views.driver import DriverDashboardView, DriverTripsView

router = APIRouter(prefix="/dashboard/driver", tags=["driver"])

dashboard_view = mounted(lambda s: DriverDashboardView(s.session, s.bookings))
trips_view = mounted(lambda s: DriverTripsView(s.session, s.bookings))


@router.get("", summary="Driver dashboard")
@limiter.limit(settings.rate_limit)
async def dashboard(request: Request, view: DriverDashboardView = Depends(dashboard_view)):
    return render_with(
        await view.load(),
        lambda state: {"summary": state.summary, "assigned": state.assigned},
    )


@router.get("/trips", summary="Assigned trips")
@limiter.limit(settings.rate_limit)
async def list_trips(
    request: Request,
    status: str = "all",
    view: DriverTripsView = Depends(trips_view),
):
    wanted = status_filter(status)
    return render_with(
        await view.load(),
        lambda state: {"trips": view.visible(wanted), "summary": state.summary},
    )


@router.post("/trips/{booking_id}/start", summary="Start a trip")
@limiter.limit(settings.rate_limit)
async def start_trip(
    request: Request, booking_id: str, view: DriverTripsView = Depends(trips_view)
):
    return render_mutation(await view.start(booking_id), view)


@router.post("/trips/{booking_id}/complete", summary="Complete a trip")
@limiter.limit(settings.rate_limit)
async def complete_trip(
    request: Request, booking_id: str, view: DriverTripsView = Depends(trips_view)
):
    return render_mutation(await view.complete(booking_id), view)

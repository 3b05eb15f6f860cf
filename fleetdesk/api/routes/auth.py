"""
Account endpoints
=================

POST /api/v1/auth/login            -- start a session, returns the landing page
POST /api/v1/auth/register         -- create an account and start a session
POST /api/v1/auth/logout           -- end the session
GET  /api/v1/auth/profile          -- settings screen
PUT  /api/v1/auth/profile          -- update the profile
PUT  /api/v1/auth/change-password  -- change the password
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from fleetdesk.api.dependencies import error_response, mounted, render, render_mutation
from fleetdesk.api.middleware import limiter
from fleetdesk.api.schemas import NavigationResponse
from fleetdesk.config import settings
from fleetdesk.domain.result import Err, Result
from fleetdesk.views.auth import AuthView, SettingsView

router = APIRouter(prefix="/auth", tags=["auth"])

settings_view = mounted(lambda s: SettingsView(s.session, s.auth))


def _auth_view(request: Request) -> AuthView:
    state = request.app.state
    return AuthView(state.session, state.auth)


def _navigate(result: Result[str], view: AuthView) -> Any:
    if isinstance(result, Err):
        return error_response(result.error)
    return NavigationResponse(message=view.notice.message, redirect=result.value).model_dump()


@router.post("/login", summary="Log in")
@limiter.limit(settings.rate_limit)
async def login(
    request: Request,
    data: dict[str, Any] = Body(...),
    view: AuthView = Depends(_auth_view),
):
    return _navigate(await view.login(data), view)


@router.post("/register", summary="Create an account")
@limiter.limit(settings.rate_limit)
async def register(
    request: Request,
    data: dict[str, Any] = Body(...),
    view: AuthView = Depends(_auth_view),
):
    return _navigate(await view.register(data), view)


@router.post("/logout", summary="Log out")
@limiter.limit(settings.rate_limit)
async def logout(request: Request, view: AuthView = Depends(_auth_view)):
    return _navigate(await view.logout(), view)


@router.get("/profile", summary="Current profile")
@limiter.limit(settings.rate_limit)
async def profile(request: Request, view: SettingsView = Depends(settings_view)):
    return render(await view.load())


@router.put("/profile", summary="Update the profile")
@limiter.limit(settings.rate_limit)
async def update_profile(
    request: Request,
    data: dict[str, Any] = Body(...),
    view: SettingsView = Depends(settings_view),
):
    return render_mutation(await view.update_profile(data), view)


@router.put("/change-password", summary="Change the password")
@limiter.limit(settings.rate_limit)
async def change_password(
    request: Request,
    data: dict[str, Any] = Body(...),
    view: SettingsView = Depends(settings_view),
):
    return render_mutation(await view.change_password(data), view)

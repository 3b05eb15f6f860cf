"""Account screens: login, registration, logout and settings."""

from __future__ import annotations

from typing import Any

from fleetdesk.domain.entities import User
from fleetdesk.domain.forms import ChangePasswordForm, LoginForm, RegisterForm, validate_form
from fleetdesk.domain.result import Ok, Result, attempt
from fleetdesk.infrastructure.repositories import AuthRepository
from fleetdesk.infrastructure.session import SessionStore, landing_path

from .base import Notice, ViewController


class AuthView:
    def __init__(self, session: SessionStore, auth: AuthRepository):
        self.session = session
        self.auth = auth
        self.notice: Notice | None = None

    async def login(self, data: dict[str, Any]) -> Result[str]:
        """Log in and return the dashboard path for the user's role."""

        async def run() -> str:
            form = validate_form(LoginForm, data)
            session = await self.auth.login(form)
            return landing_path(session.user.role)

        return self._report(await attempt(run()), "Login successful!")

    async def register(self, data: dict[str, Any]) -> Result[str]:
        async def run() -> str:
            form = validate_form(RegisterForm, data)
            session = await self.auth.register(form)
            return landing_path(session.user.role)

        return self._report(await attempt(run()), "Registration successful!")

    async def logout(self) -> Result[str]:
        async def run() -> str:
            await self.auth.logout()
            return "/auth/login"

        return self._report(await attempt(run()), "Logged out")

    def _report(self, result: Result[str], success: str) -> Result[str]:
        if isinstance(result, Ok):
            self.notice = Notice("success", success)
        else:
            self.notice = Notice("error", result.message)
        return result


class SettingsView(ViewController):
    """Account settings, open to every signed-in role."""

    def __init__(self, session: SessionStore, auth: AuthRepository):
        super().__init__(session)
        self.auth = auth
        self.state: User | None = None

    async def load(self, refresh: bool = False) -> Result[User]:
        result = await self._latest("profile", self.auth.profile)
        if isinstance(result, Ok):
            self.state = result.value
        return result

    async def update_profile(self, data: dict[str, Any]) -> Result[User]:
        return await self._mutate(
            self.auth.update_profile(data), "Profile updated successfully", reload=True
        )

    async def change_password(self, data: dict[str, Any]) -> Result[None]:
        async def run() -> None:
            form = validate_form(ChangePasswordForm, data)
            await self.auth.change_password(form)

        return await self._mutate(run(), "Password changed successfully")

"""
Reactive session store backed by a JSON file.

The single owner of ``{token, user}``.  It is injected into the HTTP
client, the repositories and every view.  Mutations go through ``set`` /
``clear`` and notify subscribers, so a 401 seen anywhere logs the whole
client out at once.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional

import pydantic
from pydantic import BaseModel

from fleetdesk.domain.entities import User
from fleetdesk.domain.enums import Role
from fleetdesk.domain.errors import AuthError, ForbiddenError

logger = logging.getLogger(__name__)

Listener = Callable[[Optional["Session"]], None]

LANDING_PATHS: dict[Role, str] = {
    Role.OWNER: "/dashboard/owner",
    Role.DRIVER: "/dashboard/driver",
    Role.CUSTOMER: "/dashboard/customer",
}


class Session(BaseModel):
    token: str
    user: User


def landing_path(role: Role) -> str:
    return LANDING_PATHS[role]


class SessionStore:
    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._session: Optional[Session] = None
        self._loaded = False
        self._listeners: list[Listener] = []

    # ── Reads ─────────────────────────────────────────────────────────

    @property
    def session(self) -> Optional[Session]:
        if not self._loaded:
            self._session = self._read()
            self._loaded = True
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def token(self) -> Optional[str]:
        return self.session.token if self.session else None

    @property
    def user(self) -> Optional[User]:
        return self.session.user if self.session else None

    @property
    def role(self) -> Optional[Role]:
        return self.session.user.role if self.session else None

    def require(self, *roles: Role) -> Session:
        """Gate a protected view.  Synchronous, so nothing renders first."""
        session = self.session
        if session is None:
            raise AuthError()
        if roles and session.user.role not in roles:
            raise ForbiddenError()
        return session

    # ── Mutations ─────────────────────────────────────────────────────

    def set(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(session.model_dump_json(by_alias=True))
        self._session = session
        self._loaded = True
        logger.info("Session started for %s (%s)", session.user.id, session.user.role.value)
        self._notify()

    def clear(self) -> None:
        had_session = self.session is not None
        self.path.unlink(missing_ok=True)
        self._session = None
        self._loaded = True
        if had_session:
            logger.info("Session cleared")
            self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Internals ─────────────────────────────────────────────────────

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)

    def _read(self) -> Optional[Session]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        try:
            return Session.model_validate(json.loads(raw.decode("utf-8")))
        except (ValueError, pydantic.ValidationError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return None

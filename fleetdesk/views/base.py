"""
View controller base.

Lifecycle
---------
1. ``mount()``   -- synchronous role gate; raises before anything is fetched.
2. reads         -- go through ``_latest``: a newer read of the same name
   cancels the superseded one, which resolves to ``Err(RequestSuperseded)``.
3. mutations     -- go through ``_mutate``: exactly one user-visible
   message per call, no automatic retry.  An ``InvalidTransitionError``
   triggers a refresh so the screen reconciles with the server.
4. ``unmount()`` -- cancels every in-flight read; nothing writes state after.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from fleetdesk.domain.entities import Booking
from fleetdesk.domain.enums import ACTION_ROLES, BookingAction, Role
from fleetdesk.domain.errors import (
    ClientError,
    ForbiddenError,
    InvalidTransitionError,
    RequestSuperseded,
)
from fleetdesk.domain.result import Err, Ok, Result, attempt
from fleetdesk.infrastructure.repositories import BookingRepository
from fleetdesk.infrastructure.session import Session, SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Notice:
    """The one message a mutation shows the user."""

    level: str
    message: str


class ViewController:
    roles: tuple[Role, ...] = ()

    def __init__(self, session: SessionStore):
        self.session_store = session
        self.session: Optional[Session] = None
        self.notice: Optional[Notice] = None
        self._reads: dict[str, asyncio.Task] = {}
        self._mounted = False

    # ── Lifecycle ─────────────────────────────────────────────────────

    def mount(self) -> Session:
        self.session = self.session_store.require(*self.roles)
        self._mounted = True
        return self.session

    async def unmount(self) -> None:
        self._mounted = False
        tasks = list(self._reads.values())
        self._reads.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def user_id(self) -> str:
        if self.session is None:
            raise RuntimeError(f"{type(self).__name__} used before mount()")
        return self.session.user.id

    async def refresh(self) -> Result[Any]:
        """User-triggered reload; the only retry path for reads."""
        return await self.load(refresh=True)

    async def load(self, refresh: bool = False) -> Result[Any]:
        raise NotImplementedError

    # ── Reads ─────────────────────────────────────────────────────────

    async def _latest(self, name: str, factory: Callable[[], Awaitable[T]]) -> Result[T]:
        """Run the read *name*, cancelling any older read of the same name."""
        if not self._mounted:
            raise RuntimeError(f"{type(self).__name__} is not mounted")

        previous = self._reads.pop(name, None)
        if previous is not None and not previous.done():
            logger.debug("%s: superseding in-flight %s", type(self).__name__, name)
            previous.cancel()

        task = asyncio.ensure_future(attempt(factory()))
        self._reads[name] = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._reads.get(name) is task:
                del self._reads[name]

        if task.cancelled():
            return Err(RequestSuperseded())
        return task.result()

    # ── Mutations ─────────────────────────────────────────────────────

    async def _mutate(
        self,
        awaitable: Awaitable[T],
        success: str,
        reload: bool = False,
    ) -> Result[T]:
        """Run one user-initiated change and record its single notice.

        With *reload*, the list is re-read after a success and after a
        rejected transition, so the screen matches the server again.  An
        unmounted view keeps its notice but reads nothing.
        """
        result = await attempt(awaitable)
        if isinstance(result, Ok):
            self.notice = Notice("success", success)
            if reload and self._mounted:
                await self.load()
            return result

        error: ClientError = result.error
        self.notice = Notice("error", error.message)
        if reload and self._mounted and isinstance(error, InvalidTransitionError):
            logger.info("%s: reconciling after %s", type(self).__name__, error.message)
            await self.load()
        return result

    async def _transition(
        self,
        bookings: BookingRepository,
        booking_id: str,
        action: BookingAction,
        success: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Result[Booking]:
        async def run() -> Booking:
            if self.session is None or self.session.user.role not in ACTION_ROLES[action]:
                raise ForbiddenError("You are not allowed to do that")
            return await bookings.transition(booking_id, action, payload)

        return await self._mutate(run(), success, reload=True)

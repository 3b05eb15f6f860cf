"""
Per-key in-flight guard.

Used by the booking repository so that at most one transition request
per booking id is on the wire at a time.  A duplicate call for the same
key and the same operation joins the running request instead of sending
another one; a different operation on a busy key is refused.

Everything runs on one event loop, so registration happens before the
first ``await`` and needs no further locking.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable, TypeVar

from fleetdesk.domain.errors import TransitionInProgressError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightGuard:
    def __init__(self) -> None:
        self._running: dict[Hashable, tuple[Any, asyncio.Task]] = {}

    def busy(self, key: Hashable) -> bool:
        running = self._running.get(key)
        return running is not None and not running[1].done()

    async def run(
        self,
        key: Hashable,
        operation: Any,
        factory: Callable[[], Awaitable[T]],
    ) -> T:
        """Run ``factory()`` for *key* unless *operation* is already running."""
        running = self._running.get(key)
        if running is not None and not running[1].done():
            running_op, task = running
            if running_op != operation:
                raise TransitionInProgressError(
                    "Another update for this booking is still in progress"
                )
            logger.info("Suppressed duplicate %s for %s", operation, key)
            return await asyncio.shield(task)

        task = asyncio.ensure_future(factory())
        self._running[key] = (operation, task)
        task.add_done_callback(lambda t: self._release(key, t))
        return await asyncio.shield(task)

    def _release(self, key: Hashable, task: asyncio.Task) -> None:
        if key in self._running and self._running[key][1] is task:
            del self._running[key]

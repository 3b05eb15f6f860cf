"""Uniform ``Ok | Err`` outcome consumed by every view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

from .errors import ClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: ClientError

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]


async def attempt(awaitable: Awaitable[T]) -> Result[T]:
    """Await *awaitable*, turning a ``ClientError`` into ``Err``.

    Anything that is not a ``ClientError`` is a bug and propagates.
    """
    try:
        return Ok(await awaitable)
    except ClientError as exc:
        logger.info("%s: %s", type(exc).__name__, exc.message)
        return Err(exc)

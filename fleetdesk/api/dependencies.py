"""FastAPI dependency injection helpers and result rendering."""

from typing import Any, AsyncIterator, Callable, TypeVar, Union

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.datastructures import State

from fleetdesk.domain.enums import BookingStatus, StatusGroup
from fleetdesk.domain.errors import ClientError, ValidationError
from fleetdesk.domain.filters import parse_status_filter
from fleetdesk.domain.result import Err, Result
from fleetdesk.views.base import ViewController

from .schemas import ErrorResponse, MutationResponse

V = TypeVar("V", bound=ViewController)


def mounted(build: Callable[[State], V]) -> Callable[[Request], AsyncIterator[V]]:
    """Dependency that builds a view, mounts it, and unmounts after the response.

    ``mount`` raises ``AuthError`` / ``ForbiddenError`` before the route body
    runs, so no protected data is fetched for a rejected session.
    """

    async def dependency(request: Request) -> AsyncIterator[V]:
        view = build(request.app.state)
        view.mount()
        try:
            yield view
        finally:
            await view.unmount()

    return dependency


def status_filter(value: str) -> Union[StatusGroup, BookingStatus]:
    try:
        return parse_status_filter(value)
    except ValueError as exc:
        raise ValidationError(fields={"status": f"Unknown status filter: {value}"}) from exc


def error_response(error: ClientError) -> JSONResponse:
    body = ErrorResponse(
        detail=error.message,
        kind=error.kind,
        redirect=error.redirect,
        fields=getattr(error, "fields", {}),
        retryable=error.retryable,
    )
    return JSONResponse(status_code=error.status_code, content=body.model_dump())


def render(result: Result[Any]) -> Any:
    """Ok -> its value as JSON; Err -> the error response."""
    if isinstance(result, Err):
        return error_response(result.error)
    return jsonable_encoder(result.value)


def render_mutation(result: Result[Any], view: Any) -> Any:
    if isinstance(result, Err):
        return error_response(result.error)
    body = MutationResponse(message=view.notice.message, data=jsonable_encoder(result.value))
    return body.model_dump()


def render_with(result: Result[Any], build: Callable[[Any], Any]) -> Any:
    """Like ``render`` but shapes the Ok value with *build* first."""
    if isinstance(result, Err):
        return error_response(result.error)
    return jsonable_encoder(build(result.value))

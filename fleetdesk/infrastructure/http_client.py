"""
Backend API gateway client.

Wraps one ``httpx.AsyncClient``.  Every request reads the bearer token
from the injected ``SessionStore``.  Failures are normalised into the
client error taxonomy: a transport failure is a ``NetworkError``, and a
business failure (including ``success: false`` over HTTP 200) is an
``ApiError``.  A 401 clears the session for every component at once.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from fleetdesk.config import Settings
from fleetdesk.domain.errors import (
    ApiError,
    AuthError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    ValidationError,
)

from .session import SessionStore

logger = logging.getLogger(__name__)


def _field_errors(body: dict[str, Any]) -> dict[str, str]:
    """Pull ``{field: message}`` out of the backend's ``errors`` list."""
    fields: dict[str, str] = {}
    for item in body.get("errors") or []:
        if not isinstance(item, dict):
            continue
        field = item.get("field") or item.get("path") or item.get("param")
        message = item.get("message") or item.get("msg")
        if field and message:
            fields.setdefault(str(field), str(message))
    return fields


class ApiClient:
    """HTTP client for the fleet backend REST API."""

    def __init__(
        self,
        settings: Settings,
        session: SessionStore,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.session = session
        self.http = http or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(settings.request_timeout_seconds),
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def call(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """Send one request and return the envelope's ``data``."""
        headers: dict[str, str] = {}
        if authenticated:
            token = self.session.token
            if not token:
                raise AuthError()
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.http.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise NetworkError(
                f"The server did not answer within "
                f"{self.settings.request_timeout_seconds:g}s, please retry"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError() from exc

        body = self._body(response)
        message = body.get("message") if isinstance(body, dict) else None

        if response.status_code == 401:
            logger.info("%s %s returned 401, logging out", method, path)
            self.session.clear()
            raise AuthError(message or "Your session has expired, please log in again")
        if response.status_code == 403:
            raise ForbiddenError(message or "You are not allowed to do that")
        if response.status_code == 404:
            raise NotFoundError(message or "Not found")
        if response.status_code in {400, 422} and isinstance(body, dict):
            fields = _field_errors(body)
            if fields:
                raise ValidationError(message or "Please correct the highlighted fields", fields)
        if response.status_code >= 400:
            logger.warning("%s %s returned %d", method, path, response.status_code)
            raise ApiError(
                message or f"Request failed ({response.status_code})", response.status_code
            )

        if not isinstance(body, dict) or "success" not in body:
            raise ApiError("Unexpected response from the server")
        if not body["success"]:
            raise ApiError(message or "The request was not accepted")
        return body.get("data")

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    # ── Verb helpers ──────────────────────────────────────────────────

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.call("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.call("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.call("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.call("DELETE", path, **kwargs)

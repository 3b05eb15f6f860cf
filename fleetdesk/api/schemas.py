"""Pydantic response schemas for the JSON screens."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    kind: str
    redirect: Optional[str] = None
    fields: dict[str, str] = {}
    retryable: bool = False


class MutationResponse(BaseModel):
    message: str
    data: Any = None


class NavigationResponse(BaseModel):
    message: str
    redirect: str


class AssignDriverRequest(BaseModel):
    driver_id: str


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = None

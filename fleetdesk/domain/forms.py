"""
Form models validated on the client before anything is submitted.

Each form turns into the backend's wire payload via ``to_payload``.
``validate_form`` converts pydantic's errors into a ``ValidationError``
carrying one message per field, ready to show inline.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

import pydantic
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from .clock import on_clock_of
from .enums import PaymentMethod, RateType, Role, VehicleType
from .errors import ValidationError

PHONE_RE = re.compile(r"^[+]?[\d\s()-]+$")
PASSWORD_PATTERNS = tuple(
    re.compile(p) for p in (r"[a-z]", r"[A-Z]", r"\d", r"[@$!%*?&]")
)


# ── Auth ──────────────────────────────────────────────────────────────


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

    def to_payload(self) -> dict[str, Any]:
        return {"email": self.email, "password": self.password}


class RegisterForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str
    role: Role
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    phone: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        if not all(pattern.search(value) for pattern in PASSWORD_PATTERNS):
            raise ValueError(
                "Password must contain uppercase, lowercase, number and special character"
            )
        return value

    @field_validator("phone")
    @classmethod
    def _phone_shape(cls, value: str) -> str:
        if not PHONE_RE.match(value):
            raise ValueError("Invalid phone number")
        return value

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords must match")
        return value

    def to_payload(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "password": self.password,
            "role": self.role.value,
            "profile": {
                "firstName": self.first_name,
                "lastName": self.last_name,
                "phone": self.phone,
                "address": {
                    "street": self.street,
                    "city": self.city,
                    "state": self.state,
                    "zipCode": self.zip_code,
                    "country": self.country,
                },
            },
        }


class ChangePasswordForm(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)

    def to_payload(self) -> dict[str, Any]:
        return {
            "currentPassword": self.current_password,
            "newPassword": self.new_password,
        }


# ── Vehicles ──────────────────────────────────────────────────────────


class VehicleForm(BaseModel):
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int
    color: str = Field(..., min_length=1)
    license_plate: str = Field(..., min_length=1)
    vin: str = Field(..., min_length=17, max_length=17)
    type: VehicleType
    passengers: int = Field(5, ge=1, le=50)
    cargo: float = Field(10, ge=0)
    base_rate: float = Field(..., ge=0)
    rate_type: RateType
    currency: str = "USD"

    @field_validator("year")
    @classmethod
    def _plausible_year(cls, value: int) -> int:
        if not 1900 <= value <= datetime.now().year + 2:
            raise ValueError("Invalid year")
        return value

    def to_payload(self) -> dict[str, Any]:
        return {
            "make": self.make,
            "modelName": self.model,
            "year": self.year,
            "color": self.color,
            "licensePlate": self.license_plate,
            "vin": self.vin,
            "type": self.type.value,
            "pricing": {
                "baseRate": self.base_rate,
                "rateType": self.rate_type.value,
                "currency": self.currency,
            },
            "capacity": {"passengers": self.passengers, "cargo": self.cargo},
            "location": {
                "type": "Point",
                "coordinates": [0, 0],
                "address": "TBD",
                "city": "TBD",
                "state": "TBD",
            },
            "features": [],
            "images": [],
            "availability": True,
            "status": "active",
        }


# ── Bookings ──────────────────────────────────────────────────────────


class BookingForm(BaseModel):
    vehicle_id: str = Field(..., min_length=1)
    pickup_address: str = Field(..., min_length=1)
    dropoff_address: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    customer_notes: Optional[str] = Field(None, max_length=500)

    @field_validator("start_date")
    @classmethod
    def _in_future(cls, value: datetime) -> datetime:
        now = datetime.now(timezone.utc) if value.tzinfo else datetime.now()
        if value <= now:
            raise ValueError("Start date must be in the future")
        return value

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start_date")
        if start is None:
            return value
        value = on_clock_of(value, start)
        if value <= start:
            raise ValueError("End date must be after start date")
        return value

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "vehicleId": self.vehicle_id,
            "pickupDate": self.start_date.isoformat(),
            "dropoffDate": self.end_date.isoformat(),
            "pickupLocation": {"address": self.pickup_address},
            "dropoffLocation": {"address": self.dropoff_address},
            "paymentMethod": self.payment_method.value,
        }
        if self.customer_notes:
            payload["customerNotes"] = self.customer_notes
        return payload


# ── Validation entry point ────────────────────────────────────────────


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def _message(error: dict[str, Any]) -> str:
    field = str(error["loc"][0]) if error["loc"] else "form"
    if error["type"] == "missing":
        return f"{_label(field)} is required"
    if error["type"] == "string_too_short" and error.get("ctx", {}).get("min_length") == 1:
        return f"{_label(field)} is required"
    msg = error["msg"]
    return msg.removeprefix("Value error, ")


def validate_form(form_cls: type[BaseModel], data: dict[str, Any]) -> Any:
    """Parse *data* into *form_cls* or raise ``ValidationError`` per field."""
    try:
        return form_cls.model_validate(data)
    except pydantic.ValidationError as exc:
        fields: dict[str, str] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "form"
            fields.setdefault(field, _message(error))
        raise ValidationError(fields=fields) from exc

"""
Domain entities parsed at the API boundary.

Patterns used
-------------
- **Parse, don't assume**: every backend payload is validated into one of
  these models before any view touches it.  Unknown enum values fail.
- **State Pattern** on ``Booking``: ``check`` enforces the lifecycle
  (pending -> confirmed -> in_progress -> completed | cancelled).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import (
    BOOKING_TRANSITIONS,
    BookingAction,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
    RateType,
    Role,
    VehicleStatus,
    VehicleType,
)
from .errors import InvalidTransitionError


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


_ID = AliasChoices("_id", "id")


# ── Value Objects ─────────────────────────────────────────────────────


class Address(WireModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class Profile(WireModel):
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    address: Optional[Address] = None


class Location(WireModel):
    address: str = ""
    city: str = ""
    state: str = ""
    coordinates: Optional[list[float]] = None


class ScheduledDate(WireModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _start_before_end(self) -> "ScheduledDate":
        if self.start >= self.end:
            raise ValueError("scheduledDate.start must be before scheduledDate.end")
        return self


class BookingPricing(WireModel):
    base_amount: Optional[float] = None
    total_amount: Optional[float] = None


class Payment(WireModel):
    status: PaymentStatus = PaymentStatus.PENDING
    method: Optional[PaymentMethod] = None


class Capacity(WireModel):
    passengers: int = 0
    cargo: float = 0


class VehiclePricing(WireModel):
    base_rate: float = 0
    rate_type: RateType = RateType.DAILY
    currency: str = "USD"


# ── Entities ──────────────────────────────────────────────────────────


class User(WireModel):
    id: str = Field(validation_alias=_ID)
    email: str = ""
    role: Role
    profile: Profile = Field(default_factory=Profile)

    @property
    def full_name(self) -> str:
        return f"{self.profile.first_name} {self.profile.last_name}".strip()


class Vehicle(WireModel):
    id: str = Field(validation_alias=_ID)
    owner: Union[User, str, None] = None
    make: str = ""
    model: str = Field("", validation_alias=AliasChoices("modelName", "model"))
    year: Optional[int] = None
    color: str = ""
    license_plate: str = ""
    vin: str = ""
    type: Optional[VehicleType] = None
    capacity: Capacity = Field(default_factory=Capacity)
    pricing: VehiclePricing = Field(default_factory=VehiclePricing)
    location: Optional[Location] = None
    availability: bool = True
    status: VehicleStatus = VehicleStatus.ACTIVE

    @property
    def display_name(self) -> str:
        parts = [str(self.year) if self.year else "", self.make, self.model]
        return " ".join(p for p in parts if p)


class Booking(WireModel):
    id: str = Field(validation_alias=_ID)
    vehicle: Union[Vehicle, str, None] = None
    customer: Union[User, str, None] = None
    driver: Union[User, str, None] = None
    scheduled_date: ScheduledDate
    pickup_location: Optional[Location] = None
    dropoff_location: Optional[Location] = None
    pricing: Optional[BookingPricing] = None
    payment: Optional[Payment] = None
    status: BookingStatus = BookingStatus.PENDING
    customer_notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total_amount(self) -> float:
        """Total price, 0 when the backend did not send one."""
        if self.pricing is None or self.pricing.total_amount is None:
            return 0.0
        return self.pricing.total_amount

    @property
    def vehicle_record(self) -> Optional[Vehicle]:
        return self.vehicle if isinstance(self.vehicle, Vehicle) else None

    @property
    def customer_record(self) -> Optional[User]:
        return self.customer if isinstance(self.customer, User) else None

    @property
    def driver_id(self) -> Optional[str]:
        if isinstance(self.driver, User):
            return self.driver.id
        return self.driver

    def check(self, action: BookingAction) -> BookingStatus:
        """Return the status *action* leads to, or raise if it is illegal now."""
        allowed, target = BOOKING_TRANSITIONS[action]
        if self.status not in allowed:
            raise InvalidTransitionError(
                f"Cannot {action.value.replace('_', ' ')} a booking "
                f"that is {self.status.value.replace('_', ' ')}"
            )
        return target

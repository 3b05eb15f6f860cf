"""Domain enumerations and booking state-transition rules."""

import enum


class Role(str, enum.Enum):
    OWNER = "vehicle_owner"
    DRIVER = "driver"
    CUSTOMER = "customer"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    ASSIGN_DRIVER = "assign_driver"
    CANCEL = "cancel"
    START = "start"
    COMPLETE = "complete"


class StatusGroup(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ALL = "all"


class RateType(str, enum.Enum):
    HOURLY = "hourly"
    DAILY = "daily"


class VehicleStatus(str, enum.Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class VehicleType(str, enum.Enum):
    SEDAN = "sedan"
    SUV = "suv"
    TRUCK = "truck"
    VAN = "van"
    MOTORCYCLE = "motorcycle"
    BUS = "bus"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"
    FAILED = "failed"


ACTIVE_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
)

TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
)

STATUS_GROUPS: dict[StatusGroup, frozenset[BookingStatus]] = {
    StatusGroup.ACTIVE: ACTIVE_STATUSES,
    StatusGroup.COMPLETED: frozenset({BookingStatus.COMPLETED}),
    StatusGroup.CANCELLED: frozenset({BookingStatus.CANCELLED}),
    StatusGroup.ALL: frozenset(BookingStatus),
}


# State machine: maps action -> (statuses it is legal from, resulting status)
BOOKING_TRANSITIONS: dict[
    BookingAction, tuple[frozenset[BookingStatus], BookingStatus]
] = {
    BookingAction.ACCEPT: (
        frozenset({BookingStatus.PENDING}),
        BookingStatus.CONFIRMED,
    ),
    BookingAction.REJECT: (
        frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED}),
        BookingStatus.CANCELLED,
    ),
    BookingAction.ASSIGN_DRIVER: (
        frozenset({BookingStatus.CONFIRMED}),
        BookingStatus.CONFIRMED,
    ),
    BookingAction.CANCEL: (
        frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED}),
        BookingStatus.CANCELLED,
    ),
    BookingAction.START: (
        frozenset({BookingStatus.CONFIRMED}),
        BookingStatus.IN_PROGRESS,
    ),
    BookingAction.COMPLETE: (
        frozenset({BookingStatus.IN_PROGRESS}),
        BookingStatus.COMPLETED,
    ),
}

# Which roles may issue each action
ACTION_ROLES: dict[BookingAction, frozenset[Role]] = {
    BookingAction.ACCEPT: frozenset({Role.OWNER}),
    BookingAction.REJECT: frozenset({Role.OWNER}),
    BookingAction.ASSIGN_DRIVER: frozenset({Role.OWNER}),
    BookingAction.CANCEL: frozenset({Role.CUSTOMER, Role.OWNER}),
    BookingAction.START: frozenset({Role.DRIVER}),
    BookingAction.COMPLETE: frozenset({Role.DRIVER}),
}

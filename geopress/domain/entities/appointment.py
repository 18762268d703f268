from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

APPOINTMENT_STATUSES = ("pending", "confirmed", "in_progress", "completed", "cancelled", "no_show")

ABIDJAN_CENTER = (5.3364, -4.0267)


@dataclass(frozen=True)
class Coordinates:
    latitude: float = ABIDJAN_CENTER[0]
    longitude: float = ABIDJAN_CENTER[1]


@dataclass(frozen=True)
class Address:
    street: str = ""
    city: str = "Abidjan"
    coordinates: Coordinates = field(default_factory=Coordinates)


@dataclass(frozen=True)
class AppointmentServiceItem:
    service: str
    quantity: int
    unit_price: float
    total_price: float


@dataclass(frozen=True)
class Cancellation:
    reason: str
    cancelled_at: str | None = None
    cancelled_by: str | None = None
    refund_requested: bool = False


@dataclass(frozen=True)
class RescheduleEntry:
    old_time_slot: str
    new_time_slot: str
    reason: str | None = None
    rescheduled_at: str | None = None


@dataclass(frozen=True)
class Appointment:
    id: str
    client: str
    pressing: str
    time_slot: str
    appointment_date: datetime
    status: str = "pending"
    services: tuple[AppointmentServiceItem, ...] = ()
    total_amount: float = 0
    payment_status: str = "pending"  # "pending", "paid", "refunded"
    pickup_address: Address | None = None
    delivery_address: Address | None = None
    notes: str | None = None
    cancellation: Cancellation | None = None
    reschedule_history: tuple[RescheduleEntry, ...] = ()
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class ServiceSelection:
    """A service the client picked before entering the booking wizard."""

    service_id: str
    name: str
    price: float
    quantity: int = 1


@dataclass(frozen=True)
class ServiceLine:
    service: str
    quantity: int


@dataclass(frozen=True)
class CreateAppointmentRequest:
    pressing: str
    time_slot: str
    services: tuple[ServiceLine, ...]
    notes: str | None = None
    pickup_address: Address | None = None
    delivery_address: Address | None = None


@dataclass(frozen=True)
class TimeUntil:
    days: int = 0
    hours: int = 0
    minutes: int = 0
    total_minutes: int = 0

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from geopress.domain.entities.appointment import Address, Appointment, ServiceSelection
from geopress.domain.entities.time_slot import TimeSlot

BOOKING_STEPS = ("date", "address", "review", "confirmation")


@dataclass(frozen=True)
class BookingState:
    pressing_id: str
    services: tuple[ServiceSelection, ...] = ()
    step: str = "date"  # "date", "address", "review", "confirmation"
    selected_date: date | None = None
    available_slots: tuple[TimeSlot, ...] = ()
    slots_synthesized: bool = False
    selected_slot: TimeSlot | None = None
    appointment_datetime: datetime | None = None
    pickup_address: Address = field(default_factory=Address)
    delivery_address: Address = field(default_factory=Address)
    same_as_pickup: bool = True
    notes: str = ""
    submitting: bool = False
    appointment: Appointment | None = None

    @property
    def step_index(self) -> int:
        return BOOKING_STEPS.index(self.step)

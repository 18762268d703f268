from __future__ import annotations

from dataclasses import dataclass
from datetime import date

SLOT_STATUSES = ("available", "full", "blocked", "closed")
SLOT_TYPES = ("regular", "express", "premium", "bulk")


@dataclass(frozen=True)
class TimeSlot:
    id: str
    pressing_id: str
    date: date
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    max_capacity: int
    current_bookings: int = 0
    available_spots: int = 0
    status: str = "available"  # "available", "full", "blocked", "closed"
    slot_type: str = "regular"  # "regular", "express", "premium", "bulk"
    special_price: float | None = None
    discount: float | None = None  # percent
    available_services: tuple[str, ...] = ()
    is_blocked: bool = False
    block_reason: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def start_hour(self) -> int:
        return int(self.start_time.split(":")[0])


@dataclass(frozen=True)
class SlotAvailability:
    slots: list[TimeSlot]
    total_slots: int = 0
    available_slots: int = 0
    total_capacity: int = 0
    available_capacity: int = 0

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from geopress.domain.entities.time_slot import TimeSlot

# Default pickup slots offered when a pressing has not configured any.
DEFAULT_TIME_SLOTS = {
    "morning": ("09:00", "11:00"),
    "afternoon": ("14:00", "16:00"),
}
DEFAULT_SLOT_CAPACITY = 4

SLOT_TYPE_LABELS = {
    "regular": "Standard",
    "express": "Express",
    "premium": "Premium",
    "bulk": "En lot",
}


@dataclass(frozen=True)
class SlotTemplate:
    start_time: str
    end_time: str
    max_capacity: int
    slot_type: str = "regular"
    special_price: float | None = None


@dataclass(frozen=True)
class BulkSlotPlan:
    start_date: date
    end_date: date
    time_slots: tuple[SlotTemplate, ...]
    days_of_week: tuple[int, ...]  # 0 = Sunday
    skip_existing_slots: bool = True


def add_one_hour(time: str) -> str:
    hours, minutes = (int(part) for part in time.split(":"))
    return f"{(hours + 1) % 24:02d}:{minutes:02d}"


def format_date_for_api(day: date | datetime) -> str:
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()


def create_default_slots(day: date, pressing_id: str, now: datetime | None = None) -> list[TimeSlot]:
    stamp = (now or datetime.now()).isoformat()
    slots: list[TimeSlot] = []
    for period in ("morning", "afternoon"):
        for index, start in enumerate(DEFAULT_TIME_SLOTS[period]):
            slots.append(
                TimeSlot(
                    id=f"default-{period}-{index}",
                    pressing_id=pressing_id,
                    date=day,
                    start_time=start,
                    end_time=add_one_hour(start),
                    max_capacity=DEFAULT_SLOT_CAPACITY,
                    current_bookings=0,
                    available_spots=DEFAULT_SLOT_CAPACITY,
                    status="available",
                    slot_type="regular",
                    is_blocked=False,
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
    return slots


def is_slot_available(slot: TimeSlot) -> bool:
    return slot.status == "available" and slot.available_spots > 0


def calculate_slot_price(slot: TimeSlot, base_price: float) -> int:
    price = slot.special_price or base_price
    if slot.discount and slot.discount > 0:
        price = price * (1 - slot.discount / 100)
    # JS Math.round semantics: halves round up
    return int(price + 0.5) if price >= 0 else -int(-price + 0.5)


def group_slots_by_period(slots: list[TimeSlot]) -> dict[str, list[TimeSlot]]:
    groups: dict[str, list[TimeSlot]] = {"morning": [], "afternoon": [], "evening": []}
    for slot in slots:
        if slot.start_hour < 12:
            groups["morning"].append(slot)
        elif slot.start_hour < 18:
            groups["afternoon"].append(slot)
        else:
            groups["evening"].append(slot)
    return groups


def order_bookable_slots(slots: list[TimeSlot]) -> list[TimeSlot]:
    """Morning (06-12), afternoon (12-18) then evening (18-22); slots outside those hours are dropped."""
    morning = [s for s in slots if 6 <= s.start_hour < 12]
    afternoon = [s for s in slots if 12 <= s.start_hour < 18]
    evening = [s for s in slots if 18 <= s.start_hour < 22]
    return morning + afternoon + evening


def filter_slots_by_type(slots: list[TimeSlot], slot_type: str) -> list[TimeSlot]:
    return [slot for slot in slots if slot.slot_type == slot_type]


def slot_start(slot: TimeSlot) -> datetime:
    hours, minutes = (int(part) for part in slot.start_time.split(":"))
    return datetime.combine(slot.date, datetime.min.time().replace(hour=hours, minute=minutes))


def find_next_available_slot(slots: list[TimeSlot]) -> TimeSlot | None:
    available = sorted((s for s in slots if is_slot_available(s)), key=slot_start)
    return available[0] if available else None


def slot_type_label(slot_type: str) -> str:
    return SLOT_TYPE_LABELS.get(slot_type, slot_type)


def generate_default_weekly_slots(start_date: date) -> BulkSlotPlan:
    """Monday to Saturday template a pressing can push through the bulk endpoint."""
    return BulkSlotPlan(
        start_date=start_date,
        end_date=start_date + timedelta(days=6),
        time_slots=(
            SlotTemplate("08:00", "09:00", 3),
            SlotTemplate("09:00", "10:00", 5),
            SlotTemplate("10:00", "11:00", 5),
            SlotTemplate("11:00", "12:00", 3),
            SlotTemplate("14:00", "15:00", 5),
            SlotTemplate("15:00", "16:00", 5, "express"),
            SlotTemplate("16:00", "17:00", 3),
            SlotTemplate("17:00", "18:00", 2, "premium"),
            SlotTemplate("18:00", "19:00", 2, "premium"),
        ),
        days_of_week=(1, 2, 3, 4, 5, 6),
        skip_existing_slots=True,
    )

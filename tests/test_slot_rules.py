"""
Tests for slot helpers and the slot payload mapping.
"""

from __future__ import annotations

from datetime import date, datetime

from geopress.application.dto.time_slot_payload import SlotAvailabilityDTO, TimeSlotDTO
from geopress.application.utils.slot_rules import (
    add_one_hour,
    calculate_slot_price,
    create_default_slots,
    filter_slots_by_type,
    find_next_available_slot,
    generate_default_weekly_slots,
    group_slots_by_period,
    is_slot_available,
    order_bookable_slots,
    slot_type_label,
)
from geopress.domain.entities.time_slot import TimeSlot

DAY = date(2024, 1, 26)


def _slot(start: str, spots: int = 2, status: str = "available", slot_type: str = "regular", **kwargs) -> TimeSlot:
    return TimeSlot(
        id=f"slot-{start}",
        pressing_id="p1",
        date=DAY,
        start_time=start,
        end_time=add_one_hour(start),
        max_capacity=4,
        current_bookings=4 - spots,
        available_spots=spots,
        status=status,
        slot_type=slot_type,
        **kwargs,
    )


def test_default_slots_shape():
    """Four one-hour regular slots, two in the morning, two in the afternoon."""
    slots = create_default_slots(DAY, "p1", now=datetime(2024, 1, 25, 10, 0))

    assert [s.start_time for s in slots] == ["09:00", "11:00", "14:00", "16:00"]
    assert [s.end_time for s in slots] == ["10:00", "12:00", "15:00", "17:00"]
    assert [s.id for s in slots] == [
        "default-morning-0",
        "default-morning-1",
        "default-afternoon-0",
        "default-afternoon-1",
    ]
    for slot in slots:
        assert slot.max_capacity == 4
        assert slot.available_spots == 4
        assert slot.current_bookings == 0
        assert slot.status == "available"
        assert slot.slot_type == "regular"
        assert slot.date == DAY
        assert slot.pressing_id == "p1"


def test_add_one_hour_wraps_midnight():
    assert add_one_hour("09:30") == "10:30"
    assert add_one_hour("23:15") == "00:15"


def test_is_slot_available():
    assert is_slot_available(_slot("09:00", spots=1))
    assert not is_slot_available(_slot("09:00", spots=0))
    assert not is_slot_available(_slot("09:00", spots=3, status="blocked"))


def test_calculate_slot_price():
    assert calculate_slot_price(_slot("09:00"), 2000) == 2000
    assert calculate_slot_price(_slot("09:00", special_price=3000), 2000) == 3000
    assert calculate_slot_price(_slot("09:00", discount=10), 2000) == 1800
    # halves round up
    assert calculate_slot_price(_slot("09:00", discount=50), 1001) == 501


def test_group_slots_by_period():
    groups = group_slots_by_period([_slot("08:00"), _slot("12:00"), _slot("17:59"), _slot("18:00")])

    assert [s.start_time for s in groups["morning"]] == ["08:00"]
    assert [s.start_time for s in groups["afternoon"]] == ["12:00", "17:59"]
    assert [s.start_time for s in groups["evening"]] == ["18:00"]


def test_order_bookable_slots_drops_night_hours():
    ordered = order_bookable_slots([_slot("19:00"), _slot("05:00"), _slot("14:00"), _slot("07:00"), _slot("22:00")])

    assert [s.start_time for s in ordered] == ["07:00", "14:00", "19:00"]


def test_filter_and_labels():
    slots = [_slot("09:00"), _slot("10:00", slot_type="express")]

    assert [s.start_time for s in filter_slots_by_type(slots, "express")] == ["10:00"]
    assert slot_type_label("premium") == "Premium"
    assert slot_type_label("custom") == "custom"


def test_find_next_available_slot():
    slots = [_slot("15:00"), _slot("08:00", spots=0), _slot("10:00")]

    assert find_next_available_slot(slots).start_time == "10:00"
    assert find_next_available_slot([_slot("08:00", spots=0)]) is None


def test_weekly_template_skips_sunday():
    plan = generate_default_weekly_slots(date(2024, 1, 22))

    assert plan.end_date == date(2024, 1, 28)
    assert 0 not in plan.days_of_week
    assert len(plan.time_slots) == 9


def test_slot_payload_derives_available_spots():
    """Remaining capacity always equals max capacity minus bookings."""
    payload = {
        "slots": [
            {
                "_id": "s1",
                "pressing": {"_id": "p1", "businessName": "Clean"},
                "date": "2024-01-26T00:00:00.000Z",
                "startTime": "09:00",
                "endTime": "10:00",
                "maxCapacity": 5,
                "currentBookings": 2,
                "availableSpots": 5,
            },
            {
                "id": "s2",
                "pressingId": "p1",
                "date": "2024-01-26",
                "startTime": "10:00",
                "endTime": "11:00",
                "maxCapacity": 3,
                "currentBookings": 4,
            },
        ]
    }

    availability = SlotAvailabilityDTO.model_validate(payload).to_entity()

    assert [s.available_spots for s in availability.slots] == [3, -1]
    assert not is_slot_available(availability.slots[1])
    assert availability.slots[0].pressing_id == "p1"
    assert availability.slots[0].date == DAY
    assert availability.total_slots == 2


def test_slot_dto_defaults():
    slot = TimeSlotDTO.model_validate(
        {"_id": "s3", "date": "2024-01-26", "startTime": "14:00", "endTime": "15:00", "maxCapacity": 4}
    ).to_entity()

    assert slot.available_spots == 4
    assert slot.status == "available"
    assert slot.pressing_id == ""

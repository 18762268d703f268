from __future__ import annotations

from datetime import date as date_type
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from geopress.application.utils.slot_rules import format_date_for_api
from geopress.domain.entities.time_slot import SlotAvailability, TimeSlot


def ref_id(value: Any) -> Any:
    """Populated references come back as objects; keep only their id."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


class TimeSlotDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    pressing_id: str = Field(default="", validation_alias=AliasChoices("pressing", "pressingId", "pressing_id"))
    date: date_type
    start_time: str
    end_time: str
    max_capacity: int = 0
    current_bookings: int = 0
    available_spots: int | None = None
    status: str = "available"
    slot_type: str = "regular"
    special_price: float | None = None
    discount: float | None = None
    available_services: list[str] = Field(default_factory=list)
    is_blocked: bool = False
    block_reason: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_pressing(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("pressing"), dict):
            data = {**data, "pressing": ref_id(data["pressing"])}
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        # The API sometimes sends full ISO datetimes for the slot day
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @model_validator(mode="after")
    def _derive_spots(self) -> "TimeSlotDTO":
        # remaining capacity is always derived, a stale availableSpots is ignored
        self.available_spots = self.max_capacity - self.current_bookings
        return self

    def to_entity(self) -> TimeSlot:
        return TimeSlot(
            id=self.id,
            pressing_id=self.pressing_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            max_capacity=self.max_capacity,
            current_bookings=self.current_bookings,
            available_spots=self.available_spots or 0,
            status=self.status,
            slot_type=self.slot_type,
            special_price=self.special_price,
            discount=self.discount,
            available_services=tuple(self.available_services),
            is_blocked=self.is_blocked,
            block_reason=self.block_reason,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class SlotAvailabilityDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    slots: list[TimeSlotDTO] = Field(default_factory=list)
    total_slots: int | None = None
    available_slots: int | None = None
    total_capacity: int | None = None
    available_capacity: int | None = None

    def to_entity(self) -> SlotAvailability:
        slots = [s.to_entity() for s in self.slots]
        return SlotAvailability(
            slots=slots,
            total_slots=self.total_slots if self.total_slots is not None else len(slots),
            available_slots=self.available_slots if self.available_slots is not None else len(slots),
            total_capacity=self.total_capacity or 0,
            available_capacity=self.available_capacity or 0,
        )


class TimeSlotStatsDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    total_slots: int = 0
    available_slots: int = 0
    booked_slots: int = 0
    blocked_slots: int = 0
    occupancy_rate: float = 0
    average_bookings_per_slot: float = 0
    peak_hours: list[str] = Field(default_factory=list)
    slot_type_distribution: dict[str, int] = Field(default_factory=dict)


class BulkCreateResultDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    created: int = 0
    skipped: int = 0
    errors: int = 0
    details: dict[str, Any] = Field(default_factory=dict)


def serialize_time_slot(slot: TimeSlot) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "date": format_date_for_api(slot.date),
        "startTime": slot.start_time,
        "endTime": slot.end_time,
        "maxCapacity": slot.max_capacity,
        "slotType": slot.slot_type,
    }
    if slot.special_price is not None:
        payload["specialPrice"] = slot.special_price
    if slot.discount is not None:
        payload["discount"] = slot.discount
    if slot.available_services:
        payload["availableServices"] = list(slot.available_services)
    return payload

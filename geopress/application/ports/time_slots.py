from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from geopress.domain.entities.time_slot import SlotAvailability, TimeSlot


class TimeSlotGatewayPort(ABC):
    @abstractmethod
    def get_available_slots(
        self,
        pressing_id: str,
        day: date | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        slot_type: str | None = None,
        min_capacity: int | None = None,
        include_unavailable: bool = False,
    ) -> SlotAvailability:
        """Fetch slots for a pressing. Raises ApiError subclasses on failure."""
        raise NotImplementedError

    @abstractmethod
    def create_time_slot(self, pressing_id: str, slot: TimeSlot) -> TimeSlot:
        raise NotImplementedError

    @abstractmethod
    def toggle_block_time_slot(self, slot_id: str, blocked: bool, reason: str | None = None) -> TimeSlot:
        raise NotImplementedError

    @abstractmethod
    def delete_time_slot(self, slot_id: str) -> None:
        raise NotImplementedError

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from geopress.application.dto.time_slot_payload import (
    BulkCreateResultDTO,
    SlotAvailabilityDTO,
    TimeSlotDTO,
    TimeSlotStatsDTO,
    serialize_time_slot,
)
from geopress.application.ports.time_slots import TimeSlotGatewayPort
from geopress.application.utils.slot_rules import BulkSlotPlan, format_date_for_api
from geopress.domain.entities.time_slot import SlotAvailability, TimeSlot
from geopress.infrastructure.api.api_client import ApiClient


class HttpTimeSlotGateway(TimeSlotGatewayPort):
    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

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
        params: dict[str, Any] = {
            "date": format_date_for_api(day) if day else None,
            "startDate": format_date_for_api(start_date) if start_date else None,
            "endDate": format_date_for_api(end_date) if end_date else None,
            "slotType": slot_type,
            "minCapacity": min_capacity or None,
            "includeUnavailable": include_unavailable or None,
        }
        data = self._client.get(f"/pressings/{pressing_id}/available-slots", params=params)
        if isinstance(data, list):
            data = {"slots": data}
        availability = SlotAvailabilityDTO.model_validate(data or {}).to_entity()
        self._logger.info(
            "Slots fetched",
            extra={"pressing_id": pressing_id, "slot_count": len(availability.slots)},
        )
        return availability

    def create_time_slot(self, pressing_id: str, slot: TimeSlot) -> TimeSlot:
        data = self._client.post(f"/pressings/{pressing_id}/time-slots", serialize_time_slot(slot))
        return TimeSlotDTO.model_validate(data).to_entity()

    def update_time_slot(
        self,
        slot_id: str,
        max_capacity: int | None = None,
        special_price: float | None = None,
        discount: float | None = None,
        available_services: list[str] | None = None,
        internal_notes: str | None = None,
    ) -> TimeSlot:
        payload = {
            "maxCapacity": max_capacity,
            "specialPrice": special_price,
            "discount": discount,
            "availableServices": available_services,
            "internalNotes": internal_notes,
        }
        data = self._client.put(f"/time-slots/{slot_id}", {k: v for k, v in payload.items() if v is not None})
        return TimeSlotDTO.model_validate(data).to_entity()

    def toggle_block_time_slot(self, slot_id: str, blocked: bool, reason: str | None = None) -> TimeSlot:
        data = self._client.patch(f"/time-slots/{slot_id}/toggle-block", {"blocked": blocked, "reason": reason})
        self._logger.info("Slot block toggled", extra={"slot_id": slot_id, "blocked": blocked})
        return TimeSlotDTO.model_validate(data).to_entity()

    def delete_time_slot(self, slot_id: str) -> None:
        self._client.delete(f"/time-slots/{slot_id}")
        self._logger.info("Slot deleted", extra={"slot_id": slot_id})

    def create_bulk_time_slots(self, pressing_id: str, plan: BulkSlotPlan) -> BulkCreateResultDTO:
        payload = {
            "pressing": pressing_id,
            "startDate": format_date_for_api(plan.start_date),
            "endDate": format_date_for_api(plan.end_date),
            "timeSlots": [
                {
                    k: v
                    for k, v in {
                        "startTime": t.start_time,
                        "endTime": t.end_time,
                        "maxCapacity": t.max_capacity,
                        "slotType": t.slot_type,
                        "specialPrice": t.special_price,
                    }.items()
                    if v is not None
                }
                for t in plan.time_slots
            ],
            "daysOfWeek": list(plan.days_of_week),
            "skipExistingSlots": plan.skip_existing_slots,
        }
        data = self._client.post(f"/pressings/{pressing_id}/bulk-time-slots", payload)
        result = BulkCreateResultDTO.model_validate(data or {})
        self._logger.info(
            "Bulk slots created",
            extra={"pressing_id": pressing_id, "created_count": result.created, "skipped_count": result.skipped},
        )
        return result

    def get_slot_stats(
        self,
        pressing_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> TimeSlotStatsDTO:
        params = {
            "startDate": format_date_for_api(start_date) if start_date else None,
            "endDate": format_date_for_api(end_date) if end_date else None,
        }
        data = self._client.get(f"/pressings/{pressing_id}/slot-stats", params=params)
        return TimeSlotStatsDTO.model_validate(data or {})

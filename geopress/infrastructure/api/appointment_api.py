from __future__ import annotations

import logging
from datetime import date
from typing import Any

from geopress.application.dto.appointment_payload import (
    AppointmentDTO,
    AppointmentListDTO,
    AppointmentStatsDTO,
    serialize_create_request,
)
from geopress.application.exceptions import ApiError
from geopress.application.ports.appointments import AppointmentGatewayPort
from geopress.domain.entities.appointment import Appointment, CreateAppointmentRequest
from geopress.infrastructure.api.api_client import ApiClient

LIST_FILTERS = {
    "status": "status",
    "pressing": "pressing",
    "client": "client",
    "start_date": "startDate",
    "end_date": "endDate",
    "page": "page",
    "limit": "limit",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
}


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


class HttpAppointmentGateway(AppointmentGatewayPort):
    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def create_appointment(self, request: CreateAppointmentRequest) -> Appointment:
        try:
            data = self._client.post("/appointments", serialize_create_request(request))
        except ApiError as e:
            self._logger.error(
                "Error creating appointment",
                extra={"pressing_id": request.pressing, "error": e.message},
            )
            raise
        appointment = AppointmentDTO.model_validate(data).to_entity()
        self._logger.info(
            "Appointment created",
            extra={"appointment_id": appointment.id, "pressing_id": request.pressing},
        )
        return appointment

    def get_appointments(self, **filters: Any) -> tuple[list[Appointment], dict[str, int]]:
        unknown = set(filters) - set(LIST_FILTERS)
        if unknown:
            raise ValueError(f"Unknown appointment filters: {sorted(unknown)}")

        params = {
            LIST_FILTERS[key]: value.isoformat() if isinstance(value, date) else value
            for key, value in filters.items()
            if value
        }
        data = self._client.get("/appointments", params=params)
        listing = AppointmentListDTO.model_validate(data or {})
        return (
            [a.to_entity() for a in listing.appointments],
            listing.pagination.model_dump(),
        )

    def get_appointment(self, appointment_id: str) -> Appointment:
        data = self._client.get(f"/appointments/{appointment_id}")
        return AppointmentDTO.model_validate(data).to_entity()

    def confirm_appointment(
        self,
        appointment_id: str,
        estimated_duration: int | None = None,
        special_instructions: str | None = None,
        internal_notes: str | None = None,
    ) -> Appointment:
        payload = _compact(
            {
                "estimatedDuration": estimated_duration,
                "specialInstructions": special_instructions,
                "internalNotes": internal_notes,
            }
        )
        return self._transition(appointment_id, "confirm", payload)

    def cancel_appointment(self, appointment_id: str, reason: str, refund_requested: bool = False) -> Appointment:
        return self._transition(
            appointment_id,
            "cancel",
            {"reason": reason, "refundRequested": refund_requested},
        )

    def reschedule_appointment(self, appointment_id: str, new_time_slot: str, reason: str | None = None) -> Appointment:
        return self._transition(
            appointment_id,
            "reschedule",
            _compact({"newTimeSlot": new_time_slot, "reason": reason}),
        )

    def complete_appointment(
        self,
        appointment_id: str,
        actual_duration: int | None = None,
        quality_notes: str | None = None,
    ) -> Appointment:
        return self._transition(
            appointment_id,
            "complete",
            _compact({"actualDuration": actual_duration, "qualityNotes": quality_notes}),
        )

    def get_appointment_stats(
        self,
        pressing: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        group_by: str | None = None,
    ) -> AppointmentStatsDTO:
        params = _compact(
            {
                "pressing": pressing,
                "startDate": start_date.isoformat() if start_date else None,
                "endDate": end_date.isoformat() if end_date else None,
                "groupBy": group_by,
            }
        )
        data = self._client.get("/appointments/stats", params=params)
        return AppointmentStatsDTO.model_validate(data or {})

    def get_today_appointments(self, pressing_id: str | None = None, today: date | None = None) -> list[Appointment]:
        today = today or date.today()
        appointments, _ = self.get_appointments(
            start_date=today,
            end_date=today,
            sort_by="appointmentDate",
            sort_order="asc",
            pressing=pressing_id,
        )
        return appointments

    def get_upcoming_appointments(
        self,
        client_id: str | None = None,
        limit: int = 10,
        today: date | None = None,
    ) -> list[Appointment]:
        appointments, _ = self.get_appointments(
            start_date=today or date.today(),
            status="confirmed",
            sort_by="appointmentDate",
            sort_order="asc",
            limit=limit,
            client=client_id,
        )
        return appointments

    def _transition(self, appointment_id: str, action: str, payload: dict[str, Any]) -> Appointment:
        try:
            data = self._client.patch(f"/appointments/{appointment_id}/{action}", payload)
        except ApiError as e:
            self._logger.error(
                "Error updating appointment",
                extra={"appointment_id": appointment_id, "action": action, "error": e.message},
            )
            raise
        self._logger.info("Appointment updated", extra={"appointment_id": appointment_id, "action": action})
        return AppointmentDTO.model_validate(data).to_entity()

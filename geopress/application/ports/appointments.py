from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from geopress.domain.entities.appointment import Appointment, CreateAppointmentRequest


class AppointmentGatewayPort(ABC):
    @abstractmethod
    def create_appointment(self, request: CreateAppointmentRequest) -> Appointment:
        raise NotImplementedError

    @abstractmethod
    def get_appointments(self, **filters: Any) -> tuple[list[Appointment], dict[str, int]]:
        """List appointments. Returns (appointments, pagination)."""
        raise NotImplementedError

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Appointment:
        raise NotImplementedError

    @abstractmethod
    def confirm_appointment(
        self,
        appointment_id: str,
        estimated_duration: int | None = None,
        special_instructions: str | None = None,
        internal_notes: str | None = None,
    ) -> Appointment:
        raise NotImplementedError

    @abstractmethod
    def cancel_appointment(self, appointment_id: str, reason: str, refund_requested: bool = False) -> Appointment:
        raise NotImplementedError

    @abstractmethod
    def reschedule_appointment(self, appointment_id: str, new_time_slot: str, reason: str | None = None) -> Appointment:
        raise NotImplementedError

    @abstractmethod
    def complete_appointment(
        self,
        appointment_id: str,
        actual_duration: int | None = None,
        quality_notes: str | None = None,
    ) -> Appointment:
        raise NotImplementedError

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable

from geopress.application.exceptions import ApiError, BookingValidationError
from geopress.application.ports.appointments import AppointmentGatewayPort
from geopress.application.use_cases.slot_availability import SlotAvailabilityUseCase
from geopress.domain.entities.appointment import (
    Address,
    Appointment,
    CreateAppointmentRequest,
    ServiceLine,
    ServiceSelection,
)
from geopress.domain.entities.booking_state import BOOKING_STEPS, BookingState
from geopress.domain.entities.notice import Notice
from geopress.domain.entities.time_slot import TimeSlot

BOOKING_FAILED_MESSAGE = "Erreur lors de la création du rendez-vous"
MISSING_INFO_MESSAGE = "Informations manquantes pour créer le rendez-vous"
BOOKING_SUCCESS_MESSAGE = "Rendez-vous créé avec succès !"
SUBMIT_IN_PROGRESS_MESSAGE = "Réservation en cours..."


@dataclass(frozen=True)
class BookingResult:
    action: str  # "show_step", "slots_loaded", "slot_selected", "blocked", "booked", "error", "busy"
    state: BookingState
    notice: Notice | None = None


class BookingWizardUseCase:
    """
    Linear booking wizard: date -> address -> review -> confirmation.

    States are immutable; every operation returns the next state wrapped in a
    BookingResult. Forward navigation is gated on the completeness of the
    current step.
    """

    def __init__(
        self,
        appointments: AppointmentGatewayPort,
        availability: SlotAvailabilityUseCase,
    ) -> None:
        self._appointments = appointments
        self._availability = availability
        self._logger = logging.getLogger(__name__)

    def start(self, pressing_id: str, services: list[ServiceSelection]) -> BookingState:
        if not pressing_id:
            raise BookingValidationError("pressing_id is required")
        return BookingState(pressing_id=pressing_id, services=tuple(services))

    def select_date(self, state: BookingState, day: date) -> BookingResult:
        self._require_step(state, "date")
        loaded = self._availability.load_available_slots(day, state.pressing_id)
        return BookingResult(
            action="slots_loaded",
            state=replace(
                state,
                selected_date=day,
                available_slots=tuple(loaded.slots),
                slots_synthesized=loaded.synthesized,
                selected_slot=None,
                appointment_datetime=None,
            ),
            notice=loaded.notice,
        )

    def select_slot(self, state: BookingState, slot: TimeSlot) -> BookingResult:
        self._require_step(state, "date")
        if state.selected_date is None:
            raise BookingValidationError("Select a date before choosing a slot")

        hours, minutes = (int(part) for part in slot.start_time.split(":"))
        moment = datetime.combine(state.selected_date, datetime.min.time().replace(hour=hours, minute=minutes))
        return BookingResult(
            action="slot_selected",
            state=replace(state, selected_slot=slot, appointment_datetime=moment),
            notice=Notice("success", f"Créneau sélectionné: {slot.start_time} - {slot.end_time}"),
        )

    def select_slot_by_id(self, state: BookingState, slot_id: str) -> BookingResult:
        for slot in state.available_slots:
            if slot.id == slot_id:
                return self.select_slot(state, slot)
        raise BookingValidationError(f"Unknown slot: {slot_id}")

    def set_pickup_address(self, state: BookingState, address: Address) -> BookingState:
        return replace(state, pickup_address=address)

    def set_delivery_address(self, state: BookingState, address: Address) -> BookingState:
        return replace(state, delivery_address=address)

    def set_same_as_pickup(self, state: BookingState, same_as_pickup: bool) -> BookingState:
        return replace(state, same_as_pickup=same_as_pickup)

    def set_notes(self, state: BookingState, notes: str) -> BookingState:
        return replace(state, notes=notes)

    def can_proceed(self, state: BookingState) -> bool:
        if state.step == "date":
            return state.selected_date is not None and state.selected_slot is not None
        if state.step == "address":
            return bool(state.pickup_address.street.strip())
        if state.step == "review":
            return True
        return False

    def next_step(self, state: BookingState) -> BookingResult:
        # review -> confirmation only happens through submit_booking
        if state.step == "review" or not self.can_proceed(state):
            return BookingResult(action="blocked", state=state)
        return BookingResult(
            action="show_step",
            state=replace(state, step=BOOKING_STEPS[state.step_index + 1]),
        )

    def previous_step(self, state: BookingState) -> BookingResult:
        if state.step_index == 0 or state.step == "confirmation":
            return BookingResult(action="blocked", state=state)
        return BookingResult(
            action="show_step",
            state=replace(state, step=BOOKING_STEPS[state.step_index - 1]),
        )

    def total_amount(self, state: BookingState) -> float:
        return sum(s.price * s.quantity for s in state.services)

    def build_request(self, state: BookingState) -> CreateAppointmentRequest:
        if state.selected_slot is None:
            raise BookingValidationError(MISSING_INFO_MESSAGE)

        pickup = state.pickup_address if state.pickup_address.street.strip() else None
        if state.same_as_pickup:
            delivery = pickup
        else:
            delivery = state.delivery_address if state.delivery_address.street.strip() else None

        return CreateAppointmentRequest(
            pressing=state.pressing_id,
            time_slot=state.selected_slot.id,
            services=tuple(ServiceLine(service=s.service_id, quantity=s.quantity) for s in state.services),
            notes=state.notes.strip() or None,
            pickup_address=pickup,
            delivery_address=delivery,
        )

    def submit_booking(
        self,
        state: BookingState,
        on_complete: Callable[[Appointment], None] | None = None,
    ) -> BookingResult:
        if state.submitting:
            return BookingResult(action="busy", state=state, notice=Notice("info", SUBMIT_IN_PROGRESS_MESSAGE))
        if state.step != "review" or state.selected_slot is None or state.selected_date is None:
            return BookingResult(action="error", state=state, notice=Notice("error", MISSING_INFO_MESSAGE))

        request = self.build_request(state)
        in_flight = replace(state, submitting=True)
        try:
            appointment = self._appointments.create_appointment(request)
        except ApiError as e:
            self._logger.error(
                "Booking submit failed",
                extra={"pressing_id": state.pressing_id, "status": e.status_code, "error": e.message},
            )
            return BookingResult(
                action="error",
                state=replace(in_flight, submitting=False),
                notice=Notice("error", e.server_message or BOOKING_FAILED_MESSAGE),
            )
        except Exception as e:
            self._logger.exception("Unexpected booking error", extra={"error": str(e)})
            return BookingResult(
                action="error",
                state=replace(in_flight, submitting=False),
                notice=Notice("error", BOOKING_FAILED_MESSAGE),
            )

        booked = replace(in_flight, submitting=False, step="confirmation", appointment=appointment)
        if on_complete is not None:
            on_complete(appointment)
        return BookingResult(action="booked", state=booked, notice=Notice("success", BOOKING_SUCCESS_MESSAGE))

    def _require_step(self, state: BookingState, step: str) -> None:
        if state.step != step:
            raise BookingValidationError(f"Operation only allowed on the {step} step (current: {state.step})")

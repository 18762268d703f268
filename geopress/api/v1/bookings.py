from fastapi import APIRouter, Depends, HTTPException

from geopress.api.v1.schemas import (
    AddressRequestSchema,
    AddressSchema,
    BookingResponseSchema,
    BookingStateSchema,
    DateRequestSchema,
    SlotRequestSchema,
    StartBookingRequestSchema,
)
from geopress.api.v1.slots import notice_schema, slot_schema
from geopress.application.ports.booking_sessions import BookingSessionStorePort
from geopress.application.use_cases.booking import BookingResult, BookingWizardUseCase
from geopress.domain.entities.appointment import Address, Coordinates, ServiceSelection
from geopress.domain.entities.booking_state import BookingState
from geopress.wiring.dependencies import get_booking_session_store, get_booking_wizard_use_case

router = APIRouter()


def _address(schema: AddressSchema) -> Address:
    if schema.latitude is None or schema.longitude is None:
        return Address(street=schema.street, city=schema.city)
    return Address(
        street=schema.street,
        city=schema.city,
        coordinates=Coordinates(latitude=schema.latitude, longitude=schema.longitude),
    )


def _address_schema(address: Address) -> AddressSchema:
    return AddressSchema(
        street=address.street,
        city=address.city,
        latitude=address.coordinates.latitude,
        longitude=address.coordinates.longitude,
    )


def _state_schema(session_id: str, state: BookingState, uc: BookingWizardUseCase) -> BookingStateSchema:
    return BookingStateSchema(
        session_id=session_id,
        pressing_id=state.pressing_id,
        step=state.step,
        selected_date=state.selected_date,
        selected_slot=slot_schema(state.selected_slot) if state.selected_slot else None,
        appointment_datetime=state.appointment_datetime,
        available_slots=[slot_schema(s) for s in state.available_slots],
        slots_synthesized=state.slots_synthesized,
        pickup_address=_address_schema(state.pickup_address),
        delivery_address=_address_schema(state.delivery_address),
        same_as_pickup=state.same_as_pickup,
        notes=state.notes,
        total_amount=uc.total_amount(state),
        can_proceed=uc.can_proceed(state),
        appointment_id=state.appointment.id if state.appointment else None,
        appointment_status=state.appointment.status if state.appointment else None,
    )


def _load(sessions: BookingSessionStorePort, session_id: str) -> BookingState:
    state = sessions.get(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Booking session not found")
    return state


def _respond(
    sessions: BookingSessionStorePort,
    session_id: str,
    result: BookingResult,
    uc: BookingWizardUseCase,
) -> BookingResponseSchema:
    sessions.put(session_id, result.state)
    return BookingResponseSchema(
        action=result.action,
        state=_state_schema(session_id, result.state, uc),
        notice=notice_schema(result.notice),
    )


@router.post("/bookings", response_model=BookingResponseSchema)
def start_booking(
    req: StartBookingRequestSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    try:
        state = uc.start(
            pressing_id=req.pressing_id,
            services=[
                ServiceSelection(service_id=s.service_id, name=s.name, price=s.price, quantity=s.quantity)
                for s in req.services
            ],
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session_id = sessions.create(state)
    return BookingResponseSchema(action="show_step", state=_state_schema(session_id, state, uc))


@router.get("/bookings/{session_id}", response_model=BookingResponseSchema)
def get_booking(
    session_id: str,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = _load(sessions, session_id)
    return BookingResponseSchema(action="show_step", state=_state_schema(session_id, state, uc))


@router.post("/bookings/{session_id}/date", response_model=BookingResponseSchema)
def choose_date(
    session_id: str,
    req: DateRequestSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = _load(sessions, session_id)
    try:
        result = uc.select_date(state, req.date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(sessions, session_id, result, uc)


@router.post("/bookings/{session_id}/slot", response_model=BookingResponseSchema)
def choose_slot(
    session_id: str,
    req: SlotRequestSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = _load(sessions, session_id)
    try:
        result = uc.select_slot_by_id(state, req.slot_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(sessions, session_id, result, uc)


@router.post("/bookings/{session_id}/address", response_model=BookingResponseSchema)
def set_address(
    session_id: str,
    req: AddressRequestSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = _load(sessions, session_id)
    state = uc.set_pickup_address(state, _address(req.pickup))
    state = uc.set_same_as_pickup(state, req.same_as_pickup)
    if req.delivery is not None:
        state = uc.set_delivery_address(state, _address(req.delivery))
    if req.notes is not None:
        state = uc.set_notes(state, req.notes)
    return _respond(sessions, session_id, BookingResult(action="address_updated", state=state), uc)


@router.post("/bookings/{session_id}/next", response_model=BookingResponseSchema)
def next_step(
    session_id: str,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = _load(sessions, session_id)
    return _respond(sessions, session_id, uc.next_step(state), uc)


@router.post("/bookings/{session_id}/back", response_model=BookingResponseSchema)
def previous_step(
    session_id: str,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = _load(sessions, session_id)
    return _respond(sessions, session_id, uc.previous_step(state), uc)


@router.post("/bookings/{session_id}/submit", response_model=BookingResponseSchema)
def submit_booking(
    session_id: str,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
    sessions: BookingSessionStorePort = Depends(get_booking_session_store),
):
    state = sessions.begin_submit(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Booking session not found")

    result = uc.submit_booking(state)
    if result.action == "busy":
        # the submit holding the session writes the final state
        return BookingResponseSchema(
            action=result.action,
            state=_state_schema(session_id, result.state, uc),
            notice=notice_schema(result.notice),
        )
    return _respond(sessions, session_id, result, uc)

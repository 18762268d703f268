"""
Tests for the HTTP surface, with gateways replaced through dependency overrides.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from geopress.application.exceptions import ApiUnavailableError, NotFoundError
from geopress.application.ports.appointments import AppointmentGatewayPort
from geopress.application.ports.pressings import PressingDirectoryPort
from geopress.application.ports.time_slots import TimeSlotGatewayPort
from geopress.application.use_cases.booking import BookingWizardUseCase
from geopress.application.use_cases.search import SearchUseCase
from geopress.application.use_cases.slot_availability import SlotAvailabilityUseCase
from geopress.core.config import settings
from geopress.domain.entities.appointment import Appointment
from geopress.domain.entities.pressing import Pressing, PressingService
from geopress.domain.entities.time_slot import SlotAvailability, TimeSlot
from geopress.infrastructure.store.memory_store import MemoryBookingSessionStore, MemoryKeyValueStore
from geopress.main import app
from geopress.wiring import dependencies


class StubSlots(TimeSlotGatewayPort):
    def __init__(self, slots: list[TimeSlot] | None = None, error: Exception | None = None) -> None:
        self.slots = slots or []
        self.error = error

    def get_available_slots(self, pressing_id, day=None, start_date=None, end_date=None,
                            slot_type=None, min_capacity=None, include_unavailable=False):
        if self.error:
            raise self.error
        return SlotAvailability(slots=list(self.slots))

    def create_time_slot(self, pressing_id, slot):
        raise NotImplementedError

    def toggle_block_time_slot(self, slot_id, blocked, reason=None):
        raise NotImplementedError

    def delete_time_slot(self, slot_id):
        raise NotImplementedError


class StubAppointments(AppointmentGatewayPort):
    def __init__(self) -> None:
        self.appointments = {
            "soon": Appointment("soon", "c1", "p1", "s1", datetime.now() + timedelta(hours=1), status="confirmed"),
            "later": Appointment("later", "c1", "p1", "s1", datetime.now() + timedelta(days=2)),
        }
        self.created = []

    def create_appointment(self, request):
        self.created.append(request)
        return Appointment("new", "c1", request.pressing, request.time_slot, datetime(2024, 1, 26, 9, 0))

    def get_appointments(self, **filters):
        return list(self.appointments.values()), {}

    def get_appointment(self, appointment_id):
        if appointment_id == "offline":
            raise ApiUnavailableError("down")
        if appointment_id not in self.appointments:
            raise NotFoundError("Rendez-vous introuvable", status_code=404)
        return self.appointments[appointment_id]

    def confirm_appointment(self, appointment_id, **kwargs):
        raise NotImplementedError

    def cancel_appointment(self, appointment_id, reason, refund_requested=False):
        raise NotImplementedError

    def reschedule_appointment(self, appointment_id, new_time_slot, reason=None):
        raise NotImplementedError

    def complete_appointment(self, appointment_id, **kwargs):
        raise NotImplementedError


class StubDirectory(PressingDirectoryPort):
    def get_nearby(self, latitude, longitude, radius_km):
        return [
            Pressing("near", "Pressing Plateau", "Avenue Chardy", 5.3197, -4.0167, neighborhood="Plateau", rating=4.0,
                     services=(PressingService("s1", "Lavage", "lavage", 1500),)),
            Pressing("far", "Pressing Bingerville", "Route de Bingerville", 5.35, -3.89, neighborhood="Bingerville",
                     rating=4.9, services=(PressingService("s2", "Repassage", "repassage", 800),)),
        ]

    def search(self, query=None, neighborhood=None):
        return []

    def get_pressing(self, pressing_id):
        return None


@pytest.fixture
def client():
    slots = StubSlots(
        [
            TimeSlot("s1", "p1", date(2024, 1, 26), "09:00", "10:00", 4, 1, 3),
            TimeSlot("s2", "p1", date(2024, 1, 26), "14:00", "15:00", 4, 4, 0),
        ]
    )
    appointments = StubAppointments()
    store = MemoryKeyValueStore()
    sessions = MemoryBookingSessionStore()

    app.dependency_overrides[dependencies.get_slot_availability_use_case] = lambda: SlotAvailabilityUseCase(slots)
    app.dependency_overrides[dependencies.get_booking_wizard_use_case] = lambda: BookingWizardUseCase(
        appointments, SlotAvailabilityUseCase(slots)
    )
    app.dependency_overrides[dependencies.get_booking_session_store] = lambda: sessions
    app.dependency_overrides[dependencies.get_search_use_case] = lambda: SearchUseCase(StubDirectory(), store)
    app.dependency_overrides[dependencies.get_appointment_gateway] = lambda: appointments

    with TestClient(app) as test_client:
        test_client.appointments = appointments
        test_client.sessions = sessions
        yield test_client

    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_slots_endpoint_filters_unavailable(client):
    response = client.get("/api/v1/pressings/p1/slots", params={"date": "2024-01-26"})

    assert response.status_code == 200
    body = response.json()
    assert body["synthesized"] is False
    assert [s["id"] for s in body["slots"]] == ["s1"]


def test_slots_endpoint_synthesizes_on_failure(client):
    app.dependency_overrides[dependencies.get_slot_availability_use_case] = lambda: SlotAvailabilityUseCase(
        StubSlots(error=ApiUnavailableError("down"))
    )

    body = client.get("/api/v1/pressings/p1/slots", params={"date": "2024-01-26"}).json()

    assert body["synthesized"] is True
    assert len(body["slots"]) == 4
    assert body["notice"]["level"] == "info"


def test_booking_flow_over_http(client):
    started = client.post(
        "/api/v1/bookings",
        json={"pressing_id": "p1", "services": [{"service_id": "svc1", "name": "Chemise", "price": 500, "quantity": 2}]},
    ).json()
    session = started["state"]["session_id"]
    assert started["state"]["step"] == "date"
    assert started["state"]["total_amount"] == 1000

    assert client.post(f"/api/v1/bookings/{session}/next").json()["action"] == "blocked"

    dated = client.post(f"/api/v1/bookings/{session}/date", json={"date": "2024-01-26"}).json()
    assert [s["id"] for s in dated["state"]["available_slots"]] == ["s1"]

    slotted = client.post(f"/api/v1/bookings/{session}/slot", json={"slot_id": "s1"}).json()
    assert slotted["state"]["can_proceed"] is True

    assert client.post(f"/api/v1/bookings/{session}/next").json()["state"]["step"] == "address"
    client.post(
        f"/api/v1/bookings/{session}/address",
        json={"pickup": {"street": "Rue des Jardins"}, "notes": "Portail bleu"},
    )
    assert client.post(f"/api/v1/bookings/{session}/next").json()["state"]["step"] == "review"
    assert client.post(f"/api/v1/bookings/{session}/back").json()["state"]["step"] == "address"
    client.post(f"/api/v1/bookings/{session}/next")

    submitted = client.post(f"/api/v1/bookings/{session}/submit").json()

    assert submitted["action"] == "booked"
    assert submitted["state"]["step"] == "confirmation"
    assert submitted["state"]["appointment_id"] == "new"
    request = client.appointments.created[0]
    assert request.delivery_address == request.pickup_address
    assert request.notes == "Portail bleu"

    fetched = client.get(f"/api/v1/bookings/{session}").json()
    assert fetched["state"]["step"] == "confirmation"


def test_booking_errors(client):
    assert client.get("/api/v1/bookings/unknown").status_code == 404
    assert client.post("/api/v1/bookings", json={"pressing_id": "p1", "services": []}).status_code == 422

    started = client.post(
        "/api/v1/bookings",
        json={"pressing_id": "p1", "services": [{"service_id": "svc1", "name": "Chemise", "price": 500}]},
    ).json()
    session = started["state"]["session_id"]

    assert client.post(f"/api/v1/bookings/{session}/slot", json={"slot_id": "nope"}).status_code == 400


def _review_session(client) -> str:
    started = client.post(
        "/api/v1/bookings",
        json={"pressing_id": "p1", "services": [{"service_id": "svc1", "name": "Chemise", "price": 500}]},
    ).json()
    session = started["state"]["session_id"]
    client.post(f"/api/v1/bookings/{session}/date", json={"date": "2024-01-26"})
    client.post(f"/api/v1/bookings/{session}/slot", json={"slot_id": "s1"})
    client.post(f"/api/v1/bookings/{session}/next")
    client.post(f"/api/v1/bookings/{session}/address", json={"pickup": {"street": "Rue des Jardins"}})
    client.post(f"/api/v1/bookings/{session}/next")
    return session


def test_submit_is_refused_while_another_is_in_flight(client):
    session = _review_session(client)
    in_flight = replace(client.sessions.get(session), submitting=True)
    client.sessions.put(session, in_flight)

    body = client.post(f"/api/v1/bookings/{session}/submit").json()

    assert body["action"] == "busy"
    assert body["notice"]["level"] == "info"
    assert client.appointments.created == []
    assert client.sessions.get(session) is in_flight


def test_submit_releases_the_session_when_done(client):
    session = _review_session(client)

    assert client.post(f"/api/v1/bookings/{session}/submit").json()["action"] == "booked"

    assert client.sessions.get(session).submitting is False
    assert len(client.appointments.created) == 1
    assert client.post("/api/v1/bookings/unknown/submit").status_code == 404


def test_ip_position_provider_is_built_once(monkeypatch):
    monkeypatch.setattr(settings, "MAPBOX_ACCESS_TOKEN", "pk.test")
    monkeypatch.setattr(settings, "GEOLOCATION_FALLBACK_TO_IP", True)
    dependencies.get_ip_position_provider.cache_clear()
    try:
        provider = dependencies.get_ip_position_provider()
        assert provider is not None
        assert dependencies.get_ip_position_provider() is provider
    finally:
        dependencies.get_ip_position_provider.cache_clear()


def test_search_and_favorites(client):
    body = client.get("/api/v1/search", params={"lat": 5.32, "lng": -4.02, "sort": "distance"}).json()

    assert [p["id"] for p in body["results"]] == ["near", "far"]
    assert body["position_source"] == "native"
    assert body["results"][0]["distance_km"] < body["results"][1]["distance_km"]

    assert client.post("/api/v1/favorites/far").json() == {"favorites": ["far"]}

    body = client.get("/api/v1/search", params={"q": "repassage"}).json()
    assert [p["id"] for p in body["results"]] == ["far"]
    assert body["results"][0]["favorite"] is True
    assert body["query"] == "repassage"

    assert client.post("/api/v1/favorites/far").json() == {"favorites": []}


def test_search_filters_by_neighborhood_and_rating(client):
    body = client.get("/api/v1/search", params={"neighborhood": ["Plateau"], "sort": "rating"}).json()
    assert [p["id"] for p in body["results"]] == ["near"]

    body = client.get("/api/v1/search", params={"rating": 4.5}).json()
    assert [p["id"] for p in body["results"]] == ["far"]


def test_appointment_eligibility(client):
    soon = client.get("/api/v1/appointments/soon/eligibility").json()
    later = client.get("/api/v1/appointments/later/eligibility").json()

    assert soon["can_cancel"] is False
    assert soon["status_label"] == "Confirmé"
    assert later["can_cancel"] is True
    assert later["can_reschedule"] is True
    assert later["time_until"]["days"] >= 1

    assert client.get("/api/v1/appointments/missing/eligibility").status_code == 404
    assert client.get("/api/v1/appointments/offline/eligibility").status_code == 502

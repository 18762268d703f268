"""
Tests for the REST client wrapper and the HTTP gateways, using httpx.MockTransport.
"""

from __future__ import annotations

import json
import logging
from datetime import date

import httpx
import pytest

from geopress.application.exceptions import ApiError, ApiUnavailableError, AuthenticationError, NotFoundError
from geopress.application.utils.slot_rules import generate_default_weekly_slots
from geopress.domain.entities.appointment import Address, CreateAppointmentRequest, ServiceLine
from geopress.infrastructure.api.api_client import ApiClient, is_public_endpoint
from geopress.infrastructure.api.appointment_api import HttpAppointmentGateway
from geopress.infrastructure.api.pressing_api import HttpPressingDirectory
from geopress.infrastructure.api.timeslot_api import HttpTimeSlotGateway
from geopress.infrastructure.store.memory_store import MemoryKeyValueStore

BASE_URL = "https://api.test/api/v1"


def _client(handler, store: MemoryKeyValueStore | None = None, on_unauthorized=None) -> ApiClient:
    return ApiClient(
        store=store or MemoryKeyValueStore(),
        base_url=BASE_URL,
        timeout=5,
        on_unauthorized=on_unauthorized,
        transport=httpx.MockTransport(handler),
    )


def test_public_endpoint_fragments():
    assert is_public_endpoint("/pressings/p1/available-slots")
    assert is_public_endpoint("/health")
    assert not is_public_endpoint("/appointments")


def test_bearer_token_and_data_unwrap():
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"success": True, "data": {"ok": 1}})

    store = MemoryKeyValueStore({"authToken": "legacy", "geopressci_access_token": "jwt-123"})
    client = _client(handler, store)

    data = client.get("/appointments", params={"status": "pending", "page": None, "includeUnavailable": True})

    assert data == {"ok": 1}
    assert seen["auth"] == "Bearer jwt-123"
    assert seen["path"] == "/api/v1/appointments"
    assert seen["params"] == {"status": "pending", "includeUnavailable": "true"}


def test_no_token_no_header_and_empty_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(204)

    assert _client(handler).delete("/time-slots/s1") is None


def test_401_on_protected_endpoint_clears_session():
    calls: list[str] = []
    store = MemoryKeyValueStore(
        {"geopressci_access_token": "jwt", "authToken": "old", "geopressci_user": {"id": "u1"}, "pressing-favorites": ["p1"]}
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Token expiré"})

    client = _client(handler, store, on_unauthorized=lambda: calls.append("login"))

    with pytest.raises(AuthenticationError) as exc:
        client.get("/appointments")

    assert exc.value.message == "Token expiré"
    assert exc.value.status_code == 401
    assert calls == ["login"]
    assert store.get("geopressci_access_token") is None
    assert store.get("geopressci_user") is None
    assert store.get("pressing-favorites") == ["p1"]


def test_401_on_public_endpoint_keeps_session():
    calls: list[str] = []
    store = MemoryKeyValueStore({"geopressci_access_token": "jwt"})

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Unauthorized"})

    client = _client(handler, store, on_unauthorized=lambda: calls.append("login"))

    with pytest.raises(AuthenticationError):
        client.get("/pressings/p1/available-slots")

    assert calls == []
    assert store.get("geopressci_access_token") == "jwt"


def test_error_mapping():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"message": "Pressing introuvable"})
        if request.url.path.endswith("/broken"):
            return httpx.Response(500, text="oops")
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)

    with pytest.raises(NotFoundError) as not_found:
        client.get("/missing")
    assert not_found.value.message == "Pressing introuvable"

    with pytest.raises(ApiError) as server_error:
        client.get("/broken")
    assert server_error.value.status_code == 500
    assert server_error.value.message == "Erreur lors de la communication avec le serveur"

    with pytest.raises(ApiUnavailableError):
        client.get("/offline")


def test_time_slot_gateway_fetches_available_slots():
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "_id": "s1",
                        "pressing": "p1",
                        "date": "2024-01-26",
                        "startTime": "09:00",
                        "endTime": "10:00",
                        "maxCapacity": 4,
                        "currentBookings": 1,
                    }
                ]
            },
        )

    availability = HttpTimeSlotGateway(_client(handler)).get_available_slots("p1", day=date(2024, 1, 26))

    assert captured["path"] == "/api/v1/pressings/p1/available-slots"
    assert captured["params"] == {"date": "2024-01-26"}
    assert availability.slots[0].available_spots == 3
    assert availability.total_slots == 1


def test_appointment_gateway_create_and_transitions():
    requests: list[tuple[str, str, dict]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        requests.append((request.method, request.url.path, body))
        status = "cancelled" if request.url.path.endswith("/cancel") else "pending"
        return httpx.Response(
            200,
            json={
                "data": {
                    "_id": "a1",
                    "client": "c1",
                    "pressing": "p1",
                    "timeSlot": "s1",
                    "appointmentDate": "2024-01-26T09:00:00",
                    "status": status,
                }
            },
        )

    gateway = HttpAppointmentGateway(_client(handler))
    request = CreateAppointmentRequest(
        pressing="p1",
        time_slot="s1",
        services=(ServiceLine("svc1", 1), ServiceLine("svc2", 3)),
        notes="Fragile",
        pickup_address=Address(street="Rue 1"),
    )

    created = gateway.create_appointment(request)
    cancelled = gateway.cancel_appointment("a1", reason="Empêchement", refund_requested=True)

    assert created.id == "a1"
    assert cancelled.status == "cancelled"
    method, path, body = requests[0]
    assert (method, path) == ("POST", "/api/v1/appointments")
    assert len(body["services"]) == 2
    assert body["notes"] == "Fragile"
    assert "deliveryAddress" not in body
    method, path, body = requests[1]
    assert (method, path) == ("PATCH", "/api/v1/appointments/a1/cancel")
    assert body["reason"] == "Empêchement"
    assert body["refundRequested"] is True


def test_appointment_gateway_rejects_unknown_filters():
    gateway = HttpAppointmentGateway(_client(lambda request: httpx.Response(200, json={})))

    with pytest.raises(ValueError):
        gateway.get_appointments(colour="red")


def test_pressing_directory():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/nearby"):
            assert request.url.params["radius"] == "10"
            return httpx.Response(
                200,
                json={"data": [{"_id": "p1", "name": "One", "location": {"coordinates": [-4.0167, 5.3197]}}]},
            )
        return httpx.Response(404, json={"message": "not found"})

    directory = HttpPressingDirectory(_client(handler))

    nearby = directory.get_nearby(5.33, -4.02, 10)
    assert [p.id for p in nearby] == ["p1"]
    assert nearby[0].coordinates_source == "api"
    assert directory.get_pressing("missing") is None


def test_today_appointments_query_and_pagination():
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "data": {
                    "appointments": [
                        {"_id": "a1", "appointmentDate": "2024-01-26T09:00:00", "pressing": {"_id": "p1"}},
                    ],
                    "pagination": {"currentPage": 1, "totalPages": 1, "totalItems": 1, "itemsPerPage": 10},
                }
            },
        )

    gateway = HttpAppointmentGateway(_client(handler))

    appointments = gateway.get_today_appointments("p1", today=date(2024, 1, 26))
    _, pagination = gateway.get_appointments(page=1)

    assert [a.pressing for a in appointments] == ["p1"]
    assert pagination["total_items"] == 1
    assert captured["params"] == {"page": "1"}


def test_bulk_slot_creation_payload(caplog):
    caplog.set_level(logging.INFO, logger="geopress.infrastructure.api.timeslot_api")
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"data": {"created": 54, "skipped": 0, "errors": 0}})

    result = HttpTimeSlotGateway(_client(handler)).create_bulk_time_slots(
        "p1", generate_default_weekly_slots(date(2024, 1, 22))
    )

    body = captured["body"]
    assert captured["path"] == "/api/v1/pressings/p1/bulk-time-slots"
    assert body["startDate"] == "2024-01-22"
    assert body["endDate"] == "2024-01-28"
    assert body["daysOfWeek"] == [1, 2, 3, 4, 5, 6]
    assert body["timeSlots"][5] == {"startTime": "15:00", "endTime": "16:00", "maxCapacity": 5, "slotType": "express"}
    assert result.created == 54
    record = next(r for r in caplog.records if r.getMessage() == "Bulk slots created")
    assert (record.created_count, record.skipped_count) == (54, 0)


def test_non_json_success_body_is_an_api_error():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(ApiError) as exc:
        HttpPressingDirectory(client).get_nearby(5.33, -4.02, 10)
    assert exc.value.status_code == 200
    assert exc.value.server_message is None


def test_error_body_message_is_kept_apart_from_default():
    with pytest.raises(ApiError) as exc:
        _client(lambda request: httpx.Response(502, text="Bad gateway")).get("/appointments")
    assert exc.value.message == "Erreur lors de la communication avec le serveur"
    assert exc.value.server_message is None

    with pytest.raises(NotFoundError) as exc:
        _client(lambda request: httpx.Response(404, json={"error": "Pressing introuvable"})).get("/pressings/x")
    assert exc.value.server_message == "Pressing introuvable"

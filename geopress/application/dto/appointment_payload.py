from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from geopress.application.dto.time_slot_payload import ref_id
from geopress.domain.entities.appointment import (
    Address,
    Appointment,
    AppointmentServiceItem,
    Cancellation,
    Coordinates,
    CreateAppointmentRequest,
    RescheduleEntry,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CoordinatesDTO(_CamelModel):
    latitude: float
    longitude: float


class AddressDTO(_CamelModel):
    street: str = ""
    city: str = "Abidjan"
    coordinates: CoordinatesDTO | None = None

    def to_entity(self) -> Address:
        if self.coordinates is None:
            return Address(street=self.street, city=self.city)
        return Address(
            street=self.street,
            city=self.city,
            coordinates=Coordinates(self.coordinates.latitude, self.coordinates.longitude),
        )


class AppointmentServiceItemDTO(_CamelModel):
    service: str
    quantity: int = 1
    unit_price: float = 0
    total_price: float | None = None

    @field_validator("service", mode="before")
    @classmethod
    def _service_id(cls, value: Any) -> Any:
        return ref_id(value)

    def to_entity(self) -> AppointmentServiceItem:
        total = self.total_price if self.total_price is not None else self.unit_price * self.quantity
        return AppointmentServiceItem(
            service=self.service,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_price=total,
        )


class CancellationDTO(_CamelModel):
    reason: str = ""
    cancelled_at: str | None = None
    cancelled_by: str | None = None
    refund_requested: bool = False


class RescheduleEntryDTO(_CamelModel):
    old_time_slot: str
    new_time_slot: str
    reason: str | None = None
    rescheduled_at: str | None = None


class AppointmentDTO(_CamelModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    client: str = ""
    pressing: str = ""
    time_slot: str = ""
    appointment_date: datetime
    status: str = "pending"
    services: list[AppointmentServiceItemDTO] = Field(default_factory=list)
    total_amount: float | None = None
    payment_status: str = "pending"
    pickup_address: AddressDTO | None = None
    delivery_address: AddressDTO | None = None
    notes: str | None = None
    cancellation: CancellationDTO | None = None
    reschedule_history: list[RescheduleEntryDTO] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_refs(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("client", "pressing", "timeSlot"):
            if key in data:
                data[key] = ref_id(data[key]) or ""
        return data

    def to_entity(self) -> Appointment:
        services = tuple(s.to_entity() for s in self.services)
        total = self.total_amount if self.total_amount is not None else sum(s.total_price for s in services)
        return Appointment(
            id=self.id,
            client=self.client,
            pressing=self.pressing,
            time_slot=self.time_slot,
            appointment_date=self.appointment_date,
            status=self.status,
            services=services,
            total_amount=total,
            payment_status=self.payment_status,
            pickup_address=self.pickup_address.to_entity() if self.pickup_address else None,
            delivery_address=self.delivery_address.to_entity() if self.delivery_address else None,
            notes=self.notes,
            cancellation=(
                Cancellation(**self.cancellation.model_dump()) if self.cancellation else None
            ),
            reschedule_history=tuple(RescheduleEntry(**r.model_dump()) for r in self.reschedule_history),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class PaginationDTO(_CamelModel):
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    items_per_page: int = 0


class AppointmentListDTO(_CamelModel):
    appointments: list[AppointmentDTO] = Field(default_factory=list)
    pagination: PaginationDTO = Field(default_factory=PaginationDTO)


class AppointmentStatsDTO(_CamelModel):
    total_appointments: int = 0
    status_distribution: dict[str, int] = Field(default_factory=dict)
    completion_rate: float = 0
    cancellation_rate: float = 0
    no_show_rate: float = 0
    average_revenue: float = 0
    total_revenue: float = 0
    appointments_by_day: list[dict[str, Any]] = Field(default_factory=list)


def serialize_address(address: Address) -> dict[str, Any]:
    return {
        "street": address.street,
        "city": address.city,
        "coordinates": {
            "latitude": address.coordinates.latitude,
            "longitude": address.coordinates.longitude,
        },
    }


def serialize_create_request(request: CreateAppointmentRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "pressing": request.pressing,
        "timeSlot": request.time_slot,
        "services": [{"service": line.service, "quantity": line.quantity} for line in request.services],
    }
    if request.notes:
        payload["notes"] = request.notes
    if request.pickup_address is not None:
        payload["pickupAddress"] = serialize_address(request.pickup_address)
    if request.delivery_address is not None:
        payload["deliveryAddress"] = serialize_address(request.delivery_address)
    return payload

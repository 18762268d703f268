from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, Field


class SortBy(str, Enum):
    relevance = "relevance"
    distance = "distance"
    rating = "rating"
    price = "price"
    newest = "newest"
    popular = "popular"


class NoticeSchema(BaseModel):
    level: str
    text: str


class SlotSchema(BaseModel):
    id: str
    pressing_id: str
    date: date
    start_time: str
    end_time: str
    max_capacity: int
    current_bookings: int = 0
    available_spots: int = 0
    status: str = "available"
    slot_type: str = "regular"
    special_price: float | None = None
    discount: float | None = None


class SlotListResponseSchema(BaseModel):
    pressing_id: str
    date: date
    synthesized: bool
    slots: list[SlotSchema]
    notice: NoticeSchema | None = None


class ServiceSelectionSchema(BaseModel):
    service_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class StartBookingRequestSchema(BaseModel):
    pressing_id: str = Field(min_length=1)
    services: list[ServiceSelectionSchema] = Field(min_length=1)


class AddressSchema(BaseModel):
    street: str = ""
    city: str = "Abidjan"
    latitude: float | None = None
    longitude: float | None = None


class DateRequestSchema(BaseModel):
    date: date


class SlotRequestSchema(BaseModel):
    slot_id: str


class AddressRequestSchema(BaseModel):
    pickup: AddressSchema
    delivery: AddressSchema | None = None
    same_as_pickup: bool = True
    notes: str | None = None


class BookingStateSchema(BaseModel):
    session_id: str
    pressing_id: str
    step: str
    selected_date: date | None = None
    selected_slot: SlotSchema | None = None
    appointment_datetime: datetime | None = None
    available_slots: list[SlotSchema] = Field(default_factory=list)
    slots_synthesized: bool = False
    pickup_address: AddressSchema
    delivery_address: AddressSchema
    same_as_pickup: bool = True
    notes: str = ""
    total_amount: float = 0
    can_proceed: bool = False
    appointment_id: str | None = None
    appointment_status: str | None = None


class BookingResponseSchema(BaseModel):
    action: str
    state: BookingStateSchema
    notice: NoticeSchema | None = None


class PressingSchema(BaseModel):
    id: str
    name: str
    address: str
    neighborhood: str | None = None
    latitude: float
    longitude: float
    rating: float = 0
    review_count: int = 0
    distance_km: float | None = None
    is_open: bool = False
    coordinates_source: str = "api"
    favorite: bool = False


class SearchResponseSchema(BaseModel):
    query: str
    sort_by: SortBy
    total: int
    position_source: str | None = None
    results: list[PressingSchema]
    notice: NoticeSchema | None = None


class FavoritesResponseSchema(BaseModel):
    favorites: list[str]


class TimeUntilSchema(BaseModel):
    days: int = 0
    hours: int = 0
    minutes: int = 0
    total_minutes: int = 0


class EligibilityResponseSchema(BaseModel):
    appointment_id: str
    status: str
    status_label: str
    can_cancel: bool
    can_reschedule: bool
    scheduled_for: str
    time_until: TimeUntilSchema

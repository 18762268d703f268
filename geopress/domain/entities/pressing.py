from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PressingService:
    id: str | None
    name: str
    category: str | None = None
    price: float = 0


@dataclass(frozen=True)
class OpeningHours:
    day: str  # "monday" ... "sunday"
    open: str | None  # HH:MM, None when closed
    close: str | None


@dataclass(frozen=True)
class Pressing:
    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    neighborhood: str | None = None
    rating: float = 0
    review_count: int = 0
    services: tuple[PressingService, ...] = ()
    opening_hours: tuple[OpeningHours, ...] = ()
    is_open: bool = False
    distance: float | None = None  # km from the search origin
    created_at: str | None = None
    badges: tuple[str, ...] = ()
    phone: str | None = None
    coordinates_source: str = "api"  # "api", "fallback"

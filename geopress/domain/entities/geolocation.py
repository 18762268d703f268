from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class GeolocationErrorCode(IntEnum):
    UNKNOWN = 0
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


@dataclass(frozen=True)
class GeoPosition:
    latitude: float
    longitude: float
    accuracy: float
    timestamp: float
    source: str = "native"  # "native", "mapbox", "manual"


@dataclass(frozen=True)
class GeolocationState:
    status: str = "idle"  # "idle", "requesting", "success", "error"
    position: GeoPosition | None = None
    error_code: GeolocationErrorCode | None = None
    error_message: str | None = None

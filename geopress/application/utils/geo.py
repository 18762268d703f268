from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Neighborhood:
    name: str
    latitude: float
    longitude: float
    north: float
    south: float
    east: float
    west: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


ABIDJAN_NEIGHBORHOODS: tuple[Neighborhood, ...] = (
    Neighborhood("Cocody", 5.3447, -3.9875, 5.37, 5.32, -3.95, -4.02),
    Neighborhood("Plateau", 5.3196, -4.0083, 5.33, 5.31, -4.00, -4.02),
    Neighborhood("Yopougon", 5.3364, -4.0889, 5.36, 5.31, -4.05, -4.12),
    Neighborhood("Adjamé", 5.3608, -4.0239, 5.37, 5.35, -4.01, -4.04),
    Neighborhood("Treichville", 5.2947, -4.0081, 5.31, 5.28, -3.99, -4.03),
    Neighborhood("Marcory", 5.2833, -3.9833, 5.30, 5.26, -3.96, -4.01),
    Neighborhood("Koumassi", 5.2889, -3.9444, 5.31, 5.27, -3.92, -3.97),
    Neighborhood("Port-Bouët", 5.2361, -3.9306, 5.26, 5.21, -3.90, -3.96),
    Neighborhood("Attécoubé", 5.3500, -4.0500, 5.37, 5.33, -4.03, -4.07),
    Neighborhood("Abobo", 5.4167, -4.0167, 5.45, 5.38, -3.99, -4.05),
    Neighborhood("Bingerville", 5.3500, -3.8833, 5.37, 5.33, -3.86, -3.91),
    Neighborhood("Anyama", 5.4833, -4.0500, 5.51, 5.46, -4.03, -4.07),
    Neighborhood("Songon", 5.3000, -4.2500, 5.33, 5.27, -4.23, -4.27),
)

# Used when a pressing payload carries coordinates outside Abidjan.
FALLBACK_COORDINATES: dict[str, tuple[float, float]] = {
    "Yopougon": (5.34, -4.10),
    "Cocody": (5.365, -4.001),
    "Plateau": (5.32, -4.03),
    "Adjamé": (5.35, -4.04),
    "Treichville": (5.295, -4.025),
    "Marcory": (5.295, -3.995),
}

UNKNOWN_NEIGHBORHOOD = "Autre"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def neighborhood_from_coordinates(latitude: float, longitude: float) -> str:
    for neighborhood in ABIDJAN_NEIGHBORHOODS:
        if neighborhood.contains(latitude, longitude):
            return neighborhood.name
    return UNKNOWN_NEIGHBORHOOD


def is_within_abidjan(latitude: float, longitude: float) -> bool:
    """Extended bounding box of greater Abidjan."""
    return 5.0 <= latitude <= 5.6 and -4.5 <= longitude <= -3.8


def fallback_coordinates(neighborhood: str | None) -> tuple[float, float]:
    return FALLBACK_COORDINATES.get(neighborhood or "", FALLBACK_COORDINATES["Yopougon"])

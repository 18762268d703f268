from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from geopress.application.exceptions import MapboxError
from geopress.core.config import settings


@dataclass(frozen=True)
class GeocodedPlace:
    latitude: float
    longitude: float
    label: str


@dataclass(frozen=True)
class Route:
    distance_m: float
    duration_s: float
    geometry: dict[str, Any]

    @property
    def distance_text(self) -> str:
        if self.distance_m < 1000:
            return f"{round(self.distance_m)} m"
        return f"{self.distance_m / 1000:.1f} km"

    @property
    def duration_text(self) -> str:
        minutes = round(self.duration_s / 60)
        if minutes < 60:
            return f"{minutes} min"
        return f"{minutes // 60} h {minutes % 60:02d}"


class MapboxClient:
    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._access_token = access_token or settings.MAPBOX_ACCESS_TOKEN
        self._base_url = (base_url or settings.MAPBOX_BASE_URL).rstrip("/")
        self._client = httpx.Client(timeout=settings.MAPBOX_TIMEOUT_SECONDS, transport=transport)
        self._logger = logging.getLogger(__name__)

        if not self._access_token:
            raise ValueError("MAPBOX_ACCESS_TOKEN is required for Mapbox calls")

    def forward_geocode(
        self,
        query: str,
        proximity: tuple[float, float] | None = None,
        country: str | None = "CI",
        limit: int = 1,
    ) -> list[GeocodedPlace]:
        params: dict[str, Any] = {"q": query, "limit": limit}
        if proximity:
            lat, lng = proximity
            params["proximity"] = f"{lng},{lat}"
        if country:
            params["country"] = country
        data = self._get("/search/geocode/v6/forward", params)
        return [_place(feature) for feature in data.get("features", []) if _has_point(feature)]

    def reverse_geocode(self, latitude: float, longitude: float, country: str | None = "CI") -> GeocodedPlace | None:
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "types": "address,poi",
            "limit": 1,
        }
        if country:
            params["country"] = country
        data = self._get("/search/geocode/v6/reverse", params)
        features = [f for f in data.get("features", []) if _has_point(f)]
        return _place(features[0]) if features else None

    def directions(
        self,
        origin: tuple[float, float],
        destination: tuple[float, float],
        profile: str = "driving",
    ) -> Route | None:
        (o_lat, o_lng), (d_lat, d_lng) = origin, destination
        path = f"/directions/v5/mapbox/{profile}/{o_lng},{o_lat};{d_lng},{d_lat}"
        data = self._get(path, {"geometries": "geojson", "language": "fr"})
        routes = data.get("routes") or []
        if not routes:
            return None
        route = routes[0]
        return Route(
            distance_m=float(route.get("distance", 0)),
            duration_s=float(route.get("duration", 0)),
            geometry=route.get("geometry") or {},
        )

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.get(
                f"{self._base_url}{path}",
                params={**params, "access_token": self._access_token},
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Mapbox request failed", extra={"url": path, "error": str(e)})
            raise MapboxError(f"Erreur Mapbox: {e}") from e


def _has_point(feature: dict[str, Any]) -> bool:
    coordinates = (feature.get("geometry") or {}).get("coordinates")
    return isinstance(coordinates, list) and len(coordinates) >= 2


def _place(feature: dict[str, Any]) -> GeocodedPlace:
    lng, lat = feature["geometry"]["coordinates"][:2]
    properties = feature.get("properties") or {}
    label = properties.get("full_address") or properties.get("name") or feature.get("place_name") or ""
    return GeocodedPlace(latitude=float(lat), longitude=float(lng), label=str(label))

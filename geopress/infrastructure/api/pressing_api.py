from __future__ import annotations

import logging

from geopress.application.dto.pressing_payload import normalize_pressing, normalize_pressings
from geopress.application.exceptions import NotFoundError
from geopress.application.ports.pressings import PressingDirectoryPort
from geopress.domain.entities.pressing import Pressing
from geopress.infrastructure.api.api_client import ApiClient


class HttpPressingDirectory(PressingDirectoryPort):
    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def get_nearby(self, latitude: float, longitude: float, radius_km: float) -> list[Pressing]:
        data = self._client.get(
            "/pressings/nearby",
            params={"lat": latitude, "lng": longitude, "radius": radius_km},
        )
        pressings = normalize_pressings(data)
        self._logger.info("Nearby pressings fetched", extra={"count": len(pressings)})
        return pressings

    def search(self, query: str | None = None, neighborhood: str | None = None) -> list[Pressing]:
        data = self._client.get("/pressings/search", params={"q": query, "neighborhood": neighborhood})
        return normalize_pressings(data)

    def get_pressing(self, pressing_id: str) -> Pressing | None:
        try:
            data = self._client.get(f"/pressings/{pressing_id}")
        except NotFoundError:
            return None
        if not isinstance(data, dict):
            return None
        return normalize_pressing(data)

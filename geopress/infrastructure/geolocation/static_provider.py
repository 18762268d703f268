from __future__ import annotations

import time

from geopress.application.exceptions import GeolocationError
from geopress.application.ports.position_provider import PositionProviderPort
from geopress.domain.entities.geolocation import GeolocationErrorCode, GeoPosition


class StaticPositionProvider(PositionProviderPort):
    """
    Position reported by the device (or picked by hand on the map) and relayed
    to the server. With no position it behaves like a device that denied or
    failed the request, raising the configured error code.
    """

    def __init__(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
        accuracy: float = 50.0,
        source: str = "native",
        error_code: GeolocationErrorCode = GeolocationErrorCode.POSITION_UNAVAILABLE,
    ) -> None:
        self._latitude = latitude
        self._longitude = longitude
        self._accuracy = accuracy
        self._source = source
        self._error_code = error_code

    def get_current_position(self, high_accuracy: bool = True, maximum_age: float = 300.0) -> GeoPosition:
        if self._latitude is None or self._longitude is None:
            raise GeolocationError(self._error_code)
        return GeoPosition(
            latitude=self._latitude,
            longitude=self._longitude,
            accuracy=self._accuracy,
            timestamp=time.time(),
            source=self._source,
        )

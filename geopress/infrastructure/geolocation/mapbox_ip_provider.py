from __future__ import annotations

import logging
import time

from geopress.application.exceptions import GeolocationError, MapboxError
from geopress.application.ports.position_provider import PositionProviderPort
from geopress.domain.entities.appointment import ABIDJAN_CENTER
from geopress.domain.entities.geolocation import GeolocationErrorCode, GeoPosition
from geopress.infrastructure.mapbox.mapbox_client import MapboxClient

IP_ACCURACY_M = 500.0
CITY_ACCURACY_M = 2000.0


def _in_abidjan_core(latitude: float, longitude: float) -> bool:
    return 5.2 <= latitude <= 5.5 and -4.3 <= longitude <= -3.8


class MapboxIpPositionProvider(PositionProviderPort):
    """Approximate position from Mapbox geocoding when the device cannot locate itself."""

    def __init__(self, client: MapboxClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def get_current_position(self, high_accuracy: bool = True, maximum_age: float = 300.0) -> GeoPosition:
        try:
            places = self._client.forward_geocode("ip", proximity=ABIDJAN_CENTER, country="CI")
        except MapboxError as e:
            self._logger.warning(
                "Mapbox IP lookup failed, trying city lookup",
                extra={"source": "mapbox", "error": str(e)},
            )
            places = []
        if places and _in_abidjan_core(places[0].latitude, places[0].longitude):
            return self._position(places[0].latitude, places[0].longitude, IP_ACCURACY_M)

        try:
            places = self._client.forward_geocode("Abidjan, Côte d'Ivoire", country=None)
            if places:
                return self._position(places[0].latitude, places[0].longitude, CITY_ACCURACY_M)
        except MapboxError as e:
            raise GeolocationError(GeolocationErrorCode.POSITION_UNAVAILABLE, str(e)) from e

        self._logger.warning("Mapbox geolocation returned no usable result")
        raise GeolocationError(
            GeolocationErrorCode.POSITION_UNAVAILABLE,
            "Erreur Mapbox: toutes les méthodes de géolocalisation ont échoué",
        )

    def _position(self, latitude: float, longitude: float, accuracy: float) -> GeoPosition:
        return GeoPosition(
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            timestamp=time.time(),
            source="mapbox",
        )

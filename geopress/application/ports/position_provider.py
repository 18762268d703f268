from abc import ABC, abstractmethod

from geopress.domain.entities.geolocation import GeoPosition


class PositionProviderPort(ABC):
    @abstractmethod
    def get_current_position(self, high_accuracy: bool = True, maximum_age: float = 300.0) -> GeoPosition:
        """Return the device position. Raises GeolocationError."""
        raise NotImplementedError

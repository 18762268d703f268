from __future__ import annotations

from typing import Any

from geopress.domain.entities.geolocation import GeolocationErrorCode


class ApiError(RuntimeError):
    """Raised when the GeoPress REST API rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload: Any = None,
        server_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload
        # text from the response body, None when the server sent none
        self.server_message = server_message


class AuthenticationError(ApiError):
    """Raised on 401 responses."""
    pass


class NotFoundError(ApiError):
    """Raised on 404 responses."""
    pass


class ApiUnavailableError(ApiError):
    """Raised when the API cannot be reached (timeouts, DNS, connection refused)."""
    pass


class MapboxError(RuntimeError):
    """Raised when a Mapbox geocoding or directions call fails."""
    pass


GEOLOCATION_MESSAGES = {
    GeolocationErrorCode.PERMISSION_DENIED: "Autorisation de géolocalisation refusée. Veuillez l'activer dans les paramètres.",
    GeolocationErrorCode.POSITION_UNAVAILABLE: "Position indisponible. Vérifiez votre connexion GPS et sortez à l'extérieur.",
    GeolocationErrorCode.TIMEOUT: "Délai d'attente dépassé. Réessayez ou sortez à l'extérieur pour un meilleur signal.",
    GeolocationErrorCode.UNKNOWN: "Erreur de géolocalisation inconnue.",
}


class GeolocationError(RuntimeError):
    """Raised by position providers. The code follows the browser PositionError numbering."""

    def __init__(self, code: int, message: str | None = None) -> None:
        try:
            self.code = GeolocationErrorCode(code)
        except ValueError:
            self.code = GeolocationErrorCode.UNKNOWN
        self.message = message or GEOLOCATION_MESSAGES[self.code]
        super().__init__(self.message)


class BookingValidationError(ValueError):
    """Raised when the booking wizard is asked for a transition its state does not allow."""
    pass

from functools import lru_cache
import logging

from geopress.core.config import settings
from geopress.application.ports.booking_sessions import BookingSessionStorePort
from geopress.application.ports.key_value_store import KeyValueStorePort
from geopress.application.ports.position_provider import PositionProviderPort
from geopress.application.use_cases.booking import BookingWizardUseCase
from geopress.application.use_cases.geolocation import GeolocationUseCase
from geopress.application.use_cases.search import SearchUseCase
from geopress.application.use_cases.slot_availability import SlotAvailabilityUseCase
from geopress.infrastructure.api.api_client import ApiClient
from geopress.infrastructure.api.appointment_api import HttpAppointmentGateway
from geopress.infrastructure.api.pressing_api import HttpPressingDirectory
from geopress.infrastructure.api.timeslot_api import HttpTimeSlotGateway
from geopress.infrastructure.geolocation.mapbox_ip_provider import MapboxIpPositionProvider
from geopress.infrastructure.geolocation.static_provider import StaticPositionProvider
from geopress.infrastructure.mapbox.mapbox_client import MapboxClient
from geopress.infrastructure.store.json_store import JsonKeyValueStore
from geopress.infrastructure.store.memory_store import MemoryBookingSessionStore, MemoryKeyValueStore


_booking_sessions: MemoryBookingSessionStore | None = None


@lru_cache
def get_key_value_store() -> KeyValueStorePort:
    if settings.STORE_PROVIDER.lower() == "json":
        return JsonKeyValueStore(settings.STORE_DATA_DIR)
    return MemoryKeyValueStore()


def get_booking_session_store() -> BookingSessionStorePort:
    global _booking_sessions
    if _booking_sessions is None:
        _booking_sessions = MemoryBookingSessionStore()
    return _booking_sessions


def _on_unauthorized() -> None:
    logging.getLogger(__name__).warning("Session expired, client must log in again")


@lru_cache
def get_api_client() -> ApiClient:
    logger = logging.getLogger(__name__)
    logger.info("GeoPress API %s (ENV=%s)", settings.GEOPRESS_API_URL, settings.ENV)
    return ApiClient(store=get_key_value_store(), on_unauthorized=_on_unauthorized)


def get_appointment_gateway() -> HttpAppointmentGateway:
    return HttpAppointmentGateway(get_api_client())


def get_time_slot_gateway() -> HttpTimeSlotGateway:
    return HttpTimeSlotGateway(get_api_client())


def get_pressing_directory() -> HttpPressingDirectory:
    return HttpPressingDirectory(get_api_client())


def get_slot_availability_use_case() -> SlotAvailabilityUseCase:
    return SlotAvailabilityUseCase(slots=get_time_slot_gateway())


def get_booking_wizard_use_case() -> BookingWizardUseCase:
    return BookingWizardUseCase(
        appointments=get_appointment_gateway(),
        availability=get_slot_availability_use_case(),
    )


def get_search_use_case() -> SearchUseCase:
    return SearchUseCase(
        directory=get_pressing_directory(),
        store=get_key_value_store(),
        debounce_seconds=settings.SEARCH_DEBOUNCE_SECONDS,
        radius_km=settings.SEARCH_RADIUS_KM,
        default_position=(settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE),
    )


@lru_cache
def get_ip_position_provider() -> PositionProviderPort | None:
    if not settings.GEOLOCATION_FALLBACK_TO_IP or not settings.MAPBOX_ACCESS_TOKEN:
        return None
    return MapboxIpPositionProvider(MapboxClient())


def get_geolocation_use_case(
    latitude: float | None = None,
    longitude: float | None = None,
    accuracy: float | None = None,
) -> GeolocationUseCase:
    provider = StaticPositionProvider(latitude=latitude, longitude=longitude, accuracy=accuracy or 50.0)
    return GeolocationUseCase(
        provider=provider,
        fallback=get_ip_position_provider(),
        timeout_seconds=settings.GEOLOCATION_TIMEOUT_SECONDS,
    )

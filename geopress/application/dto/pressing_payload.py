from __future__ import annotations

import logging
from typing import Any

from geopress.application.utils.geo import (
    fallback_coordinates,
    is_within_abidjan,
    neighborhood_from_coordinates,
)
from geopress.domain.entities.pressing import OpeningHours, Pressing, PressingService

logger = logging.getLogger(__name__)


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _is_pair(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _extract_coordinates(raw: dict[str, Any]) -> tuple[float, float]:
    """Return (lat, lng) from the first coordinate shape present, or (0, 0)."""
    address = raw.get("address") if isinstance(raw.get("address"), dict) else {}
    adresse = raw.get("adresse") if isinstance(raw.get("adresse"), dict) else {}

    geo = (address.get("coordinates") or {}) if isinstance(address.get("coordinates"), dict) else {}
    if _is_pair(geo.get("coordinates")):
        lng, lat = geo["coordinates"]
        return _as_float(lat), _as_float(lng)

    for location in (address.get("location"), raw.get("coordinates")):
        if isinstance(location, dict):
            return (
                _as_float(_first(location, "lat", "latitude", default=0)),
                _as_float(_first(location, "lng", "longitude", default=0)),
            )

    localisation = adresse.get("localisation") or {}
    if isinstance(localisation, dict) and _is_pair(localisation.get("coordinates")):
        lng, lat = localisation["coordinates"]
        return _as_float(lat), _as_float(lng)

    location = raw.get("location") or {}
    if isinstance(location, dict) and _is_pair(location.get("coordinates")):
        lng, lat = location["coordinates"]
        return _as_float(lat), _as_float(lng)

    return 0.0, 0.0


def _normalize_service(raw: Any) -> PressingService | None:
    if isinstance(raw, str):
        return PressingService(id=None, name=raw)
    if not isinstance(raw, dict):
        return None
    return PressingService(
        id=_first(raw, "_id", "id"),
        name=str(_first(raw, "name", "nom", default="")),
        category=_first(raw, "category", "categorie"),
        price=_as_float(_first(raw, "price", "prix", default=0)),
    )


def _normalize_hours(raw: Any) -> OpeningHours | None:
    if not isinstance(raw, dict):
        return None
    day = _first(raw, "day", "jour")
    if not day:
        return None
    return OpeningHours(
        day=str(day).lower(),
        open=_first(raw, "open", "ouverture"),
        close=_first(raw, "close", "fermeture"),
    )


def _rating_value(raw: Any) -> float:
    if isinstance(raw, dict):
        return _as_float(raw.get("average"))
    return _as_float(raw)


def normalize_pressing(raw: dict[str, Any]) -> Pressing | None:
    """
    Map any backend pressing payload to the canonical Pressing.

    Handles the French and English field variants (nom/name/businessName,
    prix/price, adresse/address) and the four coordinate shapes the API has
    used. Coordinates outside greater Abidjan are replaced by a per
    neighborhood fallback. Returns None when the payload has no id.
    """
    pressing_id = _first(raw, "_id", "id")
    if not pressing_id:
        logger.warning("Pressing payload without id dropped")
        return None

    address = raw.get("address") if isinstance(raw.get("address"), dict) else {}
    adresse = raw.get("adresse") if isinstance(raw.get("adresse"), dict) else {}
    addresses = raw.get("addresses") if isinstance(raw.get("addresses"), list) else []
    first_address = addresses[0] if addresses and isinstance(addresses[0], dict) else {}

    street = (
        _first(address, "street")
        or _first(adresse, "rue")
        or _first(first_address, "street")
        or (raw.get("address") if isinstance(raw.get("address"), str) else None)
        or "Adresse non disponible"
    )
    city = _first(first_address, "city") or _first(address, "city", "neighborhood") or _first(adresse, "ville", "quartier")

    lat, lng = _extract_coordinates(raw)
    source = "api"
    if not is_within_abidjan(lat, lng):
        logger.warning(
            "Invalid pressing coordinates, using neighborhood fallback",
            extra={"pressing_id": pressing_id, "lat": lat, "lng": lng},
        )
        lat, lng = fallback_coordinates(city)
        source = "fallback"

    rating_raw = raw.get("rating")
    review_count = raw.get("reviewCount")
    if review_count is None and isinstance(rating_raw, dict):
        review_count = rating_raw.get("count")

    return Pressing(
        id=str(pressing_id),
        name=str(_first(raw, "businessName", "nom", "name", default="Pressing")),
        address=str(street),
        latitude=lat,
        longitude=lng,
        neighborhood=city or neighborhood_from_coordinates(lat, lng),
        rating=_rating_value(rating_raw),
        review_count=_as_int(review_count),
        services=tuple(s for s in (_normalize_service(x) for x in raw.get("services") or []) if s),
        opening_hours=tuple(
            h for h in (_normalize_hours(x) for x in (raw.get("openingHours") or raw.get("businessHours") or [])) if h
        ),
        is_open=bool(raw.get("isOpen", False)),
        distance=_as_float(raw["distance"]) if raw.get("distance") is not None else None,
        created_at=raw.get("createdAt"),
        badges=tuple(raw.get("badges") or ()),
        phone=_first(raw, "phone", "telephone"),
        coordinates_source=source,
    )


def normalize_pressings(payload: Any) -> list[Pressing]:
    if isinstance(payload, dict):
        payload = payload.get("pressings") or payload.get("data") or []
    pressings: list[Pressing] = []
    for raw in payload or []:
        if not isinstance(raw, dict):
            continue
        pressing = normalize_pressing(raw)
        if pressing is not None:
            pressings.append(pressing)
    return pressings

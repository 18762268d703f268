from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from geopress.application.utils.geo import haversine_km
from geopress.domain.entities.appointment import ABIDJAN_CENTER
from geopress.domain.entities.pressing import Pressing
from geopress.domain.entities.search import SearchFilters, SortOption

DELIVERY_KEYWORD = "livraison"
PICKUP_KEYWORD = "collecte"


def average_service_price(pressing: Pressing) -> float | None:
    if not pressing.services:
        return None
    return sum(s.price for s in pressing.services) / len(pressing.services)


def is_pressing_open(pressing: Pressing, now: datetime | None = None) -> bool:
    now = now or datetime.now()
    today = now.strftime("%A").lower()
    current_time = now.strftime("%H:%M")
    for hours in pressing.opening_hours:
        if hours.day == today:
            if not hours.open or not hours.close:
                return False
            return hours.open <= current_time <= hours.close
    return False


def with_distances(pressings: list[Pressing], origin: tuple[float, float] | None) -> list[Pressing]:
    lat, lng = origin or ABIDJAN_CENTER
    return [replace(p, distance=haversine_km(lat, lng, p.latitude, p.longitude)) for p in pressings]


def _has_service_named(pressing: Pressing, keyword: str) -> bool:
    return any(keyword in s.name.lower() for s in pressing.services)


def _matches_query(pressing: Pressing, term: str) -> bool:
    return (
        term in pressing.name.lower()
        or term in pressing.address.lower()
        or any(term in s.name.lower() for s in pressing.services)
    )


def _created_ts(pressing: Pressing) -> float:
    if not pressing.created_at:
        return 0.0
    try:
        return datetime.fromisoformat(pressing.created_at.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def sort_pressings(pressings: list[Pressing], sort_by: SortOption) -> list[Pressing]:
    if sort_by == SortOption.distance:
        return sorted(pressings, key=lambda p: p.distance or 0)
    if sort_by == SortOption.rating:
        return sorted(pressings, key=lambda p: p.rating or 0, reverse=True)
    if sort_by == SortOption.price:
        return sorted(pressings, key=lambda p: p.services[0].price if p.services else 0)
    if sort_by == SortOption.newest:
        return sorted(pressings, key=_created_ts, reverse=True)
    if sort_by == SortOption.popular:
        return sorted(pressings, key=lambda p: p.review_count or 0, reverse=True)
    return list(pressings)


def filter_and_sort(
    pressings: list[Pressing] | tuple[Pressing, ...],
    filters: SearchFilters,
    sort_by: SortOption,
    query: str = "",
    user_position: tuple[float, float] | None = None,
    now: datetime | None = None,
) -> list[Pressing]:
    """
    Apply the search filters in sequence, then a single sort.

    Distances are recomputed from the user position, or from the Abidjan
    center when none is known. The distance threshold only applies once the
    user position is known.
    """
    filtered = with_distances(list(pressings), user_position)

    term = query.strip().lower()
    if term:
        filtered = [p for p in filtered if _matches_query(p, term)]

    if filters.neighborhoods:
        filtered = [p for p in filtered if p.neighborhood and p.neighborhood in filters.neighborhoods]

    if filters.services:
        filtered = [p for p in filtered if any(s.category in filters.services for s in p.services)]

    low, high = filters.price_range
    filtered = [
        p for p in filtered
        if average_service_price(p) is None or low <= average_service_price(p) <= high
    ]

    if user_position is not None:
        max_km = filters.distance_range[1]
        filtered = [p for p in filtered if p.distance is not None and 0 <= p.distance <= max_km]

    if filters.rating:
        filtered = [p for p in filtered if (p.rating or 0) >= filters.rating]

    if filters.open_now:
        filtered = [p for p in filtered if is_pressing_open(p, now)]

    if filters.has_delivery:
        filtered = [p for p in filtered if _has_service_named(p, DELIVERY_KEYWORD)]

    if filters.has_pickup:
        filtered = [p for p in filtered if _has_service_named(p, PICKUP_KEYWORD)]

    return sort_pressings(filtered, sort_by)

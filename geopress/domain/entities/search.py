from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from geopress.domain.entities.pressing import Pressing


class SortOption(str, Enum):
    relevance = "relevance"
    distance = "distance"
    rating = "rating"
    price = "price"
    newest = "newest"
    popular = "popular"


@dataclass(frozen=True)
class SearchFilters:
    neighborhoods: tuple[str, ...] = ()
    services: tuple[str, ...] = ()
    price_range: tuple[float, float] = (500, 10000)
    distance_range: tuple[float, float] = (0, 50)
    rating: float = 0
    open_now: bool = False
    has_delivery: bool = False
    has_pickup: bool = False


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    results: tuple[Pressing, ...] = ()
    filtered_results: tuple[Pressing, ...] = ()
    is_loading: bool = False
    error: str | None = None
    filters: SearchFilters = field(default_factory=SearchFilters)
    sort_by: SortOption = SortOption.relevance
    view_mode: str = "list"  # "list", "map"
    user_position: tuple[float, float] | None = None  # (lat, lng)
    favorites: tuple[str, ...] = ()
    recent_searches: tuple[str, ...] = ()
    is_online: bool = True
    selected_pressing: Pressing | None = None
    last_search_time: float = 0

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace

from geopress.application.exceptions import ApiError
from geopress.application.ports.key_value_store import KeyValueStorePort
from geopress.application.ports.pressings import PressingDirectoryPort
from geopress.application.utils.debounce import QueryDebouncer
from geopress.application.utils.search_filters import filter_and_sort
from geopress.domain.entities.appointment import ABIDJAN_CENTER
from geopress.domain.entities.notice import Notice
from geopress.domain.entities.pressing import Pressing
from geopress.domain.entities.search import SearchFilters, SearchState, SortOption

FAVORITES_KEY = "pressing-favorites"
RECENT_SEARCHES_KEY = "pressing-searches"
MAX_RECENT_SEARCHES = 10
LOAD_FAILED_MESSAGE = "Erreur lors du chargement des pressings"
VIEW_MODES = ("list", "map")


@dataclass(frozen=True)
class NearbyResult:
    state: SearchState
    notice: Notice | None = None


class SearchUseCase:
    """
    Pressing search state and its reducer actions.

    Every action returns a new SearchState; actions touching results, query,
    filters, sort or position recompute `filtered_results`. Favorites and
    recent searches are written through the key-value store.
    """

    def __init__(
        self,
        directory: PressingDirectoryPort,
        store: KeyValueStorePort,
        debounce_seconds: float = 0.3,
        radius_km: float = 50.0,
        default_position: tuple[float, float] = ABIDJAN_CENTER,
    ) -> None:
        self._directory = directory
        self._store = store
        self._debouncer = QueryDebouncer(debounce_seconds)
        self._radius_km = radius_km
        self._default_position = default_position
        self._logger = logging.getLogger(__name__)

    def initial_state(self) -> SearchState:
        favorites = self._store.get(FAVORITES_KEY, []) or []
        recent = self._store.get(RECENT_SEARCHES_KEY, []) or []
        return SearchState(favorites=tuple(favorites), recent_searches=tuple(recent))

    # Reducer actions

    def set_query(self, state: SearchState, query: str) -> SearchState:
        return self.filter_results(replace(state, query=query))

    def set_results(self, state: SearchState, results: list[Pressing]) -> SearchState:
        return self.filter_results(
            replace(state, results=tuple(results), is_loading=False, error=None, last_search_time=time.time())
        )

    def set_loading(self, state: SearchState, is_loading: bool) -> SearchState:
        return replace(state, is_loading=is_loading)

    def set_error(self, state: SearchState, error: str | None) -> SearchState:
        return replace(state, error=error, is_loading=False)

    def set_filters(self, state: SearchState, filters: SearchFilters) -> SearchState:
        return self.filter_results(replace(state, filters=filters))

    def set_sort(self, state: SearchState, sort_by: SortOption | str) -> SearchState:
        return self.filter_results(replace(state, sort_by=SortOption(sort_by)))

    def set_view_mode(self, state: SearchState, view_mode: str) -> SearchState:
        if view_mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode: {view_mode}")
        return replace(state, view_mode=view_mode)

    def set_user_position(self, state: SearchState, position: tuple[float, float] | None) -> SearchState:
        return self.filter_results(replace(state, user_position=position))

    def add_to_history(self, state: SearchState, query: str) -> SearchState:
        query = query.strip()
        if not query:
            return state
        recent = [query] + [q for q in state.recent_searches if q != query]
        recent = recent[:MAX_RECENT_SEARCHES]
        self._store.set(RECENT_SEARCHES_KEY, recent)
        return replace(state, recent_searches=tuple(recent))

    def toggle_favorite(self, state: SearchState, pressing_id: str) -> SearchState:
        if pressing_id in state.favorites:
            favorites = [f for f in state.favorites if f != pressing_id]
        else:
            favorites = [*state.favorites, pressing_id]
        self._store.set(FAVORITES_KEY, favorites)
        return replace(state, favorites=tuple(favorites))

    def set_online_status(self, state: SearchState, is_online: bool) -> SearchState:
        return replace(state, is_online=is_online)

    def set_selected_pressing(self, state: SearchState, pressing: Pressing | None) -> SearchState:
        return replace(state, selected_pressing=pressing)

    def filter_results(self, state: SearchState) -> SearchState:
        filtered = filter_and_sort(
            state.results,
            state.filters,
            state.sort_by,
            query=state.query,
            user_position=state.user_position,
        )
        return replace(state, filtered_results=tuple(filtered))

    # Debounced free text

    def type_query(self, query: str, now_ts: float | None = None) -> None:
        self._debouncer.push(query, now_ts)

    def apply_debounced_query(self, state: SearchState, now_ts: float | None = None) -> SearchState:
        query = self._debouncer.ready(now_ts)
        if query is None:
            return state
        return self.set_query(state, query)

    # Loading

    def load_nearby(
        self,
        state: SearchState,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> NearbyResult:
        if latitude is None or longitude is None:
            latitude, longitude = state.user_position or self._default_position

        loading = self.set_loading(state, True)
        try:
            pressings = self._directory.get_nearby(latitude, longitude, self._radius_km)
        except ApiError as e:
            self._logger.error(
                "Nearby pressings failed",
                extra={"status": e.status_code, "error": e.message},
            )
            return NearbyResult(
                state=self.set_error(loading, LOAD_FAILED_MESSAGE),
                notice=Notice("error", LOAD_FAILED_MESSAGE),
            )

        self._logger.info("Nearby pressings loaded", extra={"count": len(pressings)})
        return NearbyResult(state=self.set_results(loading, pressings))

    def search_remote(self, state: SearchState, query: str, neighborhood: str | None = None) -> NearbyResult:
        loading = self.set_loading(self.add_to_history(state, query), True)
        try:
            pressings = self._directory.search(query=query or None, neighborhood=neighborhood)
        except ApiError as e:
            self._logger.error("Pressing search failed", extra={"status": e.status_code, "error": e.message})
            return NearbyResult(
                state=self.set_error(loading, LOAD_FAILED_MESSAGE),
                notice=Notice("error", LOAD_FAILED_MESSAGE),
            )
        return NearbyResult(state=self.set_results(replace(loading, query=query), pressings))

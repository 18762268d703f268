import logging

from fastapi import APIRouter, Depends, Query

from geopress.api.v1.schemas import FavoritesResponseSchema, PressingSchema, SearchResponseSchema, SortBy
from geopress.api.v1.slots import notice_schema
from geopress.application.use_cases.search import SearchUseCase
from geopress.domain.entities.pressing import Pressing
from geopress.domain.entities.search import SearchFilters
from geopress.wiring.dependencies import get_geolocation_use_case, get_search_use_case

router = APIRouter()
logger = logging.getLogger(__name__)


def _pressing_schema(pressing: Pressing, favorites: tuple[str, ...]) -> PressingSchema:
    return PressingSchema(
        id=pressing.id,
        name=pressing.name,
        address=pressing.address,
        neighborhood=pressing.neighborhood,
        latitude=pressing.latitude,
        longitude=pressing.longitude,
        rating=pressing.rating,
        review_count=pressing.review_count,
        distance_km=round(pressing.distance, 2) if pressing.distance is not None else None,
        is_open=pressing.is_open,
        coordinates_source=pressing.coordinates_source,
        favorite=pressing.id in favorites,
    )


@router.get("/search", response_model=SearchResponseSchema)
def search_pressings(
    q: str = "",
    lat: float | None = None,
    lng: float | None = None,
    sort: SortBy = SortBy.relevance,
    neighborhood: list[str] = Query([]),
    service: list[str] = Query([]),
    min_price: float = 500,
    max_price: float = 10000,
    max_distance: float = 50,
    rating: float = Query(0, ge=0, le=5),
    open_now: bool = False,
    has_delivery: bool = False,
    has_pickup: bool = False,
    uc: SearchUseCase = Depends(get_search_use_case),
):
    geo = get_geolocation_use_case(latitude=lat, longitude=lng).request_position()
    position = (geo.position.latitude, geo.position.longitude) if geo.position else None
    if position is None:
        logger.info("Searching without user position", extra={"error": geo.error_message})

    state = uc.initial_state()
    state = uc.set_user_position(state, position)
    state = uc.set_filters(
        state,
        SearchFilters(
            neighborhoods=tuple(neighborhood),
            services=tuple(service),
            price_range=(min_price, max_price),
            distance_range=(0, max_distance),
            rating=rating,
            open_now=open_now,
            has_delivery=has_delivery,
            has_pickup=has_pickup,
        ),
    )
    state = uc.set_sort(state, sort.value)

    loaded = uc.load_nearby(state)
    state = loaded.state
    if q.strip():
        state = uc.add_to_history(uc.set_query(state, q), q)

    return SearchResponseSchema(
        query=state.query,
        sort_by=SortBy(state.sort_by.value),
        total=len(state.filtered_results),
        position_source=geo.position.source if geo.position else None,
        results=[_pressing_schema(p, state.favorites) for p in state.filtered_results],
        notice=notice_schema(loaded.notice),
    )


@router.post("/favorites/{pressing_id}", response_model=FavoritesResponseSchema)
def toggle_favorite(
    pressing_id: str,
    uc: SearchUseCase = Depends(get_search_use_case),
):
    state = uc.toggle_favorite(uc.initial_state(), pressing_id)
    return FavoritesResponseSchema(favorites=list(state.favorites))

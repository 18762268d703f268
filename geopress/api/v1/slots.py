from datetime import date

from fastapi import APIRouter, Depends, Query

from geopress.api.v1.schemas import NoticeSchema, SlotListResponseSchema, SlotSchema
from geopress.application.use_cases.slot_availability import SlotAvailabilityUseCase
from geopress.domain.entities.notice import Notice
from geopress.domain.entities.time_slot import TimeSlot
from geopress.wiring.dependencies import get_slot_availability_use_case

router = APIRouter()


def slot_schema(slot: TimeSlot) -> SlotSchema:
    return SlotSchema(
        id=slot.id,
        pressing_id=slot.pressing_id,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        max_capacity=slot.max_capacity,
        current_bookings=slot.current_bookings,
        available_spots=slot.available_spots,
        status=slot.status,
        slot_type=slot.slot_type,
        special_price=slot.special_price,
        discount=slot.discount,
    )


def notice_schema(notice: Notice | None) -> NoticeSchema | None:
    if notice is None:
        return None
    return NoticeSchema(level=notice.level, text=notice.text)


@router.get("/pressings/{pressing_id}/slots", response_model=SlotListResponseSchema)
def list_slots(
    pressing_id: str,
    day: date = Query(..., alias="date"),
    uc: SlotAvailabilityUseCase = Depends(get_slot_availability_use_case),
):
    # never fails upstream: degrades to default slots
    result = uc.load_available_slots(day, pressing_id)
    return SlotListResponseSchema(
        pressing_id=pressing_id,
        date=day,
        synthesized=result.synthesized,
        slots=[slot_schema(s) for s in result.slots],
        notice=notice_schema(result.notice),
    )

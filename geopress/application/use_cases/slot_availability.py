from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from geopress.application.exceptions import ApiError, NotFoundError
from geopress.application.ports.time_slots import TimeSlotGatewayPort
from geopress.application.utils.slot_rules import (
    create_default_slots,
    is_slot_available,
    order_bookable_slots,
)
from geopress.domain.entities.notice import Notice
from geopress.domain.entities.time_slot import TimeSlot

DEFAULT_SLOTS_NOTICE = "Créneaux par défaut disponibles"
PRESSING_NOT_FOUND_NOTICE = "Pressing non trouvé - Créneaux par défaut disponibles"
NO_SLOTS_NOTICE = "Aucun créneau disponible pour cette date\n\nVeuillez choisir une autre date"


@dataclass(frozen=True)
class SlotLoadResult:
    slots: list[TimeSlot]
    synthesized: bool
    notice: Notice | None = None

    @property
    def is_empty(self) -> bool:
        return not self.slots


class SlotAvailabilityUseCase:
    """
    Slot list for the booking calendar.

    Never raises: when the API fails or has nothing configured for the day,
    four default slots are synthesized so the calendar always has something
    to offer. Only a successful response whose slots are all unavailable
    yields an empty list.
    """

    def __init__(self, slots: TimeSlotGatewayPort) -> None:
        self._slots = slots
        self._logger = logging.getLogger(__name__)

    def load_available_slots(self, day: date, pressing_id: str) -> SlotLoadResult:
        try:
            availability = self._slots.get_available_slots(pressing_id, day=day, include_unavailable=False)
        except NotFoundError:
            self._logger.error("Pressing not found, using default slots", extra={"pressing_id": pressing_id})
            return self._defaults(day, pressing_id, PRESSING_NOT_FOUND_NOTICE)
        except ApiError as e:
            self._logger.warning(
                "Slot API failed, using default slots",
                extra={"pressing_id": pressing_id, "status": e.status_code, "error": e.message},
            )
            return self._defaults(day, pressing_id, DEFAULT_SLOTS_NOTICE)
        except Exception as e:
            self._logger.error(
                "Unexpected error loading slots, using default slots",
                extra={"pressing_id": pressing_id, "error": str(e)},
            )
            return self._defaults(day, pressing_id, DEFAULT_SLOTS_NOTICE)

        if not availability.slots:
            self._logger.warning("No slots configured, using default slots", extra={"pressing_id": pressing_id})
            return self._defaults(day, pressing_id, DEFAULT_SLOTS_NOTICE)

        bookable = order_bookable_slots([s for s in availability.slots if is_slot_available(s)])
        if not bookable:
            return SlotLoadResult(slots=[], synthesized=False, notice=Notice("info", NO_SLOTS_NOTICE))

        self._logger.info("Slots loaded", extra={"pressing_id": pressing_id, "slot_count": len(bookable)})
        return SlotLoadResult(slots=bookable, synthesized=False)

    def _defaults(self, day: date, pressing_id: str, notice: str) -> SlotLoadResult:
        return SlotLoadResult(
            slots=create_default_slots(day, pressing_id),
            synthesized=True,
            notice=Notice("info", notice),
        )

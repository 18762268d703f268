from fastapi import APIRouter, Depends, HTTPException

from geopress.api.v1.schemas import EligibilityResponseSchema, TimeUntilSchema
from geopress.application.exceptions import ApiError, NotFoundError
from geopress.application.ports.appointments import AppointmentGatewayPort
from geopress.application.utils.appointment_rules import (
    can_be_cancelled,
    can_be_rescheduled,
    format_appointment_datetime,
    status_label,
    time_until_appointment,
)
from geopress.wiring.dependencies import get_appointment_gateway

router = APIRouter()


@router.get("/appointments/{appointment_id}/eligibility", response_model=EligibilityResponseSchema)
def appointment_eligibility(
    appointment_id: str,
    gateway: AppointmentGatewayPort = Depends(get_appointment_gateway),
):
    try:
        appointment = gateway.get_appointment(appointment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ApiError as e:
        raise HTTPException(status_code=502, detail=str(e))

    remaining = time_until_appointment(appointment)
    return EligibilityResponseSchema(
        appointment_id=appointment.id,
        status=appointment.status,
        status_label=status_label(appointment.status),
        can_cancel=can_be_cancelled(appointment),
        can_reschedule=can_be_rescheduled(appointment),
        scheduled_for=format_appointment_datetime(appointment),
        time_until=TimeUntilSchema(
            days=remaining.days,
            hours=remaining.hours,
            minutes=remaining.minutes,
            total_minutes=remaining.total_minutes,
        ),
    )

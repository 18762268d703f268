from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone

from geopress.domain.entities.appointment import Appointment, AppointmentServiceItem, TimeUntil

CANCELLATION_WINDOW = timedelta(hours=2)

STATUS_LABELS = {
    "pending": "En attente",
    "confirmed": "Confirmé",
    "in_progress": "En cours",
    "completed": "Terminé",
    "cancelled": "Annulé",
    "no_show": "Absent",
}

STATUS_COLORS = {
    "pending": "yellow",
    "confirmed": "blue",
    "in_progress": "purple",
    "completed": "green",
    "cancelled": "red",
    "no_show": "gray",
}

_WEEKDAYS_FR = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche")
_MONTHS_FR = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def _now_like(moment: datetime, now: datetime | None) -> datetime:
    if now is not None:
        return now
    if moment.tzinfo is not None:
        return datetime.now(timezone.utc)
    return datetime.now()


def can_be_cancelled(appointment: Appointment, now: datetime | None = None) -> bool:
    if appointment.status in ("completed", "cancelled"):
        return False
    now = _now_like(appointment.appointment_date, now)
    return appointment.appointment_date - now > CANCELLATION_WINDOW


def can_be_rescheduled(appointment: Appointment, now: datetime | None = None) -> bool:
    return can_be_cancelled(appointment, now)


def time_until_appointment(appointment: Appointment, now: datetime | None = None) -> TimeUntil:
    now = _now_like(appointment.appointment_date, now)
    delta = appointment.appointment_date - now
    if delta <= timedelta(0):
        return TimeUntil()

    total_minutes = int(delta.total_seconds() // 60)
    return TimeUntil(
        days=total_minutes // (24 * 60),
        hours=(total_minutes % (24 * 60)) // 60,
        minutes=total_minutes % 60,
        total_minutes=total_minutes,
    )


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, "gray")


def calculate_total_amount(services: list[AppointmentServiceItem] | tuple[AppointmentServiceItem, ...]) -> float:
    return sum(item.total_price for item in services)


def group_by_status(appointments: list[Appointment]) -> dict[str, list[Appointment]]:
    groups: dict[str, list[Appointment]] = defaultdict(list)
    for appointment in appointments:
        groups[appointment.status].append(appointment)
    return dict(groups)


def filter_by_date(appointments: list[Appointment], start: datetime, end: datetime) -> list[Appointment]:
    return [a for a in appointments if start <= a.appointment_date <= end]


def format_appointment_datetime(appointment: Appointment) -> str:
    """e.g. "vendredi 26 janvier 2024 à 09:30"."""
    moment = appointment.appointment_date
    return (
        f"{_WEEKDAYS_FR[moment.weekday()]} {moment.day} {_MONTHS_FR[moment.month - 1]} "
        f"{moment.year} à {moment:%H:%M}"
    )

import logging

from fastapi import FastAPI

from geopress.api.v1.appointments import router as appointments_router
from geopress.api.v1.bookings import router as bookings_router
from geopress.api.v1.search import router as search_router
from geopress.api.v1.slots import router as slots_router
from geopress.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("pressing_id", "appointment_id", "slot_id", "slot_count", "created_count", "skipped_count", "count", "action", "status", "url", "source", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="GeoPress Client", version="1.0.0")

app.include_router(slots_router, prefix="/api/v1", tags=["slots"])
app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(search_router, prefix="/api/v1", tags=["search"])
app.include_router(appointments_router, prefix="/api/v1", tags=["appointments"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}

from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import replace
from typing import Any

from geopress.application.ports.booking_sessions import BookingSessionStorePort
from geopress.application.ports.key_value_store import KeyValueStorePort
from geopress.domain.entities.booking_state import BookingState


class MemoryKeyValueStore(KeyValueStorePort):
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        # callers must not mutate stored lists in place
        return copy.deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class MemoryBookingSessionStore(BookingSessionStorePort):
    def __init__(self) -> None:
        self._states: dict[str, BookingState] = {}
        self._lock = threading.Lock()

    def create(self, state: BookingState) -> str:
        session_id = uuid.uuid4().hex
        self._states[session_id] = state
        return session_id

    def get(self, session_id: str) -> BookingState | None:
        return self._states.get(session_id)

    def put(self, session_id: str, state: BookingState) -> None:
        with self._lock:
            self._states[session_id] = state

    def begin_submit(self, session_id: str) -> BookingState | None:
        with self._lock:
            state = self._states.get(session_id)
            if state is None or state.submitting:
                return state
            self._states[session_id] = replace(state, submitting=True)
            return state

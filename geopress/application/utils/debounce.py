from __future__ import annotations

import time


class QueryDebouncer:
    """
    Timestamp-driven debounce for the free-text search box.

    Every push resets the quiet period; `ready()` hands the latest query back
    once the period elapsed, exactly once.
    """

    def __init__(self, delay_seconds: float = 0.3) -> None:
        self._delay = delay_seconds
        self._pending: str | None = None
        self._last_push_at: float | None = None

    def push(self, query: str, now_ts: float | None = None) -> None:
        self._pending = query
        self._last_push_at = time.monotonic() if now_ts is None else now_ts

    def ready(self, now_ts: float | None = None) -> str | None:
        if self._pending is None or self._last_push_at is None:
            return None
        now_ts = time.monotonic() if now_ts is None else now_ts
        if now_ts - self._last_push_at < self._delay:
            return None
        query, self._pending = self._pending, None
        return query

    @property
    def pending(self) -> bool:
        return self._pending is not None

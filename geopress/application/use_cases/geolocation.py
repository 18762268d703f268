from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import replace

from geopress.application.exceptions import GeolocationError
from geopress.application.ports.position_provider import PositionProviderPort
from geopress.domain.entities.geolocation import GeolocationErrorCode, GeolocationState, GeoPosition


class GeolocationUseCase:
    """
    Single-shot position acquisition.

    idle -> requesting -> success | error. A retry from error and a refresh
    from success both go through `request_position` again. The primary
    provider is bounded by `timeout_seconds`; when it fails and a fallback
    provider is configured, the fallback is asked once before giving up.
    """

    def __init__(
        self,
        provider: PositionProviderPort,
        fallback: PositionProviderPort | None = None,
        timeout_seconds: float = 15.0,
        high_accuracy: bool = True,
        maximum_age: float = 300.0,
    ) -> None:
        self._provider = provider
        self._fallback = fallback
        self._timeout = timeout_seconds
        self._high_accuracy = high_accuracy
        self._maximum_age = maximum_age
        self._logger = logging.getLogger(__name__)

    def begin(self, state: GeolocationState) -> GeolocationState:
        return replace(state, status="requesting", error_code=None, error_message=None)

    def request_position(self, state: GeolocationState | None = None) -> GeolocationState:
        state = state or GeolocationState()
        if state.status == "requesting":
            # a request is already in flight for this state
            return state

        requesting = self.begin(state)
        try:
            position = self._locate(self._provider)
        except GeolocationError as primary_error:
            self._logger.warning(
                "Primary geolocation failed",
                extra={"source": "primary", "error": primary_error.message},
            )
            position = self._try_fallback()
            if position is None:
                return self._failed(requesting, primary_error)

        self._logger.info("Position acquired", extra={"source": position.source})
        return replace(requesting, status="success", position=position)

    def retry(self, state: GeolocationState) -> GeolocationState:
        if state.status != "error":
            return state
        return self.request_position(replace(state, status="idle"))

    def refresh(self, state: GeolocationState) -> GeolocationState:
        if state.status != "success":
            return state
        return self.request_position(replace(state, status="idle"))

    def _try_fallback(self) -> GeoPosition | None:
        if self._fallback is None:
            return None
        try:
            return self._locate(self._fallback)
        except GeolocationError as e:
            self._logger.warning("Fallback geolocation failed", extra={"source": "fallback", "error": e.message})
            return None

    def _locate(self, provider: PositionProviderPort) -> GeoPosition:
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(
            provider.get_current_position,
            high_accuracy=self._high_accuracy,
            maximum_age=self._maximum_age,
        )
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise GeolocationError(GeolocationErrorCode.TIMEOUT) from e
        except GeolocationError:
            raise
        except Exception as e:
            raise GeolocationError(GeolocationErrorCode.UNKNOWN) from e
        finally:
            # never block on a provider that overran its deadline
            executor.shutdown(wait=False)

    def _failed(self, state: GeolocationState, error: GeolocationError) -> GeolocationState:
        return replace(
            state,
            status="error",
            position=None,
            error_code=error.code,
            error_message=error.message,
        )

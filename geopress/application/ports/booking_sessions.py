from abc import ABC, abstractmethod

from geopress.domain.entities.booking_state import BookingState


class BookingSessionStorePort(ABC):
    @abstractmethod
    def create(self, state: BookingState) -> str:
        """Persist a new wizard and return its session id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> BookingState | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, session_id: str, state: BookingState) -> None:
        raise NotImplementedError

    @abstractmethod
    def begin_submit(self, session_id: str) -> BookingState | None:
        """
        Atomically flag the session as submitting.

        Returns the state as it was before the flag was set, so a state whose
        `submitting` is already True means another submit holds the session.
        Returns None for an unknown session.
        """
        raise NotImplementedError

from __future__ import annotations

from abc import ABC, abstractmethod

from geopress.domain.entities.pressing import Pressing


class PressingDirectoryPort(ABC):
    @abstractmethod
    def get_nearby(self, latitude: float, longitude: float, radius_km: float) -> list[Pressing]:
        """Pressings around a point, already normalized."""
        raise NotImplementedError

    @abstractmethod
    def search(self, query: str | None = None, neighborhood: str | None = None) -> list[Pressing]:
        raise NotImplementedError

    @abstractmethod
    def get_pressing(self, pressing_id: str) -> Pressing | None:
        raise NotImplementedError

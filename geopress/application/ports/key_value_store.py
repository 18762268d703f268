from abc import ABC, abstractmethod
from typing import Any


class KeyValueStorePort(ABC):
    """Client-side persistent state (favorites, search history, session tokens)."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

"""Abstract interface for the draft cache."""

from abc import ABC, abstractmethod


class CacheService(ABC):
    """Short-lived store for serialized drafts, keyed per recording."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Returns the serialized draft stored under ``key``, or None on a miss.

        Raises:
            CacheServiceError: If the backend is unreachable.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Stores a serialized draft. Empty values are not stored.

        Raises:
            CacheServiceError: If the backend is unreachable.
        """

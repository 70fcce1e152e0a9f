"""Base key-value storage interface."""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """Synchronous, string-valued key-value primitive.

    Backends raise :class:`cinesense.exceptions.StorageError` on faults.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored under ``key``.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Args:
            key: Storage key
            value: String to store
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; no-op if absent.

        Args:
            key: Storage key
        """
        pass

    @abstractmethod
    def get_all_keys(self) -> list[str]:
        """List every stored key.

        Returns:
            Keys in no particular order
        """
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Remove every key."""
        pass

    def delete_many(self, keys: list[str]) -> None:
        """Remove several keys."""
        for key in keys:
            self.delete(key)

    def close(self) -> None:
        """Release any resources held by the backend."""
        return None

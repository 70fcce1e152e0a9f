"""In-memory storage backend."""

from typing import Optional

from cinesense.storage.base import KeyValueStorage


class InMemoryStorage(KeyValueStorage):
    """Process-local storage; contents are lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def get_all_keys(self) -> list[str]:
        return list(self._data)

    def clear_all(self) -> None:
        self._data.clear()

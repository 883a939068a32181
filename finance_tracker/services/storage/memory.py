"""In-memory storage backend, used by tests and throwaway sessions."""

from typing import Optional

from finance_tracker.services.storage.interface import KeyValueStoreInterface


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Dict-backed store. Lives as long as the instance does."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear_all(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)

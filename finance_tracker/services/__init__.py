"""Services package."""

from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    StateDecodeError,
    StorageError,
    StorageWriteError,
)

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStoreInterface",
    "StateDecodeError",
    "StorageError",
    "StorageWriteError",
]

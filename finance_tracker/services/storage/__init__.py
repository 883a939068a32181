"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
The JSON file backend is the default; the in-memory one backs tests.
"""

from finance_tracker.services.storage.interface import (
    KeyValueStoreInterface,
    StateDecodeError,
    StorageError,
    StorageWriteError,
)
from finance_tracker.services.storage.json_file import JsonFileKeyValueStore
from finance_tracker.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interface
    "KeyValueStoreInterface",
    # Exceptions
    "StateDecodeError",
    "StorageError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]

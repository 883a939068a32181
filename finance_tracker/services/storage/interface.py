"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The store talks to durable storage only through this
interface. This allows us to:
1. Use in-memory storage for testing
2. Persist to a JSON file on disk for a single-user install
3. Swap in another backend later without touching the store

The interface is intentionally tiny: text values under string keys.
Encoding and decoding are the store's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for a durable key-value text store.

    Any storage implementation must implement these methods.
    Calls are synchronous: when write() returns, the value is durable.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the last value written under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if never written or cleared
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Store a value under a key, overwriting any prior value.

        Raises:
            StorageWriteError: If the value could not be stored
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a single key. Removing a missing key is a no-op."""
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """
        Remove every key in the store, not only the tracker's own.

        Raises:
            StorageWriteError: If the store could not be cleared
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List every key currently present."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageWriteError(StorageError):
    """A value could not be durably written."""
    pass


class StateDecodeError(StorageError):
    """
    A persisted value is not valid JSON of the expected shape.

    Carries the offending key and raw text for diagnosis.
    """

    def __init__(self, key: str, raw_value: str, reason: str):
        super().__init__(f"Cannot decode value under {key!r}: {reason}")
        self.key = key
        self.raw_value = raw_value
        self.reason = reason

"""
Composition root for Finance Tracker

Builds a FinanceStore from settings: configures logging, picks the
storage backend and wires in the audit logger. Views and scripts call
create_store() once and pass the store to whatever needs it.
"""

from typing import Optional

from finance_tracker.audit import AuditLogger, configure_logging
from finance_tracker.config import TrackerSettings, get_settings
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
)
from finance_tracker.state import FinanceStore


def create_storage(settings: TrackerSettings) -> KeyValueStoreInterface:
    """Instantiate the backend named by settings.storage_backend."""
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(
        settings.storage_path,
        retry_attempts=settings.write_retry_attempts,
    )


def create_store(
    settings: Optional[TrackerSettings] = None,
    storage: Optional[KeyValueStoreInterface] = None,
) -> FinanceStore:
    """
    Factory function to create a ready-to-use store.

    Args:
        settings: Settings to use. Defaults to get_settings().
        storage: Backend override, e.g. a shared in-memory store in tests.

    Raises:
        StateDecodeError: persisted state is corrupt and the decode
            failure policy is "fail"
    """
    settings = settings or get_settings()
    configure_logging(settings)
    return FinanceStore(
        storage=storage or create_storage(settings),
        settings=settings,
        audit_logger=AuditLogger(),
    )

"""
State Event Models for Finance Tracker

Every mutation of the store produces exactly one StateEvent. The same
event is:
1. Written to the structured log by the AuditLogger
2. Handed to every subscriber of the store

DESIGN DECISION: Events are emitted only after the touched keys have
been written, so an observer never sees a change that is not yet durable.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class StateEventType(str, Enum):
    """Types of events the store emits."""
    # Lifecycle
    STATE_LOADED = "state_loaded"
    STATE_DECODE_FALLBACK = "state_decode_fallback"
    APP_RESET = "app_reset"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_REMOVED = "transaction_removed"

    # Settings
    BUDGET_SET = "budget_set"
    CURRENCY_SET = "currency_set"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_DELETED = "category_deleted"
    CATEGORY_RENAMED = "category_renamed"

    # Failures
    STORAGE_WRITE_FAILED = "storage_write_failed"


class EventSeverity(str, Enum):
    """Severity level for state events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StateEvent(BaseModel):
    """A single change to the tracker's state."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: StateEventType
    severity: EventSeverity = EventSeverity.INFO

    # Durable keys written as part of this change
    keys: list[str] = Field(default_factory=list)

    entity_id: Optional[str] = Field(
        default=None,
        description="Transaction id or category name this event is about"
    )
    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "keys": list(self.keys),
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class StateEventBuilder:
    """
    Helper class to build state events with common patterns.

    Usage:
        event = StateEventBuilder.transaction_added(txn, keys)
        event = StateEventBuilder.category_renamed("Food", "Groceries", 3, keys)
    """

    @staticmethod
    def state_loaded(keys: list[str], restored: list[str]) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.STATE_LOADED,
            keys=keys,
            description=f"State loaded ({len(restored)} of {len(keys)} keys persisted)",
            details={"restored_keys": restored},
        )

    @staticmethod
    def decode_fallback(key: str, error_message: str) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.STATE_DECODE_FALLBACK,
            severity=EventSeverity.WARNING,
            keys=[key],
            description=f"Corrupt value under {key} replaced by default",
            error_message=error_message,
        )

    @staticmethod
    def transaction_added(
        transaction_id: int,
        amount: str,
        transaction_type: str,
        keys: list[str],
    ) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.TRANSACTION_ADDED,
            keys=keys,
            entity_id=str(transaction_id),
            description=f"Transaction added: {transaction_type} {amount}",
            details={"amount": amount, "type": transaction_type},
        )

    @staticmethod
    def transaction_edited(transaction_id: int, keys: list[str]) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.TRANSACTION_EDITED,
            keys=keys,
            entity_id=str(transaction_id),
            description=f"Transaction {transaction_id} replaced",
        )

    @staticmethod
    def transaction_removed(
        transaction_id: int,
        removed: int,
        keys: list[str],
    ) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.TRANSACTION_REMOVED,
            keys=keys,
            entity_id=str(transaction_id),
            description=f"Transaction {transaction_id} removed ({removed} matched)",
            details={"removed": removed},
        )

    @staticmethod
    def budget_set(amount: str, keys: list[str]) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.BUDGET_SET,
            keys=keys,
            description=f"Monthly budget set to {amount}",
            details={"amount": amount},
        )

    @staticmethod
    def currency_set(currency: str, keys: list[str]) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.CURRENCY_SET,
            keys=keys,
            entity_id=currency,
            description=f"Currency set to {currency}",
        )

    @staticmethod
    def category_added(name: str, keys: list[str]) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.CATEGORY_ADDED,
            keys=keys,
            entity_id=name,
            description=f"Category added: {name}",
        )

    @staticmethod
    def category_deleted(name: str, dangling: int, keys: list[str]) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.CATEGORY_DELETED,
            keys=keys,
            entity_id=name,
            description=f"Category deleted: {name}",
            details={"transactions_still_tagged": dangling},
        )

    @staticmethod
    def category_renamed(
        old_name: str,
        new_name: str,
        relabelled: int,
        keys: list[str],
    ) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.CATEGORY_RENAMED,
            keys=keys,
            entity_id=new_name,
            description=f"Category renamed: {old_name} -> {new_name}",
            details={
                "old_name": old_name,
                "new_name": new_name,
                "transactions_relabelled": relabelled,
            },
        )

    @staticmethod
    def app_reset(keys: list[str], entire_store: bool) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.APP_RESET,
            severity=EventSeverity.WARNING,
            keys=keys,
            description="All tracker state reset to defaults",
            details={"entire_store_cleared": entire_store},
        )

    @staticmethod
    def storage_write_failed(key: str, error_message: str) -> StateEvent:
        return StateEvent(
            event_type=StateEventType.STORAGE_WRITE_FAILED,
            severity=EventSeverity.ERROR,
            keys=[key],
            description=f"Durable write failed for {key}",
            error_message=error_message,
        )

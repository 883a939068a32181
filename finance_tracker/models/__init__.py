"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
Everything the store keeps or emits conforms to these schemas.
"""

from finance_tracker.models.category import (
    InvalidCategoryError,
    clean_category_name,
)
from finance_tracker.models.events import (
    EventSeverity,
    StateEvent,
    StateEventBuilder,
    StateEventType,
)
from finance_tracker.models.transaction import (
    InvalidTransactionError,
    Money,
    Transaction,
    TransactionDraft,
    TransactionType,
    parse_draft,
    parse_transaction,
)

__all__ = [
    # Transaction models
    "InvalidTransactionError",
    "Money",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "parse_draft",
    "parse_transaction",
    # Category rules
    "InvalidCategoryError",
    "clean_category_name",
    # Event models
    "EventSeverity",
    "StateEvent",
    "StateEventBuilder",
    "StateEventType",
]

"""
Core Data Models for Finance Tracker

These models define the strict schemas for every money movement the
tracker holds. They are designed to:
1. Reject malformed input at the boundary with a declared error kind
2. Be immutable once created, so readers can never mutate store state
3. Serialize to the same JSON shape the durable store has always used

DESIGN DECISION: Callers hand us dicts or drafts; the store only ever
keeps validated Transaction instances.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
    field_validator,
)


def _money_to_json(value: Decimal) -> Union[int, str]:
    """Whole amounts go to storage as JSON numbers, fractional ones as exact strings."""
    if value == value.to_integral_value():
        return int(value)
    return format(value, "f")


Money = Annotated[
    Decimal,
    PlainSerializer(_money_to_json, return_type=Union[int, str], when_used="json"),
]


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of a money movement.

    The sign of a transaction lives here, never in the amount.
    """
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# ERRORS
# =============================================================================

class InvalidTransactionError(ValueError):
    """
    Raised when a transaction payload cannot be turned into a Transaction.

    `reason` is one of REASONS; `errors` is the raw pydantic error list.
    """

    MISSING_AMOUNT = "missing_amount"
    MISSING_TYPE = "missing_type"
    UNRECOGNIZED_TYPE = "unrecognized_type"
    INVALID_FIELD = "invalid_field"

    REASONS = (MISSING_AMOUNT, MISSING_TYPE, UNRECOGNIZED_TYPE, INVALID_FIELD)

    def __init__(self, reason: str, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.reason = reason
        self.errors = errors or []


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

def _ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps are treated as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TransactionDraft(BaseModel):
    """
    A transaction as supplied by a caller, before the store assigns identity.

    Unknown keys (including a stray `id`) are ignored.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    amount: Money = Field(
        ...,
        ge=0,
        description="Non-negative magnitude of the movement"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    category: str = Field(
        default="",
        max_length=100,
        description="Category label (not checked against the category set)"
    )
    date: Optional[datetime] = Field(
        default=None,
        description="When the movement happened; defaults to creation time"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Free-text description"
    )

    @field_validator('date')
    @classmethod
    def date_is_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _ensure_aware(v)


class Transaction(BaseModel):
    """
    A recorded money movement.

    Instances are frozen. Edits go through the store, which swaps the
    whole instance for a new one.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")

    id: int = Field(
        ...,
        ge=0,
        description="Unique identifier assigned by the store"
    )
    amount: Money = Field(
        ...,
        ge=0,
        description="Non-negative magnitude of the movement"
    )
    type: TransactionType
    category: str = Field(
        default="",
        max_length=100
    )
    date: datetime
    note: Optional[str] = Field(
        default=None,
        max_length=500
    )

    @field_validator('date')
    @classmethod
    def date_is_aware(cls, v: datetime) -> datetime:
        return _ensure_aware(v)

    @classmethod
    def from_draft(
        cls,
        draft: TransactionDraft,
        transaction_id: int,
        created_at: datetime,
    ) -> "Transaction":
        """Give a draft its identity and, if it has none, a date."""
        return cls(
            id=transaction_id,
            amount=draft.amount,
            type=draft.type,
            category=draft.category,
            date=draft.date or created_at,
            note=draft.note,
        )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expense negative."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount

    def with_category(self, category: str) -> "Transaction":
        return self.model_copy(update={"category": category})


# =============================================================================
# CONSTRUCTION CONTRACT
# =============================================================================

def _classify(errors: list[dict[str, Any]]) -> str:
    """Pick the most specific reason out of a pydantic error list."""
    kinds = {(err["loc"][0] if err["loc"] else None, err["type"]) for err in errors}
    if ("amount", "missing") in kinds:
        return InvalidTransactionError.MISSING_AMOUNT
    if ("type", "missing") in kinds:
        return InvalidTransactionError.MISSING_TYPE
    if any(field == "type" for field, _ in kinds):
        return InvalidTransactionError.UNRECOGNIZED_TYPE
    return InvalidTransactionError.INVALID_FIELD


def _validate(model: type[BaseModel], payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    if not isinstance(payload, Mapping):
        raise InvalidTransactionError(
            InvalidTransactionError.INVALID_FIELD,
            f"Transaction payload must be a mapping, got {type(payload).__name__}",
        )
    try:
        return model.model_validate(dict(payload))
    except ValidationError as e:
        errors = e.errors()
        reason = _classify(errors)
        raise InvalidTransactionError(
            reason,
            f"Invalid transaction ({reason}): {e.error_count()} validation error(s)",
            errors,
        ) from e


def parse_draft(candidate: Union[TransactionDraft, Mapping, BaseModel]) -> TransactionDraft:
    """
    Validate a new-transaction payload.

    Raises:
        InvalidTransactionError: missing amount, missing type,
            unrecognized type, or any other malformed field
    """
    return _validate(TransactionDraft, candidate)


def parse_transaction(updated: Union[Transaction, Mapping, BaseModel]) -> Transaction:
    """
    Validate a full transaction (with id), as used for edits and decoding.

    Raises:
        InvalidTransactionError: as for parse_draft, or a missing id
    """
    # Instances are re-validated too: model_copy(update=...) skips validation
    return _validate(Transaction, updated)

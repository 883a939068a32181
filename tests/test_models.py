"""
Tests for Finance Tracker models

Test strategy:
1. Unit tests for individual components (models, codec, aggregates)
2. Store tests over an in-memory backend
3. File backend tests against pytest's tmp_path (no network, no home dir)
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from finance_tracker.models import (
    EventSeverity,
    InvalidCategoryError,
    InvalidTransactionError,
    StateEvent,
    StateEventBuilder,
    StateEventType,
    Transaction,
    TransactionDraft,
    TransactionType,
    clean_category_name,
    parse_draft,
    parse_transaction,
)


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestTransactionDraft:
    """Tests for the new-transaction construction contract."""

    def test_draft_from_dict(self):
        """Test a plain dict payload is accepted."""
        draft = parse_draft({
            "amount": 150,
            "type": "expense",
            "category": "Food",
            "date": "2026-02-22",
        })
        assert draft.amount == Decimal("150")
        assert draft.type == TransactionType.EXPENSE
        assert draft.category == "Food"
        assert draft.date == datetime(2026, 2, 22, tzinfo=timezone.utc)

    def test_draft_without_date(self):
        """Test date is optional on a draft."""
        draft = parse_draft({"amount": "12.50", "type": "income"})
        assert draft.date is None
        assert draft.category == ""

    def test_draft_ignores_stray_id(self):
        """Test an id supplied by the caller is dropped."""
        draft = parse_draft({"id": 7, "amount": 1, "type": "income"})
        assert not hasattr(draft, "id")

    def test_draft_strips_whitespace(self):
        """Test whitespace is stripped from the category."""
        draft = parse_draft({"amount": 1, "type": "expense", "category": "  Food  "})
        assert draft.category == "Food"

    def test_missing_amount(self):
        """Test a payload without amount is rejected with its own reason."""
        with pytest.raises(InvalidTransactionError) as exc:
            parse_draft({"type": "expense", "category": "Food"})
        assert exc.value.reason == InvalidTransactionError.MISSING_AMOUNT

    def test_missing_type(self):
        """Test a payload without type is rejected with its own reason."""
        with pytest.raises(InvalidTransactionError) as exc:
            parse_draft({"amount": 10})
        assert exc.value.reason == InvalidTransactionError.MISSING_TYPE

    def test_unrecognized_type(self):
        """Test an unknown type value is rejected."""
        with pytest.raises(InvalidTransactionError) as exc:
            parse_draft({"amount": 10, "type": "transfer"})
        assert exc.value.reason == InvalidTransactionError.UNRECOGNIZED_TYPE
        assert exc.value.errors

    def test_missing_amount_wins_over_missing_type(self):
        """Test the amount reason is reported first when both are missing."""
        with pytest.raises(InvalidTransactionError) as exc:
            parse_draft({})
        assert exc.value.reason == InvalidTransactionError.MISSING_AMOUNT

    def test_negative_amount_rejected(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(InvalidTransactionError) as exc:
            parse_draft({"amount": -5, "type": "expense"})
        assert exc.value.reason == InvalidTransactionError.INVALID_FIELD

    def test_non_mapping_rejected(self):
        """Test a payload that is not a mapping is rejected."""
        with pytest.raises(InvalidTransactionError):
            parse_draft(["amount", 10])

    def test_invalid_transaction_error_is_value_error(self):
        """Test callers can catch it as a ValueError."""
        with pytest.raises(ValueError):
            parse_draft({"amount": "lots", "type": "expense"})


class TestTransaction:
    """Tests for the stored Transaction model."""

    def test_from_draft_keeps_supplied_date(self):
        """Test the draft's date is kept."""
        draft = TransactionDraft(amount=5, type="expense", date="2026-02-22")
        txn = Transaction.from_draft(draft, transaction_id=1, created_at=NOW)
        assert txn.id == 1
        assert txn.date == datetime(2026, 2, 22, tzinfo=timezone.utc)

    def test_from_draft_defaults_date_to_creation(self):
        """Test the creation time is used when the draft has no date."""
        draft = TransactionDraft(amount=5, type="income")
        txn = Transaction.from_draft(draft, transaction_id=1, created_at=NOW)
        assert txn.date == NOW

    def test_transaction_is_frozen(self):
        """Test stored transactions cannot be mutated in place."""
        txn = Transaction(id=1, amount=5, type="expense", date=NOW)
        with pytest.raises(ValueError):
            txn.amount = Decimal("10")

    def test_signed_amount(self):
        """Test income is positive and expense negative."""
        income = Transaction(id=1, amount=5, type="income", date=NOW)
        expense = Transaction(id=2, amount=5, type="expense", date=NOW)
        assert income.signed_amount == Decimal("5")
        assert expense.signed_amount == Decimal("-5")

    def test_with_category(self):
        """Test relabelling returns a new instance."""
        txn = Transaction(id=1, amount=5, type="expense", category="Food", date=NOW)
        relabelled = txn.with_category("Groceries")
        assert relabelled.category == "Groceries"
        assert txn.category == "Food"
        assert relabelled.id == txn.id

    def test_naive_date_is_utc(self):
        """Test naive datetimes are read as UTC."""
        txn = Transaction(id=1, amount=5, type="expense", date=datetime(2026, 1, 1))
        assert txn.date.tzinfo == timezone.utc

    def test_parse_transaction_requires_id(self):
        """Test a full transaction needs its id."""
        with pytest.raises(InvalidTransactionError) as exc:
            parse_transaction({"amount": 5, "type": "expense", "date": "2026-01-01"})
        assert exc.value.reason == InvalidTransactionError.INVALID_FIELD

    def test_amount_serialization(self):
        """Test whole amounts are JSON numbers and fractions exact strings."""
        whole = Transaction(id=1, amount=150, type="expense", date=NOW)
        fraction = Transaction(id=2, amount="12.5", type="expense", date=NOW)
        assert whole.model_dump(mode="json")["amount"] == 150
        assert fraction.model_dump(mode="json")["amount"] == "12.5"

    def test_parse_transaction_revalidates_instances(self):
        """Test a copy that skipped validation is rejected."""
        txn = Transaction(id=1, amount=5, type="expense", date=NOW)
        broken = txn.model_copy(update={"amount": Decimal("-50")})
        with pytest.raises(InvalidTransactionError) as exc:
            parse_transaction(broken)
        assert exc.value.reason == InvalidTransactionError.INVALID_FIELD


class TestCategoryNames:
    """Tests for category label rules."""

    def test_clean_strips(self):
        assert clean_category_name("  Travel ") == "Travel"

    def test_blank_rejected(self):
        """Test that blank names are rejected."""
        with pytest.raises(InvalidCategoryError):
            clean_category_name("   ")

    def test_non_string_rejected(self):
        with pytest.raises(InvalidCategoryError):
            clean_category_name(None)


class TestStateEvents:
    """Tests for state event models."""

    def test_event_defaults(self):
        """Test StateEvent model creation."""
        event = StateEvent(
            event_type=StateEventType.BUDGET_SET,
            description="Budget set",
        )
        assert event.severity == EventSeverity.INFO
        assert event.keys == []

    def test_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = StateEventBuilder.category_renamed(
            "Food", "Groceries", 2, ["finance.categories", "finance.transactions"]
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "category_renamed"
        assert log_dict["details"]["transactions_relabelled"] == 2
        assert log_dict["keys"] == ["finance.categories", "finance.transactions"]

    def test_reset_event_is_warning(self):
        event = StateEventBuilder.app_reset(["finance.budget"], entire_store=False)
        assert event.severity == EventSeverity.WARNING
        assert event.details["entire_store_cleared"] is False

    def test_write_failure_event_is_error(self):
        event = StateEventBuilder.storage_write_failed("finance.budget", "disk full")
        assert event.severity == EventSeverity.ERROR
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

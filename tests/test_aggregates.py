"""Tests for the derived aggregate functions."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finance_tracker.aggregates import (
    dangling_transactions,
    expenses_by_category,
    is_over_budget,
    remaining_budget,
    summarize,
    total_balance,
    total_expenses,
    total_income,
)
from finance_tracker.models import Transaction


WHEN = datetime(2026, 2, 22, tzinfo=timezone.utc)


def txn(id, amount, type, category="Food"):
    return Transaction(id=id, amount=amount, type=type, category=category, date=WHEN)


@pytest.fixture
def ledger():
    return [
        txn(1, 3000, "income", "Salary"),
        txn(2, 150, "expense", "Food"),
        txn(3, "49.90", "expense", "Transport"),
        txn(4, 25, "expense", "Food"),
    ]


class TestTotals:
    """Tests for the headline sums."""

    def test_empty(self):
        assert total_balance([]) == 0
        assert total_expenses([]) == 0
        assert total_income([]) == 0

    def test_balance(self, ledger):
        assert total_balance(ledger) == Decimal("2775.10")

    def test_expenses(self, ledger):
        assert total_expenses(ledger) == Decimal("224.90")

    def test_income(self, ledger):
        assert total_income(ledger) == Decimal("3000")

    def test_accepts_generators(self, ledger):
        assert total_expenses(t for t in ledger) == Decimal("224.90")


class TestBudget:
    """Tests for the budget comparisons."""

    def test_equal_is_not_over(self):
        assert is_over_budget([txn(1, 100, "expense")], Decimal("100")) is False

    def test_above_is_over(self):
        assert is_over_budget([txn(1, "100.01", "expense")], Decimal("100")) is True

    def test_income_never_counts(self):
        assert is_over_budget([txn(1, 10_000, "income")], Decimal("0")) is False

    def test_remaining(self, ledger):
        assert remaining_budget(ledger, Decimal("2000")) == Decimal("1775.10")
        assert remaining_budget(ledger, Decimal("200")) == Decimal("-24.90")


class TestBreakdowns:
    """Tests for per-category figures."""

    def test_expenses_by_category_order(self, ledger):
        breakdown = expenses_by_category(ledger)
        assert list(breakdown) == ["Food", "Transport"]
        assert breakdown["Food"] == Decimal("175")

    def test_dangling(self, ledger):
        dangling = dangling_transactions(ledger, ["Salary", "Food"])
        assert [t.id for t in dangling] == [3]

    def test_summarize(self, ledger):
        summary = summarize(ledger, Decimal("200"))
        assert summary.is_over_budget is True
        assert summary.total_balance == Decimal("2775.10")
        assert summary.transaction_count == 4
        assert Decimal(summary.model_dump(mode="json")["total_expenses"]) == Decimal("224.9")

"""
Derived Aggregate Engine

DESIGN DECISION: Aggregates are pure functions of the current
transactions and budget. Nothing is cached, so a read right after a
mutation always reflects it.

The store calls these on every property access; reports and views can
call them directly on any sequence of transactions.
"""

from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_tracker.models.transaction import Money, Transaction, TransactionType


class BudgetSummary(BaseModel):
    """Snapshot of the headline figures, for dashboards and reports."""

    total_income: Money
    total_expenses: Money
    total_balance: Money
    monthly_budget: Money
    remaining_budget: Money
    is_over_budget: bool
    transaction_count: int = Field(ge=0)
    expenses_by_category: dict[str, Money] = Field(default_factory=dict)


def total_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Income minus expenses over every transaction."""
    return sum((t.signed_amount for t in transactions), Decimal("0"))


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == TransactionType.INCOME),
        Decimal("0"),
    )


def total_expenses(transactions: Iterable[Transaction]) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == TransactionType.EXPENSE),
        Decimal("0"),
    )


def is_over_budget(transactions: Iterable[Transaction], monthly_budget: Decimal) -> bool:
    """Strictly over: spending exactly the budget is not over it."""
    return total_expenses(transactions) > monthly_budget


def remaining_budget(transactions: Iterable[Transaction], monthly_budget: Decimal) -> Decimal:
    """Budget left to spend; negative once over budget."""
    return monthly_budget - total_expenses(transactions)


def expenses_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Sum expenses per category label.

    Keys appear in the order each category is first seen.
    """
    totals: dict[str, Decimal] = {}
    for t in transactions:
        if t.type != TransactionType.EXPENSE:
            continue
        totals[t.category] = totals.get(t.category, Decimal("0")) + t.amount
    return totals


def dangling_transactions(
    transactions: Iterable[Transaction],
    categories: Iterable[str],
) -> list[Transaction]:
    """Transactions whose category label is no longer in the category set."""
    known = set(categories)
    return [t for t in transactions if t.category not in known]


def summarize(transactions: Iterable[Transaction], monthly_budget: Decimal) -> BudgetSummary:
    items = list(transactions)
    expenses = total_expenses(items)
    return BudgetSummary(
        total_income=total_income(items),
        total_expenses=expenses,
        total_balance=total_balance(items),
        monthly_budget=monthly_budget,
        remaining_budget=monthly_budget - expenses,
        is_over_budget=expenses > monthly_budget,
        transaction_count=len(items),
        expenses_by_category=expenses_by_category(items),
    )

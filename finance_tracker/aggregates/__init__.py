"""Derived aggregate package."""

from finance_tracker.aggregates.engine import (
    BudgetSummary,
    dangling_transactions,
    expenses_by_category,
    is_over_budget,
    remaining_budget,
    summarize,
    total_balance,
    total_expenses,
    total_income,
)

__all__ = [
    "BudgetSummary",
    "dangling_transactions",
    "expenses_by_category",
    "is_over_budget",
    "remaining_budget",
    "summarize",
    "total_balance",
    "total_expenses",
    "total_income",
]

"""
Finance Tracker - Source Package

State core of a personal finance tracker: transactions, a monthly
budget, category labels and a display currency, persisted to a durable
key-value store, with balance and spending figures derived on read.

DESIGN PRINCIPLES:
1. One owner of state: every change goes through FinanceStore
2. Fail early, fail visibly
3. No change is visible before it has been written
4. Every change is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"

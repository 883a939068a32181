"""State container package."""

from finance_tracker.state.container import ENTITY_NAMES, FinanceStore, Listener

__all__ = ["ENTITY_NAMES", "FinanceStore", "Listener"]

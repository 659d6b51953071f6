"""Budget tracking package."""

from pocketledger.budgets.tracker import NO_LIMIT, BudgetTracker, NoLimitType

__all__ = ["NO_LIMIT", "BudgetTracker", "NoLimitType"]

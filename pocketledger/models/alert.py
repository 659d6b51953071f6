"""
Alert Models

Alerts are notifications derived from ledger and budget state.

Lifecycle: UNREAD -> READ, one way. An alert is never edited after
creation except for marking it read, and never deleted individually;
only the whole list can be cleared.

DEDUP KEYS: every message starts with a short bracketed tag such as
"[Food_warning]". The alert engine suppresses a new alert when one of
the most recent alerts contains the same tag as a substring.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AlertKind(str, Enum):
    """Categories of alerts."""
    BUDGET_EXCEEDED = "budget_exceeded"
    OVERSPENDING = "overspending"
    LOW_BALANCE = "low_balance"
    BUDGET_WARNING = "budget_warning"


# Kinds surfaced to the caller at creation time, not only stored
IMMEDIATE_KINDS = frozenset({AlertKind.BUDGET_EXCEEDED, AlertKind.OVERSPENDING})


class Alert(BaseModel):
    """A single stored notification."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique alert identifier"
    )
    kind: AlertKind = Field(
        ...,
        description="Alert category"
    )
    message: str = Field(
        ...,
        min_length=1,
        description="Formatted text, including the dedup key"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        description="When the alert was raised"
    )
    read: bool = Field(
        default=False,
        description="Has the user seen this alert?"
    )

    def mark_read(self) -> None:
        self.read = True

    def contains_key(self, key: str) -> bool:
        return key in self.message

    @property
    def is_immediate(self) -> bool:
        return self.kind in IMMEDIATE_KINDS


# =============================================================================
# DEDUP KEYS
# =============================================================================

def budget_warning_key(category: str) -> str:
    return f"{category}_warning"


def budget_critical_key(category: str) -> str:
    return f"{category}_critical"


def budget_exceeded_key(category: str) -> str:
    return f"{category}_exceeded"


def large_transaction_key(category: str) -> str:
    return f"large_transaction_{category}"


INSUFFICIENT_FUNDS_KEY = "insufficient_funds"
OVERSPENDING_WARNING_KEY = "overspending_warning"
OVERSPENDING_CRITICAL_KEY = "overspending_critical"
LOW_BALANCE_WARNING_KEY = "low_balance_warning"
LOW_BALANCE_CRITICAL_KEY = "low_balance_critical"
ZERO_BALANCE_KEY = "zero_balance"
NO_INCOME_KEY = "no_income"


def _tagged(key: str, text: str) -> str:
    return f"[{key}] {text}"


class AlertBuilder:
    """
    Helper class to build alerts with consistent wording.

    Usage:
        alert = AlertBuilder.budget_warning("Food", 0.85, 150.0)
        alert = AlertBuilder.low_balance_critical(420.0)
    """

    @staticmethod
    def budget_warning(category: str, usage_ratio: float, remaining: float) -> Alert:
        return Alert(
            kind=AlertKind.BUDGET_WARNING,
            message=_tagged(
                budget_warning_key(category),
                f"Category '{category}': {usage_ratio:.1%} of budget used. "
                f"Remaining: {remaining:.2f}",
            ),
        )

    @staticmethod
    def budget_critical(category: str, usage_ratio: float, remaining: float) -> Alert:
        return Alert(
            kind=AlertKind.BUDGET_EXCEEDED,
            message=_tagged(
                budget_critical_key(category),
                f"CRITICAL: category '{category}': {usage_ratio:.1%} of budget used. "
                f"Only {remaining:.2f} left",
            ),
        )

    @staticmethod
    def budget_exceeded(category: str, limit: float, spent: float) -> Alert:
        return Alert(
            kind=AlertKind.BUDGET_EXCEEDED,
            message=_tagged(
                budget_exceeded_key(category),
                f"Budget exceeded for category '{category}'! "
                f"Limit: {limit:.2f}, Spent: {spent:.2f}, "
                f"Excess: {spent - limit:.2f}",
            ),
        )

    @staticmethod
    def insufficient_funds(balance: float, required: float) -> Alert:
        return Alert(
            kind=AlertKind.LOW_BALANCE,
            message=_tagged(
                INSUFFICIENT_FUNDS_KEY,
                f"Not enough funds for this expense. Balance: {balance:.2f}, "
                f"Required: {required:.2f}, Shortfall: {required - balance:.2f}",
            ),
        )

    @staticmethod
    def overspending_warning(
        expense_ratio: float, total_expense: float, total_income: float
    ) -> Alert:
        return Alert(
            kind=AlertKind.OVERSPENDING,
            message=_tagged(
                OVERSPENDING_WARNING_KEY,
                f"Expenses are {expense_ratio:.1%} of income "
                f"({total_expense:.2f} of {total_income:.2f})",
            ),
        )

    @staticmethod
    def overspending_critical(total_expense: float, total_income: float) -> Alert:
        return Alert(
            kind=AlertKind.OVERSPENDING,
            message=_tagged(
                OVERSPENDING_CRITICAL_KEY,
                f"Expenses exceed income by {total_expense - total_income:.2f}. "
                f"Income: {total_income:.2f}, Expenses: {total_expense:.2f}",
            ),
        )

    @staticmethod
    def low_balance_warning(balance: float) -> Alert:
        return Alert(
            kind=AlertKind.LOW_BALANCE,
            message=_tagged(
                LOW_BALANCE_WARNING_KEY,
                f"Low balance: {balance:.2f}. Consider topping up.",
            ),
        )

    @staticmethod
    def low_balance_critical(balance: float) -> Alert:
        return Alert(
            kind=AlertKind.LOW_BALANCE,
            message=_tagged(
                LOW_BALANCE_CRITICAL_KEY,
                f"CRITICALLY LOW BALANCE: {balance:.2f}. Top up as soon as possible!",
            ),
        )

    @staticmethod
    def zero_balance() -> Alert:
        return Alert(
            kind=AlertKind.LOW_BALANCE,
            message=_tagged(
                ZERO_BALANCE_KEY,
                "Balance is zero. Consider adding funds.",
            ),
        )

    @staticmethod
    def no_income() -> Alert:
        return Alert(
            kind=AlertKind.BUDGET_WARNING,
            message=_tagged(
                NO_INCOME_KEY,
                "No income recorded yet. Add income to get a complete picture.",
            ),
        )

    @staticmethod
    def large_transaction(amount: float, category: str) -> Alert:
        return Alert(
            kind=AlertKind.BUDGET_WARNING,
            message=_tagged(
                large_transaction_key(category),
                f"Large transaction: {amount:.2f} in category '{category}'. "
                "Please double-check it.",
            ),
        )

"""
Report Models

Read-only views over an account, produced by the report builder and
consumed by the UI or any export collaborator. Nothing here mutates
account state.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from pocketledger.models.record import Record


class CategoryTotals(BaseModel):
    """Income, expense and budget figures for one category."""

    category: str
    income: float = 0.0
    expense: float = 0.0
    limit: Optional[float] = None
    remaining: Optional[float] = None

    @property
    def net(self) -> float:
        return self.income - self.expense


class PeriodReport(BaseModel):
    """Totals for records whose date falls inside [start, end]."""

    start: date
    end: date
    record_count: int = Field(ge=0)
    total_income: float = 0.0
    total_expense: float = 0.0
    income_by_category: dict[str, float] = Field(default_factory=dict)
    expense_by_category: dict[str, float] = Field(default_factory=dict)

    @property
    def net(self) -> float:
        return self.total_income - self.total_expense

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0


class CategorySummary(BaseModel):
    """
    Totals across a user-chosen set of categories.

    Totals for a side excluded by `incomes_only`/`expenses_only` are None.
    """

    found: list[CategoryTotals] = Field(default_factory=list)
    not_found: list[str] = Field(
        default_factory=list,
        description="Requested categories with no income and no expense"
    )
    total_income: Optional[float] = None
    total_expense: Optional[float] = None

    @property
    def net(self) -> Optional[float]:
        if self.total_income is None or self.total_expense is None:
            return None
        return self.total_income - self.total_expense


class BudgetStatus(BaseModel):
    """Current state of one budget."""

    category: str
    limit: float
    spent: float
    remaining: float
    usage_ratio: float

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


class AccountOverview(BaseModel):
    """Headline figures for the logged-in account."""

    account_id: str
    balance: float
    total_income: float
    total_expense: float
    record_count: int
    budget_count: int
    unread_alerts: int
    recent_records: list[Record] = Field(default_factory=list)

"""
Report Builder

DESIGN DECISION: Reports are DETERMINISTIC, read-only views.
They only call ledger/budget/alert query methods and never mutate the
account, so they are safe to run at any time, from any front end.
"""

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional

from pocketledger.alerts import AlertEngine
from pocketledger.budgets import BudgetTracker
from pocketledger.models.account import Account
from pocketledger.models.record import RecordKind
from pocketledger.models.report import (
    AccountOverview,
    BudgetStatus,
    CategorySummary,
    CategoryTotals,
    PeriodReport,
)


QUICK_PERIODS = ("day", "today", "week", "month", "year", "last_month")


def period_bounds(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """
    Resolve a named period to an inclusive date range.

    Raises:
        ValueError: Unknown period name
    """
    today = today or date.today()
    period = period.lower()

    if period in ("day", "today"):
        return today, today
    if period == "week":
        return today - timedelta(days=7), today
    if period == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if period == "year":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if period == "last_month":
        last_of_previous = today.replace(day=1) - timedelta(days=1)
        return last_of_previous.replace(day=1), last_of_previous

    raise ValueError(
        f"Unknown period '{period}'. Use one of: {', '.join(QUICK_PERIODS)}"
    )


class ReportBuilder:
    """
    Builds report models for one account.

    GUARANTEES:
    - Only reads real records, budgets and alerts
    - Never estimates or fills gaps
    - Empty results are reported as empty, not as errors
    """

    def __init__(self, account: Account):
        self._account = account
        self._ledger = account.ledger
        self._tracker = BudgetTracker(account.budgets, account.ledger)

    def period_report(self, start: date, end: date) -> PeriodReport:
        """Totals for records whose occurrence date is within [start, end]."""
        records = [
            record for record in self._ledger.records
            if start <= record.occurred_at.date() <= end
        ]

        income_by_category: dict[str, float] = {}
        expense_by_category: dict[str, float] = {}
        for record in records:
            bucket = (
                income_by_category
                if record.kind == RecordKind.INCOME
                else expense_by_category
            )
            bucket[record.category] = bucket.get(record.category, 0.0) + record.amount

        return PeriodReport(
            start=start,
            end=end,
            record_count=len(records),
            total_income=sum(income_by_category.values(), 0.0),
            total_expense=sum(expense_by_category.values(), 0.0),
            income_by_category=income_by_category,
            expense_by_category=expense_by_category,
        )

    def quick_report(self, period: str, today: Optional[date] = None) -> PeriodReport:
        start, end = period_bounds(period, today)
        return self.period_report(start, end)

    def category_summary(
        self,
        categories: Iterable[str],
        incomes_only: bool = False,
        expenses_only: bool = False,
    ) -> CategorySummary:
        """
        Totals for the requested categories.

        A category with neither income nor expense is listed as not found.
        """
        include_income = incomes_only or not expenses_only
        include_expense = expenses_only or not incomes_only

        summary = CategorySummary(
            total_income=0.0 if include_income else None,
            total_expense=0.0 if include_expense else None,
        )

        for category in categories:
            totals = self.category_totals(category)
            if totals.income <= 0 and totals.expense <= 0:
                summary.not_found.append(category)
                continue

            summary.found.append(totals)
            if include_income:
                summary.total_income += totals.income
            if include_expense:
                summary.total_expense += totals.expense

        return summary

    def category_totals(self, category: str) -> CategoryTotals:
        limit = self._account.budgets.get(category)
        expense = self._ledger.amount_by_category(RecordKind.EXPENSE, category)
        return CategoryTotals(
            category=category,
            income=self._ledger.amount_by_category(RecordKind.INCOME, category),
            expense=expense,
            limit=limit,
            remaining=limit - expense if limit is not None else None,
        )

    def list_categories(self) -> list[CategoryTotals]:
        """Every category from records and budgets, sorted by name."""
        return [
            self.category_totals(category)
            for category in self._account.all_categories()
        ]

    def budget_status(self) -> list[BudgetStatus]:
        """All budgets, tightest (least remaining) first."""
        statuses = []
        for category, limit in self._account.budgets.items():
            spent = self._tracker.spent(category)
            statuses.append(BudgetStatus(
                category=category,
                limit=limit,
                spent=spent,
                remaining=limit - spent,
                usage_ratio=spent / limit,
            ))
        return sorted(statuses, key=lambda status: status.remaining)

    def overview(self, recent: int = 3) -> AccountOverview:
        return AccountOverview(
            account_id=self._account.account_id,
            balance=self._ledger.balance,
            total_income=self._ledger.total_income(),
            total_expense=self._ledger.total_expense(),
            record_count=len(self._ledger.records),
            budget_count=len(self._account.budgets),
            unread_alerts=AlertEngine.unread_count(self._account),
            recent_records=self._ledger.recent_records(recent),
        )

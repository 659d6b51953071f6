"""
Alert Engine

Derives notifications from an account's ledger and budgets.

EVALUATION PATHS:
1. Full evaluation (`evaluate`) runs after every recorded income or
   expense. Each independent check yields zero or one alert, and every
   check is deduplicated.
2. The immediate budget check (`check_budget_exceeded`) runs right after
   an expense, for that expense's category only, BEFORE the full pass.
   It is NOT deduplicated: every expense in an over-budget category
   raises a fresh "budget exceeded" alert. Because it embeds the same
   dedup key, the full pass that follows stays quiet.
3. The insufficient funds alert (`insufficient_funds`) is raised when an
   expense is rejected for lack of balance. Also not deduplicated.

DEDUPLICATION: before creating an alert with key K the engine looks at
the last `dedup_window` alerts only; if any message contains K as a
substring, nothing is created. A repeat is therefore allowed again once
the earlier alert scrolls out of the window.

Budget exceeded and overspending alerts are surfaced to the notifier at
creation time; everything else is stored quietly until listed.
"""

import math
from typing import Callable, Optional

import structlog

from pocketledger.budgets import BudgetTracker
from pocketledger.config import AlertSettings, get_settings
from pocketledger.models.account import Account
from pocketledger.models.alert import (
    INSUFFICIENT_FUNDS_KEY,
    LOW_BALANCE_CRITICAL_KEY,
    LOW_BALANCE_WARNING_KEY,
    NO_INCOME_KEY,
    OVERSPENDING_CRITICAL_KEY,
    OVERSPENDING_WARNING_KEY,
    ZERO_BALANCE_KEY,
    Alert,
    AlertBuilder,
    budget_critical_key,
    budget_exceeded_key,
    budget_warning_key,
    large_transaction_key,
)


logger = structlog.get_logger(__name__)

AlertNotifier = Callable[[Alert], None]


def log_notifier(alert: Alert) -> None:
    """Default notifier: surface the alert through the log."""
    logger.warning("alert_raised", kind=alert.kind.value, message=alert.message)


class AlertEngine:
    """
    Stateless rule set applied to an account's alert list.

    Thresholds are injected at construction; by default they come from
    AlertSettings (ALERT_* environment variables).
    """

    def __init__(
        self,
        settings: Optional[AlertSettings] = None,
        notifier: Optional[AlertNotifier] = None,
    ):
        self._settings = settings or get_settings().alerts
        self._notifier = notifier or log_notifier

    @property
    def settings(self) -> AlertSettings:
        return self._settings

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate(self, account: Account) -> list[Alert]:
        """
        Run every check once and return the alerts created.

        Order: budgets, balance, overspending, income, zero balance,
        large transaction.
        """
        created: list[Alert] = []

        for check in (
            self._check_budgets,
            self._check_balance,
            self._check_overspending,
            self._check_income,
            self._check_zero_balance,
            self._check_large_transaction,
        ):
            created.extend(check(account))

        if created:
            logger.info(
                "alerts_evaluated",
                account_id=account.account_id,
                created=len(created),
            )
        return created

    def check_budget_exceeded(self, account: Account, category: str) -> Optional[Alert]:
        """Immediate, non-deduplicated budget exceeded check for one category."""
        tracker = BudgetTracker(account.budgets, account.ledger)
        if not tracker.has_limit(category):
            return None

        limit = account.budgets[category]
        spent = tracker.spent(category)
        if spent <= limit:
            return None

        return self._raise(
            account,
            AlertBuilder.budget_exceeded(category, limit, spent),
            budget_exceeded_key(category),
            dedup=False,
        )

    def insufficient_funds(self, account: Account, required: float) -> Alert:
        """Record a rejected expense. Called before the ledger rejects it."""
        balance = account.ledger.balance
        return self._raise(
            account,
            AlertBuilder.insufficient_funds(balance, required),
            INSUFFICIENT_FUNDS_KEY,
            dedup=False,
        )

    def has_recent_alert(self, account: Account, key: str) -> bool:
        """Does any of the last `dedup_window` alerts mention `key`?"""
        window = account.alerts[-self._settings.dedup_window:]
        return any(alert.contains_key(key) for alert in window)

    # -------------------------------------------------------------------------
    # Individual checks
    # -------------------------------------------------------------------------

    def _check_budgets(self, account: Account) -> list[Alert]:
        created = []
        tracker = BudgetTracker(account.budgets, account.ledger)
        warning = self._settings.budget_warning_ratio
        critical = self._settings.budget_critical_ratio

        for category, limit in list(account.budgets.items()):
            if limit <= 0:
                continue
            spent = tracker.spent(category)
            usage = spent / limit
            remaining = limit - spent

            if warning <= usage < 1.0:
                created.append(self._raise(
                    account,
                    AlertBuilder.budget_warning(category, usage, remaining),
                    budget_warning_key(category),
                ))

            if critical <= usage < 1.0:
                created.append(self._raise(
                    account,
                    AlertBuilder.budget_critical(category, usage, remaining),
                    budget_critical_key(category),
                ))

            if spent > limit:
                created.append(self._raise(
                    account,
                    AlertBuilder.budget_exceeded(category, limit, spent),
                    budget_exceeded_key(category),
                ))

        return [alert for alert in created if alert is not None]

    def _check_balance(self, account: Account) -> list[Alert]:
        balance = account.ledger.balance
        warning = self._settings.low_balance_warning
        critical = self._settings.low_balance_critical
        created = []

        if critical < balance <= warning:
            created.append(self._raise(
                account,
                AlertBuilder.low_balance_warning(balance),
                LOW_BALANCE_WARNING_KEY,
            ))

        if 0 < balance <= critical:
            created.append(self._raise(
                account,
                AlertBuilder.low_balance_critical(balance),
                LOW_BALANCE_CRITICAL_KEY,
            ))

        return [alert for alert in created if alert is not None]

    def _check_overspending(self, account: Account) -> list[Alert]:
        total_income = account.ledger.total_income()
        total_expense = account.ledger.total_expense()
        if total_income <= 0:
            return []

        created = []
        ratio = total_expense / total_income

        if self._settings.overspending_ratio <= ratio < 1.0:
            created.append(self._raise(
                account,
                AlertBuilder.overspending_warning(ratio, total_expense, total_income),
                OVERSPENDING_WARNING_KEY,
            ))

        if total_expense > total_income:
            created.append(self._raise(
                account,
                AlertBuilder.overspending_critical(total_expense, total_income),
                OVERSPENDING_CRITICAL_KEY,
            ))

        return [alert for alert in created if alert is not None]

    def _check_income(self, account: Account) -> list[Alert]:
        ledger = account.ledger
        if ledger.is_empty or ledger.total_income() != 0:
            return []
        alert = self._raise(account, AlertBuilder.no_income(), NO_INCOME_KEY)
        return [alert] if alert else []

    def _check_zero_balance(self, account: Account) -> list[Alert]:
        ledger = account.ledger
        if ledger.is_empty or not math.isclose(ledger.balance, 0.0, abs_tol=1e-9):
            return []
        alert = self._raise(account, AlertBuilder.zero_balance(), ZERO_BALANCE_KEY)
        return [alert] if alert else []

    def _check_large_transaction(self, account: Account) -> list[Alert]:
        last = account.ledger.last_record()
        if last is None or last.amount <= self._settings.large_transaction_amount:
            return []
        alert = self._raise(
            account,
            AlertBuilder.large_transaction(last.amount, last.category),
            large_transaction_key(last.category),
        )
        return [alert] if alert else []

    def _raise(
        self,
        account: Account,
        alert: Alert,
        key: str,
        dedup: bool = True,
    ) -> Optional[Alert]:
        """Store `alert` unless a recent one carries the same key."""
        if dedup and self.has_recent_alert(account, key):
            logger.debug("alert_suppressed", account_id=account.account_id, key=key)
            return None

        account.alerts.append(alert)
        if alert.is_immediate:
            self._notifier(alert)
        return alert

    # -------------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------------

    @staticmethod
    def unread_count(account: Account) -> int:
        return sum(1 for alert in account.alerts if not alert.read)

    @staticmethod
    def list_unread(account: Account) -> list[Alert]:
        return [alert for alert in account.alerts if not alert.read]

    @staticmethod
    def list_all(account: Account) -> list[Alert]:
        """All alerts in insertion order. Pure query: read state is untouched."""
        return list(account.alerts)

    @staticmethod
    def mark_all_read(account: Account) -> int:
        """Mark every alert read; returns how many were unread."""
        newly_read = 0
        for alert in account.alerts:
            if not alert.read:
                alert.mark_read()
                newly_read += 1
        return newly_read

    @classmethod
    def display_and_mark_read(cls, account: Account) -> list[Alert]:
        """
        Snapshot all alerts for display, then mark them read.

        The returned copies keep the read state they had before viewing.
        """
        snapshot = [alert.model_copy() for alert in account.alerts]
        cls.mark_all_read(account)
        return snapshot

    @staticmethod
    def clear(account: Account) -> int:
        """Drop every alert unconditionally; returns how many were removed."""
        removed = len(account.alerts)
        account.alerts.clear()
        return removed

"""
Main Orchestrator for PocketLedger

This module ties together all the components. FinanceService is the
single facade every front end talks to:

    resolve active account -> validate -> mutate -> evaluate alerts
    -> audit -> auto-save

DESIGN DECISION: The orchestrator enforces the boundaries:
- No operation runs without an active account (NotAuthenticatedError)
- Only recording income or an expense triggers alert evaluation;
  budget and category operations never do
- A failed validation leaves the account untouched
- A failed save is logged and audited but never undoes a mutation

Everything here is synchronous and single-threaded. A host serving many
users must give each session its own FinanceService and Session.
"""

from datetime import datetime
from typing import Iterable, Optional, Union

import structlog

from pocketledger.alerts import AlertEngine, AlertNotifier
from pocketledger.audit import AuditLogger
from pocketledger.budgets import BudgetTracker, NoLimitType
from pocketledger.categories import CategoryRewriter
from pocketledger.config import get_settings
from pocketledger.exceptions import InsufficientFundsError
from pocketledger.models.account import Account, BudgetChange, MergeResult, RenameResult
from pocketledger.models.alert import Alert
from pocketledger.models.audit import AuditEventBuilder, AuditEventType
from pocketledger.models.record import Record
from pocketledger.models.report import AccountOverview
from pocketledger.queries import ReportBuilder
from pocketledger.services.session import Session
from pocketledger.services.storage import (
    AccountStorageInterface,
    JsonFileAccountStorage,
    JsonLinesAuditStorage,
    NotFoundError,
    StorageError,
)
from pocketledger.validation import validate_amount, validate_category


logger = structlog.get_logger(__name__)


class FinanceService:
    """
    The account facade.

    Owns no ledger state itself: every call resolves the active account
    from the session and works on that.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        storage: Optional[AccountStorageInterface] = None,
        alert_engine: Optional[AlertEngine] = None,
        audit_logger: Optional[AuditLogger] = None,
        autosave: Optional[bool] = None,
        notifier: Optional[AlertNotifier] = None,
    ):
        self._session = session or Session()
        self._storage = storage
        self._alert_engine = alert_engine or AlertEngine(notifier=notifier)
        self._audit_logger = audit_logger or AuditLogger()
        self._autosave = (
            get_settings().storage.autosave if autosave is None else autosave
        )

    @property
    def session(self) -> Session:
        return self._session

    @property
    def alert_engine(self) -> AlertEngine:
        return self._alert_engine

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def login(self, account_id: str) -> Account:
        """
        Activate an account, loading it from storage or starting a new one.

        Credentials are checked by the caller before this is invoked.
        """
        account_id = (account_id or "").strip()
        if not account_id:
            raise ValueError("Account id cannot be empty")

        account = None
        if self._storage:
            try:
                account = self._storage.load(account_id)
            except NotFoundError:
                logger.info("account_not_found_creating", account_id=account_id)

        if account is None:
            account = Account(account_id=account_id)

        self._session.login(account)
        self._audit_logger.log(AuditEventBuilder.session_changed(account_id, True))
        return account

    def logout(self) -> None:
        """Save (if enabled) and end the session."""
        account = self._session.require_account()
        self._persist(account)
        self._session.logout()
        self._audit_logger.log(
            AuditEventBuilder.session_changed(account.account_id, False)
        )

    def current_account(self) -> Account:
        return self._session.require_account()

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    def record_income(
        self,
        amount: float,
        category: str,
        occurred_at: Optional[datetime] = None,
    ) -> Record:
        """Record income, then run the full alert pass."""
        account = self._session.require_account()

        record = account.ledger.record_income(amount, category, occurred_at)
        self._audit_logger.log_income(account.account_id, record.amount, record.category)

        self._audit_alerts(account, self._alert_engine.evaluate(account))
        self._commit(account)
        return record

    def record_expense(
        self,
        amount: float,
        category: str,
        occurred_at: Optional[datetime] = None,
    ) -> Record:
        """
        Record an expense.

        An expense larger than the balance raises a low balance alert
        first and then fails with InsufficientFundsError. A successful
        expense runs the immediate budget check for its category, then
        the full alert pass.
        """
        account = self._session.require_account()
        amount = validate_amount(amount)
        category = validate_category(category)

        ledger = account.ledger
        if ledger.balance < amount:
            alert = self._alert_engine.insufficient_funds(account, amount)
            self._audit_logger.log_expense_rejected(
                account.account_id, amount, category, ledger.balance
            )
            self._audit_alerts(account, [alert])
            self._persist(account)
            raise InsufficientFundsError(balance=ledger.balance, required=amount)

        record = ledger.record_expense(amount, category, occurred_at)
        self._audit_logger.log_expense(account.account_id, record.amount, record.category)

        created = []
        if self._alert_engine.settings.immediate_budget_check:
            immediate = self._alert_engine.check_budget_exceeded(account, record.category)
            if immediate:
                created.append(immediate)
        created.extend(self._alert_engine.evaluate(account))

        self._audit_alerts(account, created)
        self._commit(account)
        return record

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def _tracker(self, account: Account) -> BudgetTracker:
        return BudgetTracker(account.budgets, account.ledger)

    def set_budget(self, category: str, limit: float) -> float:
        account = self._session.require_account()
        old_limit = account.budgets.get((category or "").strip())

        new_limit = self._tracker(account).set_limit(category, limit)
        self._audit_logger.log(AuditEventBuilder.budget_changed(
            account.account_id,
            AuditEventType.BUDGET_SET,
            category.strip(),
            old_limit,
            new_limit,
        ))
        self._commit(account)
        return new_limit

    def would_underrun_spend(self, category: str, new_limit: float) -> bool:
        """Ask before `edit_budget`: would this limit sit below current spend?"""
        account = self._session.require_account()
        return self._tracker(account).would_underrun_spend(category, new_limit)

    def edit_budget(
        self,
        category: str,
        new_limit: float,
        confirmed: bool = False,
    ) -> BudgetChange:
        """
        Change an existing budget.

        Pass `confirmed=True` once the user has agreed to a limit below
        what was already spent.
        """
        account = self._session.require_account()

        change = self._tracker(account).edit_limit(category, new_limit, confirmed)
        self._audit_logger.log(AuditEventBuilder.budget_changed(
            account.account_id,
            AuditEventType.BUDGET_EDITED,
            change.category,
            change.old_limit,
            change.new_limit,
        ))
        self._commit(account)
        return change

    def remove_budget(self, category: str) -> float:
        account = self._session.require_account()

        removed = self._tracker(account).remove_limit(category)
        self._audit_logger.log(AuditEventBuilder.budget_changed(
            account.account_id,
            AuditEventType.BUDGET_REMOVED,
            category.strip(),
            removed,
            None,
        ))
        self._commit(account)
        return removed

    def remaining(self, category: str) -> Union[float, NoLimitType]:
        account = self._session.require_account()
        return self._tracker(account).remaining(category)

    def usage_ratio(self, category: str) -> float:
        account = self._session.require_account()
        return self._tracker(account).usage_ratio(category)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def rename_category(self, old_category: str, new_category: str) -> RenameResult:
        account = self._session.require_account()

        result = CategoryRewriter(account).rename(old_category, new_category)
        self._audit_logger.log(AuditEventBuilder.category_renamed(
            account.account_id,
            result.old_category,
            result.new_category,
            result.renamed_records,
        ))
        self._commit(account)
        return result

    def merge_categories(self, categories: Iterable[str], new_category: str) -> MergeResult:
        account = self._session.require_account()

        result = CategoryRewriter(account).merge(categories, new_category)
        self._audit_logger.log(AuditEventBuilder.categories_merged(
            account.account_id,
            result.merged_categories,
            result.new_category,
            result.merged_records,
        ))
        self._commit(account)
        return result

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------

    def check_all_alerts(self) -> list[Alert]:
        """Run the full deduplicated pass on demand."""
        account = self._session.require_account()
        created = self._alert_engine.evaluate(account)
        self._audit_alerts(account, created)
        if created:
            self._commit(account)
        return created

    def unread_count(self) -> int:
        return AlertEngine.unread_count(self._session.require_account())

    def list_unread(self) -> list[Alert]:
        return AlertEngine.list_unread(self._session.require_account())

    def list_alerts(self) -> list[Alert]:
        """All alerts in insertion order; does not change read state."""
        return AlertEngine.list_all(self._session.require_account())

    def view_alerts(self) -> list[Alert]:
        """Display-and-mark-read: snapshot all alerts, then mark them read."""
        account = self._session.require_account()
        unread = AlertEngine.unread_count(account)
        snapshot = AlertEngine.display_and_mark_read(account)
        if unread:
            self._audit_logger.log(AuditEventBuilder.alerts_changed(
                account.account_id, AuditEventType.ALERTS_READ, unread
            ))
            self._persist(account)
        return snapshot

    def mark_all_read(self) -> int:
        account = self._session.require_account()
        newly_read = AlertEngine.mark_all_read(account)
        if newly_read:
            self._persist(account)
        return newly_read

    def clear_alerts(self) -> int:
        account = self._session.require_account()
        removed = AlertEngine.clear(account)
        self._audit_logger.log(AuditEventBuilder.alerts_changed(
            account.account_id, AuditEventType.ALERTS_CLEARED, removed
        ))
        self._persist(account)
        return removed

    def unread_banner(self) -> Optional[str]:
        """One-line reminder when unread alerts exist, else None."""
        count = self.unread_count()
        if count == 0:
            return None
        noun = "alert" if count == 1 else "alerts"
        return f"You have {count} unread {noun}. Open the alerts view to read them."

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def reports(self) -> ReportBuilder:
        return ReportBuilder(self._session.require_account())

    def overview(self) -> AccountOverview:
        recent = get_settings().app.recent_records_shown
        return self.reports().overview(recent=recent)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self) -> bool:
        """Explicit save; True on success, False if no storage or it failed."""
        account = self._session.require_account()
        if not self._storage:
            return False
        return self._save(account)

    def create_backup(self) -> Optional[str]:
        """Save, then copy the stored account to a timestamped backup."""
        account = self._session.require_account()
        if not self._storage or not self._save(account):
            return None

        try:
            location = self._storage.backup(account.account_id)
        except StorageError as e:
            logger.error("backup_failed", account_id=account.account_id, error=str(e))
            return None

        self._audit_logger.log(
            AuditEventBuilder.backup_created(account.account_id, location)
        )
        return location

    def _commit(self, account: Account) -> None:
        account.touch()
        self._persist(account)

    def _persist(self, account: Account) -> None:
        if self._autosave and self._storage:
            self._save(account)

    def _save(self, account: Account) -> bool:
        try:
            self._storage.save(account)
        except StorageError as e:
            logger.error("account_save_failed", account_id=account.account_id, error=str(e))
            self._audit_logger.log_save_failed(account.account_id, str(e))
            return False
        self._audit_logger.log(AuditEventBuilder.account_saved(account.account_id))
        return True

    def _audit_alerts(self, account: Account, alerts: list[Alert]) -> None:
        for alert in alerts:
            self._audit_logger.log_alert(account.account_id, alert.kind.value, alert.message)


def create_finance_service(
    use_storage: bool = True,
    notifier: Optional[AlertNotifier] = None,
) -> FinanceService:
    """
    Factory function to create a fully wired FinanceService.

    Args:
        use_storage: Whether to persist to the configured data directory.
                    Set to False for a throwaway in-memory session.
        notifier: Callback for immediate alerts (defaults to logging)
    """
    if not use_storage:
        return FinanceService(autosave=False, notifier=notifier)

    storage_settings = get_settings().storage
    return FinanceService(
        storage=JsonFileAccountStorage(storage_settings),
        audit_logger=AuditLogger(JsonLinesAuditStorage(storage_settings.audit_path)),
        notifier=notifier,
    )

"""
Integration tests for FinanceService.

These run whole flows against in-memory storage: resolve the account,
mutate, evaluate alerts, audit, auto-save.
"""

import pytest

from pocketledger.alerts import AlertEngine
from pocketledger.audit import AuditLogger
from pocketledger.budgets import NO_LIMIT
from pocketledger.config import AlertSettings, StorageSettings
from pocketledger.exceptions import (
    BudgetNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCategoryError,
    NotAuthenticatedError,
    UnconfirmedBudgetEditError,
)
from pocketledger.models.alert import AlertKind
from pocketledger.models.audit import AuditEventType
from pocketledger.orchestrator import FinanceService, create_finance_service
from pocketledger.services.storage import (
    InMemoryAccountStorage,
    InMemoryAuditStorage,
    JsonFileAccountStorage,
    StorageWriteError,
)


class FailingStorage(InMemoryAccountStorage):
    def save(self, account):
        raise StorageWriteError("disk full")


def count_key(alerts, key):
    return sum(1 for alert in alerts if alert.contains_key(key))


def event_types(audit_storage):
    return [event.event_type for event in audit_storage.get_recent_events(limit=1000)]


class TestScenarios:
    """End-to-end flows for the three core behaviours."""

    def test_expense_over_budget_alerts_once(self, service, notified):
        service.record_income(2000, "Salary")
        service.set_budget("Food", 1000)
        service.record_expense(1200, "Food")

        account = service.current_account()
        assert account.ledger.balance == 800.0
        exceeded = [a for a in account.alerts if a.kind == AlertKind.BUDGET_EXCEEDED]
        assert len(exceeded) == 1
        assert count_key(account.alerts, "Food_exceeded") == 1
        assert [a.kind for a in notified] == [AlertKind.BUDGET_EXCEEDED]

    def test_expense_with_no_funds_is_rejected(self, service, storage):
        with pytest.raises(InsufficientFundsError):
            service.record_expense(50, "Food")

        account = service.current_account()
        assert account.ledger.balance == 0.0
        assert account.ledger.is_empty
        assert len(account.alerts) == 1
        assert account.alerts[0].kind == AlertKind.LOW_BALANCE
        assert len(storage.load("alice").alerts) == 1

    def test_warning_is_not_repeated(self, service):
        service.record_income(2000, "Salary")
        service.set_budget("Food", 1000)
        service.record_expense(850, "Food")
        service.record_expense(10, "Food")

        account = service.current_account()
        assert count_key(account.alerts, "Food_warning") == 1
        assert count_key(account.alerts, "low_balance_warning") == 1

    def test_overspending_is_not_repeated(self, service):
        service.record_income(1000, "Salary")
        service.record_expense(920, "Rent")
        service.record_income(5, "Gift")
        service.record_expense(10, "Food")

        account = service.current_account()
        assert count_key(account.alerts, "overspending_warning") == 1

        before = len(account.alerts)
        service.overview()
        service.reports().quick_report("month")
        assert len(account.alerts) == before


class TestSession:

    def test_operations_require_login(self, engine):
        service = FinanceService(alert_engine=engine, autosave=False)
        with pytest.raises(NotAuthenticatedError):
            service.record_income(10, "Salary")
        with pytest.raises(NotAuthenticatedError):
            service.view_alerts()
        with pytest.raises(NotAuthenticatedError):
            service.reports()

    def test_login_requires_id(self, engine):
        service = FinanceService(alert_engine=engine, autosave=False)
        with pytest.raises(ValueError):
            service.login("   ")

    def test_logout_then_login_restores_account(self, service, audit_storage):
        service.record_income(300, "Salary")
        service.logout()
        assert not service.session.is_authenticated

        account = service.login("alice")
        assert account.ledger.balance == 300.0
        types = event_types(audit_storage)
        assert AuditEventType.LOGGED_OUT in types
        assert AuditEventType.LOGGED_IN in types

    def test_new_account_on_first_login(self, service):
        account = service.login("bob")
        assert account.account_id == "bob"
        assert account.ledger.is_empty


class TestLedgerFlows:

    def test_autosave_after_income(self, service, storage):
        service.record_income(2500, "Salary")
        assert storage.load("alice").ledger.balance == 2500.0

    def test_invalid_input_leaves_account_untouched(self, service):
        with pytest.raises(InvalidAmountError):
            service.record_expense(-5, "Food")
        with pytest.raises(InvalidCategoryError):
            service.record_expense(5, "  ")
        account = service.current_account()
        assert account.ledger.is_empty
        assert account.alerts == []

    def test_immediate_check_repeats_per_expense(self, service):
        service.record_income(5000, "Salary")
        service.set_budget("Food", 100)
        service.record_expense(150, "Food")
        service.record_expense(10, "Food")
        assert count_key(service.list_alerts(), "Food_exceeded") == 2

    def test_immediate_check_can_be_disabled(self, storage):
        engine = AlertEngine(
            settings=AlertSettings(immediate_budget_check=False),
            notifier=lambda alert: None,
        )
        service = FinanceService(storage=storage, alert_engine=engine, autosave=False)
        service.login("alice")
        service.record_income(5000, "Salary")
        service.set_budget("Food", 100)
        service.record_expense(150, "Food")
        service.record_expense(10, "Food")
        assert count_key(service.list_alerts(), "Food_exceeded") == 1

    def test_expenses_are_audited(self, service, audit_storage):
        service.record_income(100, "Salary")
        service.record_expense(20, "Food")
        types = event_types(audit_storage)
        assert AuditEventType.INCOME_RECORDED in types
        assert AuditEventType.EXPENSE_RECORDED in types
        assert AuditEventType.ACCOUNT_SAVED in types

    def test_rejected_expense_is_audited(self, service, audit_storage):
        with pytest.raises(InsufficientFundsError):
            service.record_expense(20, "Food")
        types = event_types(audit_storage)
        assert AuditEventType.EXPENSE_REJECTED in types
        assert AuditEventType.ALERT_RAISED in types


class TestBudgetFlows:

    def test_budget_operations_do_not_evaluate_alerts(self, service):
        service.record_income(400, "Salary")
        before = len(service.list_alerts())
        service.set_budget("Food", 100)
        service.edit_budget("Food", 200)
        service.remove_budget("Food")
        assert len(service.list_alerts()) == before

    def test_edit_below_spend(self, service):
        service.record_income(5000, "Salary")
        service.set_budget("Food", 1000)
        service.record_expense(600, "Food")

        assert service.would_underrun_spend("Food", 500)
        with pytest.raises(UnconfirmedBudgetEditError):
            service.edit_budget("Food", 500)
        assert service.remaining("Food") == 400.0

        change = service.edit_budget("Food", 500, confirmed=True)
        assert change.below_spend
        assert service.remaining("Food") == -100.0
        assert service.usage_ratio("Food") == pytest.approx(1.2)

    def test_remove_budget(self, service, storage):
        service.set_budget("Food", 1000)
        assert service.remove_budget("Food") == 1000.0
        assert service.remaining("Food") is NO_LIMIT
        assert storage.load("alice").budgets == {}
        with pytest.raises(BudgetNotFoundError):
            service.remove_budget("Food")

    def test_padded_budget_names(self, service, audit_storage):
        service.record_income(5000, "Salary")
        service.set_budget(" Food ", 1000)
        service.record_expense(500, "Food")

        assert service.remaining(" Food ") == 500.0
        assert service.would_underrun_spend(" Food ", 100)
        with pytest.raises(UnconfirmedBudgetEditError):
            service.edit_budget(" Food ", 100)
        assert service.remove_budget(" Food ") == 1000.0

        removed = [
            event for event in audit_storage.get_recent_events(limit=1000)
            if event.event_type == AuditEventType.BUDGET_REMOVED
        ]
        assert [event.details["category"] for event in removed] == ["Food"]


class TestCategoryFlows:

    def test_rename_is_saved_and_audited(self, service, storage, audit_storage):
        service.record_income(500, "Salary")
        service.record_expense(100, "Groceries")
        result = service.rename_category("Groceries", "Food")
        assert result.renamed_records == 1
        assert storage.load("alice").ledger.has_category("Food")
        assert AuditEventType.CATEGORY_RENAMED in event_types(audit_storage)

    def test_merge(self, service, audit_storage):
        service.record_income(500, "Salary")
        service.record_expense(100, "Groceries")
        service.record_expense(50, "Restaurants")
        service.set_budget("Groceries", 300)
        result = service.merge_categories(["Groceries", "Restaurants", "Pets"], "Food")
        assert result.merged_records == 2
        assert result.not_found == ["Pets"]
        assert service.remaining("Food") == 150.0
        assert AuditEventType.CATEGORIES_MERGED in event_types(audit_storage)


class TestAlertFlows:

    @pytest.fixture
    def alerted(self, service):
        service.record_income(400, "Salary")
        return service

    def test_unread_banner(self, alerted):
        assert alerted.unread_banner() == (
            "You have 1 unread alert. Open the alerts view to read them."
        )

    def test_view_alerts_marks_read(self, alerted, storage):
        snapshot = alerted.view_alerts()
        assert len(snapshot) == 1
        assert snapshot[0].read is False
        assert alerted.unread_count() == 0
        assert alerted.unread_banner() is None
        assert storage.load("alice").alerts[0].read is True

    def test_list_alerts_keeps_unread(self, alerted):
        alerted.list_alerts()
        assert alerted.unread_count() == 1
        assert len(alerted.list_unread()) == 1

    def test_mark_all_read(self, alerted):
        assert alerted.mark_all_read() == 1
        assert alerted.mark_all_read() == 0

    def test_clear_then_check_all(self, alerted, audit_storage):
        assert alerted.clear_alerts() == 1
        assert alerted.list_alerts() == []
        assert AuditEventType.ALERTS_CLEARED in event_types(audit_storage)

        created = alerted.check_all_alerts()
        assert [a.kind for a in created] == [AlertKind.LOW_BALANCE]
        assert alerted.check_all_alerts() == []


class TestPersistence:

    def test_explicit_save(self, service, storage):
        service.record_income(100, "Salary")
        storage.delete("alice")
        assert service.save() is True
        assert storage.exists("alice")

    def test_backup(self, service, storage, audit_storage):
        service.record_income(100, "Salary")
        location = service.create_backup()
        assert location is not None
        assert list(storage.backups) == [location]
        assert AuditEventType.BACKUP_CREATED in event_types(audit_storage)

    def test_failed_save_keeps_mutation(self, engine):
        audit_storage = InMemoryAuditStorage()
        service = FinanceService(
            storage=FailingStorage(),
            alert_engine=engine,
            audit_logger=AuditLogger(audit_storage),
            autosave=True,
        )
        service.login("alice")
        service.record_income(100, "Salary")

        assert service.current_account().ledger.balance == 100.0
        assert service.save() is False
        assert service.create_backup() is None
        assert AuditEventType.SAVE_FAILED in event_types(audit_storage)

    def test_similar_account_ids_stay_separate(self, engine, tmp_path):
        storage = JsonFileAccountStorage(StorageSettings(
            data_dir=tmp_path / "data",
            backup_dir=tmp_path / "backups",
        ))
        service = FinanceService(storage=storage, alert_engine=engine, autosave=True)
        service.login("a b")
        service.record_income(100, "Salary")
        service.logout()

        account = service.login("a_b")
        assert account.account_id == "a_b"
        assert account.ledger.is_empty

    def test_no_storage(self, engine):
        service = FinanceService(alert_engine=engine, autosave=True)
        service.login("alice")
        service.record_income(100, "Salary")
        assert service.save() is False
        assert service.create_backup() is None

    def test_factory_without_storage(self):
        service = create_finance_service(use_storage=False)
        service.login("alice")
        service.record_income(100, "Salary")
        assert service.save() is False


class TestOverview:

    def test_overview(self, service):
        service.record_income(1000, "Salary")
        service.record_expense(100, "Food")
        service.set_budget("Food", 500)

        overview = service.overview()
        assert overview.account_id == "alice"
        assert overview.balance == 900.0
        assert overview.total_income == 1000.0
        assert overview.total_expense == 100.0
        assert overview.record_count == 2
        assert overview.budget_count == 1
        assert overview.unread_alerts == service.unread_count()
        assert [r.category for r in overview.recent_records] == ["Salary", "Food"]

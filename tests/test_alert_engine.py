"""Tests for the Alert Engine."""

import pytest

from pocketledger.alerts import AlertEngine
from pocketledger.config import AlertSettings
from pocketledger.models.account import Account
from pocketledger.models.alert import Alert, AlertKind
from pocketledger.models.ledger import Ledger
from pocketledger.models.record import Record, RecordKind


def filler(n: int) -> list[Alert]:
    return [
        Alert(kind=AlertKind.BUDGET_WARNING, message=f"[filler_{i}] unrelated")
        for i in range(n)
    ]


def keys(alerts: list[Alert]) -> list[str]:
    return [alert.message.split("]")[0].lstrip("[") for alert in alerts]


@pytest.fixture
def budgeted(account):
    """Balance 5000, Food budget 1000, nothing spent yet."""
    account.ledger.record_income(5000.0, "Salary")
    account.budgets["Food"] = 1000.0
    return account


class TestBudgetChecks:

    def test_warning_between_thresholds(self, engine, budgeted):
        budgeted.ledger.record_expense(850.0, "Food")
        created = engine.evaluate(budgeted)
        assert keys(created) == ["Food_warning"]
        assert created[0].kind == AlertKind.BUDGET_WARNING
        assert "85.0%" in created[0].message

    def test_critical_also_warns(self, engine, budgeted):
        budgeted.ledger.record_expense(960.0, "Food")
        created = engine.evaluate(budgeted)
        assert keys(created) == ["Food_warning", "Food_critical"]
        assert created[1].kind == AlertKind.BUDGET_EXCEEDED

    def test_exceeded_only_once_over(self, engine, budgeted):
        budgeted.ledger.record_expense(1200.0, "Food")
        created = engine.evaluate(budgeted)
        assert keys(created) == ["Food_exceeded"]
        assert "Excess: 200.00" in created[0].message

    def test_exactly_at_limit_is_not_exceeded(self, engine, budgeted):
        budgeted.ledger.record_expense(1000.0, "Food")
        assert engine.evaluate(budgeted) == []
        assert engine.check_budget_exceeded(budgeted, "Food") is None

    def test_below_warning_is_quiet(self, engine, budgeted):
        budgeted.ledger.record_expense(100.0, "Food")
        assert engine.evaluate(budgeted) == []


class TestBalanceChecks:

    def test_low_balance_warning(self, engine, account):
        account.ledger.record_income(1500.0, "Salary")
        created = engine.evaluate(account)
        assert keys(created) == ["low_balance_warning"]
        assert created[0].kind == AlertKind.LOW_BALANCE

    def test_low_balance_critical(self, engine, account):
        account.ledger.record_income(400.0, "Salary")
        assert keys(engine.evaluate(account)) == ["low_balance_critical"]

    def test_zero_balance(self, engine, account):
        account.ledger.record_income(100.0, "Salary")
        account.ledger.record_expense(100.0, "Food")
        created = engine.evaluate(account)
        assert keys(created) == ["zero_balance"]

    def test_empty_ledger_is_quiet(self, engine, account):
        assert engine.evaluate(account) == []


class TestSpendingChecks:

    def test_overspending_warning(self, engine, account):
        account.ledger.record_income(1000.0, "Salary")
        account.ledger.record_expense(950.0, "Rent")
        created = engine.evaluate(account)
        assert "overspending_warning" in keys(created)
        assert "low_balance_critical" in keys(created)

    def test_overspending_critical(self, engine):
        """Historical data can hold more expense than income."""
        ledger = Ledger(
            records=[
                Record(kind=RecordKind.INCOME, amount=100.0, category="Salary"),
                Record(kind=RecordKind.EXPENSE, amount=150.0, category="Rent"),
            ],
            balance=-50.0,
        )
        account = Account(account_id="bob", ledger=ledger)
        created = engine.evaluate(account)
        assert keys(created) == ["overspending_critical"]
        assert created[0].kind == AlertKind.OVERSPENDING

    def test_no_income(self, engine):
        ledger = Ledger(
            records=[Record(kind=RecordKind.EXPENSE, amount=10.0, category="Food")],
            balance=-10.0,
        )
        account = Account(account_id="bob", ledger=ledger)
        created = engine.evaluate(account)
        assert keys(created) == ["no_income"]

    def test_large_transaction(self, engine, account):
        account.ledger.record_income(20000.0, "Bonus")
        created = engine.evaluate(account)
        assert keys(created) == ["large_transaction_Bonus"]

    def test_at_large_threshold_is_quiet(self, engine, account):
        account.ledger.record_income(10000.0, "Bonus")
        assert engine.evaluate(account) == []

    def test_evaluation_order(self, engine, account):
        """Budgets are checked before balance."""
        account.ledger.record_income(1500.0, "Salary")
        account.budgets["Food"] = 1000.0
        account.ledger.record_expense(850.0, "Food")
        assert keys(engine.evaluate(account)) == ["Food_warning", "low_balance_warning"]


class TestDeduplication:

    def test_repeat_evaluation_is_suppressed(self, engine, budgeted):
        budgeted.ledger.record_expense(850.0, "Food")
        assert len(engine.evaluate(budgeted)) == 1
        budgeted.ledger.record_expense(10.0, "Food")
        assert engine.evaluate(budgeted) == []
        assert len(budgeted.alerts) == 1

    def test_key_inside_window_suppresses(self, engine, budgeted):
        budgeted.ledger.record_expense(850.0, "Food")
        engine.evaluate(budgeted)
        budgeted.alerts.extend(filler(9))
        assert engine.evaluate(budgeted) == []

    def test_key_outside_window_repeats(self, engine, budgeted):
        budgeted.ledger.record_expense(850.0, "Food")
        engine.evaluate(budgeted)
        budgeted.alerts.extend(filler(10))
        assert keys(engine.evaluate(budgeted)) == ["Food_warning"]

    def test_window_size_is_configurable(self, budgeted):
        engine = AlertEngine(settings=AlertSettings(dedup_window=2), notifier=lambda a: None)
        budgeted.ledger.record_expense(850.0, "Food")
        engine.evaluate(budgeted)
        budgeted.alerts.extend(filler(2))
        assert len(engine.evaluate(budgeted)) == 1

    def test_has_recent_alert(self, engine, account):
        account.alerts.append(Alert(kind=AlertKind.LOW_BALANCE, message="[zero_balance] x"))
        assert engine.has_recent_alert(account, "zero_balance")
        assert not engine.has_recent_alert(account, "no_income")


class TestImmediateChecks:

    def test_budget_exceeded_is_not_deduplicated(self, engine, budgeted):
        budgeted.ledger.record_expense(1100.0, "Food")
        first = engine.check_budget_exceeded(budgeted, "Food")
        second = engine.check_budget_exceeded(budgeted, "Food")
        assert first is not None and second is not None
        assert len(budgeted.alerts) == 2

    def test_immediate_check_quiets_full_pass(self, engine, budgeted):
        budgeted.ledger.record_expense(1100.0, "Food")
        engine.check_budget_exceeded(budgeted, "Food")
        assert engine.evaluate(budgeted) == []

    def test_no_budget_no_alert(self, engine, budgeted):
        budgeted.ledger.record_expense(1100.0, "Rent")
        assert engine.check_budget_exceeded(budgeted, "Rent") is None

    def test_insufficient_funds_is_not_deduplicated(self, engine, account):
        engine.insufficient_funds(account, 50.0)
        engine.insufficient_funds(account, 50.0)
        assert len(account.alerts) == 2
        assert all(a.kind == AlertKind.LOW_BALANCE for a in account.alerts)


class TestNotifier:

    def test_only_immediate_kinds_are_notified(self, engine, budgeted, notified):
        budgeted.ledger.record_expense(960.0, "Food")
        engine.evaluate(budgeted)
        assert [a.kind for a in notified] == [AlertKind.BUDGET_EXCEEDED]

    def test_low_balance_is_stored_quietly(self, engine, account, notified):
        account.ledger.record_income(400.0, "Salary")
        engine.evaluate(account)
        assert notified == []
        assert len(account.alerts) == 1


class TestReadState:

    @pytest.fixture
    def alerted(self, engine, account):
        account.ledger.record_income(400.0, "Salary")
        engine.evaluate(account)
        engine.insufficient_funds(account, 1000.0)
        return account

    def test_unread_count(self, alerted):
        assert AlertEngine.unread_count(alerted) == 2
        assert len(AlertEngine.list_unread(alerted)) == 2

    def test_list_all_is_pure(self, alerted):
        listed = AlertEngine.list_all(alerted)
        assert len(listed) == 2
        assert AlertEngine.unread_count(alerted) == 2

    def test_display_and_mark_read(self, alerted):
        snapshot = AlertEngine.display_and_mark_read(alerted)
        assert [a.read for a in snapshot] == [False, False]
        assert AlertEngine.unread_count(alerted) == 0
        assert AlertEngine.list_unread(alerted) == []

    def test_mark_all_read_counts_newly_read(self, alerted):
        alerted.alerts[0].mark_read()
        assert AlertEngine.mark_all_read(alerted) == 1
        assert AlertEngine.mark_all_read(alerted) == 0

    def test_clear(self, alerted):
        assert AlertEngine.clear(alerted) == 2
        assert alerted.alerts == []
        assert AlertEngine.unread_count(alerted) == 0

"""Shared fixtures for PocketLedger tests."""

import pytest

from pocketledger.alerts import AlertEngine
from pocketledger.audit import AuditLogger
from pocketledger.config import AlertSettings
from pocketledger.models.account import Account
from pocketledger.orchestrator import FinanceService
from pocketledger.services.storage import InMemoryAccountStorage, InMemoryAuditStorage


@pytest.fixture
def alert_settings():
    """Default thresholds, independent of the environment."""
    return AlertSettings(
        budget_warning_ratio=0.80,
        budget_critical_ratio=0.95,
        overspending_ratio=0.90,
        low_balance_warning=2000.0,
        low_balance_critical=500.0,
        large_transaction_amount=10000.0,
        dedup_window=10,
        immediate_budget_check=True,
    )


@pytest.fixture
def notified():
    """Alerts passed to the notifier, in order."""
    return []


@pytest.fixture
def engine(alert_settings, notified):
    return AlertEngine(settings=alert_settings, notifier=notified.append)


@pytest.fixture
def account():
    return Account(account_id="alice")


@pytest.fixture
def storage():
    return InMemoryAccountStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def service(engine, storage, audit_storage):
    """A logged-in service with autosave to in-memory storage."""
    service = FinanceService(
        storage=storage,
        alert_engine=engine,
        audit_logger=AuditLogger(audit_storage),
        autosave=True,
    )
    service.login("alice")
    return service

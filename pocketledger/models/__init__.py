"""
Data Models Package

This package contains all Pydantic models used by PocketLedger.
All data flowing through the system must conform to these schemas.
"""

from pocketledger.models.account import (
    Account,
    BudgetChange,
    MergeResult,
    RenameResult,
)
from pocketledger.models.alert import (
    Alert,
    AlertBuilder,
    AlertKind,
)
from pocketledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from pocketledger.models.ledger import Ledger
from pocketledger.models.record import Record, RecordKind
from pocketledger.models.report import (
    AccountOverview,
    BudgetStatus,
    CategorySummary,
    CategoryTotals,
    PeriodReport,
)

__all__ = [
    # Ledger models
    "Account",
    "Ledger",
    "Record",
    "RecordKind",
    # Results
    "BudgetChange",
    "MergeResult",
    "RenameResult",
    # Alert models
    "Alert",
    "AlertBuilder",
    "AlertKind",
    # Report models
    "AccountOverview",
    "BudgetStatus",
    "CategorySummary",
    "CategoryTotals",
    "PeriodReport",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

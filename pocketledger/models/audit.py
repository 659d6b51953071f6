"""
Audit Models for PocketLedger

Every mutation of an account is logged for audit purposes.
This provides:
1. Complete traceability of all balance changes
2. Debugging information when things go wrong
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutating account operation has its own event type.
    """
    # Ledger
    INCOME_RECORDED = "income_recorded"
    EXPENSE_RECORDED = "expense_recorded"
    EXPENSE_REJECTED = "expense_rejected"

    # Budgets
    BUDGET_SET = "budget_set"
    BUDGET_EDITED = "budget_edited"
    BUDGET_REMOVED = "budget_removed"

    # Categories
    CATEGORY_RENAMED = "category_renamed"
    CATEGORIES_MERGED = "categories_merged"

    # Alerts
    ALERT_RAISED = "alert_raised"
    ALERTS_READ = "alerts_read"
    ALERTS_CLEARED = "alerts_cleared"

    # Persistence
    ACCOUNT_SAVED = "account_saved"
    SAVE_FAILED = "save_failed"
    BACKUP_CREATED = "backup_created"

    # Session
    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which account this is about
    account_id: Optional[str] = Field(
        default=None,
        description="Account the event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "account_id": self.account_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line for an append-only JSONL file."""
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.income_recorded("alice", 2000.0, "Salary")
        event = AuditEventBuilder.alert_raised("alice", "budget_exceeded", msg)
    """

    @staticmethod
    def income_recorded(account_id: str, amount: float, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_RECORDED,
            account_id=account_id,
            description=f"Income recorded: {amount:.2f} ({category})",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_recorded(account_id: str, amount: float, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            account_id=account_id,
            description=f"Expense recorded: {amount:.2f} ({category})",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_rejected(
        account_id: str, amount: float, category: str, balance: float
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            account_id=account_id,
            description=f"Expense rejected: {amount:.2f} exceeds balance {balance:.2f}",
            details={"amount": amount, "category": category, "balance": balance},
            is_user_action=True,
        )

    @staticmethod
    def budget_changed(
        account_id: str,
        event_type: AuditEventType,
        category: str,
        old_limit: Optional[float],
        new_limit: Optional[float],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            account_id=account_id,
            description=f"Budget for '{category}': {old_limit} -> {new_limit}",
            details={
                "category": category,
                "old_limit": old_limit,
                "new_limit": new_limit,
            },
            is_user_action=True,
        )

    @staticmethod
    def category_renamed(
        account_id: str, old_category: str, new_category: str, records: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_RENAMED,
            account_id=account_id,
            description=f"Category renamed: '{old_category}' -> '{new_category}'",
            details={
                "old_category": old_category,
                "new_category": new_category,
                "renamed_records": records,
            },
            is_user_action=True,
        )

    @staticmethod
    def categories_merged(
        account_id: str, sources: list[str], new_category: str, records: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_MERGED,
            account_id=account_id,
            description=f"{len(sources)} categories merged into '{new_category}'",
            details={
                "sources": sources,
                "new_category": new_category,
                "merged_records": records,
            },
            is_user_action=True,
        )

    @staticmethod
    def alert_raised(account_id: str, kind: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALERT_RAISED,
            severity=AuditSeverity.WARNING,
            account_id=account_id,
            description=message[:500],
            details={"kind": kind},
        )

    @staticmethod
    def alerts_changed(
        account_id: str, event_type: AuditEventType, count: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            account_id=account_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {count}",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def account_saved(account_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_SAVED,
            severity=AuditSeverity.DEBUG,
            account_id=account_id,
            description="Account saved",
        )

    @staticmethod
    def save_failed(account_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            account_id=account_id,
            description="Failed to save account",
            error_message=error_message,
        )

    @staticmethod
    def backup_created(account_id: str, location: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_CREATED,
            account_id=account_id,
            description="Backup created",
            details={"location": location},
            is_user_action=True,
        )

    @staticmethod
    def session_changed(account_id: str, logged_in: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.LOGGED_IN if logged_in else AuditEventType.LOGGED_OUT
            ),
            account_id=account_id,
            description=f"User {'logged in' if logged_in else 'logged out'}",
            is_user_action=True,
        )

"""
Audit Logger

DESIGN DECISION: Every mutation of an account is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. User can see history of their interactions

The audit logger:
- Is synchronous, like the rest of the core
- Gracefully handles failures (a broken audit sink never breaks a mutation)
"""

import logging
from typing import Optional

import structlog

from pocketledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from pocketledger.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stderr at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage sink (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("pocketledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent(self, limit: int = 100, account_id: Optional[str] = None) -> list[AuditEvent]:
        """Most recent persisted events, newest first (empty without storage)."""
        if not self._storage:
            return []
        return self._storage.get_recent_events(limit=limit, account_id=account_id)

    def log_income(self, account_id: str, amount: float, category: str) -> None:
        self.log(AuditEventBuilder.income_recorded(account_id, amount, category))

    def log_expense(self, account_id: str, amount: float, category: str) -> None:
        self.log(AuditEventBuilder.expense_recorded(account_id, amount, category))

    def log_expense_rejected(
        self, account_id: str, amount: float, category: str, balance: float
    ) -> None:
        self.log(AuditEventBuilder.expense_rejected(account_id, amount, category, balance))

    def log_alert(self, account_id: str, kind: str, message: str) -> None:
        self.log(AuditEventBuilder.alert_raised(account_id, kind, message))

    def log_save_failed(self, account_id: str, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(account_id, error_message))

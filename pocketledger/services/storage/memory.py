"""
In-Memory Storage Implementation

Keeps serialized copies of accounts in a dict. Used by tests and by the
UI when no data directory is configured. Storing JSON rather than the
live object means a later mutation never leaks into the stored copy.
"""

from datetime import datetime

from pocketledger.models.account import Account
from pocketledger.models.audit import AuditEvent
from pocketledger.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    NotFoundError,
)


class InMemoryAccountStorage(AccountStorageInterface):
    """Accounts kept as JSON strings keyed by account id."""

    def __init__(self):
        self._accounts: dict[str, str] = {}
        self._backups: dict[str, str] = {}

    def load(self, account_id: str) -> Account:
        if account_id not in self._accounts:
            raise NotFoundError(f"No stored account for '{account_id}'")
        return Account.model_validate_json(self._accounts[account_id])

    def save(self, account: Account) -> bool:
        self._accounts[account.account_id] = account.model_dump_json()
        return True

    def exists(self, account_id: str) -> bool:
        return account_id in self._accounts

    def delete(self, account_id: str) -> bool:
        return self._accounts.pop(account_id, None) is not None

    def backup(self, account_id: str) -> str:
        if account_id not in self._accounts:
            raise NotFoundError(f"No stored account for '{account_id}'")
        key = f"{account_id}_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}"
        self._backups[key] = self._accounts[account_id]
        return key

    @property
    def backups(self) -> dict[str, str]:
        return dict(self._backups)


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit events kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(
        self,
        limit: int = 100,
        account_id: str | None = None,
    ) -> list[AuditEvent]:
        events = [
            event for event in reversed(self._events)
            if account_id is None or event.account_id == account_id
        ]
        return events[:limit]

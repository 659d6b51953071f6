"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON files for a real database later
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from the on-disk format

The core hands an Account to storage as a plain value; it never knows
how it is encoded.
"""

from abc import ABC, abstractmethod

from pocketledger.models.account import Account
from pocketledger.models.audit import AuditEvent


class AccountStorageInterface(ABC):
    """
    Abstract interface for account persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self, account_id: str) -> Account:
        """
        Load an account.

        Raises:
            NotFoundError: No account stored under this id
            StorageError: Stored data could not be read
        """
        pass

    @abstractmethod
    def save(self, account: Account) -> bool:
        """
        Save an account, replacing any previous version.

        Returns:
            True if saved successfully

        Raises:
            StorageWriteError: If save fails
        """
        pass

    @abstractmethod
    def exists(self, account_id: str) -> bool:
        pass

    @abstractmethod
    def delete(self, account_id: str) -> bool:
        """
        Delete a stored account.

        Returns:
            True if something was deleted
        """
        pass

    @abstractmethod
    def backup(self, account_id: str) -> str:
        """
        Copy the stored account to a timestamped backup.

        Returns:
            A description of where the backup went (path or key)

        Raises:
            NotFoundError: Nothing stored to back up
            StorageWriteError: If the copy fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        account_id: str | None = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageWriteError(StorageError):
    """Could not write to the storage backend."""
    pass

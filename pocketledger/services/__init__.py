"""Services package."""

from pocketledger.services.session import Session
from pocketledger.services.storage import (
    AccountStorageInterface,
    AuditStorageInterface,
    InMemoryAccountStorage,
    InMemoryAuditStorage,
    JsonFileAccountStorage,
    JsonLinesAuditStorage,
    NotFoundError,
    StorageError,
    StorageWriteError,
)

__all__ = [
    # Session
    "Session",
    # Storage services
    "AccountStorageInterface",
    "AuditStorageInterface",
    "InMemoryAccountStorage",
    "InMemoryAuditStorage",
    "JsonFileAccountStorage",
    "JsonLinesAuditStorage",
    "NotFoundError",
    "StorageError",
    "StorageWriteError",
]

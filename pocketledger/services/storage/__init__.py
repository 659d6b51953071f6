"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements local JSON files as the backend, but designed to be swappable.
"""

from pocketledger.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    NotFoundError,
    StorageError,
    StorageWriteError,
)
from pocketledger.services.storage.json_files import (
    JsonFileAccountStorage,
    JsonLinesAuditStorage,
    account_file_name,
)
from pocketledger.services.storage.memory import (
    InMemoryAccountStorage,
    InMemoryAuditStorage,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "AuditStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StorageWriteError",
    # JSON file implementation
    "JsonFileAccountStorage",
    "JsonLinesAuditStorage",
    "account_file_name",
    # In-memory implementation
    "InMemoryAccountStorage",
    "InMemoryAuditStorage",
]

"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local SQLite database as the backend, but designed
to be swappable.
"""

from renovation.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordStorageInterface,
    RecordT,
    StorageError,
    restore_on_error,
)
from renovation.services.storage.database import Database
from renovation.services.storage.sqlite import (
    SqliteAuditStorage,
    SqliteRecordStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStorageInterface",
    "RecordT",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Helpers
    "restore_on_error",
    # SQLite implementation
    "Database",
    "SqliteAuditStorage",
    "SqliteRecordStorage",
]

"""Services package."""

from renovation.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    Database,
    DuplicateError,
    NotFoundError,
    RecordStorageInterface,
    SqliteAuditStorage,
    SqliteRecordStorage,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "Database",
    "DuplicateError",
    "NotFoundError",
    "RecordStorageInterface",
    "SqliteAuditStorage",
    "SqliteRecordStorage",
    "StorageError",
]

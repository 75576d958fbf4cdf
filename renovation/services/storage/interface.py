"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep repositories and use cases free of SQL
2. Use an in-memory database for testing
3. Swap the local SQLite file for another backend later

The interface is intentionally generic: one set of CRUD operations works
for every record type, and filtering/sorting is described with a
RecordQuery instead of backend-specific code.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator, Iterable, Optional, TypeVar
from uuid import UUID

from renovation.models import AuditEvent, RecordQuery, RenovationRecord


RecordT = TypeVar("RecordT", bound=RenovationRecord)


class RecordStorageInterface(ABC):
    """
    Abstract interface for renovation record storage.

    Any storage implementation must implement these methods.
    Every method is a single await; the result or the error comes back
    atomically.
    """

    @abstractmethod
    async def add(self, record: RecordT) -> RecordT:
        """
        Insert a new record.

        Args:
            record: The record to insert (a Phase is inserted with its tasks)

        Returns:
            The stored record

        Raises:
            DuplicateError: If a record with the same id already exists
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def get(self, record_type: type[RecordT], record_id: UUID) -> Optional[RecordT]:
        """
        Retrieve a record by its ID.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, record: RecordT) -> RecordT:
        """
        Overwrite an existing record with the given field values.

        A Phase update also replaces its task list.

        Raises:
            NotFoundError: If the record doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete(self, record_type: type[RenovationRecord], record_id: UUID) -> bool:
        """
        Delete a record and everything it owns.

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def fetch(
        self,
        record_type: type[RecordT],
        query: Optional[RecordQuery] = None,
    ) -> list[RecordT]:
        """
        List records matching a query, in the query's sort order.

        Args:
            record_type: Which records to fetch
            query: Filters, keyword, sort and paging (None fetches all)

        Returns:
            List of matching records

        Raises:
            StorageError: If the query references unknown fields or fails
        """
        pass

    @abstractmethod
    async def count(
        self,
        record_type: type[RenovationRecord],
        query: Optional[RecordQuery] = None,
    ) -> int:
        """Number of records matching the query (sort and paging ignored)."""
        pass

    @abstractmethod
    async def save_all(
        self,
        records: Iterable[RenovationRecord],
        deletions: Iterable[tuple[type[RenovationRecord], UUID]] = (),
    ) -> None:
        """
        Insert-or-update every record and apply deletions in one transaction.

        Either all changes are committed or none are.

        Raises:
            StorageError: If any change fails (nothing is committed)
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one expense and its alerts).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
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


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not open or use the database."""
    pass


@contextmanager
def restore_on_error(*records: RenovationRecord) -> Generator[None, None, None]:
    """
    Undo in-memory changes to records if the save inside the block fails.

    Snapshots are taken on entry; on StorageError every record is put
    back and the error is re-raised.
    """
    snapshots = [(record, record.snapshot()) for record in records]
    try:
        yield
    except StorageError:
        for record, snapshot in snapshots:
            record.restore(snapshot)
        raise

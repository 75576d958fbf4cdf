"""
SQLite Storage Implementation

DESIGN DECISION: A local SQLite file is the only store because:
1. The app is single-user and works offline
2. No server to install or keep running
3. Transactions and foreign-key cascades come for free
4. The whole project is one file to back up

Records are pydantic models; tables are SQLAlchemy rows with the same
field names. Conversion happens at this boundary only:
- _record_to_columns: record -> column values (enums stored by value)
- _row_to_record: row -> record via model_validate(from_attributes)

Rows are converted while their session is still open so lazy
relationships (Phase.tasks) are loaded before the session closes.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Generator, Iterable, Optional
from uuid import UUID

from sqlalchemy import Select, String, func, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from renovation.config import get_logger
from renovation.models import (
    AuditEvent,
    Budget,
    Contact,
    Expense,
    JournalEntry,
    Material,
    Phase,
    Project,
    RecordQuery,
    RenovationRecord,
    Task,
)
from renovation.services.storage.database import CASEFOLD_FUNCTION, Database
from renovation.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordStorageInterface,
    RecordT,
    StorageError,
)
from renovation.services.storage.tables import (
    AuditEventRow,
    BudgetRow,
    ContactRow,
    ExpenseRow,
    JournalEntryRow,
    MaterialRow,
    PhaseRow,
    ProjectRow,
    RecordRow,
    TaskRow,
)


logger = get_logger("storage.sqlite")


# Record type -> table row class
ROW_CLASSES: dict[type[RenovationRecord], type[RecordRow]] = {
    Project: ProjectRow,
    Budget: BudgetRow,
    Expense: ExpenseRow,
    Phase: PhaseRow,
    Task: TaskRow,
    Material: MaterialRow,
    Contact: ContactRow,
    JournalEntry: JournalEntryRow,
}


def _column_value(value: Any) -> Any:
    """Enums are stored by value."""
    if isinstance(value, Enum):
        return value.value
    return value


def _record_to_columns(record: RenovationRecord) -> dict[str, Any]:
    """Convert a record to column values. Phase tasks are handled separately."""
    values = record.model_dump(exclude={"tasks"})
    return {name: _column_value(value) for name, value in values.items()}


@contextmanager
def _translate_errors(action: str) -> Generator[None, None, None]:
    """Wrap SQLAlchemy errors into StorageError subclasses."""
    try:
        yield
    except StorageError:
        raise
    except IntegrityError as e:
        message = str(e.orig) if e.orig else str(e)
        if "UNIQUE" in message.upper():
            raise DuplicateError(f"Failed to {action}: {message}") from e
        raise StorageError(f"Failed to {action}: {message}") from e
    except OperationalError as e:
        raise ConnectionError(f"Failed to {action}: {e.orig or e}") from e
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to {action}: {e}") from e


class SqliteRecordStorage(RecordStorageInterface):
    """
    SQLite implementation of record storage.

    One session per call; save_all uses one session for all its changes.
    """

    def __init__(self, database: Optional[Database] = None):
        self._database = database or Database()

    @property
    def database(self) -> Database:
        return self._database

    # -------------------------------------------------------------------------
    # Conversion helpers
    # -------------------------------------------------------------------------

    def _row_class(self, record_type: type[RenovationRecord]) -> type[RecordRow]:
        try:
            return ROW_CLASSES[record_type]
        except KeyError:
            raise StorageError(f"Unsupported record type: {record_type.__name__}")

    def _row_to_record(self, record_type: type[RecordT], row: RecordRow) -> RecordT:
        return record_type.model_validate(row, from_attributes=True)

    def _column(self, row_class: type[RecordRow], field: str):
        column = getattr(row_class, field, None)
        if column is None or field not in row_class.__table__.columns:
            raise StorageError(f"Unknown field for {row_class.__tablename__}: {field}")
        return column

    def _sync_tasks(self, row: PhaseRow, tasks: list[Task]) -> None:
        """Make the phase's task rows match the given task list."""
        existing = {task_row.id: task_row for task_row in row.tasks}
        task_rows = []
        for task in tasks:
            task_row = existing.pop(task.id, None) or TaskRow(id=task.id)
            for name, value in _record_to_columns(task).items():
                if name in ("id", "phase_id"):
                    continue
                setattr(task_row, name, value)
            task_rows.append(task_row)
        # Rows left in `existing` are orphaned and deleted on flush
        row.tasks = task_rows

    def _insert(self, session: Session, record: RenovationRecord) -> None:
        row_class = self._row_class(type(record))
        if session.get(row_class, record.id) is not None:
            raise DuplicateError(f"{type(record).__name__} already exists: {record.id}")
        row = row_class(**_record_to_columns(record))
        if isinstance(record, Phase):
            self._sync_tasks(row, record.tasks)
        session.add(row)

    def _apply_update(self, session: Session, record: RenovationRecord) -> None:
        row_class = self._row_class(type(record))
        row = session.get(row_class, record.id)
        if row is None:
            raise NotFoundError(f"{type(record).__name__} not found: {record.id}")
        for name, value in _record_to_columns(record).items():
            if name == "id":
                continue
            setattr(row, name, value)
        if isinstance(record, Phase):
            self._sync_tasks(row, record.tasks)

    def _build_select(self, row_class: type[RecordRow], query: RecordQuery) -> Select:
        stmt = select(row_class)

        for field, value in query.filters.items():
            stmt = stmt.where(self._column(row_class, field) == _column_value(value))

        if query.date_from or query.date_to:
            date_column = self._column(row_class, query.date_field)
            if query.date_from:
                stmt = stmt.where(date_column >= query.date_from)
            if query.date_to:
                stmt = stmt.where(date_column <= query.date_to)

        if query.has_keyword:
            keyword = query.keyword.strip().casefold()
            casefold = getattr(func, CASEFOLD_FUNCTION)
            stmt = stmt.where(or_(*[
                casefold(self._column(row_class, field), type_=String).contains(keyword, autoescape=True)
                for field in query.keyword_fields
            ]))

        return stmt

    # -------------------------------------------------------------------------
    # RecordStorageInterface
    # -------------------------------------------------------------------------

    async def add(self, record: RecordT) -> RecordT:
        """Insert a new record."""
        with _translate_errors(f"save {type(record).__name__.lower()}"):
            with self._database.session_scope() as session:
                self._insert(session, record)
        logger.debug("record_added", record_type=type(record).__name__, record_id=str(record.id))
        return record

    async def get(self, record_type: type[RecordT], record_id: UUID) -> Optional[RecordT]:
        """Retrieve a record by its ID."""
        row_class = self._row_class(record_type)
        with _translate_errors(f"load {record_type.__name__.lower()}"):
            with self._database.session_scope() as session:
                row = session.get(row_class, record_id)
                if row is None:
                    return None
                return self._row_to_record(record_type, row)

    async def update(self, record: RecordT) -> RecordT:
        """Update an existing record."""
        with _translate_errors(f"update {type(record).__name__.lower()}"):
            with self._database.session_scope() as session:
                self._apply_update(session, record)
        logger.debug("record_updated", record_type=type(record).__name__, record_id=str(record.id))
        return record

    async def delete(self, record_type: type[RenovationRecord], record_id: UUID) -> bool:
        """Delete a record by ID. Owned records go with it."""
        row_class = self._row_class(record_type)
        with _translate_errors(f"delete {record_type.__name__.lower()}"):
            with self._database.session_scope() as session:
                row = session.get(row_class, record_id)
                if row is None:
                    return False
                session.delete(row)
        logger.debug("record_deleted", record_type=record_type.__name__, record_id=str(record_id))
        return True

    async def fetch(
        self,
        record_type: type[RecordT],
        query: Optional[RecordQuery] = None,
    ) -> list[RecordT]:
        """List records with filters, keyword, sort and paging."""
        query = query or RecordQuery()
        row_class = self._row_class(record_type)

        with _translate_errors(f"fetch {record_type.__name__.lower()} records"):
            stmt = self._build_select(row_class, query)
            for key in query.sort:
                column = self._column(row_class, key.field)
                stmt = stmt.order_by(column.desc() if key.descending else column.asc())
            if query.offset:
                stmt = stmt.offset(query.offset)
            if query.limit is not None:
                stmt = stmt.limit(query.limit)

            with self._database.session_scope() as session:
                rows = session.scalars(stmt).all()
                return [self._row_to_record(record_type, row) for row in rows]

    async def count(
        self,
        record_type: type[RenovationRecord],
        query: Optional[RecordQuery] = None,
    ) -> int:
        query = query or RecordQuery()
        row_class = self._row_class(record_type)

        with _translate_errors(f"count {record_type.__name__.lower()} records"):
            stmt = select(func.count()).select_from(
                self._build_select(row_class, query).subquery()
            )
            with self._database.session_scope() as session:
                return session.scalar(stmt) or 0

    async def save_all(
        self,
        records: Iterable[RenovationRecord],
        deletions: Iterable[tuple[type[RenovationRecord], UUID]] = (),
    ) -> None:
        """Insert-or-update and delete in a single transaction."""
        records = list(records)
        deletions = list(deletions)

        with _translate_errors("save changes"):
            with self._database.session_scope() as session:
                for record in records:
                    row_class = self._row_class(type(record))
                    if session.get(row_class, record.id) is None:
                        self._insert(session, record)
                    else:
                        self._apply_update(session, record)
                    # Later records may depend on earlier ones (e.g. budget after project)
                    session.flush()
                for record_type, record_id in deletions:
                    row = session.get(self._row_class(record_type), record_id)
                    if row is not None:
                        session.delete(row)

        logger.debug("records_saved", saved=len(records), deleted=len(deletions))


class SqliteAuditStorage(AuditStorageInterface):
    """
    SQLite implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, database: Optional[Database] = None):
        self._database = database or Database()

    def _event_to_row(self, event: AuditEvent) -> AuditEventRow:
        return AuditEventRow(
            event_id=event.event_id,
            timestamp=event.timestamp,
            event_type=event.event_type.value,
            severity=event.severity.value,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            correlation_id=event.correlation_id,
            description=event.description,
            details=event.model_dump(mode="json")["details"],
            error_message=event.error_message,
            is_user_action=event.is_user_action,
        )

    def _row_to_event(self, row: AuditEventRow) -> AuditEvent:
        return AuditEvent.model_validate(row, from_attributes=True)

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            with self._database.session_scope() as session:
                session.add(self._event_to_row(event))
            return True
        except SQLAlchemyError as e:
            # Audit persistence must not break the main flow
            logger.warning("audit_append_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def _select_events(self, stmt) -> list[AuditEvent]:
        with _translate_errors("get audit events"):
            with self._database.session_scope() as session:
                return [self._row_to_event(row) for row in session.scalars(stmt).all()]

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID, oldest first."""
        stmt = (
            select(AuditEventRow)
            .where(AuditEventRow.correlation_id == correlation_id)
            .order_by(AuditEventRow.timestamp)
        )
        return await self._select_events(stmt)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by entity, oldest first."""
        stmt = (
            select(AuditEventRow)
            .where(
                AuditEventRow.entity_type == entity_type,
                AuditEventRow.entity_id == entity_id,
            )
            .order_by(AuditEventRow.timestamp)
        )
        return await self._select_events(stmt)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events, newest first."""
        stmt = (
            select(AuditEventRow)
            .order_by(AuditEventRow.timestamp.desc())
            .limit(limit)
        )
        return await self._select_events(stmt)

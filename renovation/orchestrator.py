"""
Component wiring for the Renovation Planner

This module builds the object graph once: database, storage, audit
logger, repositories, use cases and the session. Screens receive the
pieces they need from here; nothing reaches for a global.

DESIGN DECISION: Audit events share the record database. When the
database cannot be opened the app does not start, because without a
store there is nothing to show.
"""

from typing import Optional

from renovation.audit import AuditLogger
from renovation.config import configure_logging, get_logger
from renovation.notifications import LoggingNotificationSink
from renovation.repositories import (
    BudgetRepository,
    ContactRepository,
    ExpenseRepository,
    JournalRepository,
    MaterialRepository,
    ProjectRepository,
    ScheduleRepository,
)
from renovation.services.storage import Database, SqliteAuditStorage, SqliteRecordStorage
from renovation.session import AppSession
from renovation.use_cases import RecordExpenseUseCase, UpdateTaskStatusUseCase


logger = get_logger("orchestrator")


class AppComponents:
    """Everything the UI needs, wired against one database."""

    def __init__(self, database: Database, session: AppSession):
        self.database = database
        self.session = session

        self.storage = SqliteRecordStorage(database)
        self.audit_logger = AuditLogger(SqliteAuditStorage(database))
        self.notifications = LoggingNotificationSink(self.audit_logger)

        self.projects = ProjectRepository(self.storage, self.audit_logger)
        self.budgets = BudgetRepository(self.storage, self.audit_logger)
        self.expenses = ExpenseRepository(self.storage)
        self.schedule = ScheduleRepository(self.storage)
        self.materials = MaterialRepository(self.storage)
        self.contacts = ContactRepository(self.storage)
        self.journal = JournalRepository(self.storage)

        self.record_expense = RecordExpenseUseCase(
            expense_repository=self.expenses,
            budget_repository=self.budgets,
            notification_sink=self.notifications,
            audit_logger=self.audit_logger,
        )
        self.update_task_status = UpdateTaskStatusUseCase(
            schedule_repository=self.schedule,
            audit_logger=self.audit_logger,
        )


def create_app_components(
    database_url: Optional[str] = None,
    state_path: Optional[str] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        database_url: SQLAlchemy URL; defaults to the configured one
        state_path: Session state file; defaults to the configured one

    Returns:
        AppComponents with tables created and the session loaded
    """
    configure_logging()

    database = Database(url=database_url)
    database.create_tables()

    session = AppSession(state_path)
    session.load()

    logger.info("app_components_created", database_url=database.url)
    return AppComponents(database, session)

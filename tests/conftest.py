"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database with all tables
created. Async code is driven with asyncio.run through the `run` helper.
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from renovation.audit import AuditLogger
from renovation.models import Budget, Phase, PhaseType, Project, Task
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
from renovation.services.storage import (
    Database,
    SqliteAuditStorage,
    SqliteRecordStorage,
    StorageError,
)
from renovation.session import AppSession
from renovation.use_cases import RecordExpenseUseCase, UpdateTaskStatusUseCase


TODAY = date(2024, 6, 15)


def run(coro):
    """Run a coroutine to completion."""
    return asyncio.run(coro)


class FlakyStorage(SqliteRecordStorage):
    """Record storage whose writes fail while `failing` is set."""

    def __init__(self, database):
        super().__init__(database)
        self.failing = False

    def _check(self):
        if self.failing:
            raise StorageError("Failed to save changes: database is locked")

    async def update(self, record):
        self._check()
        return await super().update(record)

    async def save_all(self, records, deletions=()):
        self._check()
        return await super().save_all(records, deletions)


@pytest.fixture
def database():
    db = Database.in_memory()
    yield db
    db.dispose()


@pytest.fixture
def storage(database):
    return SqliteRecordStorage(database)


@pytest.fixture
def flaky_storage(database):
    return FlakyStorage(database)


@pytest.fixture
def audit_storage(database):
    return SqliteAuditStorage(database)


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def sink(audit_logger):
    return LoggingNotificationSink(audit_logger)


@pytest.fixture
def project_repo(storage, audit_logger):
    return ProjectRepository(storage, audit_logger)


@pytest.fixture
def budget_repo(storage, audit_logger):
    return BudgetRepository(storage, audit_logger)


@pytest.fixture
def expense_repo(storage):
    return ExpenseRepository(storage)


@pytest.fixture
def schedule_repo(storage):
    return ScheduleRepository(storage)


@pytest.fixture
def material_repo(storage):
    return MaterialRepository(storage)


@pytest.fixture
def contact_repo(storage):
    return ContactRepository(storage)


@pytest.fixture
def journal_repo(storage):
    return JournalRepository(storage)


@pytest.fixture
def record_expense(expense_repo, budget_repo, sink, audit_logger):
    return RecordExpenseUseCase(
        expense_repository=expense_repo,
        budget_repository=budget_repo,
        notification_sink=sink,
        audit_logger=audit_logger,
    )


@pytest.fixture
def update_task_status(schedule_repo, audit_logger):
    return UpdateTaskStatusUseCase(schedule_repo, audit_logger)


@pytest.fixture
def session(tmp_path):
    return AppSession(tmp_path / "session.json")


@pytest.fixture
def project(project_repo):
    """A stored project started 30 days before TODAY."""
    project = Project(
        name="Riverside flat",
        house_type="2 bedrooms",
        area=85,
        start_date=TODAY - timedelta(days=30),
        estimated_duration=90,
    )
    run(project_repo.create(project, Decimal("10000")))
    return project


@pytest.fixture
def budget(budget_repo, project) -> Budget:
    return run(budget_repo.fetch_budget(project))


@pytest.fixture
def phase(schedule_repo, project) -> Phase:
    """A stored phase with three pending tasks."""
    phase = Phase(
        project_id=project.id,
        title="Plumbing",
        phase_type=PhaseType.PLUMBING,
        planned_start_date=TODAY - timedelta(days=5),
        planned_end_date=TODAY + timedelta(days=5),
    )
    for title in ("Water pipes", "Wiring", "Pressure test"):
        phase.add_task(Task(title=title))
    return run(schedule_repo.create_phase(phase))

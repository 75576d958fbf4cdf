"""
Data Models Package

This package contains all Pydantic models used in the Renovation Planner.
All records read from or written to the store must conform to these schemas.
"""

from renovation.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from renovation.models.base import RenovationRecord, utcnow
from renovation.models.enums import (
    ContactRole,
    ExpenseCategory,
    MaterialStatus,
    ParentCategory,
    PaymentType,
    PhaseType,
    TaskStatus,
)
from renovation.models.project import (
    Budget,
    Contact,
    Expense,
    JournalEntry,
    Material,
    Phase,
    Project,
    Task,
)
from renovation.models.query import RecordQuery, SortKey
from renovation.models.statistics import (
    BudgetStatistics,
    CategoryStatistic,
    MonthGroup,
    TaskStatusSummary,
)

__all__ = [
    # Records
    "Budget",
    "Contact",
    "Expense",
    "JournalEntry",
    "Material",
    "Phase",
    "Project",
    "RenovationRecord",
    "Task",
    "utcnow",
    # Enums
    "ContactRole",
    "ExpenseCategory",
    "MaterialStatus",
    "ParentCategory",
    "PaymentType",
    "PhaseType",
    "TaskStatus",
    # Queries
    "RecordQuery",
    "SortKey",
    # Statistics
    "BudgetStatistics",
    "CategoryStatistic",
    "MonthGroup",
    "TaskStatusSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""Repositories: domain-level access to the record store."""

from renovation.repositories.budget import BudgetRepository
from renovation.repositories.expense import ExpenseRepository, ExpenseSortOption
from renovation.repositories.project import ProjectRepository, ProjectSortOrder
from renovation.repositories.records import (
    ContactRepository,
    JournalRepository,
    MaterialRepository,
    ProjectRecordRepository,
)
from renovation.repositories.schedule import ScheduleRepository

__all__ = [
    "BudgetRepository",
    "ContactRepository",
    "ExpenseRepository",
    "ExpenseSortOption",
    "JournalRepository",
    "MaterialRepository",
    "ProjectRecordRepository",
    "ProjectRepository",
    "ProjectSortOrder",
    "ScheduleRepository",
]

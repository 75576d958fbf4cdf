"""Use cases: multi-step operations with validation, audit and alerts."""

from renovation.use_cases.record_expense import RecordExpenseUseCase
from renovation.use_cases.update_task_status import TOGGLE_NEXT, UpdateTaskStatusUseCase

__all__ = [
    "RecordExpenseUseCase",
    "TOGGLE_NEXT",
    "UpdateTaskStatusUseCase",
]

"""Derived statistics computed from fetched records."""

from renovation.statistics.budget import (
    compute_budget_statistics,
    compute_category_statistics,
    compute_parent_category_totals,
    group_expenses_by_month,
    sort_category_statistics,
    total_expenses,
    usage_fraction,
)
from renovation.statistics.schedule import (
    overdue_tasks,
    sort_tasks_by_status,
    summarize_tasks,
)

__all__ = [
    "compute_budget_statistics",
    "compute_category_statistics",
    "compute_parent_category_totals",
    "group_expenses_by_month",
    "overdue_tasks",
    "sort_category_statistics",
    "sort_tasks_by_status",
    "summarize_tasks",
    "total_expenses",
    "usage_fraction",
]

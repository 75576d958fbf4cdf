"""Task status aggregation."""

from datetime import date
from typing import Optional

from renovation.models import Task, TaskStatus, TaskStatusSummary


def summarize_tasks(tasks: list[Task]) -> TaskStatusSummary:
    """Count tasks per status. Works on any list, persisted or not."""
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1

    return TaskStatusSummary(
        total=len(tasks),
        pending=counts[TaskStatus.PENDING],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        completed=counts[TaskStatus.COMPLETED],
        issue=counts[TaskStatus.ISSUE],
        cancelled=counts[TaskStatus.CANCELLED],
    )


def sort_tasks_by_status(tasks: list[Task]) -> list[Task]:
    """issue < in_progress < pending < completed < cancelled, stable."""
    return sorted(tasks, key=lambda t: t.status.sort_priority)


def overdue_tasks(tasks: list[Task], today: Optional[date] = None) -> list[Task]:
    return [t for t in tasks if t.is_overdue(today)]

"""
Update Task Status Use Case

Every status change goes through here so that the phase is re-derived
from its tasks and both are written in one transaction.
"""

from datetime import date
from typing import Callable, Optional

from renovation.audit import AuditLogger
from renovation.config import get_logger
from renovation.models import Phase, Task, TaskStatus
from renovation.repositories import ScheduleRepository
from renovation.services.storage import StorageError, restore_on_error


logger = get_logger("use_cases.update_task_status")

# Next status when a task is tapped in the checklist
TOGGLE_NEXT = {
    TaskStatus.PENDING: TaskStatus.IN_PROGRESS,
    TaskStatus.IN_PROGRESS: TaskStatus.COMPLETED,
    TaskStatus.COMPLETED: TaskStatus.PENDING,
    TaskStatus.ISSUE: TaskStatus.PENDING,
    TaskStatus.CANCELLED: TaskStatus.PENDING,
}


class UpdateTaskStatusUseCase:
    """Applies task transitions and saves the task with its phase."""

    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._schedule = schedule_repository
        self._audit = audit_logger or AuditLogger()

    async def _apply(self, phase: Phase, task: Task, transition: Callable[[Task], None]) -> Task:
        old_status = task.status
        was_completed = phase.is_completed

        try:
            with restore_on_error(phase, task):
                transition(task)
                phase.replace_task(task)
                await self._schedule.save_phase_with_tasks(phase)
        except StorageError as e:
            await self._audit.log_save_failed("task", task.id, str(e))
            raise

        if task.status is not old_status:
            await self._audit.log_task_status_changed(task, old_status.value)
        if phase.is_completed != was_completed:
            await self._audit.log_phase_status_changed(phase.id, phase.title, phase.is_completed)

        logger.info(
            "task_status_updated",
            task_id=str(task.id),
            phase_id=str(phase.id),
            old_status=old_status.value,
            new_status=task.status.value,
            phase_completed=phase.is_completed,
        )
        return task

    async def start(self, phase: Phase, task: Task) -> Task:
        return await self._apply(phase, task, Task.start)

    async def complete(self, phase: Phase, task: Task, at: Optional[date] = None) -> Task:
        return await self._apply(phase, task, lambda t: t.complete(at))

    async def reset(self, phase: Phase, task: Task) -> Task:
        return await self._apply(phase, task, Task.reset)

    async def mark_as_issue(self, phase: Phase, task: Task) -> Task:
        return await self._apply(phase, task, Task.mark_as_issue)

    async def cancel(self, phase: Phase, task: Task) -> Task:
        return await self._apply(phase, task, Task.cancel)

    async def toggle(self, phase: Phase, task: Task) -> Task:
        """Cycle pending -> in progress -> completed -> pending."""
        target = TOGGLE_NEXT[task.status]
        if target is TaskStatus.IN_PROGRESS:
            return await self.start(phase, task)
        if target is TaskStatus.COMPLETED:
            return await self.complete(phase, task)
        return await self.reset(phase, task)

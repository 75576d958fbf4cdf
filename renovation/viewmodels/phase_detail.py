"""Task checklist of one phase."""

from datetime import date
from typing import Optional

from renovation.models import Phase, Task, TaskStatus, TaskStatusSummary
from renovation.repositories import ScheduleRepository
from renovation.statistics import overdue_tasks, sort_tasks_by_status, summarize_tasks
from renovation.use_cases import UpdateTaskStatusUseCase
from renovation.viewmodels.base import BaseViewModel


class PhaseDetailViewModel(BaseViewModel):
    """Filters, status buckets and task actions for a phase."""

    def __init__(
        self,
        phase: Phase,
        schedule_repository: ScheduleRepository,
        update_task_status: UpdateTaskStatusUseCase,
    ):
        super().__init__()
        self.phase = phase
        self._schedule = schedule_repository
        self._update_status = update_task_status

        self.search_text = ""
        self.selected_status: Optional[TaskStatus] = None

    @property
    def tasks(self) -> list[Task]:
        return self.phase.tasks

    async def reload(self) -> None:
        """Re-read the phase and its tasks from the store."""
        phase = await self._run("load tasks", self._schedule.fetch_phase(self.phase.id))
        if phase is not None:
            self.phase = phase

    # -------------------------------------------------------------------------
    # Views of the task list
    # -------------------------------------------------------------------------

    @property
    def filtered_tasks(self) -> list[Task]:
        """Tasks matching the status filter and search text, issues first."""
        result = self.tasks
        if self.selected_status is not None:
            result = [t for t in result if t.status is self.selected_status]

        needle = self.search_text.strip().casefold()
        if needle:
            result = [
                t for t in result
                if needle in t.title.casefold()
                or needle in t.description.casefold()
                or needle in t.assignee.casefold()
            ]
        return sort_tasks_by_status(result)

    def tasks_with_status(self, status: TaskStatus) -> list[Task]:
        return [t for t in self.tasks if t.status is status]

    @property
    def pending_tasks(self) -> list[Task]:
        return self.tasks_with_status(TaskStatus.PENDING)

    @property
    def in_progress_tasks(self) -> list[Task]:
        return self.tasks_with_status(TaskStatus.IN_PROGRESS)

    @property
    def completed_tasks(self) -> list[Task]:
        return self.tasks_with_status(TaskStatus.COMPLETED)

    @property
    def issue_tasks(self) -> list[Task]:
        return self.tasks_with_status(TaskStatus.ISSUE)

    def overdue_tasks(self, today: Optional[date] = None) -> list[Task]:
        return overdue_tasks(self.tasks, today)

    @property
    def status_summary(self) -> TaskStatusSummary:
        return summarize_tasks(self.tasks)

    @property
    def task_progress(self) -> float:
        return self.status_summary.progress

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def toggle_task(self, task: Task) -> None:
        await self._run("update task status", self._update_status.toggle(self.phase, task))

    async def mark_task_as_issue(self, task: Task) -> None:
        await self._run("update task status", self._update_status.mark_as_issue(self.phase, task))

    async def add_task(self, title: str, description: str = "", assignee: str = "") -> Optional[Task]:
        async def _add() -> Task:
            task = Task(title=title, description=description, assignee=assignee)
            await self._schedule.add_task(self.phase, task)
            return task

        return await self._run("add task", _add())

    async def delete_task(self, task: Task) -> None:
        await self._run("delete task", self._schedule.remove_task(self.phase, task))

    async def start_phase(self, at: Optional[date] = None) -> None:
        self.phase.start(at)
        await self._run("start phase", self._schedule.update_phase(self.phase))

    async def complete_phase(self, at: Optional[date] = None) -> None:
        """Complete the phase and all its tasks, starting it if needed."""
        at = at or date.today()
        self.phase.start(at)
        self.phase.complete(at)
        await self._run("complete phase", self._schedule.update_phase(self.phase))

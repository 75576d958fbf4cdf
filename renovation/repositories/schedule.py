"""
Schedule Repository

Phases are always loaded and saved together with their tasks. Every
task mutation goes through the phase: the task list is changed, the
phase re-derives its status, and phase plus tasks are written in one
transaction.
"""

from datetime import timedelta
from typing import Optional
from uuid import UUID

from renovation.config import get_logger
from renovation.models import Phase, PhaseType, Project, RecordQuery, SortKey, Task
from renovation.services.storage import RecordStorageInterface, restore_on_error


logger = get_logger("repositories.schedule")

PHASE_SORT = [SortKey.asc("sort_order"), SortKey.asc("created_at")]


class ScheduleRepository:
    """Phases and their tasks for a project."""

    def __init__(self, storage: RecordStorageInterface):
        self._storage = storage

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    async def fetch_phases(self, project: Project) -> list[Phase]:
        """All phases of a project in sort order, tasks included."""
        query = RecordQuery(filters={"project_id": project.id}, sort=PHASE_SORT)
        return await self._storage.fetch(Phase, query)

    async def fetch_phase(self, phase_id: UUID) -> Optional[Phase]:
        return await self._storage.get(Phase, phase_id)

    async def create_phase(self, phase: Phase) -> Phase:
        phase.sync_status_from_tasks()
        await self._storage.add(phase)
        logger.info("phase_created", phase_id=str(phase.id), title=phase.title)
        return phase

    async def update_phase(self, phase: Phase) -> Phase:
        phase.touch()
        await self._storage.update(phase)
        return phase

    async def delete_phase(self, phase: Phase) -> bool:
        """Delete a phase and its tasks."""
        return await self._storage.delete(Phase, phase.id)

    async def create_default_phases(self, project: Project) -> list[Phase]:
        """
        Lay out the standard phases back to back from the project start.

        Each phase gets its type's default duration.
        """
        phases = []
        start = project.start_date
        standard_types = [t for t in PhaseType if t is not PhaseType.CUSTOM]
        for order, phase_type in enumerate(standard_types):
            end = start + timedelta(days=phase_type.default_duration_days)
            phases.append(Phase(
                project_id=project.id,
                title=phase_type.display_name,
                phase_type=phase_type,
                sort_order=order,
                planned_start_date=start,
                planned_end_date=end,
            ))
            start = end
        await self._storage.save_all(phases)
        logger.info("default_phases_created", project_id=str(project.id), count=len(phases))
        return phases

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def save_phase_with_tasks(self, phase: Phase) -> Phase:
        """
        Re-derive the phase status and save phase and tasks atomically.

        If the save fails the phase is rolled back to its state on entry.
        """
        with restore_on_error(phase):
            phase.sync_status_from_tasks()
            await self._storage.save_all([phase])
        return phase

    async def add_task(self, phase: Phase, task: Task) -> Phase:
        with restore_on_error(phase, task):
            phase.add_task(task)
            await self.save_phase_with_tasks(phase)
        logger.info("task_added", phase_id=str(phase.id), task_id=str(task.id))
        return phase

    async def update_task(self, phase: Phase, task: Task) -> Phase:
        with restore_on_error(phase, task):
            task.touch()
            phase.replace_task(task)
            await self.save_phase_with_tasks(phase)
        return phase

    async def remove_task(self, phase: Phase, task: Task) -> Phase:
        with restore_on_error(phase):
            phase.remove_task(task.id)
            await self.save_phase_with_tasks(phase)
        logger.info("task_removed", phase_id=str(phase.id), task_id=str(task.id))
        return phase

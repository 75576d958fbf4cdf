"""
Project Repository

A project and its budget are created together in one transaction, so
there is never a project without a budget. Deleting a project removes
everything it owns.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from renovation.audit import AuditLogger
from renovation.config import get_logger, get_settings
from renovation.models import Budget, Project, RecordQuery, SortKey
from renovation.services.storage import RecordStorageInterface


logger = get_logger("repositories.project")


class ProjectSortOrder(str, Enum):
    """Sort orders offered in the project list."""
    UPDATED_DATE = "updated_date"
    START_DATE = "start_date"
    NAME = "name"
    PROGRESS = "progress"
    AREA = "area"

    @property
    def display_name(self) -> str:
        return {
            ProjectSortOrder.UPDATED_DATE: "Recently updated",
            ProjectSortOrder.START_DATE: "Start date",
            ProjectSortOrder.NAME: "Name",
            ProjectSortOrder.PROGRESS: "Progress",
            ProjectSortOrder.AREA: "Floor area",
        }[self]

    @property
    def sort_keys(self) -> list[SortKey]:
        """
        Store-level ordering.

        Progress depends on phases, so PROGRESS falls back to recently
        updated here and is re-sorted by the project list.
        """
        return {
            ProjectSortOrder.UPDATED_DATE: [SortKey.desc("updated_at")],
            ProjectSortOrder.START_DATE: [SortKey.desc("start_date")],
            ProjectSortOrder.NAME: [SortKey.asc("name")],
            ProjectSortOrder.PROGRESS: [SortKey.desc("updated_at")],
            ProjectSortOrder.AREA: [SortKey.desc("area")],
        }[self]


class ProjectRepository:
    """CRUD for projects. Creation and deletion are audited."""

    def __init__(
        self,
        storage: RecordStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._settings = get_settings().budget

    async def create(
        self,
        project: Project,
        total_budget: Decimal = Decimal("0"),
        warning_threshold: Optional[float] = None,
    ) -> Budget:
        """
        Store a new project together with its budget.

        Args:
            project: The project to create
            total_budget: Initial budget total
            warning_threshold: Defaults to the configured threshold

        Returns:
            The project's budget
        """
        if warning_threshold is None:
            warning_threshold = self._settings.default_warning_threshold
        budget = Budget(
            project_id=project.id,
            total_amount=total_budget,
            warning_threshold=warning_threshold,
        )
        await self._storage.save_all([project, budget])
        logger.info(
            "project_created",
            project_id=str(project.id),
            name=project.name,
            total_budget=str(total_budget),
        )
        await self._audit.log_project_created(project.id, project.name, str(total_budget))
        return budget

    async def fetch(self, project_id: UUID) -> Optional[Project]:
        return await self._storage.get(Project, project_id)

    async def fetch_all(
        self,
        sort_by: ProjectSortOrder = ProjectSortOrder.UPDATED_DATE,
    ) -> list[Project]:
        return await self._storage.fetch(Project, RecordQuery(sort=sort_by.sort_keys))

    async def update(self, project: Project) -> Project:
        project.touch()
        await self._storage.update(project)
        return project

    async def delete(self, project: Project) -> bool:
        """Delete the project and everything it owns."""
        deleted = await self._storage.delete(Project, project.id)
        logger.info("project_deleted", project_id=str(project.id), deleted=deleted)
        if deleted:
            await self._audit.log_project_deleted(project.id, project.name)
        return deleted

    async def set_active(self, project: Project, is_active: bool = True) -> Project:
        project.is_active = is_active
        return await self.update(project)

    async def duplicate(self, project: Project, today: Optional[date] = None) -> Project:
        """
        Copy a project's details into a new active project starting today.

        The budget total and threshold are copied; expenses, phases and
        other records are not.
        """
        copy = Project(
            name=f"{project.name} - copy"[:100],
            house_type=project.house_type,
            area=project.area,
            start_date=today or date.today(),
            estimated_duration=project.estimated_duration,
            notes=project.notes,
            cover_image=project.cover_image,
            is_active=True,
        )

        budgets = await self._storage.fetch(
            Budget, RecordQuery(filters={"project_id": project.id}, limit=1)
        )
        if budgets:
            await self.create(copy, budgets[0].total_amount, budgets[0].warning_threshold)
        else:
            await self.create(copy)
        return copy

"""Project list with filters, sorting and aggregate counts."""

from datetime import date
from enum import Enum
from typing import Optional

from renovation.models import Phase, Project
from renovation.repositories import ProjectRepository, ProjectSortOrder, ScheduleRepository
from renovation.session import AppSession
from renovation.viewmodels.base import BaseViewModel


class ProjectFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    DELAYED = "delayed"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ProjectListViewModel(BaseViewModel):
    """
    All projects plus the phases needed for progress and delay.

    "Active" means flagged active and not fully complete; "completed"
    means every enabled phase is done.
    """

    def __init__(
        self,
        project_repository: ProjectRepository,
        schedule_repository: ScheduleRepository,
        session: AppSession,
    ):
        super().__init__()
        self._projects = project_repository
        self._schedule = schedule_repository
        self.session = session

        self.projects: list[Project] = []
        self._phases: dict = {}
        self.search_text = ""
        self.selected_filter = ProjectFilter.ALL
        self.sort_order = ProjectSortOrder.UPDATED_DATE
        self.today: Optional[date] = None

    async def _load(self) -> None:
        projects = await self._projects.fetch_all(ProjectSortOrder.UPDATED_DATE)
        phases = {}
        for project in projects:
            phases[project.id] = await self._schedule.fetch_phases(project)
        self.projects = projects
        self._phases = phases
        self.session.auto_select(projects)

    async def load(self) -> None:
        self.is_loading = True
        await self._run("load projects", self._load())
        self.is_loading = False

    # -------------------------------------------------------------------------
    # Per-project values
    # -------------------------------------------------------------------------

    def phases_for(self, project: Project) -> list[Phase]:
        return self._phases.get(project.id, [])

    def progress(self, project: Project) -> float:
        return Project.overall_progress(self.phases_for(project))

    def is_delayed(self, project: Project) -> bool:
        return project.is_delayed(self.phases_for(project), self.today)

    def is_selected(self, project: Project) -> bool:
        return self.session.selected_project_id == project.id

    # -------------------------------------------------------------------------
    # List views
    # -------------------------------------------------------------------------

    def _matches_filter(self, project: Project, project_filter: ProjectFilter) -> bool:
        if project_filter is ProjectFilter.ACTIVE:
            return project.is_active and self.progress(project) < 1.0
        if project_filter is ProjectFilter.COMPLETED:
            return self.progress(project) >= 1.0
        if project_filter is ProjectFilter.DELAYED:
            return self.is_delayed(project)
        return True

    def _sorted(self, projects: list[Project]) -> list[Project]:
        order = self.sort_order
        if order is ProjectSortOrder.NAME:
            return sorted(projects, key=lambda p: p.name)
        if order is ProjectSortOrder.START_DATE:
            return sorted(projects, key=lambda p: p.start_date, reverse=True)
        if order is ProjectSortOrder.PROGRESS:
            return sorted(projects, key=self.progress, reverse=True)
        if order is ProjectSortOrder.AREA:
            return sorted(projects, key=lambda p: p.area, reverse=True)
        return sorted(projects, key=lambda p: p.updated_at, reverse=True)

    @property
    def filtered_projects(self) -> list[Project]:
        result = [p for p in self.projects if self._matches_filter(p, self.selected_filter)]

        needle = self.search_text.strip().casefold()
        if needle:
            result = [
                p for p in result
                if needle in p.name.casefold()
                or needle in p.house_type.casefold()
                or needle in p.notes.casefold()
            ]
        return self._sorted(result)

    @property
    def has_projects(self) -> bool:
        return bool(self.projects)

    @property
    def total_projects(self) -> int:
        return len(self.projects)

    def count(self, project_filter: ProjectFilter) -> int:
        return sum(1 for p in self.projects if self._matches_filter(p, project_filter))

    @property
    def total_active_projects(self) -> int:
        return self.count(ProjectFilter.ACTIVE)

    @property
    def total_completed_projects(self) -> int:
        return self.count(ProjectFilter.COMPLETED)

    @property
    def total_delayed_projects(self) -> int:
        return self.count(ProjectFilter.DELAYED)

    @property
    def average_progress(self) -> float:
        if not self.projects:
            return 0.0
        return sum(self.progress(p) for p in self.projects) / len(self.projects)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def select(self, project: Project) -> None:
        self.session.select(project)

    async def delete(self, project: Project) -> bool:
        deleted = await self._run("delete project", self._projects.delete(project))
        if self.error_message:
            return False
        await self.load()
        return bool(deleted)

    async def toggle_active(self, project: Project) -> None:
        await self._run(
            "update project",
            self._projects.set_active(project, not project.is_active),
        )
        if not self.error_message:
            await self.load()

    async def duplicate(self, project: Project) -> Optional[Project]:
        copy = await self._run("duplicate project", self._projects.duplicate(project))
        if copy is not None:
            await self.load()
        return copy

"""
Application Session

Remembers which project the user is working on, across restarts.

DESIGN DECISION: The session is a plain object created once by the app
and handed to whatever needs the current project. There is no global
instance. The selected project id is written to a small JSON file every
time it changes; a missing or unreadable file means "nothing selected".
"""

from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError

from renovation.config import get_logger, get_settings
from renovation.models import Project


logger = get_logger("session")


class SessionState(BaseModel):
    """What is persisted between runs."""

    selected_project_id: Optional[UUID] = None


class AppSession:
    """Current-project selection backed by a JSON state file."""

    def __init__(self, state_path: Optional[Union[str, Path]] = None):
        if state_path is None:
            state_path = get_settings().app.session_state_path
        self._path = Path(state_path) if state_path else None
        self._selected_id: Optional[UUID] = None

    @property
    def state_path(self) -> Optional[Path]:
        return self._path

    @property
    def selected_project_id(self) -> Optional[UUID]:
        return self._selected_id

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> Optional[UUID]:
        """Restore the last selection from disk."""
        if self._path is None or not self._path.exists():
            self._selected_id = None
            return None

        try:
            state = SessionState.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("session_state_unreadable", path=str(self._path), error=str(e))
            self._selected_id = None
            return None

        self._selected_id = state.selected_project_id
        return self._selected_id

    def _save(self) -> None:
        if self._path is None:
            return
        state = SessionState(selected_project_id=self._selected_id)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(state.model_dump_json(), encoding="utf-8")
        except OSError as e:
            # Selection still works in memory for this run
            logger.warning("session_state_write_failed", path=str(self._path), error=str(e))

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(self, project: Project) -> None:
        self.select_id(project.id)

    def select_id(self, project_id: UUID) -> None:
        self._selected_id = project_id
        self._save()
        logger.debug("project_selected", project_id=str(project_id))

    def clear(self) -> None:
        self._selected_id = None
        self._save()

    def current_project(self, projects: list[Project]) -> Optional[Project]:
        """
        The selected project if it is in the list, else the first active
        project, else the first project.
        """
        if self._selected_id is not None:
            for project in projects:
                if project.id == self._selected_id:
                    return project
        for project in projects:
            if project.is_active:
                return project
        return projects[0] if projects else None

    def auto_select(self, projects: list[Project]) -> Optional[Project]:
        """
        Keep the selection if that project still exists, otherwise select
        the first active project, the first project, or nothing.
        """
        if self._selected_id is not None:
            for project in projects:
                if project.id == self._selected_id:
                    return project

        fallback = next((p for p in projects if p.is_active), None)
        if fallback is None and projects:
            fallback = projects[0]

        if fallback is None:
            self.clear()
        else:
            self.select(fallback)
        return fallback

"""Tests for the persisted current-project session."""

import pytest
from uuid import uuid4

from conftest import TODAY
from renovation.models import Project
from renovation.session import AppSession


def make_project(name: str, is_active: bool = True) -> Project:
    return Project(name=name, area=50, start_date=TODAY, is_active=is_active)


class TestPersistence:
    """Tests for reading and writing the state file."""

    def test_selection_survives_restart(self, tmp_path):
        """Test a new session loads the last selection."""
        path = tmp_path / "state" / "session.json"
        project = make_project("Flat")
        AppSession(path).select(project)

        restored = AppSession(path)
        assert restored.load() == project.id
        assert restored.selected_project_id == project.id

    def test_missing_file_means_no_selection(self, session):
        """Test loading without a file selects nothing."""
        assert session.load() is None

    def test_corrupt_file_ignored(self, tmp_path):
        """Test unreadable state is treated as no selection."""
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")
        session = AppSession(path)
        assert session.load() is None

    def test_clear(self, session):
        """Test clearing removes the persisted selection."""
        session.select_id(uuid4())
        session.clear()
        assert AppSession(session.state_path).load() is None


class TestCurrentProject:
    """Tests for resolving the current project."""

    def test_selected_wins(self, session):
        """Test the selected project is current when present."""
        a, b = make_project("A"), make_project("B")
        session.select(b)
        assert session.current_project([a, b]) is b

    def test_falls_back_to_first_active(self, session):
        """Test an unknown selection falls back to the first active project."""
        inactive, active = make_project("Old", is_active=False), make_project("New")
        session.select_id(uuid4())
        assert session.current_project([inactive, active]) is active

    def test_falls_back_to_first(self, session):
        """Test with nothing active the first project is current."""
        a = make_project("A", is_active=False)
        assert session.current_project([a]) is a
        assert session.current_project([]) is None


class TestAutoSelect:
    """Tests for auto_select."""

    def test_keeps_existing_selection(self, session):
        """Test an existing selection is kept."""
        a, b = make_project("A"), make_project("B")
        session.select(b)
        assert session.auto_select([a, b]) is b
        assert session.selected_project_id == b.id

    def test_selects_fallback(self, session):
        """Test a stale selection is replaced and persisted."""
        inactive, active = make_project("Old", is_active=False), make_project("New")
        session.select_id(uuid4())
        assert session.auto_select([inactive, active]) is active
        assert AppSession(session.state_path).load() == active.id

    def test_clears_when_empty(self, session):
        """Test no projects clears the selection."""
        session.select_id(uuid4())
        assert session.auto_select([]) is None
        assert session.selected_project_id is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Material, contact and journal lists for the current project.

These screens follow the session's current project: load() resolves it
from the stored projects and loads that project's records.
"""

from decimal import Decimal
from typing import Optional

from renovation.formatting import format_currency, format_month
from renovation.models import (
    Contact,
    ContactRole,
    JournalEntry,
    Material,
    MaterialStatus,
    Project,
)
from renovation.repositories import (
    ContactRepository,
    JournalRepository,
    MaterialRepository,
    ProjectRepository,
)
from renovation.session import AppSession
from renovation.viewmodels.base import BaseViewModel


UNASSIGNED_LOCATION = "Unassigned"


class _ProjectRecordsViewModel(BaseViewModel):
    """Resolves the current project through the session."""

    def __init__(self, project_repository: ProjectRepository, session: AppSession):
        super().__init__()
        self._projects = project_repository
        self.session = session
        self.project: Optional[Project] = None

    async def _current_project(self) -> Optional[Project]:
        projects = await self._projects.fetch_all()
        self.project = self.session.current_project(projects)
        return self.project


# =============================================================================
# Materials
# =============================================================================

class MaterialListViewModel(_ProjectRecordsViewModel):

    def __init__(
        self,
        material_repository: MaterialRepository,
        project_repository: ProjectRepository,
        session: AppSession,
    ):
        super().__init__(project_repository, session)
        self._materials = material_repository
        self.materials: list[Material] = []
        self.search_text = ""
        self.selected_status: Optional[MaterialStatus] = None

    async def _load(self) -> None:
        project = await self._current_project()
        self.materials = await self._materials.fetch_for_project(project) if project else []

    async def load(self) -> None:
        self.is_loading = True
        await self._run("load materials", self._load())
        self.is_loading = False

    @property
    def filtered_materials(self) -> list[Material]:
        result = self.materials
        if self.selected_status is not None:
            result = [m for m in result if m.status is self.selected_status]
        needle = self.search_text.strip().casefold()
        if needle:
            result = [
                m for m in result
                if needle in m.name.casefold()
                or needle in m.brand.casefold()
                or needle in m.specification.casefold()
                or needle in m.location.casefold()
            ]
        return sorted(result, key=lambda m: m.created_at, reverse=True)

    @property
    def grouped_by_status(self) -> list[tuple[MaterialStatus, list[Material]]]:
        """Non-empty status groups in status order."""
        groups = []
        for status in MaterialStatus:
            materials = [m for m in self.filtered_materials if m.status is status]
            if materials:
                groups.append((status, materials))
        return groups

    @property
    def grouped_by_location(self) -> list[tuple[str, list[Material]]]:
        groups: dict[str, list[Material]] = {}
        for material in self.filtered_materials:
            groups.setdefault(material.location or UNASSIGNED_LOCATION, []).append(material)
        return sorted(groups.items())

    @property
    def total_cost(self) -> Decimal:
        return sum((m.total_price for m in self.materials), Decimal("0"))

    @property
    def total_cost_formatted(self) -> str:
        return format_currency(self.total_cost)

    def materials_with_status(self, status: MaterialStatus) -> list[Material]:
        return [m for m in self.materials if m.status is status]

    async def add(self, **fields) -> Optional[Material]:
        if self.project is None:
            self.error_message = "Select a project first"
            return None
        project = self.project

        async def _add() -> Material:
            return await self._materials.create(Material(project_id=project.id, **fields), project)

        material = await self._run("save material", _add())
        if material is not None:
            await self.load()
        return material

    async def update_status(self, material: Material, status: MaterialStatus) -> None:
        material.update_status(status)
        await self._run("update material", self._materials.update(material))
        if not self.error_message:
            await self.load()

    async def delete(self, material: Material) -> None:
        await self._run("delete material", self._materials.delete(material))
        if not self.error_message:
            await self.load()


# =============================================================================
# Contacts
# =============================================================================

class ContactListViewModel(_ProjectRecordsViewModel):

    def __init__(
        self,
        contact_repository: ContactRepository,
        project_repository: ProjectRepository,
        session: AppSession,
    ):
        super().__init__(project_repository, session)
        self._contacts = contact_repository
        self.contacts: list[Contact] = []
        self.search_text = ""
        self.selected_role: Optional[ContactRole] = None

    async def _load(self) -> None:
        project = await self._current_project()
        self.contacts = await self._contacts.fetch_for_project(project) if project else []

    async def load(self) -> None:
        self.is_loading = True
        await self._run("load contacts", self._load())
        self.is_loading = False

    @property
    def filtered_contacts(self) -> list[Contact]:
        result = self.contacts
        if self.selected_role is not None:
            result = [c for c in result if c.role is self.selected_role]
        needle = self.search_text.strip().casefold()
        if needle:
            result = [
                c for c in result
                if needle in c.name.casefold()
                or needle in c.company.casefold()
                or needle in c.phone_number
            ]
        return result

    @property
    def grouped_contacts(self) -> list[tuple[ContactRole, list[Contact]]]:
        """Non-empty role groups in role order, names sorted within each."""
        groups = []
        for role in ContactRole:
            contacts = [c for c in self.filtered_contacts if c.role is role]
            if contacts:
                groups.append((role, sorted(contacts, key=lambda c: c.name)))
        return groups

    @property
    def recommended_contacts(self) -> list[Contact]:
        return [c for c in self.filtered_contacts if c.is_recommended]

    async def add(self, **fields) -> Optional[Contact]:
        if self.project is None:
            self.error_message = "Select a project first"
            return None
        project = self.project

        async def _add() -> Contact:
            return await self._contacts.create(Contact(project_id=project.id, **fields), project)

        contact = await self._run("save contact", _add())
        if contact is not None:
            await self.load()
        return contact

    async def toggle_recommended(self, contact: Contact) -> None:
        await self._run("update contact", self._contacts.toggle_recommended(contact))
        if not self.error_message:
            await self.load()

    async def delete(self, contact: Contact) -> None:
        await self._run("delete contact", self._contacts.delete(contact))
        if not self.error_message:
            await self.load()


# =============================================================================
# Journal
# =============================================================================

class JournalListViewModel(_ProjectRecordsViewModel):

    def __init__(
        self,
        journal_repository: JournalRepository,
        project_repository: ProjectRepository,
        session: AppSession,
    ):
        super().__init__(project_repository, session)
        self._journal = journal_repository
        self.entries: list[JournalEntry] = []
        self.search_text = ""
        self.selected_tag: Optional[str] = None

    async def _load(self) -> None:
        project = await self._current_project()
        self.entries = await self._journal.fetch_for_project(project) if project else []

    async def load(self) -> None:
        self.is_loading = True
        await self._run("load journal", self._load())
        self.is_loading = False

    @property
    def filtered_entries(self) -> list[JournalEntry]:
        result = self.entries
        if self.selected_tag:
            result = [e for e in result if self.selected_tag in e.tags]
        needle = self.search_text.strip().casefold()
        if needle:
            result = [
                e for e in result
                if needle in e.title.casefold()
                or needle in e.content.casefold()
                or any(needle in tag.casefold() for tag in e.tags)
            ]
        return result

    @property
    def grouped_entries(self) -> list[tuple[str, list[JournalEntry]]]:
        """Entries by month, newest month first, newest entry first within."""
        groups: dict[tuple[int, int], list[JournalEntry]] = {}
        for entry in self.filtered_entries:
            groups.setdefault((entry.date.year, entry.date.month), []).append(entry)
        return [
            (format_month(year, month), sorted(groups[(year, month)], key=lambda e: e.date, reverse=True))
            for year, month in sorted(groups, reverse=True)
        ]

    @property
    def all_tags(self) -> list[str]:
        return sorted({tag for entry in self.entries for tag in entry.tags})

    @property
    def entries_with_photos(self) -> list[JournalEntry]:
        return [e for e in self.filtered_entries if e.photos]

    async def add(self, **fields) -> Optional[JournalEntry]:
        if self.project is None:
            self.error_message = "Select a project first"
            return None
        project = self.project

        async def _add() -> JournalEntry:
            return await self._journal.create(JournalEntry(project_id=project.id, **fields), project)

        entry = await self._run("save journal entry", _add())
        if entry is not None:
            await self.load()
        return entry

    async def delete(self, entry: JournalEntry) -> None:
        await self._run("delete journal entry", self._journal.delete(entry))
        if not self.error_message:
            await self.load()

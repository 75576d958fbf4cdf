"""
Project-scoped record repositories

Materials, contacts and journal entries all hang off a project and share
the same CRUD and search shape. Each subclass names its record type, the
fields searched by keyword and the default ordering.
"""

from decimal import Decimal
from typing import Generic, Optional
from uuid import UUID

from renovation.config import get_logger
from renovation.models import (
    Contact,
    ContactRole,
    JournalEntry,
    Material,
    MaterialStatus,
    Project,
    RecordQuery,
    SortKey,
)
from renovation.services.storage import RecordStorageInterface, RecordT


logger = get_logger("repositories.records")


class ProjectRecordRepository(Generic[RecordT]):
    """CRUD and keyword search for records owned by a project."""

    record_type: type[RecordT]
    search_fields: list[str] = []
    default_sort: list[SortKey] = [SortKey.desc("created_at")]

    def __init__(self, storage: RecordStorageInterface):
        self._storage = storage

    def _project_query(self, project: Project, **kwargs) -> RecordQuery:
        filters = {"project_id": project.id, **kwargs.pop("filters", {})}
        kwargs.setdefault("sort", self.default_sort)
        return RecordQuery(filters=filters, **kwargs)

    async def create(self, record: RecordT, project: Project) -> RecordT:
        record.project_id = project.id
        await self._storage.add(record)
        logger.info(
            "record_created",
            record_type=self.record_type.__name__,
            record_id=str(record.id),
            project_id=str(project.id),
        )
        return record

    async def fetch(self, record_id: UUID) -> Optional[RecordT]:
        return await self._storage.get(self.record_type, record_id)

    async def fetch_for_project(self, project: Project) -> list[RecordT]:
        return await self._storage.fetch(self.record_type, self._project_query(project))

    async def search(self, project: Project, keyword: str) -> list[RecordT]:
        """Case-insensitive substring search. A blank keyword returns everything."""
        if not keyword or not keyword.strip():
            return await self.fetch_for_project(project)
        query = self._project_query(
            project,
            keyword=keyword,
            keyword_fields=self.search_fields,
        )
        return await self._storage.fetch(self.record_type, query)

    async def update(self, record: RecordT) -> RecordT:
        record.touch()
        await self._storage.update(record)
        return record

    async def delete(self, record: RecordT) -> bool:
        deleted = await self._storage.delete(self.record_type, record.id)
        logger.info(
            "record_deleted",
            record_type=self.record_type.__name__,
            record_id=str(record.id),
            deleted=deleted,
        )
        return deleted


# =============================================================================
# Materials
# =============================================================================

class MaterialRepository(ProjectRecordRepository[Material]):
    """Materials, newest first."""

    record_type = Material
    search_fields = ["name", "brand", "specification", "location"]

    async def fetch_by_status(self, project: Project, status: MaterialStatus) -> list[Material]:
        query = self._project_query(project, filters={"status": status})
        return await self._storage.fetch(Material, query)

    async def total_cost(self, project: Project) -> Decimal:
        """Sum of unit price times quantity over every material."""
        materials = await self.fetch_for_project(project)
        return sum((m.total_price for m in materials), Decimal("0"))


# =============================================================================
# Contacts
# =============================================================================

class ContactRepository(ProjectRecordRepository[Contact]):
    """Contacts, alphabetical."""

    record_type = Contact
    search_fields = ["name", "company", "phone_number"]
    default_sort = [SortKey.asc("name")]

    async def fetch_by_role(self, project: Project, role: ContactRole) -> list[Contact]:
        query = self._project_query(project, filters={"role": role})
        return await self._storage.fetch(Contact, query)

    async def fetch_recommended(self, project: Project) -> list[Contact]:
        query = self._project_query(project, filters={"is_recommended": True})
        return await self._storage.fetch(Contact, query)

    async def toggle_recommended(self, contact: Contact) -> Contact:
        contact.is_recommended = not contact.is_recommended
        return await self.update(contact)


# =============================================================================
# Journal
# =============================================================================

class JournalRepository(ProjectRecordRepository[JournalEntry]):
    """
    Journal entries, newest date first.

    Tags live in a JSON column, so tag matching happens after the fetch.
    """

    record_type = JournalEntry
    search_fields = ["title", "content"]
    default_sort = [SortKey.desc("date"), SortKey.desc("created_at")]

    async def search(self, project: Project, keyword: str) -> list[JournalEntry]:
        """Match title, content or any tag, case-insensitively."""
        entries = await self.fetch_for_project(project)
        if not keyword or not keyword.strip():
            return entries
        needle = keyword.strip().casefold()
        return [
            entry for entry in entries
            if needle in entry.title.casefold()
            or needle in entry.content.casefold()
            or any(needle in tag.casefold() for tag in entry.tags)
        ]

    async def fetch_by_tag(self, project: Project, tag: str) -> list[JournalEntry]:
        """Entries carrying the exact tag."""
        tag = tag.strip()
        return [e for e in await self.fetch_for_project(project) if tag in e.tags]

"""
Base model shared by every persisted renovation record.

DESIGN DECISION: Timestamps are naive UTC datetimes. SQLite has no
timezone-aware column type, so storing naive UTC keeps values identical
after a round trip through the database.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RenovationRecord(BaseModel):
    """
    Identity and timestamps for a stored record.

    from_attributes lets records be validated straight from ORM rows.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        from_attributes=True,
        validate_assignment=True,
    )

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record ID"
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        description="When the record was created (UTC)"
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        description="Last modification time (UTC)"
    )

    def touch(self) -> None:
        """Bump updated_at to now."""
        self.updated_at = utcnow()

    def snapshot(self) -> Any:
        """Capture the current field values for restore()."""
        return self.model_copy(deep=True)

    def restore(self, snapshot: Any) -> None:
        """Put every field back to the value captured by snapshot()."""
        for name in type(self).model_fields:
            setattr(self, name, getattr(snapshot, name))

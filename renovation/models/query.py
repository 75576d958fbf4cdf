"""
Record query model.

DESIGN DECISION: Repositories describe what they want as a RecordQuery
and the storage layer translates it. Repositories never build SQL, so
the storage backend stays swappable.
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class SortKey(BaseModel):
    """One ORDER BY term."""

    field: str = Field(..., min_length=1)
    descending: bool = False

    @classmethod
    def asc(cls, field: str) -> "SortKey":
        return cls(field=field)

    @classmethod
    def desc(cls, field: str) -> "SortKey":
        return cls(field=field, descending=True)


class RecordQuery(BaseModel):
    """
    A structured fetch over one record type.

    All conditions are ANDed:
    - filters: field == value for every entry
    - date_field between date_from and date_to (inclusive, either optional)
    - keyword: case-insensitive substring in any of keyword_fields
    """

    filters: dict[str, Any] = Field(
        default_factory=dict,
        description="Equality filters, field name -> value"
    )

    date_field: str = Field(
        default="date",
        description="Field the date range applies to"
    )
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    keyword: Optional[str] = Field(
        default=None,
        description="Substring to search for (blank means no keyword filter)"
    )
    keyword_fields: list[str] = Field(default_factory=list)

    sort: list[SortKey] = Field(default_factory=list)

    limit: Optional[int] = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode='after')
    def validate_ranges(self) -> 'RecordQuery':
        """Reject inverted ranges and keywords with nowhere to look."""
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        if self.has_keyword and not self.keyword_fields:
            raise ValueError("keyword search needs at least one keyword field")
        return self

    @property
    def has_keyword(self) -> bool:
        return bool(self.keyword and self.keyword.strip())

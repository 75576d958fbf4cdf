"""
SQLAlchemy table definitions for the local store.

Rows mirror the pydantic records field for field, so a row can be
validated straight into its record with model_validate(row).

Ownership is a strict tree. Every parent relationship uses
cascade="all, delete-orphan" and every foreign key is ON DELETE CASCADE,
so deleting a project removes everything under it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID stored as its 36-character string form."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """Declarative base for all tables."""

    type_annotation_map: ClassVar[dict] = {
        # Money: two decimal places, up to 999,999,999,999.99
        Decimal: Numeric(14, 2),
        # Naive UTC timestamps
        datetime: DateTime(),
        date: Date(),
        PyUUID: UUIDString(),
    }


class RecordRow(Base):
    """Abstract base with id and timestamps."""

    __abstract__ = True

    id: Mapped[PyUUID] = mapped_column(primary_key=True, default=uuid4)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


# =============================================================================
# PROJECT
# =============================================================================

class ProjectRow(RecordRow):
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(100))
    house_type: Mapped[str] = mapped_column(String(100), default="")
    area: Mapped[float] = mapped_column(Float)
    start_date: Mapped[date]
    estimated_duration: Mapped[int] = mapped_column(Integer)
    notes: Mapped[str] = mapped_column(Text, default="")
    cover_image: Mapped[Optional[str]] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    budget: Mapped[Optional["BudgetRow"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        uselist=False,
    )
    phases: Mapped[list["PhaseRow"]] = relationship(
        cascade="all, delete-orphan",
        order_by="PhaseRow.sort_order",
    )
    materials: Mapped[list["MaterialRow"]] = relationship(cascade="all, delete-orphan")
    contacts: Mapped[list["ContactRow"]] = relationship(cascade="all, delete-orphan")
    journal_entries: Mapped[list["JournalEntryRow"]] = relationship(cascade="all, delete-orphan")


# =============================================================================
# BUDGET & EXPENSES
# =============================================================================

class BudgetRow(RecordRow):
    __tablename__ = "budgets"

    project_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        unique=True,
    )
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    warning_threshold: Mapped[float] = mapped_column(Float, default=0.8)

    project: Mapped["ProjectRow"] = relationship(back_populates="budget")
    expenses: Mapped[list["ExpenseRow"]] = relationship(cascade="all, delete-orphan")


class ExpenseRow(RecordRow):
    __tablename__ = "expenses"
    __table_args__ = (
        Index("ix_expenses_budget_date", "budget_id", "date"),
    )

    budget_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"),
    )
    amount: Mapped[Decimal]
    category: Mapped[str] = mapped_column(String(30))
    date: Mapped[date]
    notes: Mapped[str] = mapped_column(Text, default="")
    photos: Mapped[list] = mapped_column(JSON, default=list)
    payment_type: Mapped[str] = mapped_column(String(20))
    vendor: Mapped[str] = mapped_column(String(200), default="")


# =============================================================================
# SCHEDULE
# =============================================================================

class PhaseRow(RecordRow):
    __tablename__ = "phases"

    project_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100))
    phase_type: Mapped[str] = mapped_column(String(30))
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    planned_start_date: Mapped[date]
    planned_end_date: Mapped[date]
    actual_start_date: Mapped[Optional[date]]
    actual_end_date: Mapped[Optional[date]]
    notes: Mapped[str] = mapped_column(Text, default="")
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    tasks: Mapped[list["TaskRow"]] = relationship(
        cascade="all, delete-orphan",
        order_by="TaskRow.created_at",
        lazy="selectin",
    )


class TaskRow(RecordRow):
    __tablename__ = "tasks"

    phase_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("phases.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20))
    assignee: Mapped[str] = mapped_column(String(100), default="")
    assignee_contact: Mapped[str] = mapped_column(String(100), default="")
    planned_start_date: Mapped[Optional[date]]
    planned_end_date: Mapped[Optional[date]]
    actual_completion_date: Mapped[Optional[date]]
    photos: Mapped[list] = mapped_column(JSON, default=list)


# =============================================================================
# MATERIALS, CONTACTS, JOURNAL
# =============================================================================

class MaterialRow(RecordRow):
    __tablename__ = "materials"

    project_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100))
    brand: Mapped[str] = mapped_column(String(100), default="")
    specification: Mapped[str] = mapped_column(String(200), default="")
    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity: Mapped[float] = mapped_column(Float, default=0.0)
    unit: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20))
    location: Mapped[str] = mapped_column(String(100), default="")
    notes: Mapped[str] = mapped_column(Text, default="")
    photos: Mapped[list] = mapped_column(JSON, default=list)


class ContactRow(RecordRow):
    __tablename__ = "contacts"

    project_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20))
    phone_number: Mapped[str] = mapped_column(String(30), default="")
    wechat_id: Mapped[str] = mapped_column(String(50), default="")
    company: Mapped[str] = mapped_column(String(100), default="")
    address: Mapped[str] = mapped_column(String(200), default="")
    rating: Mapped[int] = mapped_column(Integer, default=0)
    notes: Mapped[str] = mapped_column(Text, default="")
    is_recommended: Mapped[bool] = mapped_column(Boolean, default=False)


class JournalEntryRow(RecordRow):
    __tablename__ = "journal_entries"

    project_id: Mapped[PyUUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text, default="")
    photos: Mapped[list] = mapped_column(JSON, default=list)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    date: Mapped[date]


# =============================================================================
# AUDIT
# =============================================================================

class AuditEventRow(Base):
    """Append-only; not owned by any project."""

    __tablename__ = "audit_events"

    event_id: Mapped[PyUUID] = mapped_column(primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(index=True)
    event_type: Mapped[str] = mapped_column(String(40))
    severity: Mapped[str] = mapped_column(String(10))
    entity_type: Mapped[Optional[str]] = mapped_column(String(20))
    entity_id: Mapped[Optional[PyUUID]] = mapped_column(index=True)
    correlation_id: Mapped[Optional[PyUUID]] = mapped_column(index=True)
    description: Mapped[str] = mapped_column(String(500))
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    is_user_action: Mapped[bool] = mapped_column(Boolean, default=False)

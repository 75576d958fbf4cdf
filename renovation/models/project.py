"""
Core Data Models for Renovation Planner

A renovation is modelled as a strict ownership tree:

    Project
    ├── Budget ── Expense*
    ├── Phase* ── Task*
    ├── Material*
    ├── Contact*
    └── JournalEntry*

Children reference their parent by id. Cascading deletes are the
store's job; these models only carry data and the state transitions
of a single record.

DESIGN DECISION: Derived values that depend on "today" take it as an
argument (defaulting to date.today()) so they can be tested without
patching the clock.
"""

import datetime  # records with a field named "date" annotate via the module
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from renovation.models.base import RenovationRecord
from renovation.models.enums import (
    ContactRole,
    ExpenseCategory,
    MaterialStatus,
    PaymentType,
    PhaseType,
    TaskStatus,
)


# =============================================================================
# PROJECT
# =============================================================================

class Project(RenovationRecord):
    """
    A renovation project (one house or apartment).

    is_active marks the project currently being worked on. At most one
    active project is recommended but not enforced.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Project name (e.g. 'My apartment')"
    )
    house_type: str = Field(
        default="",
        max_length=100,
        description="Layout description (e.g. '2 bed 1 living')"
    )
    area: float = Field(
        ...,
        gt=0,
        description="Floor area in square meters"
    )
    start_date: date = Field(
        default_factory=date.today,
        description="Construction start date"
    )
    estimated_duration: int = Field(
        default=90,
        gt=0,
        description="Estimated duration in days"
    )
    notes: str = Field(default="", max_length=2000)
    cover_image: Optional[str] = Field(
        default=None,
        description="Path to the cover image"
    )
    is_active: bool = True

    @property
    def estimated_end_date(self) -> date:
        return self.start_date + timedelta(days=self.estimated_duration)

    def days_elapsed(self, today: Optional[date] = None) -> int:
        """Days since the start date (negative before it)."""
        today = today or date.today()
        return (today - self.start_date).days

    def remaining_days(self, today: Optional[date] = None) -> int:
        return max(0, self.estimated_duration - self.days_elapsed(today))

    @staticmethod
    def overall_progress(phases: list["Phase"]) -> float:
        """Fraction of enabled phases that are completed."""
        enabled = [p for p in phases if p.is_enabled]
        if not enabled:
            return 0.0
        return sum(1 for p in enabled if p.is_completed) / len(enabled)

    def is_delayed(self, phases: list["Phase"], today: Optional[date] = None) -> bool:
        """Past the estimated duration with phases still open."""
        return (
            self.days_elapsed(today) > self.estimated_duration
            and self.overall_progress(phases) < 1.0
        )


# =============================================================================
# BUDGET & EXPENSES
# =============================================================================

class Budget(RenovationRecord):
    """
    Spending ceiling of a project (one per project).

    Totals are not stored here; see renovation.statistics.
    """

    project_id: UUID = Field(
        ...,
        description="Owning project"
    )
    total_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Total budget"
    )
    warning_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Usage fraction that triggers a warning"
    )

    def update_total_amount(self, amount: Decimal) -> None:
        self.total_amount = amount
        self.touch()

    def update_warning_threshold(self, threshold: float) -> None:
        """Set the threshold, clamped into [0, 1]."""
        self.warning_threshold = max(0.0, min(1.0, threshold))
        self.touch()


class Expense(RenovationRecord):
    """
    A single payment against a budget.

    The amount range is checked by RecordExpenseUseCase, not here, so
    that rows written by older versions still load.
    """

    budget_id: UUID = Field(
        ...,
        description="Owning budget"
    )
    amount: Decimal = Field(
        ...,
        decimal_places=2,
        description="Amount paid"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )
    date: datetime.date = Field(
        default_factory=datetime.date.today,
        description="Date of the payment"
    )
    notes: str = Field(default="", max_length=1000)
    photos: list[str] = Field(
        default_factory=list,
        description="Paths of receipt photos"
    )
    payment_type: PaymentType = PaymentType.FULL
    vendor: str = Field(default="", max_length=200)

    @property
    def has_photos(self) -> bool:
        return bool(self.photos)

    def update_amount(self, amount: Decimal) -> None:
        self.amount = amount
        self.touch()

    def update_category(self, category: ExpenseCategory) -> None:
        self.category = category
        self.touch()

    def update_notes(self, notes: str) -> None:
        self.notes = notes
        self.touch()

    def update_date(self, expense_date: datetime.date) -> None:
        self.date = expense_date
        self.touch()

    def update_vendor(self, vendor: str) -> None:
        self.vendor = vendor
        self.touch()

    def update_payment_type(self, payment_type: PaymentType) -> None:
        self.payment_type = payment_type
        self.touch()

    def add_photo(self, path: str) -> None:
        self.photos = [*self.photos, path]
        self.touch()

    def remove_photo(self, index: int) -> None:
        """Remove the photo at index; out of range is a no-op."""
        if 0 <= index < len(self.photos):
            photos = list(self.photos)
            del photos[index]
            self.photos = photos
            self.touch()


# =============================================================================
# SCHEDULE
# =============================================================================

class Task(RenovationRecord):
    """
    A unit of work inside a phase.

    Transitions:
    - start(): pending -> in_progress (ignored from any other state)
    - complete(): any -> completed, stamps the completion date
    - mark_as_issue(), cancel(): any -> issue / cancelled
    - reset(): any -> pending, clears the completion date
    """

    phase_id: Optional[UUID] = Field(
        default=None,
        description="Owning phase (set when added to a phase)"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Task title"
    )
    description: str = Field(default="", max_length=2000)
    status: TaskStatus = TaskStatus.PENDING
    assignee: str = Field(default="", max_length=100)
    assignee_contact: str = Field(default="", max_length=100)
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    actual_completion_date: Optional[date] = None
    photos: list[str] = Field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def has_issue(self) -> bool:
        return self.status is TaskStatus.ISSUE

    def is_overdue(self, today: Optional[date] = None) -> bool:
        if self.is_completed or self.planned_end_date is None:
            return False
        return (today or date.today()) > self.planned_end_date

    def start(self) -> None:
        if self.status is not TaskStatus.PENDING:
            return
        self.status = TaskStatus.IN_PROGRESS
        self.touch()

    def complete(self, at: Optional[date] = None) -> None:
        self.status = TaskStatus.COMPLETED
        self.actual_completion_date = at or date.today()
        self.touch()

    def mark_as_issue(self) -> None:
        self.status = TaskStatus.ISSUE
        self.touch()

    def cancel(self) -> None:
        self.status = TaskStatus.CANCELLED
        self.touch()

    def reset(self) -> None:
        self.status = TaskStatus.PENDING
        self.actual_completion_date = None
        self.touch()

    def update_assignee(self, name: str, contact: str = "") -> None:
        self.assignee = name
        self.assignee_contact = contact
        self.touch()


class Phase(RenovationRecord):
    """
    A scheduling stage of a project, containing tasks.

    Completion is derived from the tasks: call sync_status_from_tasks()
    after any task is added, removed or changes status.
    """

    project_id: UUID = Field(
        ...,
        description="Owning project"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Phase title"
    )
    phase_type: PhaseType = PhaseType.CUSTOM
    sort_order: int = Field(default=0, ge=0)
    planned_start_date: date
    planned_end_date: date
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: str = Field(default="", max_length=2000)
    is_completed: bool = False
    is_enabled: bool = True
    tasks: list[Task] = Field(
        default_factory=list,
        description="Tasks in creation order"
    )

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def planned_duration(self) -> int:
        return (self.planned_end_date - self.planned_start_date).days

    @property
    def actual_duration(self) -> Optional[int]:
        if self.actual_start_date is None or self.actual_end_date is None:
            return None
        return (self.actual_end_date - self.actual_start_date).days

    @property
    def has_started(self) -> bool:
        return self.actual_start_date is not None

    @property
    def is_in_progress(self) -> bool:
        return self.has_started and not self.is_completed

    @property
    def completed_tasks_count(self) -> int:
        if not self.is_enabled:
            return 0
        return sum(1 for t in self.tasks if t.is_completed)

    @property
    def total_tasks_count(self) -> int:
        if not self.is_enabled:
            return 0
        return len(self.tasks)

    @property
    def progress(self) -> float:
        """Completed task fraction; without tasks, 1.0 once completed."""
        if not self.is_enabled:
            return 0.0
        if not self.tasks:
            return 1.0 if self.is_completed else 0.0
        return self.completed_tasks_count / len(self.tasks)

    @property
    def status_summary(self):
        """Task counts per status, recomputed from the current task list."""
        from renovation.statistics import summarize_tasks
        return summarize_tasks(self.tasks)

    def is_delayed(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        if self.actual_end_date is not None:
            return self.actual_end_date > self.planned_end_date
        if self.actual_start_date is None:
            return today > self.planned_start_date
        return today > self.planned_end_date and not self.is_completed

    def delayed_days(self, today: Optional[date] = None) -> int:
        today = today or date.today()
        if not self.is_delayed(today):
            return 0
        end = self.actual_end_date or today
        return max(0, (end - self.planned_end_date).days)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self, at: Optional[date] = None) -> None:
        """Stamp the actual start date once."""
        if self.actual_start_date is not None:
            return
        self.actual_start_date = at or date.today()
        self.touch()

    def complete(self, at: Optional[date] = None) -> None:
        """Complete the phase and every unfinished task in it."""
        if self.is_completed:
            return
        at = at or date.today()
        self.actual_end_date = at
        self.is_completed = True
        for task in self.tasks:
            if not task.is_completed:
                task.complete(at)
        self.touch()

    def reopen(self) -> None:
        if not self.is_completed:
            return
        self.is_completed = False
        self.actual_end_date = None
        self.touch()

    def add_task(self, task: Task) -> None:
        task.phase_id = self.id
        self.tasks = [*self.tasks, task]
        self.touch()

    def remove_task(self, task_id: UUID) -> None:
        self.tasks = [t for t in self.tasks if t.id != task_id]
        self.touch()

    def replace_task(self, task: Task) -> None:
        """Swap in an updated copy of a task already in the list."""
        self.tasks = [task if t.id == task.id else t for t in self.tasks]

    def snapshot(self) -> tuple["Phase", list[Task]]:
        """Field values plus the task objects themselves."""
        return super().snapshot(), list(self.tasks)

    def restore(self, snapshot: tuple["Phase", list[Task]]) -> None:
        """
        Roll the phase back to snapshot.

        The original task objects are put back and restored in place, so
        callers holding them see the rolled-back values too.
        """
        saved, tasks = snapshot
        super().restore(saved)
        for task, saved_task in zip(tasks, saved.tasks):
            task.restore(saved_task)
        self.tasks = tasks

    def all_tasks_completed(self) -> bool:
        return bool(self.tasks) and all(t.is_completed for t in self.tasks)

    def sync_status_from_tasks(self) -> None:
        """
        Derive completion from the task list.

        - no tasks: nothing changes
        - all tasks completed: the phase completes
        - otherwise a completed phase is reopened, and the phase is
          started if any task is in progress or completed
        """
        if not self.tasks:
            return

        if self.all_tasks_completed():
            self.complete()
            return

        self.reopen()

        if any(
            t.status in (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)
            for t in self.tasks
        ):
            self.start()


# =============================================================================
# MATERIALS, CONTACTS, JOURNAL
# =============================================================================

class Material(RenovationRecord):
    """A material to buy for the project."""

    project_id: UUID
    name: str = Field(..., min_length=1, max_length=100)
    brand: str = Field(default="", max_length=100)
    specification: str = Field(default="", max_length=200)
    unit_price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Price per unit"
    )
    quantity: float = Field(default=0.0, ge=0)
    unit: str = Field(default="pcs", max_length=20)
    status: MaterialStatus = MaterialStatus.PENDING
    location: str = Field(
        default="",
        max_length=100,
        description="Room or area where it is used"
    )
    notes: str = Field(default="", max_length=1000)
    photos: list[str] = Field(default_factory=list)

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * Decimal(str(self.quantity))

    def update_status(self, status: MaterialStatus) -> None:
        self.status = status
        self.touch()


class Contact(RenovationRecord):
    """A person or company involved in the renovation."""

    project_id: UUID
    name: str = Field(..., min_length=1, max_length=100)
    role: ContactRole = ContactRole.OTHER
    phone_number: str = Field(default="", max_length=30)
    wechat_id: str = Field(default="", max_length=50)
    company: str = Field(default="", max_length=100)
    address: str = Field(default="", max_length=200)
    rating: int = Field(
        default=0,
        description="0 means unrated, otherwise 1-5 stars"
    )
    notes: str = Field(default="", max_length=1000)
    is_recommended: bool = False

    @field_validator('rating')
    @classmethod
    def clamp_rating(cls, v: int) -> int:
        """Clamp out-of-range ratings instead of rejecting them."""
        return max(0, min(5, v))

    @property
    def is_rated(self) -> bool:
        return self.rating > 0


class JournalEntry(RenovationRecord):
    """A dated renovation diary entry."""

    project_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(default="", max_length=10000)
    photos: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    date: datetime.date = Field(default_factory=datetime.date.today)

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Drop blank and repeated tags, keeping first occurrence order."""
        seen = []
        for tag in (t.strip() for t in v):
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    def add_tag(self, tag: str) -> None:
        tag = tag.strip()
        if not tag or tag in self.tags:
            return
        self.tags = [*self.tags, tag]
        self.touch()

    def remove_tag(self, tag: str) -> None:
        if tag not in self.tags:
            return
        self.tags = [t for t in self.tags if t != tag]
        self.touch()

    def add_photo(self, path: str) -> None:
        self.photos = [*self.photos, path]
        self.touch()

    def remove_photo(self, index: int) -> None:
        if 0 <= index < len(self.photos):
            photos = list(self.photos)
            del photos[index]
            self.photos = photos
            self.touch()

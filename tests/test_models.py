"""
Tests for the Renovation Planner records

Test strategy:
1. Unit tests for records and their derived values (this module)
2. Repository and use case tests against in-memory SQLite
3. No network access in tests
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from renovation.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Budget,
    Contact,
    Expense,
    ExpenseCategory,
    JournalEntry,
    Material,
    MaterialStatus,
    ParentCategory,
    Phase,
    PhaseType,
    Project,
    RecordQuery,
    Task,
    TaskStatus,
)


TODAY = date(2024, 6, 15)


def make_phase(tasks=(), **kwargs) -> Phase:
    fields = dict(
        project_id=uuid4(),
        title="Masonry",
        phase_type=PhaseType.MASONRY,
        planned_start_date=TODAY - timedelta(days=10),
        planned_end_date=TODAY + timedelta(days=5),
    )
    fields.update(kwargs)
    phase = Phase(**fields)
    for title in tasks:
        phase.add_task(Task(title=title))
    return phase


class TestProject:
    """Tests for Project derived values."""

    def test_estimated_end_date(self):
        """Test end date is start plus estimated duration."""
        project = Project(name="Flat", area=80, start_date=date(2024, 1, 1), estimated_duration=31)
        assert project.estimated_end_date == date(2024, 2, 1)

    def test_days_elapsed_and_remaining(self):
        """Test elapsed and remaining days relative to a given day."""
        project = Project(name="Flat", area=80, start_date=TODAY - timedelta(days=30))
        assert project.days_elapsed(TODAY) == 30
        assert project.remaining_days(TODAY) == 60

    def test_remaining_days_never_negative(self):
        """Test remaining days bottom out at zero."""
        project = Project(name="Flat", area=80, start_date=TODAY - timedelta(days=200))
        assert project.remaining_days(TODAY) == 0

    def test_area_must_be_positive(self):
        """Test that a zero area is rejected."""
        with pytest.raises(ValidationError):
            Project(name="Flat", area=0, start_date=TODAY)

    def test_overall_progress_counts_enabled_phases(self):
        """Test progress is the completed share of enabled phases."""
        done = make_phase(is_completed=True)
        open_phase = make_phase()
        disabled = make_phase(is_enabled=False)
        assert Project.overall_progress([done, open_phase, disabled]) == 0.5
        assert Project.overall_progress([]) == 0.0

    def test_is_delayed(self):
        """Test a project past its duration with open phases is delayed."""
        project = Project(name="Flat", area=80, start_date=TODAY - timedelta(days=100), estimated_duration=90)
        assert project.is_delayed([make_phase()], TODAY) is True
        assert project.is_delayed([make_phase(is_completed=True)], TODAY) is False

    def test_name_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        project = Project(name="  Flat  ", area=80, start_date=TODAY)
        assert project.name == "Flat"


class TestBudgetAndExpense:
    """Tests for Budget and Expense records."""

    def test_warning_threshold_clamped(self):
        """Test threshold updates are clamped into [0, 1]."""
        budget = Budget(project_id=uuid4(), total_amount=Decimal("1000"))
        budget.update_warning_threshold(1.5)
        assert budget.warning_threshold == 1.0
        budget.update_warning_threshold(-0.2)
        assert budget.warning_threshold == 0.0

    def test_negative_total_rejected(self):
        """Test a negative budget total is rejected."""
        with pytest.raises(ValidationError):
            Budget(project_id=uuid4(), total_amount=Decimal("-1"))

    def test_sub_cent_amounts_rejected(self):
        """Test money fields hold at most 2 decimal places."""
        with pytest.raises(ValidationError):
            Expense(budget_id=uuid4(), amount=Decimal("0.001"), category=ExpenseCategory.OTHER)
        budget = Budget(project_id=uuid4(), total_amount=Decimal("1000"))
        with pytest.raises(ValidationError):
            budget.update_total_amount(Decimal("12.345"))
        assert budget.total_amount == Decimal("1000")

    def test_expense_photos(self):
        """Test adding and removing receipt photos."""
        expense = Expense(budget_id=uuid4(), amount=Decimal("10"), category=ExpenseCategory.OTHER)
        assert expense.has_photos is False
        expense.add_photo("a.jpg")
        expense.add_photo("b.jpg")
        expense.remove_photo(0)
        assert expense.photos == ["b.jpg"]
        expense.remove_photo(5)
        assert expense.photos == ["b.jpg"]

    def test_update_touches_timestamp(self):
        """Test mutators bump updated_at."""
        expense = Expense(budget_id=uuid4(), amount=Decimal("10"), category=ExpenseCategory.OTHER)
        before = expense.updated_at
        expense.update_vendor("Tile shop")
        assert expense.vendor == "Tile shop"
        assert expense.updated_at >= before

    def test_category_parents(self):
        """Test every category maps to a parent category."""
        assert ExpenseCategory.PLUMBING.parent_category is ParentCategory.HARD_DECORATION
        assert ExpenseCategory.FURNITURE.parent_category is ParentCategory.SOFT_DECORATION
        for category in ExpenseCategory:
            assert category.parent_category in ParentCategory


class TestTask:
    """Tests for Task transitions."""

    def test_start_only_from_pending(self):
        """Test start() moves pending to in progress and ignores other states."""
        task = Task(title="Tiles")
        task.start()
        assert task.status is TaskStatus.IN_PROGRESS

        task.mark_as_issue()
        task.start()
        assert task.status is TaskStatus.ISSUE

    def test_complete_and_reset(self):
        """Test complete() stamps the date and reset() clears it."""
        task = Task(title="Tiles")
        task.complete(TODAY)
        assert task.is_completed
        assert task.actual_completion_date == TODAY

        task.reset()
        assert task.status is TaskStatus.PENDING
        assert task.actual_completion_date is None

    def test_is_overdue(self):
        """Test unfinished tasks past their planned end are overdue."""
        task = Task(title="Tiles", planned_end_date=TODAY - timedelta(days=1))
        assert task.is_overdue(TODAY) is True
        task.complete(TODAY)
        assert task.is_overdue(TODAY) is False
        assert Task(title="No date").is_overdue(TODAY) is False

    def test_status_sort_priority(self):
        """Test issues sort first and cancelled last."""
        ordered = sorted(TaskStatus, key=lambda s: s.sort_priority)
        assert ordered[0] is TaskStatus.ISSUE
        assert ordered[-1] is TaskStatus.CANCELLED


class TestPhase:
    """Tests for Phase derived status."""

    def test_add_task_sets_phase_id(self):
        """Test tasks added to a phase point back to it."""
        phase = make_phase(["A"])
        assert phase.tasks[0].phase_id == phase.id

    def test_start_then_complete_reflected_in_summary(self):
        """Test one completed task of three shows in the summary."""
        phase = make_phase(["A", "B", "C"])
        phase.tasks[0].start()
        phase.tasks[0].complete(TODAY)

        summary = phase.status_summary
        assert summary.completed == 1
        assert summary.total == 3
        assert summary.pending == 2
        assert phase.progress == pytest.approx(1 / 3)

    def test_sync_completes_when_all_tasks_done(self):
        """Test the phase completes once every task is completed."""
        phase = make_phase(["A", "B"])
        for task in phase.tasks:
            task.complete(TODAY)
        phase.sync_status_from_tasks()
        assert phase.is_completed is True
        assert phase.actual_end_date is not None

    def test_sync_reopens_and_starts(self):
        """Test a completed phase reopens when a task is reset."""
        phase = make_phase(["A", "B"])
        phase.complete(TODAY)
        phase.tasks[0].reset()
        phase.sync_status_from_tasks()
        assert phase.is_completed is False
        assert phase.actual_end_date is None
        assert phase.has_started is True

    def test_sync_without_tasks_changes_nothing(self):
        """Test a phase without tasks keeps its state."""
        phase = make_phase()
        phase.sync_status_from_tasks()
        assert phase.is_completed is False
        assert phase.has_started is False

    def test_complete_finishes_open_tasks(self):
        """Test completing a phase completes its unfinished tasks."""
        phase = make_phase(["A", "B"])
        phase.complete(TODAY)
        assert all(t.is_completed for t in phase.tasks)

    def test_is_delayed_when_not_started(self):
        """Test a phase past its planned start without starting is delayed."""
        phase = make_phase()
        assert phase.is_delayed(TODAY) is True
        phase.start(TODAY - timedelta(days=10))
        assert phase.is_delayed(TODAY) is False

    def test_delayed_days(self):
        """Test delay is counted past the planned end."""
        phase = make_phase(planned_end_date=TODAY - timedelta(days=3))
        phase.start(TODAY - timedelta(days=10))
        assert phase.delayed_days(TODAY) == 3

    def test_restore_rolls_back_tasks_in_place(self):
        """Test restore puts phase and task values back without replacing task objects."""
        phase = make_phase(["A", "B"])
        first = phase.tasks[0]
        snapshot = phase.snapshot()

        first.complete(TODAY)
        phase.add_task(Task(title="C"))
        phase.start(TODAY)
        phase.restore(snapshot)

        assert phase.tasks[0] is first
        assert first.status is TaskStatus.PENDING
        assert [t.title for t in phase.tasks] == ["A", "B"]
        assert phase.has_started is False

    def test_disabled_phase_counts_nothing(self):
        """Test a disabled phase reports no tasks and no progress."""
        phase = make_phase(["A"], is_enabled=False)
        assert phase.total_tasks_count == 0
        assert phase.progress == 0.0


class TestOtherRecords:
    """Tests for materials, contacts and journal entries."""

    def test_material_total_price(self):
        """Test total price is unit price times quantity."""
        material = Material(project_id=uuid4(), name="Tiles", unit_price=Decimal("120.50"), quantity=2.5)
        assert material.total_price == Decimal("301.250")

    def test_material_status_progress(self):
        """Test status progress percentages."""
        assert MaterialStatus.PENDING.progress_percentage == 0
        assert MaterialStatus.INSTALLED.progress_percentage == 100

    def test_contact_rating_clamped(self):
        """Test out-of-range ratings are clamped."""
        assert Contact(project_id=uuid4(), name="Wang", rating=9).rating == 5
        assert Contact(project_id=uuid4(), name="Wang", rating=-1).rating == 0
        assert Contact(project_id=uuid4(), name="Wang").is_rated is False

    def test_journal_tags_deduplicated(self):
        """Test blank and repeated tags are dropped."""
        entry = JournalEntry(project_id=uuid4(), title="Day 1", tags=["a", " a ", "", "b"])
        assert entry.tags == ["a", "b"]
        entry.add_tag("b")
        entry.add_tag("c")
        entry.remove_tag("a")
        assert entry.tags == ["b", "c"]


class TestRecordQuery:
    """Tests for RecordQuery validation."""

    def test_inverted_date_range_rejected(self):
        """Test date_from after date_to is rejected."""
        with pytest.raises(ValidationError):
            RecordQuery(date_from=TODAY, date_to=TODAY - timedelta(days=1))

    def test_keyword_requires_fields(self):
        """Test a keyword without fields to search is rejected."""
        with pytest.raises(ValidationError):
            RecordQuery(keyword="tile")


class TestAuditModels:
    """Tests for audit event models."""

    def test_expense_recorded_event(self):
        """Test building an expense-recorded event."""
        correlation_id = uuid4()
        event = AuditEventBuilder.expense_recorded(
            expense_id=uuid4(),
            budget_id=uuid4(),
            amount="3000",
            category="plumbing",
            correlation_id=correlation_id,
        )
        assert event.event_type is AuditEventType.EXPENSE_RECORDED
        assert event.correlation_id == correlation_id
        assert event.entity_type == "expense"

    def test_budget_exceeded_is_warning(self):
        """Test over-budget events carry warning severity or higher."""
        event = AuditEventBuilder.budget_exceeded(uuid4(), "11000", "10000")
        assert event.severity in (AuditSeverity.WARNING, AuditSeverity.ERROR)

    def test_to_log_dict(self):
        """Test log dict uses plain strings."""
        event = AuditEventBuilder.project_created(uuid4(), "Flat", "10000")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == AuditEventType.PROJECT_CREATED.value
        assert isinstance(event, AuditEvent)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

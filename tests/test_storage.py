"""Tests for the SQLite record and audit storage."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import TODAY, run
from renovation.models import (
    AuditEventBuilder,
    Budget,
    Contact,
    Expense,
    ExpenseCategory,
    JournalEntry,
    Material,
    PaymentType,
    Phase,
    Project,
    RecordQuery,
    SortKey,
    Task,
    TaskStatus,
)
from renovation.services.storage import DuplicateError, NotFoundError, StorageError


def make_expense(budget, amount="100", category=ExpenseCategory.OTHER, day=TODAY, **kwargs):
    return Expense(budget_id=budget.id, amount=Decimal(amount), category=category, date=day, **kwargs)


class TestRecordStorage:
    """Tests for basic CRUD."""

    def test_round_trip_keeps_types(self, storage, budget):
        """Test decimals, enums, dates and lists survive a round trip."""
        expense = make_expense(
            budget, "1234.56", ExpenseCategory.PLUMBING,
            payment_type=PaymentType.DEPOSIT, photos=["a.jpg", "b.jpg"], vendor="Pipes Co",
        )
        run(storage.add(expense))

        loaded = run(storage.get(Expense, expense.id))
        assert loaded.amount == Decimal("1234.56")
        assert loaded.category is ExpenseCategory.PLUMBING
        assert loaded.payment_type is PaymentType.DEPOSIT
        assert loaded.date == TODAY
        assert loaded.photos == ["a.jpg", "b.jpg"]
        assert loaded.vendor == "Pipes Co"

    def test_get_missing_returns_none(self, storage):
        """Test getting an unknown ID returns None."""
        assert run(storage.get(Project, uuid4())) is None

    def test_add_twice_is_duplicate(self, storage, budget):
        """Test adding the same record twice raises DuplicateError."""
        expense = make_expense(budget)
        run(storage.add(expense))
        with pytest.raises(DuplicateError):
            run(storage.add(expense))

    def test_second_budget_for_project_is_duplicate(self, storage, project):
        """Test a project can only have one budget."""
        with pytest.raises(DuplicateError):
            run(storage.add(Budget(project_id=project.id, total_amount=Decimal("1"))))

    def test_update_missing_raises(self, storage, budget):
        """Test updating an unknown record raises NotFoundError."""
        with pytest.raises(NotFoundError):
            run(storage.update(make_expense(budget)))

    def test_update_persists(self, storage, budget):
        """Test updates are written."""
        expense = make_expense(budget)
        run(storage.add(expense))
        expense.update_amount(Decimal("250"))
        run(storage.update(expense))
        assert run(storage.get(Expense, expense.id)).amount == Decimal("250")

    def test_delete(self, storage, budget):
        """Test delete returns True once, then False."""
        expense = make_expense(budget)
        run(storage.add(expense))
        assert run(storage.delete(Expense, expense.id)) is True
        assert run(storage.delete(Expense, expense.id)) is False

    def test_orphan_expense_rejected(self, storage):
        """Test an expense pointing at no budget is rejected."""
        orphan = Expense(budget_id=uuid4(), amount=Decimal("1"), category=ExpenseCategory.OTHER)
        with pytest.raises(StorageError):
            run(storage.add(orphan))


class TestRecordQueries:
    """Tests for fetch and count with RecordQuery."""

    @pytest.fixture
    def expenses(self, storage, budget):
        records = [
            make_expense(budget, "300", ExpenseCategory.PLUMBING, TODAY - timedelta(days=2), notes="Pipes 50% off"),
            make_expense(budget, "100", ExpenseCategory.PAINTING, TODAY - timedelta(days=1), vendor="Paint House"),
            make_expense(budget, "200", ExpenseCategory.PLUMBING, TODAY, notes="Valves"),
        ]
        run(storage.save_all(records))
        return records

    def test_filters(self, storage, budget, expenses):
        """Test equality filters accept enum values."""
        query = RecordQuery(filters={"budget_id": budget.id, "category": ExpenseCategory.PLUMBING})
        assert len(run(storage.fetch(Expense, query))) == 2

    def test_date_range_inclusive(self, storage, expenses):
        """Test both ends of the date range are inclusive."""
        query = RecordQuery(date_from=TODAY - timedelta(days=1), date_to=TODAY)
        assert len(run(storage.fetch(Expense, query))) == 2

    def test_keyword_case_insensitive(self, storage, expenses):
        """Test keyword search ignores case and checks every field."""
        query = RecordQuery(keyword="PAINT", keyword_fields=["notes", "vendor"])
        found = run(storage.fetch(Expense, query))
        assert [e.vendor for e in found] == ["Paint House"]

    def test_keyword_percent_is_literal(self, storage, expenses):
        """Test % in a keyword is matched literally."""
        query = RecordQuery(keyword="50%", keyword_fields=["notes"])
        assert [e.notes for e in run(storage.fetch(Expense, query))] == ["Pipes 50% off"]
        query = RecordQuery(keyword="%", keyword_fields=["vendor"])
        assert run(storage.fetch(Expense, query)) == []

    def test_sort_limit_offset(self, storage, expenses):
        """Test ordering and paging."""
        query = RecordQuery(sort=[SortKey.desc("amount")], limit=2, offset=1)
        assert [e.amount for e in run(storage.fetch(Expense, query))] == [Decimal("200"), Decimal("100")]

    def test_count(self, storage, expenses):
        """Test count applies the same conditions as fetch."""
        assert run(storage.count(Expense)) == 3
        assert run(storage.count(Expense, RecordQuery(date_from=TODAY))) == 1

    def test_unknown_field_rejected(self, storage, expenses):
        """Test filtering on a field the table lacks raises StorageError."""
        with pytest.raises(StorageError):
            run(storage.fetch(Expense, RecordQuery(filters={"colour": "red"})))


class TestSaveAll:
    """Tests for transactional save_all."""

    def test_all_or_nothing(self, storage, budget):
        """Test one bad record rolls back the whole batch."""
        good = make_expense(budget)
        bad = Expense(budget_id=uuid4(), amount=Decimal("1"), category=ExpenseCategory.OTHER)
        with pytest.raises(StorageError):
            run(storage.save_all([good, bad]))
        assert run(storage.get(Expense, good.id)) is None

    def test_inserts_updates_and_deletes(self, storage, budget):
        """Test mixed inserts, updates and deletions in one call."""
        keep = make_expense(budget, "10")
        drop = make_expense(budget, "20")
        run(storage.save_all([keep, drop]))

        keep.update_amount(Decimal("15"))
        new = make_expense(budget, "30")
        run(storage.save_all([keep, new], deletions=[(Expense, drop.id)]))

        amounts = sorted(e.amount for e in run(storage.fetch(Expense)))
        assert amounts == [Decimal("15"), Decimal("30")]


class TestPhaseTasks:
    """Tests for phases stored together with their tasks."""

    def test_tasks_round_trip_in_order(self, storage, phase):
        """Test tasks load with the phase in creation order."""
        loaded = run(storage.get(Phase, phase.id))
        assert [t.title for t in loaded.tasks] == ["Water pipes", "Wiring", "Pressure test"]
        assert all(t.phase_id == phase.id for t in loaded.tasks)

    def test_removed_task_row_deleted(self, storage, phase):
        """Test removing a task from the list deletes its row."""
        removed = phase.tasks[0]
        phase.remove_task(removed.id)
        run(storage.update(phase))
        assert run(storage.get(Task, removed.id)) is None
        assert len(run(storage.get(Phase, phase.id)).tasks) == 2

    def test_task_status_saved(self, storage, phase):
        """Test task changes are written with the phase."""
        phase.tasks[1].start()
        run(storage.update(phase))
        loaded = run(storage.get(Phase, phase.id))
        assert loaded.tasks[1].status is TaskStatus.IN_PROGRESS


class TestCascadeDelete:
    """Tests for deleting a project and everything it owns."""

    def test_project_delete_removes_owned_records(self, storage, project, budget, phase):
        """Test budget, expenses, phases, tasks, materials, contacts and journal go too."""
        run(storage.save_all([
            make_expense(budget),
            Material(project_id=project.id, name="Tiles"),
            Contact(project_id=project.id, name="Wang"),
            JournalEntry(project_id=project.id, title="Day 1"),
        ]))

        assert run(storage.delete(Project, project.id)) is True

        for record_type in (Budget, Expense, Phase, Task, Material, Contact, JournalEntry):
            assert run(storage.count(record_type)) == 0

    def test_budget_delete_removes_expenses(self, storage, budget):
        """Test deleting a budget deletes its expenses."""
        run(storage.add(make_expense(budget)))
        run(storage.delete(Budget, budget.id))
        assert run(storage.count(Expense)) == 0


class TestAuditStorage:
    """Tests for the append-only audit table."""

    def test_append_and_query(self, audit_storage):
        """Test events can be read back by correlation ID and entity."""
        correlation_id = uuid4()
        expense_id = uuid4()
        event = AuditEventBuilder.expense_recorded(expense_id, uuid4(), "100", "other", correlation_id)
        assert run(audit_storage.append_event(event)) is True

        by_correlation = run(audit_storage.get_events_by_correlation_id(correlation_id))
        assert [e.event_id for e in by_correlation] == [event.event_id]

        by_entity = run(audit_storage.get_events_by_entity("expense", expense_id))
        assert by_entity[0].details["amount"] == "100"

    def test_recent_events_newest_first(self, audit_storage):
        """Test recent events come newest first."""
        first = AuditEventBuilder.project_created(uuid4(), "A", "0")
        second = AuditEventBuilder.project_created(uuid4(), "B", "0")
        second.timestamp = first.timestamp + timedelta(seconds=1)
        run(audit_storage.append_event(first))
        run(audit_storage.append_event(second))
        recent = run(audit_storage.get_recent_events(limit=1))
        assert [e.event_id for e in recent] == [second.event_id]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

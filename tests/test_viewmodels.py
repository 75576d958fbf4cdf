"""
Tests for the view models

Test strategy:
1. View models are driven the way a screen drives them
2. Failures surface as error_message, never as exceptions
3. Display strings use the default currency symbol
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from conftest import TODAY, run
from renovation.models import (
    ContactRole,
    Expense,
    ExpenseCategory,
    MaterialStatus,
    Phase,
    PhaseType,
    Project,
    TaskStatus,
)
from renovation.repositories import ProjectSortOrder
from renovation.viewmodels import (
    AddExpenseViewModel,
    BudgetDashboardViewModel,
    ContactListViewModel,
    ExpenseListViewModel,
    JournalListViewModel,
    MaterialListViewModel,
    PhaseDetailViewModel,
    ProjectFilter,
    ProjectListViewModel,
    describe_error,
)


def add_expense(expense_repo, budget, amount, category=ExpenseCategory.OTHER, day=TODAY, **kwargs):
    expense = Expense(budget_id=budget.id, amount=Decimal(amount), category=category, date=day, **kwargs)
    return run(expense_repo.create(expense, budget))


def test_describe_error_strips_action_prefix():
    """Test store messages lose their 'Failed to ...:' prefix."""
    assert describe_error(Exception("Failed to save expense: disk full")) == "disk full"
    assert describe_error(Exception("disk full")) == "disk full"


class TestAddExpenseViewModel:
    """Tests for the add-expense form."""

    @pytest.fixture
    def vm(self, record_expense):
        return AddExpenseViewModel(record_expense)

    def test_invalid_text_amount(self, vm, expense_repo, budget):
        """Test non-numeric text is reported and nothing is stored."""
        vm.amount = "abc"
        assert vm.can_save is False
        assert run(vm.save(budget)) is None
        assert vm.error_message == "Please enter a valid amount"
        assert run(expense_repo.fetch_all(budget)) == []

    def test_negative_amount(self, vm, budget):
        """Test a negative amount reports the validator message."""
        vm.amount = "-5"
        assert run(vm.save(budget)) is None
        assert vm.error_message == "Amount must be greater than 0"

    def test_save_resets_form(self, vm, expense_repo, budget):
        """Test a successful save stores the expense and clears the form."""
        vm.amount = "1,200"
        vm.category = ExpenseCategory.LIGHTING
        vm.notes = "Pendant lamps"
        expense = run(vm.save(budget))

        assert expense.amount == Decimal("1200")
        assert vm.amount == ""
        assert vm.error_message is None
        assert run(expense_repo.fetch(expense.id)).notes == "Pendant lamps"

    def test_edit_updates_existing(self, vm, expense_repo, budget):
        """Test saving while editing updates instead of inserting."""
        expense = add_expense(expense_repo, budget, "100", notes="Tiles")
        vm.edit(expense)
        assert Decimal(vm.amount) == Decimal("100")

        vm.amount = "150"
        run(vm.save(budget))

        assert vm.editing is None
        assert len(run(expense_repo.fetch_all(budget))) == 1
        assert run(expense_repo.fetch(expense.id)).amount == Decimal("150")


class TestBudgetDashboardViewModel:
    """Tests for the budget overview."""

    @pytest.fixture
    def vm(self, budget_repo, expense_repo):
        return BudgetDashboardViewModel(budget_repo, expense_repo)

    def test_load(self, vm, expense_repo, budget, project):
        """Test totals and display strings after loading."""
        add_expense(expense_repo, budget, "3000", ExpenseCategory.PLUMBING)
        add_expense(expense_repo, budget, "4000", ExpenseCategory.FLOORING)
        run(vm.load(project, TODAY))

        assert vm.has_budget is True
        assert vm.total_expenses_formatted == "¥7,000.00"
        assert vm.remaining_budget_formatted == "¥3,000.00"
        assert vm.usage_percentage_formatted == "70.0%"
        assert vm.has_warning is False
        assert vm.is_over_budget is False
        assert [s.category for s in vm.category_statistics] == [ExpenseCategory.FLOORING, ExpenseCategory.PLUMBING]
        assert len(vm.recent_expenses) == 2

    def test_update_total_budget(self, vm, expense_repo, budget, project):
        """Test lowering the total below spending shows over budget."""
        add_expense(expense_repo, budget, "7000")
        run(vm.load(project, TODAY))

        assert run(vm.update_total_budget("abc")) is False
        assert vm.error_message == "Please enter a valid amount"

        assert run(vm.update_total_budget("5,000")) is True
        assert vm.is_over_budget is True
        assert vm.estimated_overage_formatted == "¥2,000.00"

    def test_update_threshold(self, vm, budget_repo, budget, project):
        """Test the threshold change is stored."""
        run(vm.load(project, TODAY))
        assert run(vm.update_warning_threshold(0.5)) is True
        assert run(budget_repo.fetch(budget.id)).warning_threshold == 0.5

    def test_project_without_budget(self, vm, storage):
        """Test a project without a budget can get one."""
        bare = Project(name="Garage", area=20, start_date=TODAY)
        run(storage.add(bare))
        run(vm.load(bare, TODAY))
        assert vm.has_budget is False
        assert vm.total_budget_formatted == "¥0.00"

        budget = run(vm.create_budget(bare, "20000"))
        assert budget is not None
        assert vm.has_budget is True

    def test_second_budget_reports_error(self, vm, project, budget):
        """Test creating a second budget reports a store error."""
        assert run(vm.create_budget(project, "500")) is None
        assert vm.error_message.startswith("Failed to create budget")


class TestExpenseListViewModel:
    """Tests for the expense list."""

    @pytest.fixture
    def vm(self, expense_repo, record_expense):
        return ExpenseListViewModel(expense_repo, record_expense)

    @pytest.fixture
    def expenses(self, expense_repo, budget):
        return [
            add_expense(expense_repo, budget, "300", ExpenseCategory.PLUMBING, TODAY - timedelta(days=40)),
            add_expense(expense_repo, budget, "1200", ExpenseCategory.FLOORING, TODAY, vendor="Oak & Co"),
        ]

    def test_load_groups_by_month(self, vm, budget, expenses):
        """Test the unfiltered list is grouped by month."""
        run(vm.load(budget))
        assert len(vm.expenses) == 2
        assert len(vm.month_groups) == 2
        assert vm.total_formatted == "¥1,500.00"

    def test_search_wins_over_category(self, vm, budget, expenses):
        """Test search text takes precedence over the category filter."""
        vm.search_text = "oak"
        vm.selected_category = ExpenseCategory.PLUMBING
        run(vm.load(budget))
        assert [e.vendor for e in vm.expenses] == ["Oak & Co"]
        assert vm.month_groups == []

    def test_category_filter_and_clear(self, vm, budget, expenses):
        """Test the category filter and clearing it."""
        vm.selected_category = ExpenseCategory.PLUMBING
        run(vm.load(budget))
        assert len(vm.expenses) == 1

        vm.clear_filters()
        run(vm.load(budget))
        assert len(vm.expenses) == 2

    def test_delete(self, vm, budget, expenses):
        """Test delete reloads the list."""
        run(vm.load(budget))
        assert run(vm.delete(expenses[0], budget)) is True
        assert len(vm.expenses) == 1
        assert vm.is_empty is False


class TestProjectListViewModel:
    """Tests for the project list."""

    @pytest.fixture
    def vm(self, project_repo, schedule_repo, session, project):
        old = Project(name="Old house", house_type="Villa", area=300, start_date=TODAY - timedelta(days=200), estimated_duration=90)
        run(project_repo.create(old))
        run(schedule_repo.create_phase(Phase(
            project_id=old.id, title="Painting", phase_type=PhaseType.PAINTING,
            planned_start_date=old.start_date, planned_end_date=old.start_date + timedelta(days=10),
        )))

        cabin = Project(name="Cabin", area=40, start_date=TODAY - timedelta(days=10))
        run(project_repo.create(cabin))
        run(schedule_repo.create_phase(Phase(
            project_id=cabin.id, title="Cleaning", phase_type=PhaseType.CLEANING,
            planned_start_date=cabin.start_date, planned_end_date=TODAY, is_completed=True,
        )))

        vm = ProjectListViewModel(project_repo, schedule_repo, session)
        vm.today = TODAY
        run(vm.load())
        return vm

    def test_counts(self, vm):
        """Test aggregate counts per filter."""
        assert vm.total_projects == 3
        assert vm.total_active_projects == 2
        assert vm.total_completed_projects == 1
        assert vm.total_delayed_projects == 1
        assert vm.average_progress == pytest.approx(1 / 3)

    def test_filter_and_search(self, vm):
        """Test filters and search narrow the list."""
        vm.selected_filter = ProjectFilter.DELAYED
        assert [p.name for p in vm.filtered_projects] == ["Old house"]

        vm.selected_filter = ProjectFilter.ALL
        vm.search_text = "villa"
        assert [p.name for p in vm.filtered_projects] == ["Old house"]

    def test_sort_orders(self, vm):
        """Test name and progress sorting."""
        vm.sort_order = ProjectSortOrder.NAME
        assert [p.name for p in vm.filtered_projects] == ["Cabin", "Old house", "Riverside flat"]
        vm.sort_order = ProjectSortOrder.PROGRESS
        assert vm.filtered_projects[0].name == "Cabin"

    def test_load_selects_a_project(self, vm, session):
        """Test loading picks a current project when none was chosen."""
        assert session.selected_project_id in {p.id for p in vm.projects}

    def test_select_and_delete(self, vm, session):
        """Test deleting the selected project selects another."""
        target = next(p for p in vm.projects if p.name == "Cabin")
        vm.select(target)
        assert vm.is_selected(target)

        assert run(vm.delete(target)) is True
        assert vm.total_projects == 2
        assert session.selected_project_id != target.id
        assert session.selected_project_id is not None

    def test_toggle_active_and_duplicate(self, vm):
        """Test deactivating a project and duplicating one."""
        riverside = next(p for p in vm.projects if p.name == "Riverside flat")
        run(vm.toggle_active(riverside))
        assert vm.total_active_projects == 1

        copy = run(vm.duplicate(riverside))
        assert copy.name == "Riverside flat - copy"
        assert vm.total_projects == 4


class TestPhaseDetailViewModel:
    """Tests for the task checklist."""

    @pytest.fixture
    def vm(self, phase, schedule_repo, update_task_status):
        return PhaseDetailViewModel(phase, schedule_repo, update_task_status)

    def test_toggle_and_issue(self, vm):
        """Test toggling and flagging update the status buckets."""
        run(vm.toggle_task(vm.tasks[0]))
        run(vm.mark_task_as_issue(vm.tasks[1]))

        assert len(vm.in_progress_tasks) == 1
        assert len(vm.issue_tasks) == 1
        assert vm.filtered_tasks[0].status is TaskStatus.ISSUE

    def test_filters(self, vm):
        """Test status filter and search."""
        run(vm.toggle_task(vm.tasks[0]))
        vm.selected_status = TaskStatus.PENDING
        assert {t.title for t in vm.filtered_tasks} == {"Wiring", "Pressure test"}
        vm.search_text = "PRESSURE"
        assert [t.title for t in vm.filtered_tasks] == ["Pressure test"]

    def test_add_blank_task_reports_error(self, vm):
        """Test a blank title is reported, not raised."""
        assert run(vm.add_task("   ")) is None
        assert vm.error_message
        assert len(vm.tasks) == 3

    def test_add_and_delete_task(self, vm):
        """Test adding and removing tasks."""
        task = run(vm.add_task("Sockets", assignee="Li"))
        assert len(vm.tasks) == 4
        run(vm.delete_task(task))
        run(vm.reload())
        assert len(vm.tasks) == 3

    def test_complete_phase(self, vm, schedule_repo, phase):
        """Test completing the phase completes every task."""
        run(vm.complete_phase(TODAY))
        stored = run(schedule_repo.fetch_phase(phase.id))
        assert stored.is_completed is True
        assert stored.actual_start_date == TODAY
        assert vm.task_progress == 1.0

    def test_overdue(self, vm):
        """Test tasks past their planned end are overdue."""
        vm.tasks[0].planned_end_date = TODAY - timedelta(days=1)
        assert [t.title for t in vm.overdue_tasks(TODAY)] == ["Water pipes"]


class TestRecordListViewModels:
    """Tests for materials, contacts and journal lists."""

    def test_materials(self, material_repo, project_repo, session, project):
        """Test adding, grouping and costing materials."""
        vm = MaterialListViewModel(material_repo, project_repo, session)
        run(vm.load())
        assert vm.project.id == project.id

        run(vm.add(name="Tiles", unit_price=Decimal("10"), quantity=3, location="Kitchen"))
        run(vm.add(name="Paint", unit_price=Decimal("5"), quantity=2))
        assert vm.total_cost_formatted == "¥40.00"
        assert [label for label, _ in vm.grouped_by_location] == ["Kitchen", "Unassigned"]

        tiles = next(m for m in vm.materials if m.name == "Tiles")
        run(vm.update_status(tiles, MaterialStatus.DELIVERED))
        assert len(vm.materials_with_status(MaterialStatus.DELIVERED)) == 1

        vm.search_text = "pai"
        assert [m.name for m in vm.filtered_materials] == ["Paint"]

    def test_material_without_project(self, material_repo, project_repo, session):
        """Test adding with no project asks the user to pick one."""
        vm = MaterialListViewModel(material_repo, project_repo, session)
        run(vm.load())
        assert run(vm.add(name="Tiles")) is None
        assert vm.error_message == "Select a project first"

    def test_invalid_material_reports_error(self, material_repo, project_repo, session, project):
        """Test a blank name is reported through error_message."""
        vm = MaterialListViewModel(material_repo, project_repo, session)
        run(vm.load())
        assert run(vm.add(name="")) is None
        assert vm.error_message

    def test_contacts(self, contact_repo, project_repo, session, project):
        """Test grouping and recommendation."""
        vm = ContactListViewModel(contact_repo, project_repo, session)
        run(vm.load())
        run(vm.add(name="Zhao", role=ContactRole.FOREMAN))
        run(vm.add(name="Li", role=ContactRole.ELECTRICIAN, phone_number="138000"))

        assert [role for role, _ in vm.grouped_contacts] == [ContactRole.FOREMAN, ContactRole.ELECTRICIAN]
        li = next(c for c in vm.contacts if c.name == "Li")
        run(vm.toggle_recommended(li))
        assert [c.name for c in vm.recommended_contacts] == ["Li"]

        vm.search_text = "138"
        assert [c.name for c in vm.filtered_contacts] == ["Li"]

    def test_journal(self, journal_repo, project_repo, session, project):
        """Test month grouping and tags."""
        vm = JournalListViewModel(journal_repo, project_repo, session)
        run(vm.load())
        run(vm.add(title="Walls up", date=date(2024, 5, 20), tags=["masonry"]))
        run(vm.add(title="Tiles arrived", date=date(2024, 6, 2), tags=["delivery"], photos=["tiles.jpg"]))

        assert [label for label, _ in vm.grouped_entries] == ["June 2024", "May 2024"]
        assert vm.all_tags == ["delivery", "masonry"]
        assert [e.title for e in vm.entries_with_photos] == ["Tiles arrived"]

        vm.selected_tag = "masonry"
        assert [e.title for e in vm.filtered_entries] == ["Walls up"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

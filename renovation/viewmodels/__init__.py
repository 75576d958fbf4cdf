"""View models: screen state and actions consumed by the Streamlit app."""

from renovation.viewmodels.add_expense import AddExpenseViewModel
from renovation.viewmodels.base import BaseViewModel, describe_error
from renovation.viewmodels.budget_dashboard import BudgetDashboardViewModel
from renovation.viewmodels.expense_list import ExpenseListViewModel
from renovation.viewmodels.phase_detail import PhaseDetailViewModel
from renovation.viewmodels.project_list import ProjectFilter, ProjectListViewModel
from renovation.viewmodels.records import (
    ContactListViewModel,
    JournalListViewModel,
    MaterialListViewModel,
)

__all__ = [
    "AddExpenseViewModel",
    "BaseViewModel",
    "BudgetDashboardViewModel",
    "ContactListViewModel",
    "ExpenseListViewModel",
    "JournalListViewModel",
    "MaterialListViewModel",
    "PhaseDetailViewModel",
    "ProjectFilter",
    "ProjectListViewModel",
    "describe_error",
]

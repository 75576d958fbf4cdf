"""Searchable, filterable expense list."""

from decimal import Decimal
from typing import Optional

from renovation.formatting import format_currency
from renovation.models import Budget, Expense, ExpenseCategory, MonthGroup
from renovation.repositories import ExpenseRepository, ExpenseSortOption
from renovation.statistics import group_expenses_by_month, total_expenses
from renovation.use_cases import RecordExpenseUseCase
from renovation.viewmodels.base import BaseViewModel


class ExpenseListViewModel(BaseViewModel):
    """
    Expenses of one budget.

    Search text wins over the category filter; with neither set the list
    follows the sort option and is also grouped by month.
    """

    def __init__(
        self,
        expense_repository: ExpenseRepository,
        record_expense: RecordExpenseUseCase,
    ):
        super().__init__()
        self._expenses = expense_repository
        self._record_expense = record_expense

        self.search_text = ""
        self.selected_category: Optional[ExpenseCategory] = None
        self.sort_option = ExpenseSortOption.DATE_DESCENDING

        self.expenses: list[Expense] = []
        self.month_groups: list[MonthGroup] = []

    async def _load(self, budget: Budget) -> None:
        if self.search_text.strip():
            self.expenses = await self._expenses.search(budget, self.search_text)
            self.month_groups = []
        elif self.selected_category is not None:
            self.expenses = await self._expenses.fetch_expenses(budget, category=self.selected_category)
            self.month_groups = []
        else:
            self.expenses = await self._expenses.fetch_all(budget, self.sort_option)
            self.month_groups = group_expenses_by_month(self.expenses)

    async def load(self, budget: Budget) -> None:
        self.is_loading = True
        await self._run("load expenses", self._load(budget))
        self.is_loading = False

    async def delete(self, expense: Expense, budget: Budget) -> bool:
        deleted = await self._run("delete expense", self._record_expense.delete(expense))
        if self.error_message:
            return False
        await self.load(budget)
        return bool(deleted)

    def clear_filters(self) -> None:
        self.search_text = ""
        self.selected_category = None

    @property
    def is_empty(self) -> bool:
        return not self.expenses

    @property
    def total(self) -> Decimal:
        return total_expenses(self.expenses)

    @property
    def total_formatted(self) -> str:
        return format_currency(self.total)

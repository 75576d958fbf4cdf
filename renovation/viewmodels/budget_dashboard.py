"""Budget overview for the current project."""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from renovation.config import BudgetSettings, get_settings
from renovation.formatting import format_currency, format_percentage, parse_amount
from renovation.models import (
    Budget,
    BudgetStatistics,
    CategoryStatistic,
    Expense,
    ParentCategory,
    Project,
)
from renovation.repositories import BudgetRepository, ExpenseRepository
from renovation.statistics import sort_category_statistics
from renovation.viewmodels.base import BaseViewModel


ZERO = Decimal("0")


class BudgetDashboardViewModel(BaseViewModel):
    """
    Totals, threshold flags, category breakdown and recent expenses.

    Call load() again after any expense changes; nothing is cached
    between loads.
    """

    def __init__(
        self,
        budget_repository: BudgetRepository,
        expense_repository: ExpenseRepository,
        settings: Optional[BudgetSettings] = None,
    ):
        super().__init__()
        self._budgets = budget_repository
        self._expenses = expense_repository
        self._settings = settings or get_settings().budget

        self.project: Optional[Project] = None
        self.budget: Optional[Budget] = None
        self.statistics: Optional[BudgetStatistics] = None
        self.category_statistics: list[CategoryStatistic] = []
        self.parent_category_totals: dict[ParentCategory, Decimal] = {}
        self.recent_expenses: list[Expense] = []
        self.top_expenses: list[Expense] = []

    async def _load(self, project: Project, today: Optional[date]) -> None:
        self.budget = await self._budgets.fetch_budget(project)
        if self.budget is None:
            self.statistics = None
            self.category_statistics = []
            self.parent_category_totals = {}
            self.recent_expenses = []
            self.top_expenses = []
            return

        self.statistics = await self._budgets.get_budget_statistics(self.budget, today)
        self.category_statistics = sort_category_statistics(
            await self._budgets.get_category_statistics(self.budget)
        )
        self.parent_category_totals = await self._budgets.get_parent_category_totals(self.budget)
        self.recent_expenses = await self._expenses.fetch_top_recent(
            self.budget, self._settings.recent_expense_limit
        )
        self.top_expenses = await self._expenses.fetch_top_expenses(
            self.budget, self._settings.top_expense_limit
        )

    async def load(self, project: Project, today: Optional[date] = None) -> None:
        self.project = project
        self.is_loading = True
        await self._run("load budget", self._load(project, today))
        self.is_loading = False

    async def create_budget(
        self,
        project: Project,
        amount: Union[str, Decimal],
        warning_threshold: Optional[float] = None,
    ) -> Optional[Budget]:
        value = parse_amount(amount) if isinstance(amount, str) else amount
        if value is None:
            self.error_message = "Please enter a valid amount"
            return None

        async def _create() -> Budget:
            budget = Budget(
                project_id=project.id,
                total_amount=value,
                warning_threshold=(
                    self._settings.default_warning_threshold
                    if warning_threshold is None else warning_threshold
                ),
            )
            return await self._budgets.create(budget)

        budget = await self._run("create budget", _create())
        if budget is not None:
            await self.load(project)
        return budget

    async def update_total_budget(self, amount: Union[str, Decimal]) -> bool:
        if self.budget is None or self.project is None:
            return False
        value = parse_amount(amount) if isinstance(amount, str) else amount
        if value is None or value < 0:
            self.error_message = "Please enter a valid amount"
            return False

        await self._run("update budget", self._budgets.update_total_amount(self.budget, value))
        if self.error_message:
            return False
        await self.load(self.project)
        return True

    async def update_warning_threshold(self, threshold: float) -> bool:
        if self.budget is None or self.project is None:
            return False
        await self._run(
            "update budget",
            self._budgets.update_warning_threshold(self.budget, threshold),
        )
        if self.error_message:
            return False
        await self.load(self.project)
        return True

    # -------------------------------------------------------------------------
    # Display values
    # -------------------------------------------------------------------------

    @property
    def has_budget(self) -> bool:
        return self.budget is not None

    @property
    def total_budget_formatted(self) -> str:
        return format_currency(self.statistics.total_budget if self.statistics else ZERO)

    @property
    def total_expenses_formatted(self) -> str:
        return format_currency(self.statistics.total_expenses if self.statistics else ZERO)

    @property
    def remaining_budget_formatted(self) -> str:
        return format_currency(self.statistics.remaining_budget if self.statistics else ZERO)

    @property
    def current_month_expenses_formatted(self) -> str:
        return format_currency(self.statistics.current_month_expenses if self.statistics else ZERO)

    @property
    def estimated_overage_formatted(self) -> str:
        return format_currency(self.statistics.estimated_overage if self.statistics else ZERO)

    @property
    def usage_percentage(self) -> float:
        return self.statistics.usage_percentage if self.statistics else 0.0

    @property
    def usage_percentage_formatted(self) -> str:
        return format_percentage(self.usage_percentage)

    @property
    def has_warning(self) -> bool:
        return bool(self.statistics and self.statistics.has_reached_warning_threshold)

    @property
    def is_over_budget(self) -> bool:
        return bool(self.statistics and self.statistics.is_over_budget)

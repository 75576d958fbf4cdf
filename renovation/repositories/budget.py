"""
Budget Repository

Loads and saves budgets and computes their statistics.

DESIGN DECISION: Statistics are recomputed on every call from a fresh
fetch of the budget and its expenses. Nothing derived is cached or
stored, so a deleted expense can never linger in a total.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from renovation.audit import AuditLogger
from renovation.config import get_logger
from renovation.models import (
    Budget,
    BudgetStatistics,
    CategoryStatistic,
    Expense,
    ExpenseCategory,
    ParentCategory,
    Project,
    RecordQuery,
)
from renovation.services.storage import RecordStorageInterface, restore_on_error
from renovation.statistics import (
    compute_budget_statistics,
    compute_category_statistics,
    compute_parent_category_totals,
)


logger = get_logger("repositories.budget")


class BudgetRepository:
    """CRUD for budgets plus the statistics derived from their expenses."""

    def __init__(
        self,
        storage: RecordStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()

    async def _current(self, budget: Budget) -> Budget:
        """Re-read the budget so statistics use its stored total."""
        return await self.fetch(budget.id) or budget

    async def _expenses(self, budget: Budget) -> list[Expense]:
        query = RecordQuery(filters={"budget_id": budget.id})
        return await self._storage.fetch(Expense, query)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def fetch_budget(self, project: Project) -> Optional[Budget]:
        """The budget of a project, if it has one."""
        budgets = await self._storage.fetch(
            Budget, RecordQuery(filters={"project_id": project.id}, limit=1)
        )
        return budgets[0] if budgets else None

    async def fetch(self, budget_id: UUID) -> Optional[Budget]:
        return await self._storage.get(Budget, budget_id)

    async def create(self, budget: Budget) -> Budget:
        """
        Store a new budget.

        Raises:
            DuplicateError: If the project already has a budget
        """
        await self._storage.add(budget)
        logger.info(
            "budget_created",
            budget_id=str(budget.id),
            project_id=str(budget.project_id),
            total_amount=str(budget.total_amount),
        )
        return budget

    async def update(self, budget: Budget) -> Budget:
        budget.touch()
        await self._storage.update(budget)
        return budget

    async def delete(self, budget: Budget) -> bool:
        """Delete the budget and all of its expenses."""
        return await self._storage.delete(Budget, budget.id)

    async def update_total_amount(self, budget: Budget, amount: Decimal) -> Budget:
        with restore_on_error(budget):
            budget.update_total_amount(amount)
            await self._storage.update(budget)
        logger.info("budget_total_updated", budget_id=str(budget.id), total_amount=str(amount))
        await self._audit.log_budget_updated(budget.id, str(budget.total_amount), budget.warning_threshold)
        return budget

    async def update_warning_threshold(self, budget: Budget, threshold: float) -> Budget:
        """Set the warning threshold, clamped into [0, 1]."""
        with restore_on_error(budget):
            budget.update_warning_threshold(threshold)
            await self._storage.update(budget)
        await self._audit.log_budget_updated(budget.id, str(budget.total_amount), budget.warning_threshold)
        return budget

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    async def get_budget_statistics(
        self,
        budget: Budget,
        today: Optional[date] = None,
    ) -> BudgetStatistics:
        current = await self._current(budget)
        return compute_budget_statistics(current, await self._expenses(current), today)

    async def get_category_statistics(
        self,
        budget: Budget,
    ) -> dict[ExpenseCategory, CategoryStatistic]:
        """Statistics for every category, zero-filled."""
        return compute_category_statistics(await self._expenses(budget))

    async def get_parent_category_totals(
        self,
        budget: Budget,
    ) -> dict[ParentCategory, Decimal]:
        return compute_parent_category_totals(await self._expenses(budget))

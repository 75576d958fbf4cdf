"""
Expense Repository

Query façade over the expenses of one budget. Every list comes back
already ordered; most are date descending, newest first.
"""

from datetime import date
from enum import Enum
from typing import Optional
from uuid import UUID

from renovation.config import get_logger
from renovation.models import (
    Budget,
    Expense,
    ExpenseCategory,
    MonthGroup,
    RecordQuery,
    SortKey,
)
from renovation.services.storage import RecordStorageInterface
from renovation.statistics import group_expenses_by_month


logger = get_logger("repositories.expense")

SEARCH_FIELDS = ["notes", "vendor"]


class ExpenseSortOption(str, Enum):
    """Sort orders offered in the expense list."""
    DATE_DESCENDING = "date_descending"
    DATE_ASCENDING = "date_ascending"
    AMOUNT_DESCENDING = "amount_descending"
    AMOUNT_ASCENDING = "amount_ascending"

    @property
    def display_name(self) -> str:
        return {
            ExpenseSortOption.DATE_DESCENDING: "Newest first",
            ExpenseSortOption.DATE_ASCENDING: "Oldest first",
            ExpenseSortOption.AMOUNT_DESCENDING: "Largest first",
            ExpenseSortOption.AMOUNT_ASCENDING: "Smallest first",
        }[self]

    @property
    def sort_keys(self) -> list[SortKey]:
        # created_at breaks ties between expenses on the same day
        return {
            ExpenseSortOption.DATE_DESCENDING: [SortKey.desc("date"), SortKey.desc("created_at")],
            ExpenseSortOption.DATE_ASCENDING: [SortKey.asc("date"), SortKey.asc("created_at")],
            ExpenseSortOption.AMOUNT_DESCENDING: [SortKey.desc("amount"), SortKey.desc("date")],
            ExpenseSortOption.AMOUNT_ASCENDING: [SortKey.asc("amount"), SortKey.desc("date")],
        }[self]


class ExpenseRepository:
    """
    CRUD and ordered queries for expenses.

    Errors from the store propagate as StorageError; nothing is retried.
    """

    def __init__(self, storage: RecordStorageInterface):
        self._storage = storage

    def _budget_query(self, budget: Budget, **kwargs) -> RecordQuery:
        filters = {"budget_id": budget.id, **kwargs.pop("filters", {})}
        kwargs.setdefault("sort", ExpenseSortOption.DATE_DESCENDING.sort_keys)
        return RecordQuery(filters=filters, **kwargs)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def create(self, expense: Expense, budget: Budget) -> Expense:
        """Store a new expense under the given budget."""
        expense.budget_id = budget.id
        await self._storage.add(expense)
        logger.info(
            "expense_created",
            expense_id=str(expense.id),
            budget_id=str(budget.id),
            amount=str(expense.amount),
        )
        return expense

    async def fetch(self, expense_id: UUID) -> Optional[Expense]:
        return await self._storage.get(Expense, expense_id)

    async def update(self, expense: Expense) -> Expense:
        expense.touch()
        await self._storage.update(expense)
        logger.info("expense_updated", expense_id=str(expense.id))
        return expense

    async def delete(self, expense: Expense) -> bool:
        deleted = await self._storage.delete(Expense, expense.id)
        logger.info("expense_deleted", expense_id=str(expense.id), deleted=deleted)
        return deleted

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def fetch_all(
        self,
        budget: Budget,
        sort_by: ExpenseSortOption = ExpenseSortOption.DATE_DESCENDING,
    ) -> list[Expense]:
        return await self._storage.fetch(
            Expense, self._budget_query(budget, sort=sort_by.sort_keys)
        )

    async def fetch_expenses(
        self,
        budget: Budget,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Expense]:
        """
        Expenses filtered by category and/or an inclusive date range.

        Returns:
            Matching expenses, newest first
        """
        filters = {"category": category} if category else {}
        query = self._budget_query(
            budget,
            filters=filters,
            date_from=date_from,
            date_to=date_to,
        )
        return await self._storage.fetch(Expense, query)

    async def search(self, budget: Budget, keyword: str) -> list[Expense]:
        """
        Case-insensitive substring search over notes and vendor.

        A blank keyword returns every expense.
        """
        if not keyword or not keyword.strip():
            return await self.fetch_all(budget)
        query = self._budget_query(budget, keyword=keyword, keyword_fields=SEARCH_FIELDS)
        return await self._storage.fetch(Expense, query)

    async def fetch_grouped_by_month(self, budget: Budget) -> list[MonthGroup]:
        """Every expense bucketed by month, newest month first."""
        return group_expenses_by_month(await self.fetch_all(budget))

    async def fetch_top_recent(self, budget: Budget, limit: int = 3) -> list[Expense]:
        """The most recent expenses by date."""
        if limit <= 0:
            return []
        return await self._storage.fetch(Expense, self._budget_query(budget, limit=limit))

    async def fetch_top_expenses(self, budget: Budget, limit: int = 5) -> list[Expense]:
        """The largest expenses by amount."""
        if limit <= 0:
            return []
        query = self._budget_query(
            budget,
            sort=ExpenseSortOption.AMOUNT_DESCENDING.sort_keys,
            limit=limit,
        )
        return await self._storage.fetch(Expense, query)

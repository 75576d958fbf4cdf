"""
Derived statistics models.

These are never stored. They are computed from a fresh fetch of the
underlying records every time they are read.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from renovation.models.enums import ExpenseCategory
from renovation.models.project import Expense


class BudgetStatistics(BaseModel):
    """Totals and threshold flags for one budget."""

    total_budget: Decimal = Field(..., description="Budget total amount")
    total_expenses: Decimal = Field(..., description="Sum of all expense amounts")
    remaining_budget: Decimal = Field(
        ...,
        description="Budget minus expenses, negative when over budget"
    )
    usage_percentage: float = Field(
        ...,
        ge=0.0,
        description="Expenses / budget as a fraction (0 when the budget is 0)"
    )
    warning_threshold: float
    has_reached_warning_threshold: bool
    is_over_budget: bool
    estimated_overage: Decimal = Field(
        ...,
        ge=0,
        description="How far expenses exceed the budget, else 0"
    )
    current_month_expenses: Decimal
    expense_count: int = Field(default=0, ge=0)


class CategoryStatistic(BaseModel):
    """Spending in one expense category."""

    category: ExpenseCategory
    amount: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    percentage: float = Field(
        default=0.0,
        ge=0.0,
        description="Share of total expenses (0 when there are none)"
    )


class MonthGroup(BaseModel):
    """Expenses of one calendar month, in the order they were fetched."""

    year: int
    month: int = Field(..., ge=1, le=12)
    expenses: list[Expense] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((e.amount for e in self.expenses), Decimal("0"))

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class TaskStatusSummary(BaseModel):
    """Task counts per status for a phase (or any list of tasks)."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    issue: int = 0
    cancelled: int = 0

    @property
    def progress(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def all_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total

    @property
    def has_issues(self) -> bool:
        return self.issue > 0

"""
Budget statistics.

Pure functions over an explicit list of expenses. Nothing here touches
the store; repositories fetch and then call these.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from renovation.models import (
    Budget,
    BudgetStatistics,
    CategoryStatistic,
    Expense,
    ExpenseCategory,
    MonthGroup,
    ParentCategory,
)


ZERO = Decimal("0")


def total_expenses(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), ZERO)


def usage_fraction(spent: Decimal, total: Decimal) -> float:
    """spent / total, or 0 when there is no budget."""
    if total <= 0:
        return 0.0
    return float(spent / total)


def compute_budget_statistics(
    budget: Budget,
    expenses: list[Expense],
    today: Optional[date] = None,
) -> BudgetStatistics:
    """
    Compute totals and threshold flags for a budget.

    Args:
        budget: The budget (for total amount and threshold)
        expenses: Every expense of that budget
        today: Reference day for current_month_expenses

    Returns:
        BudgetStatistics
    """
    today = today or date.today()
    spent = total_expenses(expenses)
    usage = usage_fraction(spent, budget.total_amount)

    this_month = total_expenses(
        e for e in expenses
        if e.date.year == today.year and e.date.month == today.month
    )

    return BudgetStatistics(
        total_budget=budget.total_amount,
        total_expenses=spent,
        remaining_budget=budget.total_amount - spent,
        usage_percentage=usage,
        warning_threshold=budget.warning_threshold,
        has_reached_warning_threshold=usage >= budget.warning_threshold,
        is_over_budget=spent > budget.total_amount,
        estimated_overage=max(ZERO, spent - budget.total_amount),
        current_month_expenses=this_month,
        expense_count=len(expenses),
    )


def compute_category_statistics(
    expenses: list[Expense],
) -> dict[ExpenseCategory, CategoryStatistic]:
    """
    Per-category amount, count and share of total.

    Every category is present, zero-filled, in enum order.
    """
    spent = total_expenses(expenses)
    amounts = {c: ZERO for c in ExpenseCategory}
    counts = {c: 0 for c in ExpenseCategory}

    for expense in expenses:
        amounts[expense.category] += expense.amount
        counts[expense.category] += 1

    return {
        category: CategoryStatistic(
            category=category,
            amount=amounts[category],
            count=counts[category],
            percentage=usage_fraction(amounts[category], spent),
        )
        for category in ExpenseCategory
    }


def sort_category_statistics(
    stats: dict[ExpenseCategory, CategoryStatistic],
    include_empty: bool = False,
) -> list[CategoryStatistic]:
    """Display order: amount descending, ties in enum order."""
    items = [s for s in stats.values() if include_empty or s.count > 0]
    return sorted(items, key=lambda s: s.amount, reverse=True)


def compute_parent_category_totals(
    expenses: list[Expense],
) -> dict[ParentCategory, Decimal]:
    """Amount per parent category, every parent present."""
    totals = {p: ZERO for p in ParentCategory}
    for expense in expenses:
        totals[expense.category.parent_category] += expense.amount
    return totals


def group_expenses_by_month(expenses: list[Expense]) -> list[MonthGroup]:
    """
    Bucket expenses by (year, month) of their date.

    Each bucket keeps the input order; buckets are ordered newest first.
    """
    buckets: dict[tuple[int, int], list[Expense]] = {}
    for expense in expenses:
        key = (expense.date.year, expense.date.month)
        buckets.setdefault(key, []).append(expense)

    return [
        MonthGroup(year=year, month=month, expenses=items)
        for (year, month), items in sorted(
            buckets.items(), key=lambda kv: kv[0], reverse=True
        )
    ]

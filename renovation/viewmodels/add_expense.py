"""Form state for recording or editing an expense."""

from datetime import date
from typing import Optional

from renovation.formatting import parse_amount
from renovation.models import Budget, Expense, ExpenseCategory, PaymentType
from renovation.use_cases import RecordExpenseUseCase
from renovation.viewmodels.base import BaseViewModel


class AddExpenseViewModel(BaseViewModel):
    """
    The add-expense form.

    The amount is kept as the text the user typed and parsed on save.
    When editing is set (via edit()), save() updates that expense
    instead of recording a new one.
    """

    def __init__(self, record_expense: RecordExpenseUseCase):
        super().__init__()
        self._record_expense = record_expense
        self.editing: Optional[Expense] = None
        self.reset()

    def reset(self) -> None:
        self.amount = ""
        self.category = ExpenseCategory.OTHER
        self.expense_date = date.today()
        self.notes = ""
        self.vendor = ""
        self.payment_type = PaymentType.FULL
        self.photos: list[str] = []
        self.editing = None
        self.error_message = None

    def edit(self, expense: Expense) -> None:
        """Fill the form from an existing expense."""
        self.amount = str(expense.amount)
        self.category = expense.category
        self.expense_date = expense.date
        self.notes = expense.notes
        self.vendor = expense.vendor
        self.payment_type = expense.payment_type
        self.photos = list(expense.photos)
        self.editing = expense
        self.error_message = None

    @property
    def can_save(self) -> bool:
        value = parse_amount(self.amount)
        return value is not None and value > 0

    async def save(self, budget: Budget) -> Optional[Expense]:
        """
        Record (or update) the expense.

        Returns:
            The saved expense, or None with error_message set
        """
        value = parse_amount(self.amount)
        if value is None:
            self.error_message = "Please enter a valid amount"
            return None

        self.is_loading = True
        if self.editing is not None:
            operation = self._record_expense.update(
                self.editing,
                amount=value,
                category=self.category,
                date=self.expense_date,
                notes=self.notes,
                payment_type=self.payment_type,
                vendor=self.vendor,
                photos=self.photos,
            )
            expense = await self._run("update expense", operation)
        else:
            operation = self._record_expense.execute(
                value,
                self.category,
                self.expense_date,
                notes=self.notes,
                photos=self.photos,
                payment_type=self.payment_type,
                vendor=self.vendor,
                budget=budget,
            )
            expense = await self._run("save expense", operation)
        self.is_loading = False

        if expense is not None:
            self.reset()
        return expense

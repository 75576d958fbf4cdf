"""
Expense Input Validation

DESIGN DECISION: Input is validated completely before anything is
mutated or written. A rejected input leaves every record unchanged.

Checks:
- Amount: a finite number with 0 < amount < max_expense_amount and
  no more than 2 decimal places
- Category: one of the ExpenseCategory values
- Date: a calendar date no further in the future than the configured
  tolerance
- Payment type: one of the PaymentType values

IMPORTANT: Validation NEVER silently fixes issues. Each failure raises
an InputValidationError whose message can be shown to the user as is.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from renovation.config import BudgetSettings, get_settings
from renovation.models import ExpenseCategory, PaymentType

# Smallest amount the store keeps (Numeric(14, 2))
CENT = Decimal("0.01")


class InputValidationError(Exception):
    """User input was rejected. The message is user-facing."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidAmountError(InputValidationError):
    """Amount is missing, not a number, or out of range."""

    def __init__(self, message: str):
        super().__init__(message, field="amount")


class InvalidDateError(InputValidationError):
    """Date is not a date or too far in the future."""

    def __init__(self, message: str):
        super().__init__(message, field="date")


class InvalidCategoryError(InputValidationError):
    """Category is not a known expense category."""

    def __init__(self, message: str):
        super().__init__(message, field="category")


class ExpenseValidator:
    """
    Validates the fields of an expense before it is created or updated.

    Every method returns the normalized value or raises a subclass of
    InputValidationError.
    """

    def __init__(self, settings: Optional[BudgetSettings] = None):
        self._settings = settings or get_settings().budget

    @property
    def max_amount(self) -> Decimal:
        return self._settings.max_expense_amount

    def validate_amount(self, amount: Any) -> Decimal:
        if amount is None or isinstance(amount, bool):
            raise InvalidAmountError("Please enter a valid amount")
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError("Please enter a valid amount")

        if not value.is_finite():
            raise InvalidAmountError("Please enter a valid amount")
        if value <= 0:
            raise InvalidAmountError("Amount must be greater than 0")
        if value >= self.max_amount:
            raise InvalidAmountError(f"Amount must be less than {self.max_amount:,.0f}")
        cents = value.quantize(CENT)
        if cents != value:
            raise InvalidAmountError("Amount cannot have more than 2 decimal places")
        return cents if value.as_tuple().exponent < -2 else value

    def validate_category(self, category: Any) -> ExpenseCategory:
        if isinstance(category, ExpenseCategory):
            return category
        try:
            return ExpenseCategory(category)
        except ValueError:
            raise InvalidCategoryError(f"Unknown expense category: {category!r}")

    def validate_date(self, expense_date: Any, today: Optional[date] = None) -> date:
        if isinstance(expense_date, datetime):
            expense_date = expense_date.date()
        if not isinstance(expense_date, date):
            raise InvalidDateError("Please choose a valid date")

        today = today or date.today()
        latest = today + timedelta(days=self._settings.future_date_tolerance_days)
        if expense_date > latest:
            raise InvalidDateError(
                f"Date cannot be more than {self._settings.future_date_tolerance_days} "
                f"days in the future"
            )
        return expense_date

    def validate_payment_type(self, payment_type: Any) -> PaymentType:
        if isinstance(payment_type, PaymentType):
            return payment_type
        try:
            return PaymentType(payment_type)
        except ValueError:
            raise InputValidationError(
                f"Unknown payment type: {payment_type!r}",
                field="payment_type",
            )

"""Input validation package."""

from renovation.validation.validator import (
    ExpenseValidator,
    InputValidationError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidDateError,
)

__all__ = [
    "ExpenseValidator",
    "InputValidationError",
    "InvalidAmountError",
    "InvalidCategoryError",
    "InvalidDateError",
]

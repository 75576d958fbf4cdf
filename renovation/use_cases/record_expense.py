"""
Record Expense Use Case

Flow for adding, editing and removing an expense:
1. Validate → every supplied field, before anything is touched
2. Persist → one store call
3. Audit → expense event under one correlation ID
4. Alert → re-read budget statistics, notify on threshold crossings

DESIGN DECISION: Step 4 is best-effort. The expense is committed before
alerts are evaluated; a failing statistics read or notification sink is
logged and audited, never raised, and never rolls the expense back.
"""

import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import ValidationError

from renovation.audit import AuditLogger, create_correlation_id
from renovation.config import get_logger
from renovation.models import Budget, Expense, ExpenseCategory, PaymentType
from renovation.notifications import AlertLevel, BudgetAlert, NotificationSink
from renovation.repositories import BudgetRepository, ExpenseRepository
from renovation.services.storage import StorageError
from renovation.validation import ExpenseValidator, InputValidationError


logger = get_logger("use_cases.record_expense")


def _first_error(error: ValidationError) -> InputValidationError:
    """Turn a pydantic error into a user-facing validation error."""
    detail = error.errors()[0]
    field = ".".join(str(part) for part in detail.get("loc", ())) or None
    return InputValidationError(detail.get("msg", str(error)), field=field)


class RecordExpenseUseCase:
    """
    Records, updates and deletes expenses against a budget.

    Input problems raise InputValidationError subclasses; store problems
    raise StorageError. Both leave the stored data unchanged.
    """

    def __init__(
        self,
        expense_repository: ExpenseRepository,
        budget_repository: BudgetRepository,
        notification_sink: Optional[NotificationSink] = None,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._expenses = expense_repository
        self._budgets = budget_repository
        self._sink = notification_sink
        self._validator = validator or ExpenseValidator()
        self._audit = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def execute(
        self,
        amount: Any,
        category: Any,
        date: Any,
        notes: str = "",
        photos: Optional[list[str]] = None,
        payment_type: Any = PaymentType.FULL,
        vendor: str = "",
        *,
        budget: Budget,
        today: Optional[datetime.date] = None,
    ) -> Expense:
        """
        Validate and record a new expense.

        Returns:
            The stored expense

        Raises:
            InvalidAmountError: Amount missing or outside (0, max)
            InvalidCategoryError: Unknown category
            InvalidDateError: Date too far in the future
            StorageError: The store rejected the write
        """
        correlation_id = create_correlation_id()

        try:
            expense = Expense(
                budget_id=budget.id,
                amount=self._validator.validate_amount(amount),
                category=self._validator.validate_category(category),
                date=self._validator.validate_date(date, today),
                notes=notes or "",
                photos=list(photos or []),
                payment_type=self._validator.validate_payment_type(payment_type),
                vendor=vendor or "",
            )
        except ValidationError as e:
            error = _first_error(e)
            await self._audit.log_validation_failed(error.field or "expense", error.message, correlation_id)
            raise error from e
        except InputValidationError as e:
            await self._audit.log_validation_failed(e.field or "expense", e.message, correlation_id)
            raise

        try:
            await self._expenses.create(expense, budget)
        except StorageError as e:
            await self._audit.log_save_failed("expense", expense.id, str(e), correlation_id)
            raise

        await self._audit.log_expense_recorded(expense, correlation_id)
        logger.info(
            "expense_recorded",
            expense_id=str(expense.id),
            budget_id=str(budget.id),
            amount=str(expense.amount),
            category=expense.category.value,
        )

        await self.check_thresholds(budget, correlation_id)
        return expense

    async def update(
        self,
        expense: Expense,
        amount: Any = None,
        category: Any = None,
        date: Any = None,
        notes: Optional[str] = None,
        payment_type: Any = None,
        vendor: Optional[str] = None,
        photos: Optional[list[str]] = None,
        today: Optional[datetime.date] = None,
    ) -> Expense:
        """
        Apply the supplied fields to an expense and save it.

        Fields left as None are not touched. Every supplied field is
        validated first, so a rejected update leaves the expense as it was.
        """
        correlation_id = create_correlation_id()
        changes: dict[str, Any] = {}

        try:
            if amount is not None:
                changes["amount"] = self._validator.validate_amount(amount)
            if category is not None:
                changes["category"] = self._validator.validate_category(category)
            if date is not None:
                changes["date"] = self._validator.validate_date(date, today)
            if payment_type is not None:
                changes["payment_type"] = self._validator.validate_payment_type(payment_type)
            if notes is not None:
                changes["notes"] = notes
            if vendor is not None:
                changes["vendor"] = vendor
            if photos is not None:
                changes["photos"] = list(photos)
            # Length limits on free text are checked by the model itself
            Expense.model_validate({**expense.model_dump(), **changes})
        except ValidationError as e:
            error = _first_error(e)
            await self._audit.log_validation_failed(error.field or "expense", error.message, correlation_id)
            raise error from e
        except InputValidationError as e:
            await self._audit.log_validation_failed(e.field or "expense", e.message, correlation_id)
            raise

        if not changes:
            return expense

        original = expense.model_copy(deep=True)
        self._apply_changes(expense, changes)

        try:
            await self._expenses.update(expense)
        except StorageError as e:
            # Keep the in-memory record in step with the store
            for field in changes:
                setattr(expense, field, getattr(original, field))
            expense.updated_at = original.updated_at
            await self._audit.log_save_failed("expense", expense.id, str(e), correlation_id)
            raise

        await self._audit.log_expense_updated(expense.id, sorted(changes), correlation_id)

        try:
            budget = await self._budgets.fetch(expense.budget_id)
        except StorageError as e:
            logger.warning("threshold_check_failed", budget_id=str(expense.budget_id), error=str(e))
            budget = None
        if budget is not None:
            await self.check_thresholds(budget, correlation_id)
        return expense

    async def delete(self, expense: Expense) -> bool:
        """Remove an expense. Returns False if it was already gone."""
        correlation_id = create_correlation_id()
        try:
            deleted = await self._expenses.delete(expense)
        except StorageError as e:
            await self._audit.log_save_failed("expense", expense.id, str(e), correlation_id)
            raise
        if deleted:
            await self._audit.log_expense_deleted(expense, correlation_id)
        return deleted

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------

    async def check_thresholds(
        self,
        budget: Budget,
        correlation_id: Optional[UUID] = None,
    ) -> list[BudgetAlert]:
        """
        Send a warning alert when usage reached the threshold and an
        over-budget alert when spending exceeds the total. Both can fire.

        Returns:
            The alerts that were delivered
        """
        if self._sink is None:
            return []

        try:
            stats = await self._budgets.get_budget_statistics(budget)
        except StorageError as e:
            logger.warning("threshold_check_failed", budget_id=str(budget.id), error=str(e))
            return []

        alerts = []
        if stats.has_reached_warning_threshold:
            alerts.append(BudgetAlert.from_statistics(AlertLevel.WARNING, budget, stats, correlation_id))
        if stats.is_over_budget:
            alerts.append(BudgetAlert.from_statistics(AlertLevel.OVER_BUDGET, budget, stats, correlation_id))

        delivered = []
        for alert in alerts:
            try:
                await self._sink.send(alert)
                delivered.append(alert)
            except Exception as e:
                logger.warning(
                    "notification_failed",
                    budget_id=str(budget.id),
                    level=alert.level.value,
                    error=str(e),
                )
                await self._audit.log_error(
                    error_type="notification_failed",
                    error_message=str(e),
                    details={"budget_id": str(budget.id), "level": alert.level.value},
                    correlation_id=correlation_id,
                )
        return delivered

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _apply_changes(self, expense: Expense, changes: dict[str, Any]) -> None:
        if "amount" in changes:
            expense.update_amount(Decimal(changes["amount"]))
        if "category" in changes:
            expense.update_category(ExpenseCategory(changes["category"]))
        if "date" in changes:
            expense.update_date(changes["date"])
        if "payment_type" in changes:
            expense.update_payment_type(changes["payment_type"])
        if "notes" in changes:
            expense.update_notes(changes["notes"])
        if "vendor" in changes:
            expense.update_vendor(changes["vendor"])
        if "photos" in changes:
            expense.photos = changes["photos"]

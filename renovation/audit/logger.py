"""
Audit Logger

DESIGN DECISION: Every change to renovation records is logged.
This provides:
1. Traceability of budget and schedule changes
2. Debugging capability when a save fails
3. A history of budget alerts

The audit logger:
- Is async like the storage it writes to
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

from renovation.config import get_logger
from renovation.models import AuditEvent, AuditEventBuilder, AuditSeverity, Expense, Task
from renovation.services.storage import AuditStorageInterface


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit_events table (when storage is configured)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity is AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_project_created(self, project_id: UUID, name: str, total_budget: str) -> None:
        await self.log(AuditEventBuilder.project_created(project_id, name, total_budget))

    async def log_project_deleted(self, project_id: UUID, name: str) -> None:
        await self.log(AuditEventBuilder.project_deleted(project_id, name))

    async def log_budget_updated(
        self,
        budget_id: UUID,
        total_amount: str,
        warning_threshold: float,
    ) -> None:
        await self.log(AuditEventBuilder.budget_updated(budget_id, total_amount, warning_threshold))

    async def log_expense_recorded(self, expense: Expense, correlation_id: UUID) -> None:
        """Log a newly recorded expense."""
        event = AuditEventBuilder.expense_recorded(
            expense_id=expense.id,
            budget_id=expense.budget_id,
            amount=str(expense.amount),
            category=expense.category.value,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_updated(
        self,
        expense_id: UUID,
        changed_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.expense_updated(expense_id, changed_fields, correlation_id))

    async def log_expense_deleted(self, expense: Expense, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.expense_deleted(expense.id, str(expense.amount), correlation_id))

    async def log_validation_failed(self, field: str, message: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.validation_failed(field, message, correlation_id))

    async def log_task_status_changed(self, task: Task, old_status: str) -> None:
        event = AuditEventBuilder.task_status_changed(
            task_id=task.id,
            phase_id=task.phase_id,
            old_status=old_status,
            new_status=task.status.value,
        )
        await self.log(event)

    async def log_phase_status_changed(self, phase_id: UUID, title: str, is_completed: bool) -> None:
        await self.log(AuditEventBuilder.phase_status_changed(phase_id, title, is_completed))

    async def log_save_failed(
        self,
        entity_type: str,
        entity_id: Optional[UUID],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed write."""
        event = AuditEventBuilder.save_failed(
            entity_type=entity_type,
            entity_id=entity_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Newest persisted events; empty when only logging locally."""
        if not self._storage:
            return []
        return await self._storage.get_recent_events(limit)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., recording an expense).
    Pass it through all subsequent operations.
    """
    return uuid4()

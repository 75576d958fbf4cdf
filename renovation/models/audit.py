"""
Audit Models for Renovation Planner

Every change to renovation records is logged as an audit event.
This provides:
1. A history of what changed in a project and when
2. Debugging information when a save fails
3. A record of every budget alert that was raised

DESIGN DECISION: Audit logs are append-only. We never delete or modify them,
and they are not owned by a project, so deleting a project keeps its history.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from renovation.models.base import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Projects
    PROJECT_CREATED = "project_created"
    PROJECT_DELETED = "project_deleted"

    # Budget
    BUDGET_UPDATED = "budget_updated"
    BUDGET_WARNING = "budget_warning"
    BUDGET_EXCEEDED = "budget_exceeded"

    # Expenses
    EXPENSE_RECORDED = "expense_recorded"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    VALIDATION_FAILED = "validation_failed"

    # Schedule
    TASK_STATUS_CHANGED = "task_status_changed"
    PHASE_STATUS_CHANGED = "phase_status_changed"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'budget', 'task')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., an expense and the alert it raised)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_recorded(expense_id, budget_id, "3000.00", "flooring", cid)
        event = AuditEventBuilder.budget_exceeded(budget_id, "11000.00", "10000.00", cid)
    """

    @staticmethod
    def project_created(
        project_id: UUID,
        name: str,
        total_budget: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECT_CREATED,
            entity_type="project",
            entity_id=project_id,
            description=f"Project created: {name}",
            details={
                "name": name,
                "total_budget": total_budget,
            },
            is_user_action=True,
        )

    @staticmethod
    def project_deleted(
        project_id: UUID,
        name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECT_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="project",
            entity_id=project_id,
            description=f"Project deleted: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(
        budget_id: UUID,
        total_amount: str,
        warning_threshold: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget set to {total_amount} (warning at {warning_threshold:.0%})",
            details={
                "total_amount": total_amount,
                "warning_threshold": warning_threshold,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_recorded(
        expense_id: UUID,
        budget_id: UUID,
        amount: str,
        category: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense recorded: {category} - {amount}",
            details={
                "budget_id": str(budget_id),
                "amount": amount,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: UUID,
        changed_fields: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense deleted: {amount}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        field: str,
        message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Expense input rejected: {field}",
            details={"field": field},
            error_message=message,
            is_user_action=True,
        )

    @staticmethod
    def budget_warning(
        budget_id: UUID,
        usage_percentage: float,
        threshold: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_WARNING,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget usage at {usage_percentage:.0%} (threshold {threshold:.0%})",
            details={
                "usage_percentage": usage_percentage,
                "threshold": threshold,
            },
        )

    @staticmethod
    def budget_exceeded(
        budget_id: UUID,
        total_expenses: str,
        total_budget: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        overage = Decimal(total_expenses) - Decimal(total_budget)
        return AuditEvent(
            event_type=AuditEventType.BUDGET_EXCEEDED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget exceeded by {overage}",
            details={
                "total_expenses": total_expenses,
                "total_budget": total_budget,
                "overage": str(overage),
            },
        )

    @staticmethod
    def task_status_changed(
        task_id: UUID,
        phase_id: UUID,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TASK_STATUS_CHANGED,
            entity_type="task",
            entity_id=task_id,
            description=f"Task status changed: {old_status} -> {new_status}",
            details={
                "phase_id": str(phase_id),
                "old_status": old_status,
                "new_status": new_status,
            },
            is_user_action=True,
        )

    @staticmethod
    def phase_status_changed(
        phase_id: UUID,
        title: str,
        is_completed: bool,
    ) -> AuditEvent:
        state = "completed" if is_completed else "reopened"
        return AuditEvent(
            event_type=AuditEventType.PHASE_STATUS_CHANGED,
            entity_type="phase",
            entity_id=phase_id,
            description=f"Phase {state}: {title}",
            details={"is_completed": is_completed},
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        entity_id: Optional[UUID],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Failed to save {entity_type}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

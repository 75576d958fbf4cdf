"""
Budget alert notifications.

DESIGN DECISION: Alerts are best-effort. The expense that triggered an
alert is already committed when the alert is sent, so a failing sink is
logged by the caller and never undoes the write.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from renovation.audit import AuditLogger
from renovation.models import AuditEventBuilder, Budget, BudgetStatistics


class AlertLevel(str, Enum):
    """Kind of budget alert."""
    WARNING = "warning"          # usage reached the warning threshold
    OVER_BUDGET = "over_budget"  # expenses exceed the budget


class BudgetAlert(BaseModel):
    """A budget threshold crossing to tell the user about."""

    level: AlertLevel
    budget_id: UUID
    project_id: UUID
    total_budget: Decimal
    total_expenses: Decimal
    usage_percentage: float = Field(..., ge=0.0)
    warning_threshold: float
    estimated_overage: Decimal = Decimal("0")
    correlation_id: Optional[UUID] = None

    @classmethod
    def from_statistics(
        cls,
        level: AlertLevel,
        budget: Budget,
        stats: BudgetStatistics,
        correlation_id: Optional[UUID] = None,
    ) -> "BudgetAlert":
        return cls(
            level=level,
            budget_id=budget.id,
            project_id=budget.project_id,
            total_budget=stats.total_budget,
            total_expenses=stats.total_expenses,
            usage_percentage=stats.usage_percentage,
            warning_threshold=stats.warning_threshold,
            estimated_overage=stats.estimated_overage,
            correlation_id=correlation_id,
        )

    @property
    def message(self) -> str:
        if self.level is AlertLevel.OVER_BUDGET:
            return f"Over budget by {self.estimated_overage:,.2f}"
        return f"Budget usage has reached {self.usage_percentage:.0%}"


class NotificationSink(ABC):
    """Destination for budget alerts."""

    @abstractmethod
    async def send(self, alert: BudgetAlert) -> None:
        """
        Deliver one alert.

        Raises:
            Any exception on delivery failure; callers treat it as non-fatal.
        """
        pass


class LoggingNotificationSink(NotificationSink):
    """
    Writes alerts to the audit trail and keeps them until the UI reads them.

    The app calls pop_alerts() after each action to show pending alerts.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit = audit_logger or AuditLogger()
        self._pending: list[BudgetAlert] = []

    async def send(self, alert: BudgetAlert) -> None:
        if alert.level is AlertLevel.OVER_BUDGET:
            event = AuditEventBuilder.budget_exceeded(
                budget_id=alert.budget_id,
                total_expenses=str(alert.total_expenses),
                total_budget=str(alert.total_budget),
                correlation_id=alert.correlation_id,
            )
        else:
            event = AuditEventBuilder.budget_warning(
                budget_id=alert.budget_id,
                usage_percentage=alert.usage_percentage,
                threshold=alert.warning_threshold,
                correlation_id=alert.correlation_id,
            )
        await self._audit.log(event)
        self._pending.append(alert)

    def pop_alerts(self) -> list[BudgetAlert]:
        """Return and clear the alerts sent since the last call."""
        alerts, self._pending = self._pending, []
        return alerts

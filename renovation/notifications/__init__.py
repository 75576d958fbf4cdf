"""Budget alert notifications."""

from renovation.notifications.sink import (
    AlertLevel,
    BudgetAlert,
    LoggingNotificationSink,
    NotificationSink,
)

__all__ = [
    "AlertLevel",
    "BudgetAlert",
    "LoggingNotificationSink",
    "NotificationSink",
]

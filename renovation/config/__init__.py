"""Configuration package."""

from renovation.config.logging_config import configure_logging, get_logger
from renovation.config.settings import (
    AppSettings,
    BudgetSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BudgetSettings",
    "Settings",
    "StorageSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "validate_all_settings",
]

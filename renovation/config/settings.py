"""
Configuration Management for Renovation Planner

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, including the
budget limits (maximum expense amount, warning threshold) which are
configuration values rather than constants baked into the use cases.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RENOVATION_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite:///renovation.db",
        description="SQLAlchemy database URL (SQLite file or in-memory)"
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only SQLite is supported as the local store."""
        if not v.startswith("sqlite"):
            raise ValueError(f"Unsupported database URL: {v}. Only sqlite URLs are supported")
        return v


class BudgetSettings(BaseSettings):
    """Budget limits and expense validation thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="RENOVATION_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    max_expense_amount: Decimal = Field(
        default=Decimal("10000000"),
        gt=0,
        description="Exclusive upper bound for a single expense amount"
    )
    default_warning_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Budget usage fraction that triggers a warning for new budgets"
    )
    future_date_tolerance_days: int = Field(
        default=30,
        ge=0,
        description="How many days in the future an expense date can be"
    )
    recent_expense_limit: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Number of recent expenses shown on the dashboard"
    )
    top_expense_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of largest expenses shown in statistics"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="Log renderer: json lines or human readable console output"
    )

    # Display
    currency_symbol: str = Field(
        default="¥",
        max_length=5,
        description="Currency symbol used when formatting amounts"
    )

    # Session
    session_state_path: Optional[str] = Field(
        default=".renovation_session.json",
        description="File remembering the last selected project (None disables it)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "budget", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

"""
Configuration Management for PocketLedger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Alert thresholds live here as named settings rather than constants
buried in the alert engine, so they can be overridden and tested.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AlertSettings(BaseSettings):
    """Thresholds used by the alert engine."""

    model_config = SettingsConfigDict(
        env_prefix="ALERT_",
        extra="ignore"
    )

    budget_warning_ratio: float = Field(
        default=0.80,
        gt=0.0,
        le=1.0,
        description="Usage ratio that triggers a budget warning"
    )
    budget_critical_ratio: float = Field(
        default=0.95,
        gt=0.0,
        le=1.0,
        description="Usage ratio that triggers a critical budget alert"
    )
    overspending_ratio: float = Field(
        default=0.90,
        gt=0.0,
        le=1.0,
        description="Expense/income ratio that triggers an overspending warning"
    )
    low_balance_warning: float = Field(
        default=2000.0,
        gt=0.0,
        description="Balance at or below which a low balance warning fires"
    )
    low_balance_critical: float = Field(
        default=500.0,
        gt=0.0,
        description="Balance at or below which a critical low balance alert fires"
    )
    large_transaction_amount: float = Field(
        default=10000.0,
        gt=0.0,
        description="Single record amount considered large"
    )
    dedup_window: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="How many recent alerts are scanned for a repeat key"
    )
    immediate_budget_check: bool = Field(
        default=True,
        description="Run the non-deduplicated budget exceeded check after each expense"
    )

    @model_validator(mode="after")
    def validate_ordering(self) -> "AlertSettings":
        """Critical thresholds must be stricter than warnings."""
        if self.budget_critical_ratio < self.budget_warning_ratio:
            raise ValueError("budget_critical_ratio cannot be below budget_warning_ratio")
        if self.low_balance_critical > self.low_balance_warning:
            raise ValueError("low_balance_critical cannot exceed low_balance_warning")
        return self


class StorageSettings(BaseSettings):
    """Local JSON storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per account"
    )
    backup_dir: Path = Field(
        default=Path("data/backups"),
        description="Directory for timestamped account backups"
    )
    audit_file: str = Field(
        default="audit.jsonl",
        description="Audit log file name inside data_dir"
    )
    autosave: bool = Field(
        default=True,
        description="Save the account after every successful mutation"
    )
    write_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for each file write"
    )

    @property
    def audit_path(self) -> Path:
        return self.data_dir / self.audit_file


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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level"
    )
    recent_records_shown: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Records listed in the account overview"
    )


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

    # Sub-settings are loaded lazily so one bad section doesn't block the rest

    @property
    def alerts(self) -> AlertSettings:
        return AlertSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("alerts", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

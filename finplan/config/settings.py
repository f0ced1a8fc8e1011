"""
Configuration Management for the Financial Planning Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable constants live here.
The engine reads them through get_settings() so a deployment can adjust
horizons and limits without touching the calculation code.
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlannerSettings(BaseSettings):
    """
    Engine constants.

    Loads configuration from environment variables (FINPLAN_*) and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Financing solver bounds
    min_months: int = Field(
        default=1,
        ge=1,
        description="Shortest financing duration in months"
    )
    max_months: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Longest financing duration in months"
    )

    # Projection / history windows
    projection_horizon_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="How many months ahead the projection reaches"
    )
    history_limit_months: int = Field(
        default=24,
        ge=1,
        description="How far back the monthly history goes"
    )
    history_minimum_months: int = Field(
        default=3,
        ge=0,
        description="Recent months always listed in history, tracked or not"
    )

    # Reconciliation reminders
    deadline_warning_days: int = Field(
        default=7,
        ge=0,
        le=31,
        description="Days before salary day when an open month is flagged"
    )

    # Ledger input limits
    max_item_name_length: int = Field(
        default=50,
        ge=1,
        le=200,
        description="Maximum length of a recurring item name"
    )
    max_reasonable_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )
    fallback_category: str = Field(
        default="other",
        description="Category unknown items are folded into"
    )

    @field_validator('fallback_category')
    @classmethod
    def normalize_fallback(cls, v: str) -> str:
        """Categories are compared lower-case."""
        v = v.strip().lower()
        if not v:
            raise ValueError("fallback_category cannot be empty")
        return v

    @model_validator(mode='after')
    def validate_month_bounds(self) -> 'PlannerSettings':
        if self.min_months > self.max_months:
            raise ValueError("min_months cannot exceed max_months")
        return self


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_LOG_",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False = console renderer)"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


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
    def planner(self) -> PlannerSettings:
        return PlannerSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


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

    try:
        _ = settings.planner
        results["planner"] = True
    except Exception as e:
        results["planner"] = False
        results["planner_error"] = str(e)

    try:
        _ = settings.logging
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)

    return results

"""Configuration package."""

from finplan.config.settings import (
    LoggingSettings,
    PlannerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "LoggingSettings",
    "PlannerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]

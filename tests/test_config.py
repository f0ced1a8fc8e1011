"""
Tests for configuration and the clock helpers.
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from finplan.config import (
    LoggingSettings,
    PlannerSettings,
    get_settings,
    validate_all_settings,
)
from finplan.engine.clock import (
    FixedClock,
    SystemClock,
    add_months,
    first_of_month,
    month_offset,
    months_between,
    today,
)


class TestPlannerSettings:
    """Tests for PlannerSettings."""

    def test_defaults(self):
        settings = PlannerSettings()
        assert settings.min_months == 1
        assert settings.max_months == 60
        assert settings.projection_horizon_months == 12
        assert settings.history_limit_months == 24
        assert settings.history_minimum_months == 3
        assert settings.max_item_name_length == 50
        assert settings.fallback_category == "other"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FINPLAN_MAX_MONTHS", "36")
        assert get_settings().planner.max_months == 36

    def test_fallback_lower_cased(self):
        assert PlannerSettings(fallback_category=" Misc ").fallback_category == "misc"

    def test_blank_fallback_rejected(self):
        with pytest.raises(ValueError):
            PlannerSettings(fallback_category="  ")

    def test_inverted_month_bounds_rejected(self):
        with pytest.raises(ValueError):
            PlannerSettings(min_months=12, max_months=6)


class TestLoggingSettings:
    """Tests for LoggingSettings."""

    def test_level_upper_cased(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            LoggingSettings(level="chatty")


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_all_valid(self):
        results = validate_all_settings()
        assert results["planner"] is True
        assert results["logging"] is True

    def test_reports_invalid_planner(self, monkeypatch):
        monkeypatch.setenv("FINPLAN_MIN_MONTHS", "0")
        results = validate_all_settings()
        assert results["planner"] is False
        assert "planner_error" in results


class TestClock:
    """Tests for clocks and month helpers."""

    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo == timezone.utc

    def test_fixed_clock_assumes_utc(self):
        clock = FixedClock(datetime(2024, 3, 15, 9, 0))
        assert clock.now().tzinfo == timezone.utc
        assert today(clock) == date(2024, 3, 15)

    def test_fixed_clock_advance(self):
        clock = FixedClock(datetime(2024, 1, 31, tzinfo=timezone.utc))
        clock.advance(months=1)
        assert today(clock) == date(2024, 2, 29)
        clock.advance(days=1)
        assert clock.now() - datetime(2024, 2, 29, tzinfo=timezone.utc) == timedelta(days=1)

    def test_first_of_month(self):
        assert first_of_month(date(2024, 3, 31)) == date(2024, 3, 1)
        assert first_of_month(datetime(2024, 3, 31, 23, 0)) == date(2024, 3, 1)

    def test_month_offset(self):
        assert month_offset(date(2024, 11, 20), 3) == date(2025, 2, 1)
        assert month_offset(date(2024, 1, 5), -1) == date(2023, 12, 1)

    def test_add_months_clamps_day(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_months_between(self):
        assert months_between(date(2024, 1, 15), date(2024, 3, 14)) == 1
        assert months_between(date(2024, 1, 1), date(2025, 1, 1)) == 12
        assert months_between(date(2024, 3, 1), date(2024, 1, 1)) == -2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for the budget summary and the reconciliation history.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from finplan.engine.summary import (
    build_budget_summary,
    budget_stats,
    monthly_history,
    months_to_goal,
    savings_rate,
    validated_count,
)
from finplan.models.finance import FinanceSettings, GoalTotals, MonthlyValidation


TODAY = date(2024, 6, 10)
LOCKED_AT = datetime(2024, 6, 1, tzinfo=timezone.utc)


class TestBudgetStats:
    """Tests for headline numbers."""

    def test_savings_rate(self):
        assert savings_rate(Decimal("4000"), Decimal("3000")) == 25.0

    def test_savings_rate_without_income(self):
        assert savings_rate(Decimal("0"), Decimal("300")) == 0.0

    def test_months_to_goal(self):
        assert months_to_goal(Decimal("1000"), Decimal("300")) == 4

    def test_months_to_goal_without_allocation(self):
        assert months_to_goal(Decimal("1000"), Decimal("0")) is None

    def test_yearly_projection(self):
        stats = budget_stats(Decimal("3000"), Decimal("2500"), Decimal("0"), Decimal("0"))
        assert stats.monthly_net == Decimal("500")
        assert stats.yearly_projection == Decimal("6000")


class TestBudgetSummary:
    """Tests for build_budget_summary."""

    def test_summary(self, sample_expenses, sample_income):
        summary = build_budget_summary(
            sample_expenses,
            sample_income,
            FinanceSettings(project_monthly_allocation=Decimal("500")),
            GoalTotals(total_goals_cost=Decimal("6000"), completed_goals_cost=Decimal("1000")),
        )
        assert summary.total_income == Decimal("3500")
        assert summary.total_expenses == Decimal("1615")
        assert summary.monthly_net_balance == Decimal("1885")
        assert summary.expenses_by_category[0].category == "housing"
        assert summary.funding.remaining == Decimal("5000")
        assert summary.stats.months_to_goal == 10

    def test_empty_ledger(self):
        summary = build_budget_summary([], [], FinanceSettings(), GoalTotals())
        assert summary.monthly_net_balance == Decimal("0")
        assert summary.expenses_by_category == []
        assert summary.stats.savings_rate == 0.0


class TestMonthlyHistory:
    """Tests for monthly_history."""

    def test_minimum_months_without_records(self):
        entries = monthly_history([], TODAY, limit=24, minimum=3)
        assert [e.month for e in entries] == [date(2024, 5, 1), date(2024, 4, 1), date(2024, 3, 1)]
        assert validated_count(entries) == 0

    def test_excludes_current_month(self):
        current = MonthlyValidation(month=date(2024, 6, 1), validated_at=LOCKED_AT)
        entries = monthly_history([current], TODAY, limit=24, minimum=3)
        assert date(2024, 6, 1) not in [e.month for e in entries]

    def test_older_months_only_when_tracked(self):
        validations = [
            MonthlyValidation(month=date(2023, 12, 1), validated_at=LOCKED_AT),
            MonthlyValidation(month=date(2024, 2, 1)),
        ]
        entries = monthly_history(validations, TODAY, limit=24, minimum=3)
        months = [e.month for e in entries]
        assert months == [
            date(2024, 5, 1),
            date(2024, 4, 1),
            date(2024, 3, 1),
            date(2024, 2, 1),
            date(2023, 12, 1),
        ]
        assert validated_count(entries) == 1

    def test_capped_at_limit(self):
        validations = [MonthlyValidation(month=date(2020, 1, 1), validated_at=LOCKED_AT)]
        entries = monthly_history(validations, TODAY, limit=6, minimum=3)
        assert len(entries) == 3
        assert entries[-1].month == date(2024, 3, 1)

    def test_defaults_from_settings(self, monkeypatch):
        monkeypatch.setenv("FINPLAN_HISTORY_MINIMUM_MONTHS", "5")
        entries = monthly_history([], TODAY)
        assert len(entries) == 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

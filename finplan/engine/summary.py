"""
Budget summary and reconciliation history.

Headline numbers for the finance overview: totals, savings rate, months
to goal, yearly projection, and the list of past months shown in the
reconciliation history.
"""

import math
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from finplan.config import get_settings
from finplan.engine.categories import EXPENSE_CATEGORIES, INCOME_CATEGORIES
from finplan.engine.clock import first_of_month, month_offset, months_between
from finplan.engine.ledger import active_total, category_breakdown
from finplan.engine.target import resolve_funding_target
from finplan.models.finance import (
    BudgetStats,
    BudgetSummary,
    FinanceSettings,
    GoalTotals,
    MonthHistoryEntry,
    MonthlyValidation,
    RecurringItem,
)


def savings_rate(total_income: Decimal, total_expenses: Decimal) -> float:
    """Net balance as a percentage of income; 0 without income."""
    if total_income <= 0:
        return 0.0
    return float((total_income - total_expenses) / total_income * 100)


def months_to_goal(remaining: Decimal, monthly_allocation: Decimal) -> Optional[int]:
    if monthly_allocation <= 0:
        return None
    return math.ceil(remaining / monthly_allocation)


def budget_stats(
    total_income: Decimal,
    total_expenses: Decimal,
    remaining: Decimal,
    monthly_allocation: Decimal,
) -> BudgetStats:
    net = total_income - total_expenses
    return BudgetStats(
        savings_rate=savings_rate(total_income, total_expenses),
        months_to_goal=months_to_goal(remaining, monthly_allocation),
        monthly_net=net,
        yearly_projection=net * 12,
    )


def build_budget_summary(
    expenses: Iterable[RecurringItem],
    income: Iterable[RecurringItem],
    settings: FinanceSettings,
    goal_totals: GoalTotals,
    detect_from_name: bool = False,
) -> BudgetSummary:
    """Everything the monthly budget overview shows, in one pass."""
    expenses = list(expenses)
    income = list(income)

    total_income = active_total(income)
    total_expenses = active_total(expenses)
    funding = resolve_funding_target(settings, goal_totals)

    return BudgetSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        monthly_net_balance=total_income - total_expenses,
        expenses_by_category=category_breakdown(
            expenses,
            EXPENSE_CATEGORIES,
            detect_from_name=detect_from_name,
            sort_by_magnitude=True,
        ),
        income_by_category=category_breakdown(
            income,
            INCOME_CATEGORIES,
            detect_from_name=detect_from_name,
            sort_by_magnitude=True,
        ),
        funding=funding,
        stats=budget_stats(
            total_income,
            total_expenses,
            funding.remaining,
            settings.project_monthly_allocation,
        ),
    )


def monthly_history(
    validations: Iterable[MonthlyValidation],
    today: date,
    limit: Optional[int] = None,
    minimum: Optional[int] = None,
) -> list[MonthHistoryEntry]:
    """
    Past months, newest first, excluding the current month.

    Goes back to the earliest tracked month (capped at `limit`). The
    `minimum` most recent months are always listed; older months only
    appear when a record exists for them.
    """
    planner = get_settings().planner
    limit = planner.history_limit_months if limit is None else limit
    minimum = planner.history_minimum_months if minimum is None else minimum

    by_month = {record.month: record for record in validations}
    current = first_of_month(today)

    if by_month:
        earliest = min(by_month)
        months_back = months_between(earliest, current)
    else:
        months_back = minimum
    months_back = min(max(months_back, minimum), limit)

    entries = []
    for i in range(1, months_back + 1):
        month = month_offset(current, -i)
        record = by_month.get(month)
        if record is not None or i <= minimum:
            entries.append(MonthHistoryEntry(month=month, validation=record))
    return entries


def validated_count(entries: Iterable[MonthHistoryEntry]) -> int:
    return sum(1 for entry in entries if entry.is_validated)

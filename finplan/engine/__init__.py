"""
Planning engine package.

Pure calculations and the monthly reconciliation state machine.
Nothing here performs I/O.
"""

from finplan.engine.clock import (
    Clock,
    FixedClock,
    SystemClock,
    first_of_month,
    month_offset,
    months_between,
)
from finplan.engine.errors import (
    FinancePlanningError,
    InvalidInputError,
    InvalidTransitionError,
    ReconciliationError,
    ReconciliationLockedError,
)
from finplan.engine.financing import (
    MAX_MONTHS,
    MIN_MONTHS,
    FinancingSolver,
    amount_to_finance,
    deadline_status,
    months_until,
)
from finplan.engine.ledger import (
    RecurringLedger,
    active_total,
    category_breakdown,
    monthly_net_balance,
    totals_by_category,
)
from finplan.engine.projection import (
    ProjectionEngine,
    build_projection,
    classify_trend,
)
from finplan.engine.reconciliation import (
    MonthlyReconciliation,
    days_until_salary_day,
    is_near_deadline,
)
from finplan.engine.summary import build_budget_summary, monthly_history
from finplan.engine.target import resolve_funding_target

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    "first_of_month",
    "month_offset",
    "months_between",
    # Errors
    "FinancePlanningError",
    "InvalidInputError",
    "InvalidTransitionError",
    "ReconciliationError",
    "ReconciliationLockedError",
    # Financing
    "MAX_MONTHS",
    "MIN_MONTHS",
    "FinancingSolver",
    "amount_to_finance",
    "deadline_status",
    "months_until",
    # Ledger
    "RecurringLedger",
    "active_total",
    "category_breakdown",
    "monthly_net_balance",
    "totals_by_category",
    # Projection
    "ProjectionEngine",
    "build_projection",
    "classify_trend",
    # Reconciliation
    "MonthlyReconciliation",
    "days_until_salary_day",
    "is_near_deadline",
    # Summary / target
    "build_budget_summary",
    "monthly_history",
    "resolve_funding_target",
]

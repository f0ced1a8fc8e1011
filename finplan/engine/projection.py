"""
Projection Engine

Builds the forward balance series and says whether reality is ahead of
or behind it.

- projected: straight-line cumulative projection of the CURRENT monthly
  net balance, starting this month.
- actual: the net of a locked reconciliation record for that month, or
  None. A month without a locked record is a gap, never a zero.

Stateless: everything is recomputed on every call.
"""

import math
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from finplan.config import get_settings
from finplan.engine.clock import Clock, first_of_month, month_offset
from finplan.models.finance import (
    MonthlyValidation,
    ProjectionPoint,
    ProjectionResult,
    TrendInterpretation,
    TrendKind,
)


NO_ACTUALS_MESSAGE = (
    "Here is your projected evolution over the next {months} months "
    "if your income and expenses remain the same."
)
AHEAD_MESSAGE = "You are performing better than your initial projection."
BEHIND_MESSAGE = "Based on real data, you are currently behind your projection."
NO_DATA_MESSAGE = "Add recurring income and expenses to see projections."


def _locked_by_month(
    validations: Iterable[MonthlyValidation],
) -> dict[date, MonthlyValidation]:
    return {
        record.month: record
        for record in validations
        if record.is_locked
    }


def build_projection(
    monthly_net_balance: Decimal,
    validations: Iterable[MonthlyValidation],
    start_month: date,
    horizon_months: int = 12,
) -> list[ProjectionPoint]:
    """
    One point per month from start_month through start_month + horizon.

    The series holds horizon_months + 1 points: the current month is i = 0
    and projected[i] = monthly_net_balance * (i + 1).
    """
    start_month = first_of_month(start_month)
    locked = _locked_by_month(validations)

    points = []
    for i in range(horizon_months + 1):
        month = month_offset(start_month, i)
        record = locked.get(month)
        points.append(ProjectionPoint(
            month=month,
            projected=monthly_net_balance * (i + 1),
            actual=record.net if record is not None else None,
        ))
    return points


def months_to_stabilize(remaining: Decimal, monthly_net_balance: Decimal) -> Optional[int]:
    """ceil(|remaining / net|), or None when the net balance is zero."""
    if monthly_net_balance == 0:
        return None
    return math.ceil(abs(remaining / monthly_net_balance))


def classify_trend(
    points: list[ProjectionPoint],
    monthly_net_balance: Decimal,
    remaining: Decimal,
    horizon_months: Optional[int] = None,
) -> TrendInterpretation:
    """
    Compare the most recent actual against its projected value.

    Ties fall through to a neutral "months to stabilize" estimate.
    horizon_months only shapes the no-actuals message and defaults to
    the configured projection horizon.
    """
    with_actuals = [point for point in points if point.actual is not None]
    if not with_actuals:
        if horizon_months is None:
            horizon_months = get_settings().planner.projection_horizon_months
        return TrendInterpretation(
            kind=TrendKind.NEUTRAL,
            message=NO_ACTUALS_MESSAGE.format(months=horizon_months),
        )

    latest = with_actuals[-1]
    if latest.actual > latest.projected:
        return TrendInterpretation(
            kind=TrendKind.POSITIVE,
            message=AHEAD_MESSAGE,
            reference_month=latest.month,
        )
    if latest.actual < latest.projected:
        return TrendInterpretation(
            kind=TrendKind.NEGATIVE,
            message=BEHIND_MESSAGE,
            reference_month=latest.month,
        )

    months = months_to_stabilize(remaining, monthly_net_balance)
    if months is None:
        return TrendInterpretation(
            kind=TrendKind.NEUTRAL,
            message=NO_DATA_MESSAGE,
            reference_month=latest.month,
        )
    return TrendInterpretation(
        kind=TrendKind.NEUTRAL,
        message=f"If nothing changes, your balance will stabilize in {months} months.",
        reference_month=latest.month,
        months_to_stabilize=months,
    )


class ProjectionEngine:
    """
    Projection anchored at the injected clock's current month.
    """

    def __init__(self, clock: Clock, horizon_months: Optional[int] = None):
        self._clock = clock
        self._horizon = (
            horizon_months
            if horizon_months is not None
            else get_settings().planner.projection_horizon_months
        )

    @property
    def horizon_months(self) -> int:
        return self._horizon

    def current_month(self) -> date:
        return first_of_month(self._clock.now().date())

    def project(
        self,
        monthly_net_balance: Decimal,
        validations: Iterable[MonthlyValidation],
        remaining: Decimal = Decimal("0"),
    ) -> ProjectionResult:
        points = build_projection(
            monthly_net_balance,
            validations,
            self.current_month(),
            self._horizon,
        )
        return ProjectionResult(
            monthly_net_balance=monthly_net_balance,
            points=points,
            trend=classify_trend(points, monthly_net_balance, remaining, self._horizon),
        )

"""
Target & remaining-amount resolution.

Decides how much money still has to be raised. Recomputed from its
inputs on every call; nothing is cached.
"""

from decimal import Decimal

from finplan.models.finance import FinanceSettings, FundingTarget, GoalTotals


ZERO = Decimal("0")


def resolve_funding_target(
    settings: FinanceSettings,
    goal_totals: GoalTotals,
) -> FundingTarget:
    """
    Resolve the funding target and what remains of it.

    Custom mode (an explicit target above zero) tracks its own
    allocation, so goal completion and already_funded count for nothing
    there. In goal mode the financed amount is capped at the total.

    GUARANTEE: 0 <= remaining <= total.
    """
    is_custom = settings.is_custom_mode
    total = settings.project_funding_target if is_custom else goal_totals.total_goals_cost

    if is_custom:
        financed = ZERO
    else:
        financed = min(goal_totals.completed_goals_cost + settings.already_funded, total)

    remaining = max(total - financed, ZERO)

    return FundingTarget(
        total=total,
        financed=financed,
        remaining=remaining,
        is_custom_mode=is_custom,
    )


def remaining_amount(settings: FinanceSettings, goal_totals: GoalTotals) -> Decimal:
    return resolve_funding_target(settings, goal_totals).remaining

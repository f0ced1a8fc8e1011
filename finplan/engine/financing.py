"""
Smart Financing Solver

Converts between "finish in N months" and "pay P per month" for a fixed
amount to finance, and compares the result against an optional deadline.

DESIGN DECISION: This is a pure two-function pair. There is no "last
edited field" state; the caller decides which input is authoritative
for a given user action and calls from_months() or from_amount().

Rounding is one-sided: from_amount() rounds months UP, and the plan
finishes on or before the duration implied by the payment.
A from_months -> from_amount -> from_months round trip therefore need
not reproduce the original monthly amount.
"""

import math
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from finplan.config import get_settings
from finplan.engine.clock import month_offset, months_between
from finplan.engine.errors import InvalidInputError
from finplan.models.finance import DeadlineStatus, FinancingPlan


ZERO = Decimal("0")

MIN_MONTHS = 1
MAX_MONTHS = 60


def _to_decimal(value, field: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidInputError(f"{field} must be finite, got {value!r}")
    return result


def amount_to_finance(remaining, existing_balance_reserved=ZERO) -> Decimal:
    """
    What is left to finance once a declared reserve is set aside.

    The reserve is separate from already_funded: it is a lump sum the
    user says is saved but not linked to any goal.
    """
    remaining = _to_decimal(remaining, "remaining")
    reserved = _to_decimal(existing_balance_reserved, "existing_balance_reserved")
    if reserved < 0:
        raise InvalidInputError("existing_balance_reserved cannot be negative")
    return max(ZERO, remaining - reserved)


def monthly_amount_for(amount: Decimal, months: int) -> Decimal:
    """Monthly payment that finishes `amount` in exactly `months`. No rounding."""
    if isinstance(months, bool) or not isinstance(months, int):
        raise InvalidInputError(f"months must be a whole number, got {months!r}")
    if months < 1:
        raise InvalidInputError(f"months must be at least 1, got {months}")
    amount = _to_decimal(amount, "amount_to_finance")
    if amount <= 0:
        return ZERO
    return amount / months


def months_for(
    amount: Decimal,
    monthly_amount,
    min_months: int = MIN_MONTHS,
    max_months: int = MAX_MONTHS,
) -> int:
    """Months needed at `monthly_amount`, rounded up and clamped."""
    monthly_amount = _to_decimal(monthly_amount, "monthly_amount")
    if monthly_amount <= 0:
        raise InvalidInputError(
            f"monthly_amount must be greater than zero, got {monthly_amount}"
        )
    amount = _to_decimal(amount, "amount_to_finance")
    if amount <= 0:
        return min_months
    months = math.ceil(amount / monthly_amount)
    return max(min_months, min(months, max_months))


def deadline_status(months: int, deadline_months: Optional[int] = None) -> DeadlineStatus:
    """
    Compare a financing duration against a deadline in months.

    No deadline means always on track.
    """
    if deadline_months is None:
        return DeadlineStatus(deadline_months=None, is_on_track=True, overrun_months=0)
    return DeadlineStatus(
        deadline_months=deadline_months,
        is_on_track=months <= deadline_months,
        overrun_months=max(0, months - deadline_months),
    )


def months_until(deadline: date, today: date) -> int:
    """Whole months from today to the deadline (negative once it has passed)."""
    return months_between(today, deadline)


class FinancingSolver:
    """
    Financing calculator bound to one amount to finance.

    Re-create it whenever the remaining amount or the reserve changes;
    it holds no other state.
    """

    def __init__(
        self,
        amount: Decimal,
        min_months: Optional[int] = None,
        max_months: Optional[int] = None,
    ):
        settings = get_settings().planner
        amount = _to_decimal(amount, "amount_to_finance")
        if amount < 0:
            raise InvalidInputError("amount_to_finance cannot be negative")
        self._amount = amount
        self._min_months = min_months if min_months is not None else settings.min_months
        self._max_months = max_months if max_months is not None else settings.max_months
        if self._min_months < 1 or self._min_months > self._max_months:
            raise InvalidInputError(
                f"Invalid month bounds: {self._min_months}..{self._max_months}"
            )

    @classmethod
    def for_remaining(
        cls,
        remaining: Decimal,
        existing_balance_reserved: Decimal = ZERO,
        **kwargs,
    ) -> "FinancingSolver":
        return cls(amount_to_finance(remaining, existing_balance_reserved), **kwargs)

    @property
    def amount_to_finance(self) -> Decimal:
        return self._amount

    @property
    def min_months(self) -> int:
        return self._min_months

    @property
    def max_months(self) -> int:
        return self._max_months

    def from_months(
        self,
        months: int,
        deadline_months: Optional[int] = None,
        start_month: Optional[date] = None,
    ) -> FinancingPlan:
        """
        Plan with the duration as the authoritative input.

        Nothing to finance means a zero monthly amount for any duration.
        Raises InvalidInputError for a duration outside 1..max_months.
        """
        monthly = monthly_amount_for(self._amount, months)
        if months > self._max_months:
            raise InvalidInputError(
                f"months must be at most {self._max_months}, got {months}"
            )
        return self._plan(months, monthly, deadline_months, start_month)

    def from_amount(
        self,
        monthly_amount: Decimal,
        deadline_months: Optional[int] = None,
        start_month: Optional[date] = None,
    ) -> FinancingPlan:
        """
        Plan with the monthly payment as the authoritative input.

        Raises InvalidInputError for a payment of zero or less. Nothing to
        finance keeps the entered payment over min_months.
        """
        months = months_for(
            self._amount,
            monthly_amount,
            min_months=self._min_months,
            max_months=self._max_months,
        )
        monthly = _to_decimal(monthly_amount, "monthly_amount")
        return self._plan(months, monthly, deadline_months, start_month)

    def _plan(
        self,
        months: int,
        monthly: Decimal,
        deadline_months: Optional[int],
        start_month: Optional[date],
    ) -> FinancingPlan:
        return FinancingPlan(
            amount_to_finance=self._amount,
            months=months,
            monthly_amount=monthly,
            completion_month=month_offset(start_month, months) if start_month else None,
            deadline=deadline_status(months, deadline_months),
        )

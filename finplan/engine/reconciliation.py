"""
Monthly Reconciliation

A per-calendar-month state machine. The user confirms that the recurring
amounts happened, enters unplanned amounts, and validates the month,
which freezes its totals.

States:
    OPEN     validated_at is None; fields are freely editable
    LOCKED   validated_at is set; totals are a frozen snapshot
    EDITING  a LOCKED month reopened for amendment (never persisted)

Transitions:
    OPEN    --validate()-->    LOCKED   (both confirmations required)
    LOCKED  --begin_edit()-->  EDITING
    EDITING --update()-->      LOCKED   (original validated_at kept)
    EDITING --cancel_edit()--> LOCKED   (pending edits discarded)

CRITICAL: actual_total_income / actual_total_expenses are written only
by validate() and update(). Changing the ledger after a month is locked
never changes that month's totals until it is explicitly amended.

Missing confirmations are a precondition, not an error: validate()
returns False and leaves everything untouched. Callers are expected to
gate the action on can_validate.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

import structlog

from finplan.config import get_settings
from finplan.engine.clock import Clock, first_of_month, month_offset
from finplan.engine.errors import (
    InvalidInputError,
    InvalidTransitionError,
    ReconciliationLockedError,
)
from finplan.engine.ledger import active_total
from finplan.models.finance import (
    MonthlyValidation,
    ReconciliationState,
    RecurringItem,
)


logger = structlog.get_logger(__name__)


def _unplanned(value, field: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    if not amount.is_finite() or amount < 0:
        raise InvalidInputError(f"{field} must be a non-negative amount, got {value!r}")
    return amount


class MonthlyReconciliation:
    """
    Reconciliation workflow for one user and one month.

    Wraps an already-loaded MonthlyValidation (or starts a new one) and
    produces the record to upsert through snapshot(). Persistence is the
    caller's job.
    """

    def __init__(
        self,
        month: date,
        clock: Clock,
        record: Optional[MonthlyValidation] = None,
        user_id: Optional[UUID] = None,
    ):
        month = first_of_month(month)
        if record is None:
            now = clock.now()
            record = MonthlyValidation(
                month=month,
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
        elif record.month != month:
            raise InvalidInputError(
                f"Record is for {record.month.isoformat()}, not {month.isoformat()}"
            )

        self._clock = clock
        self._record = record.model_copy(deep=True)
        self._editing = False
        self._load_pending(self._record)

    @classmethod
    def for_record(cls, record: MonthlyValidation, clock: Clock) -> "MonthlyReconciliation":
        return cls(record.month, clock, record=record, user_id=record.user_id)

    def _load_pending(self, record: MonthlyValidation) -> None:
        self._confirmed_expenses = record.confirmed_expenses
        self._confirmed_income = record.confirmed_income
        self._unplanned_expenses = record.unplanned_expenses
        self._unplanned_income = record.unplanned_income

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ReconciliationState:
        if self._record.validated_at is None:
            return ReconciliationState.OPEN
        if self._editing:
            return ReconciliationState.EDITING
        return ReconciliationState.LOCKED

    @property
    def month(self) -> date:
        return self._record.month

    @property
    def is_locked(self) -> bool:
        return self.state == ReconciliationState.LOCKED

    @property
    def is_editable(self) -> bool:
        return self.state in (ReconciliationState.OPEN, ReconciliationState.EDITING)

    @property
    def confirmed_expenses(self) -> bool:
        return self._confirmed_expenses

    @property
    def confirmed_income(self) -> bool:
        return self._confirmed_income

    @property
    def unplanned_expenses(self) -> Decimal:
        return self._unplanned_expenses

    @property
    def unplanned_income(self) -> Decimal:
        return self._unplanned_income

    @property
    def can_validate(self) -> bool:
        return (
            self.state == ReconciliationState.OPEN
            and self._confirmed_expenses
            and self._confirmed_income
        )

    # ------------------------------------------------------------------
    # Field edits (OPEN or EDITING only)
    # ------------------------------------------------------------------

    def _ensure_editable(self, action: str) -> None:
        if not self.is_editable:
            raise ReconciliationLockedError(
                f"Cannot {action}: {self.month:%B %Y} is locked. Reopen it first."
            )

    def confirm_expenses(self, confirmed: bool = True) -> None:
        self._ensure_editable("confirm expenses")
        self._confirmed_expenses = confirmed

    def confirm_income(self, confirmed: bool = True) -> None:
        self._ensure_editable("confirm income")
        self._confirmed_income = confirmed

    def set_unplanned(self, expenses=None, income=None) -> None:
        """Set unplanned amounts. None leaves a field unchanged."""
        self._ensure_editable("change unplanned amounts")
        new_expenses = (
            _unplanned(expenses, "unplanned_expenses")
            if expenses is not None else self._unplanned_expenses
        )
        new_income = (
            _unplanned(income, "unplanned_income")
            if income is not None else self._unplanned_income
        )
        self._unplanned_expenses = new_expenses
        self._unplanned_income = new_income

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _frozen_totals(
        self,
        expenses: Iterable[RecurringItem],
        income: Iterable[RecurringItem],
    ) -> tuple[Decimal, Decimal]:
        actual_income = active_total(income) + self._unplanned_income
        actual_expenses = active_total(expenses) + self._unplanned_expenses
        return actual_income, actual_expenses

    def validate(
        self,
        expenses: Iterable[RecurringItem],
        income: Iterable[RecurringItem],
    ) -> bool:
        """
        Lock the month using the ledger as it is right now.

        Returns True when the month is locked afterwards. Validating an
        already locked month changes nothing, so repeated calls yield the
        same frozen totals.
        """
        state = self.state
        if state == ReconciliationState.LOCKED:
            return True
        if state == ReconciliationState.EDITING:
            raise InvalidTransitionError("validate", "being edited; use update()")

        if not self.can_validate:
            logger.info(
                "validation_preconditions_not_met",
                month=self.month.isoformat(),
                confirmed_expenses=self._confirmed_expenses,
                confirmed_income=self._confirmed_income,
            )
            return False

        actual_income, actual_expenses = self._frozen_totals(expenses, income)
        now = self._clock.now()
        self._record = self._record.model_copy(update={
            "confirmed_expenses": self._confirmed_expenses,
            "confirmed_income": self._confirmed_income,
            "unplanned_expenses": self._unplanned_expenses,
            "unplanned_income": self._unplanned_income,
            "actual_total_income": actual_income,
            "actual_total_expenses": actual_expenses,
            "validated_at": now,
            "updated_at": now,
        })
        logger.info(
            "month_validated",
            month=self.month.isoformat(),
            actual_total_income=str(actual_income),
            actual_total_expenses=str(actual_expenses),
        )
        return True

    def begin_edit(self) -> None:
        """Reopen a locked month. No data changes."""
        if self.state != ReconciliationState.LOCKED:
            raise InvalidTransitionError("reopen", self.state.value)
        self._editing = True

    def cancel_edit(self) -> None:
        """Leave edit mode, discarding any pending field edits."""
        if self.state != ReconciliationState.EDITING:
            raise InvalidTransitionError("cancel editing", self.state.value)
        self._editing = False
        self._load_pending(self._record)

    def update(
        self,
        expenses: Iterable[RecurringItem],
        income: Iterable[RecurringItem],
        refresh_timestamp: bool = False,
    ) -> MonthlyValidation:
        """
        Amend a reopened month and lock it again.

        Totals are recomputed from the current ledger and unplanned
        fields. The original validated_at is kept unless
        refresh_timestamp is set (or none was ever recorded).
        """
        if self.state != ReconciliationState.EDITING:
            raise InvalidTransitionError("amend", self.state.value)

        actual_income, actual_expenses = self._frozen_totals(expenses, income)
        now = self._clock.now()
        validated_at = self._record.validated_at
        if refresh_timestamp or validated_at is None:
            validated_at = now

        self._record = self._record.model_copy(update={
            "confirmed_expenses": self._confirmed_expenses,
            "confirmed_income": self._confirmed_income,
            "unplanned_expenses": self._unplanned_expenses,
            "unplanned_income": self._unplanned_income,
            "actual_total_income": actual_income,
            "actual_total_expenses": actual_expenses,
            "validated_at": validated_at,
            "updated_at": now,
        })
        self._editing = False
        logger.info(
            "month_amended",
            month=self.month.isoformat(),
            actual_total_income=str(actual_income),
            actual_total_expenses=str(actual_expenses),
            timestamp_refreshed=refresh_timestamp,
        )
        return self.snapshot()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def snapshot(self) -> MonthlyValidation:
        """
        The record to persist.

        An open month carries its draft fields. A locked or editing month
        carries what was last validated; pending edits are not included.
        """
        if self.state == ReconciliationState.OPEN:
            return self._record.model_copy(update={
                "confirmed_expenses": self._confirmed_expenses,
                "confirmed_income": self._confirmed_income,
                "unplanned_expenses": self._unplanned_expenses,
                "unplanned_income": self._unplanned_income,
                "updated_at": self._clock.now(),
            })
        return self._record.model_copy(deep=True)

    def preview_totals(
        self,
        expenses: Iterable[RecurringItem],
        income: Iterable[RecurringItem],
    ) -> dict[str, Decimal]:
        """What validate()/update() would freeze right now. Writes nothing."""
        expenses, income = list(expenses), list(income)
        actual_income, actual_expenses = self._frozen_totals(expenses, income)
        return {
            "recurring_income": active_total(income),
            "recurring_expenses": active_total(expenses),
            "actual_total_income": actual_income,
            "actual_total_expenses": actual_expenses,
            "net": actual_income - actual_expenses,
        }


# =============================================================================
# Salary-day reminders
# =============================================================================

def days_until_salary_day(salary_payment_day: int, today: date) -> int:
    """
    Days from today until the next salary day.

    A salary day past the end of a short month falls on its last day.
    """
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    salary_day = min(salary_payment_day, days_in_month)
    if salary_day >= today.day:
        return salary_day - today.day
    next_month = month_offset(first_of_month(today), 1)
    next_length = calendar.monthrange(next_month.year, next_month.month)[1]
    return days_in_month - today.day + min(salary_payment_day, next_length)


def is_near_deadline(
    salary_payment_day: int,
    today: date,
    is_validated: bool,
    warning_days: Optional[int] = None,
) -> bool:
    """An open month within the warning window before salary day."""
    if is_validated:
        return False
    if warning_days is None:
        warning_days = get_settings().planner.deadline_warning_days
    return days_until_salary_day(salary_payment_day, today) <= warning_days


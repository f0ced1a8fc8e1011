"""
Tests for the monthly reconciliation state machine.
"""

import pytest
from datetime import date
from decimal import Decimal

from finplan.engine.errors import (
    InvalidInputError,
    InvalidTransitionError,
    ReconciliationLockedError,
)
from finplan.engine.reconciliation import (
    MonthlyReconciliation,
    days_until_salary_day,
    is_near_deadline,
)
from finplan.models.finance import (
    MonthlyValidation,
    ReconciliationState,
)


MARCH = date(2024, 3, 1)


@pytest.fixture
def workflow(clock):
    return MonthlyReconciliation(MARCH, clock)


@pytest.fixture
def locked(workflow, sample_expenses, sample_income):
    workflow.confirm_expenses()
    workflow.confirm_income()
    workflow.set_unplanned(expenses=Decimal("85"), income=Decimal("100"))
    assert workflow.validate(sample_expenses, sample_income) is True
    return workflow


class TestOpenMonth:
    """Tests for a month that has not been validated."""

    def test_starts_open(self, workflow):
        assert workflow.state == ReconciliationState.OPEN
        assert workflow.is_editable is True
        assert workflow.can_validate is False

    def test_month_normalized(self, clock):
        workflow = MonthlyReconciliation(date(2024, 3, 19), clock)
        assert workflow.month == MARCH

    def test_record_for_other_month_rejected(self, clock):
        record = MonthlyValidation(month=date(2024, 2, 1))
        with pytest.raises(InvalidInputError):
            MonthlyReconciliation(MARCH, clock, record=record)

    def test_validate_without_confirmations_is_a_no_op(self, workflow, sample_expenses, sample_income):
        workflow.confirm_expenses()
        assert workflow.validate(sample_expenses, sample_income) is False
        assert workflow.state == ReconciliationState.OPEN
        assert workflow.snapshot().validated_at is None
        assert workflow.snapshot().actual_total_income == Decimal("0")

    @pytest.mark.parametrize("value", [Decimal("-1"), "abc", True, float("nan")])
    def test_rejects_invalid_unplanned(self, workflow, value):
        with pytest.raises(InvalidInputError):
            workflow.set_unplanned(expenses=value)

    def test_set_unplanned_none_keeps_field(self, workflow):
        workflow.set_unplanned(expenses=Decimal("10"), income=Decimal("5"))
        workflow.set_unplanned(income=Decimal("7"))
        assert workflow.unplanned_expenses == Decimal("10")
        assert workflow.unplanned_income == Decimal("7")

    def test_snapshot_carries_draft(self, workflow, clock):
        workflow.confirm_income()
        workflow.set_unplanned(expenses=Decimal("20"))
        record = workflow.snapshot()
        assert record.confirmed_income is True
        assert record.confirmed_expenses is False
        assert record.unplanned_expenses == Decimal("20")
        assert record.updated_at == clock.now()

    def test_cannot_reopen_open_month(self, workflow):
        with pytest.raises(InvalidTransitionError):
            workflow.begin_edit()


class TestValidate:
    """Tests for Open → Locked."""

    def test_freezes_totals(self, locked, clock):
        record = locked.snapshot()
        assert locked.state == ReconciliationState.LOCKED
        assert record.actual_total_income == Decimal("3600")
        assert record.actual_total_expenses == Decimal("1700")
        assert record.validated_at == clock.now()
        assert record.net == Decimal("1900")

    def test_idempotent(self, locked, sample_expenses, sample_income, clock):
        first = locked.snapshot()
        clock.advance(days=2)
        assert locked.validate(sample_expenses, sample_income) is True
        second = locked.snapshot()
        assert second.actual_total_income == first.actual_total_income
        assert second.actual_total_expenses == first.actual_total_expenses
        assert second.validated_at == first.validated_at

    def test_frozen_snapshot_ignores_ledger_changes(self, locked, sample_expenses, sample_income, make_item):
        before = locked.snapshot()
        sample_expenses.append(make_item("New car", "900"))
        sample_income[0].amount = Decimal("1")
        locked.validate(sample_expenses, sample_income)
        after = locked.snapshot()
        assert after.actual_total_income == before.actual_total_income
        assert after.actual_total_expenses == before.actual_total_expenses

    def test_locked_fields_cannot_change(self, locked):
        with pytest.raises(ReconciliationLockedError):
            locked.set_unplanned(expenses=Decimal("1"))
        with pytest.raises(ReconciliationLockedError):
            locked.confirm_income(False)

    def test_preview_totals_writes_nothing(self, workflow, sample_expenses, sample_income):
        workflow.set_unplanned(income=Decimal("10"))
        preview = workflow.preview_totals(sample_expenses, sample_income)
        assert preview["recurring_income"] == Decimal("3500")
        assert preview["actual_total_income"] == Decimal("3510")
        assert preview["net"] == Decimal("3510") - Decimal("1615")
        assert workflow.snapshot().actual_total_income == Decimal("0")


class TestEditing:
    """Tests for Locked → Editing → Locked."""

    def test_begin_edit(self, locked):
        locked.begin_edit()
        assert locked.state == ReconciliationState.EDITING
        assert locked.is_editable is True

    def test_update_recomputes_and_keeps_timestamp(self, locked, sample_expenses, sample_income, clock, make_item):
        original = locked.snapshot().validated_at
        clock.advance(days=5)
        locked.begin_edit()
        locked.set_unplanned(expenses=Decimal("0"))
        sample_expenses.append(make_item("Repair", "300"))

        record = locked.update(sample_expenses, sample_income)

        assert locked.state == ReconciliationState.LOCKED
        assert record.actual_total_expenses == Decimal("1915")
        assert record.validated_at == original
        assert record.updated_at == clock.now()

    def test_update_can_refresh_timestamp(self, locked, sample_expenses, sample_income, clock):
        clock.advance(days=5)
        locked.begin_edit()
        record = locked.update(sample_expenses, sample_income, refresh_timestamp=True)
        assert record.validated_at == clock.now()

    def test_cancel_edit_discards_pending(self, locked):
        locked.begin_edit()
        locked.set_unplanned(expenses=Decimal("999"))
        locked.cancel_edit()
        assert locked.state == ReconciliationState.LOCKED
        assert locked.unplanned_expenses == Decimal("85")

    def test_snapshot_while_editing_is_last_validated(self, locked):
        locked.begin_edit()
        locked.set_unplanned(expenses=Decimal("999"))
        assert locked.snapshot().unplanned_expenses == Decimal("85")

    def test_validate_while_editing_rejected(self, locked, sample_expenses, sample_income):
        locked.begin_edit()
        with pytest.raises(InvalidTransitionError):
            locked.validate(sample_expenses, sample_income)

    def test_update_requires_editing(self, locked, sample_expenses, sample_income):
        with pytest.raises(InvalidTransitionError):
            locked.update(sample_expenses, sample_income)

    def test_cancel_requires_editing(self, locked):
        with pytest.raises(InvalidTransitionError):
            locked.cancel_edit()

    def test_resume_from_stored_record(self, locked, clock):
        """A workflow loaded from a stored locked record starts LOCKED."""
        resumed = MonthlyReconciliation.for_record(locked.snapshot(), clock)
        assert resumed.state == ReconciliationState.LOCKED
        assert resumed.unplanned_income == Decimal("100")


class TestSalaryDay:
    """Tests for salary-day reminders."""

    def test_days_until_later_this_month(self):
        assert days_until_salary_day(25, date(2024, 3, 15)) == 10

    def test_days_until_today(self):
        assert days_until_salary_day(15, date(2024, 3, 15)) == 0

    def test_days_until_next_month(self):
        assert days_until_salary_day(5, date(2024, 3, 15)) == 21

    def test_salary_day_clamped_to_short_month(self):
        assert days_until_salary_day(31, date(2024, 2, 20)) == 9

    def test_next_month_clamped(self):
        """Salary on the 30th seen from 31 January falls on 29 February."""
        assert days_until_salary_day(30, date(2024, 1, 31)) == 29

    def test_near_deadline(self):
        assert is_near_deadline(20, date(2024, 3, 15), is_validated=False) is True
        assert is_near_deadline(28, date(2024, 3, 15), is_validated=False) is False

    def test_validated_month_never_near_deadline(self):
        assert is_near_deadline(15, date(2024, 3, 15), is_validated=True) is False

    def test_custom_warning_window(self):
        assert is_near_deadline(28, date(2024, 3, 15), is_validated=False, warning_days=14) is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

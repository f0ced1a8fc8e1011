"""
Main Orchestrator for the Financial Planning Engine

This module ties the pure engine to storage, the clock, input
validation and the audit log, and defines the end-to-end flows for:
1. Recurring ledger edits (draft → validate → save → audit)
2. Financing plans (target → remaining → solver)
3. Monthly reconciliation (load → edit → validate/amend → upsert → audit)
4. Projection and history (ledger + locked months → series)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No item is stored without passing schema validation
- A month's totals are written only through the reconciliation workflow
- Every mutation is audited

Storage failures are audited and re-raised unchanged. The engine never
retries.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from finplan.audit import AuditLogger, create_correlation_id
from finplan.engine.clock import Clock, SystemClock, first_of_month, today
from finplan.engine.errors import InvalidInputError
from finplan.engine.financing import FinancingSolver, months_until
from finplan.engine.ledger import RecurringLedger
from finplan.engine.projection import ProjectionEngine
from finplan.engine.reconciliation import MonthlyReconciliation, is_near_deadline
from finplan.engine.summary import build_budget_summary, monthly_history
from finplan.engine.target import resolve_funding_target
from finplan.models.audit import AuditEventBuilder
from finplan.models.finance import (
    BudgetSummary,
    EntryKind,
    FinanceSettings,
    FinancingPlan,
    GoalTotals,
    MonthHistoryEntry,
    MonthlyValidation,
    ProjectionResult,
    RecurringItem,
    ValidationResult,
)
from finplan.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryReconciliationStorage,
    InMemorySettingsStorage,
    LedgerStorageInterface,
    NotFoundError,
    ReconciliationStorageInterface,
    SettingsStorageInterface,
    StorageError,
)
from finplan.validation import LedgerItemValidator


logger = structlog.get_logger(__name__)

# Fields a caller may change on an existing item
EDITABLE_ITEM_FIELDS = frozenset({"name", "amount", "category", "kind", "is_active"})

# Default financing duration when neither input is authoritative
DEFAULT_FINANCING_MONTHS = 12


class FinancePlanner:
    """
    One user's planning session.

    Flow for a month:
    1. save_month_draft → confirmations and unplanned amounts stored, month OPEN
    2. validate_month → totals frozen from the ledger, month LOCKED
    3. amend_month → reopened, recomputed and locked again

    Ledger edits after step 2 never touch the locked month's totals.
    """

    def __init__(
        self,
        user_id: Optional[UUID] = None,
        clock: Optional[Clock] = None,
        ledger_storage: Optional[LedgerStorageInterface] = None,
        settings_storage: Optional[SettingsStorageInterface] = None,
        reconciliation_storage: Optional[ReconciliationStorageInterface] = None,
        validator: Optional[LedgerItemValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._user_id = user_id
        self._clock = clock or SystemClock()
        self._ledger_storage = ledger_storage or InMemoryLedgerStorage()
        self._settings_storage = settings_storage or InMemorySettingsStorage()
        self._reconciliation_storage = reconciliation_storage or InMemoryReconciliationStorage()
        self._validator = validator or LedgerItemValidator()
        self._audit_logger = audit_logger or AuditLogger(user_id=user_id)
        self._projection = ProjectionEngine(self._clock)

    @property
    def user_id(self) -> Optional[UUID]:
        return self._user_id

    @property
    def clock(self) -> Clock:
        return self._clock

    def _storage_call(
        self,
        operation: str,
        func: Callable,
        *args,
        correlation_id: Optional[UUID] = None,
    ):
        """Run a storage call; audit any failure and re-raise it."""
        try:
            return func(*args)
        except StorageError as e:
            self._audit_logger.log_storage_error(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation},
                correlation_id=correlation_id,
            )
            raise

    # =========================================================================
    # RECURRING LEDGER
    # =========================================================================

    def ledger(self) -> RecurringLedger:
        """All of the user's items, active and inactive."""
        items = self._storage_call("list_items", self._ledger_storage.list_items, self._user_id)
        return RecurringLedger(items)

    def validate_item(
        self,
        name: Optional[str],
        amount: Any,
        kind: EntryKind,
        category: Optional[str] = None,
    ) -> ValidationResult:
        """Preview the checks add_item() would run. Stores nothing."""
        return self._validator.validate(
            name,
            amount,
            kind,
            category=category,
            existing_items=self.ledger().items,
        )

    def _reject(self, result: ValidationResult, correlation_id: UUID) -> None:
        self._audit_logger.log_item_rejected(
            issues=[issue.model_dump() for issue in result.issues],
            correlation_id=correlation_id,
        )
        errors = [issue.message for issue in result.issues if issue.severity == "error"]
        raise InvalidInputError("; ".join(errors))

    def add_item(
        self,
        name: str,
        amount: Any,
        kind: EntryKind,
        category: Optional[str] = None,
        is_active: bool = True,
    ) -> RecurringItem:
        """
        Validate and store a new recurring item.

        Warnings are logged but do not block the save. An unknown
        category is stored as the fallback category.

        Raises:
            InvalidInputError: If the draft has error-level issues
        """
        correlation_id = create_correlation_id()
        kind = EntryKind(kind)

        result = self.validate_item(name, amount, kind, category)
        if result.has_errors:
            self._reject(result, correlation_id)
        if result.warnings:
            logger.info("item_warnings", name=name, warnings=result.warnings)

        now = self._clock.now()
        item = RecurringItem(
            user_id=self._user_id,
            name=name,
            amount=Decimal(str(amount)),
            category=result.resolved_category if category else None,
            kind=kind,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        saved = self._storage_call(
            "save_item",
            self._ledger_storage.save_item,
            item,
            correlation_id=correlation_id,
        )

        self._audit_logger.log_item_created(
            item_id=saved.id,
            name=saved.name,
            kind=saved.kind.value,
            amount=saved.amount,
            correlation_id=correlation_id,
        )
        return saved

    def _get_own_item(self, item_id: UUID, correlation_id: UUID) -> RecurringItem:
        item = self._storage_call(
            "get_item",
            self._ledger_storage.get_item,
            item_id,
            correlation_id=correlation_id,
        )
        if item is None or item.user_id != self._user_id:
            raise NotFoundError(f"Recurring item not found: {item_id}")
        return item

    def update_item(self, item_id: UUID, **changes) -> RecurringItem:
        """
        Overwrite fields of an existing item in place.

        Raises:
            InvalidInputError: Unknown fields or a draft with error-level issues
            NotFoundError: If the item doesn't belong to this user
        """
        unknown = set(changes) - EDITABLE_ITEM_FIELDS
        if unknown:
            raise InvalidInputError(f"Cannot update item fields: {', '.join(sorted(unknown))}")

        correlation_id = create_correlation_id()
        item = self._get_own_item(item_id, correlation_id)

        merged = {**item.model_dump(), **changes}
        kind = EntryKind(merged["kind"])
        others = [other for other in self.ledger().items if other.id != item.id]
        result = self._validator.validate(
            merged["name"],
            merged["amount"],
            kind,
            category=merged["category"],
            existing_items=others,
        )
        if result.has_errors:
            self._reject(result, correlation_id)

        if "category" in changes and changes["category"]:
            merged["category"] = result.resolved_category
        merged["amount"] = Decimal(str(merged["amount"]))
        merged["updated_at"] = self._clock.now()
        updated = RecurringItem.model_validate(merged)

        saved = self._storage_call(
            "update_item",
            self._ledger_storage.update_item,
            updated,
            correlation_id=correlation_id,
        )
        self._audit_logger.log_item_updated(
            item_id=saved.id,
            changes=changes,
            correlation_id=correlation_id,
        )
        return saved

    def set_item_active(self, item_id: UUID, is_active: bool) -> RecurringItem:
        """Toggle whether an item counts toward totals."""
        return self.update_item(item_id, is_active=is_active)

    def delete_item(self, item_id: UUID) -> bool:
        """
        Delete an item.

        Returns:
            True if the item existed and was deleted
        """
        correlation_id = create_correlation_id()
        try:
            self._get_own_item(item_id, correlation_id)
        except NotFoundError:
            return False

        deleted = self._storage_call(
            "delete_item",
            self._ledger_storage.delete_item,
            item_id,
            correlation_id=correlation_id,
        )
        if deleted:
            self._audit_logger.log_item_deleted(item_id=item_id, correlation_id=correlation_id)
        return deleted

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def settings(self) -> FinanceSettings:
        return self._storage_call(
            "get_settings",
            self._settings_storage.get_settings,
            self._user_id,
        )

    def update_settings(self, **changes) -> FinanceSettings:
        """
        Change finance settings.

        Raises:
            InvalidInputError: Unknown fields or out-of-range values
        """
        unknown = set(changes) - set(FinanceSettings.model_fields)
        if unknown:
            raise InvalidInputError(f"Unknown settings: {', '.join(sorted(unknown))}")

        correlation_id = create_correlation_id()
        current = self.settings()
        try:
            updated = FinanceSettings.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            raise InvalidInputError(str(e)) from e

        saved = self._storage_call(
            "save_settings",
            self._settings_storage.save_settings,
            self._user_id,
            updated,
            correlation_id=correlation_id,
        )
        self._audit_logger.log_settings_updated(changes=changes, correlation_id=correlation_id)
        return saved

    # =========================================================================
    # SUMMARY & FINANCING
    # =========================================================================

    def budget_summary(self, goal_totals: Optional[GoalTotals] = None) -> BudgetSummary:
        ledger = self.ledger()
        return build_budget_summary(
            ledger.expenses,
            ledger.income,
            self.settings(),
            goal_totals or GoalTotals(),
        )

    def plan_financing(
        self,
        goal_totals: Optional[GoalTotals] = None,
        months: Optional[int] = None,
        monthly_amount: Any = None,
        existing_balance_reserved: Any = Decimal("0"),
        deadline: Optional[date] = None,
    ) -> FinancingPlan:
        """
        Financing plan for what remains of the target.

        Exactly one of months / monthly_amount is authoritative. With
        neither, the declared monthly allocation is used if there is one,
        otherwise a 12-month duration.

        Raises:
            InvalidInputError: Both inputs given, or an invalid one
        """
        if months is not None and monthly_amount is not None:
            raise InvalidInputError("Give either months or monthly_amount, not both")

        settings = self.settings()
        funding = resolve_funding_target(settings, goal_totals or GoalTotals())
        solver = FinancingSolver.for_remaining(funding.remaining, existing_balance_reserved)

        now = today(self._clock)
        deadline_months = months_until(deadline, now) if deadline else None
        start_month = first_of_month(now)

        if months is None and monthly_amount is None:
            if settings.project_monthly_allocation > 0:
                monthly_amount = settings.project_monthly_allocation
            else:
                months = DEFAULT_FINANCING_MONTHS

        if months is not None:
            plan = solver.from_months(months, deadline_months, start_month)
        else:
            plan = solver.from_amount(monthly_amount, deadline_months, start_month)

        self._audit_logger.log(AuditEventBuilder.financing_planned(
            amount_to_finance=plan.amount_to_finance,
            months=plan.months,
            monthly_amount=plan.monthly_amount,
        ))
        return plan

    # =========================================================================
    # MONTHLY RECONCILIATION
    # =========================================================================

    def current_month(self) -> date:
        return first_of_month(today(self._clock))

    def reconciliation(self, month: Optional[date] = None) -> MonthlyReconciliation:
        """The workflow for a month (current month by default), loaded from storage."""
        month = first_of_month(month or self.current_month())
        record = self._storage_call(
            "get_validation",
            self._reconciliation_storage.get_validation,
            self._user_id,
            month,
        )
        return MonthlyReconciliation(month, self._clock, record=record, user_id=self._user_id)

    @staticmethod
    def _apply_fields(
        workflow: MonthlyReconciliation,
        confirmed_expenses: Optional[bool],
        confirmed_income: Optional[bool],
        unplanned_expenses: Any,
        unplanned_income: Any,
    ) -> None:
        if confirmed_expenses is not None:
            workflow.confirm_expenses(confirmed_expenses)
        if confirmed_income is not None:
            workflow.confirm_income(confirmed_income)
        if unplanned_expenses is not None or unplanned_income is not None:
            workflow.set_unplanned(expenses=unplanned_expenses, income=unplanned_income)

    def _upsert(self, record: MonthlyValidation, correlation_id: UUID) -> MonthlyValidation:
        return self._storage_call(
            "upsert_validation",
            self._reconciliation_storage.upsert_validation,
            record,
            correlation_id=correlation_id,
        )

    def save_month_draft(
        self,
        month: Optional[date] = None,
        confirmed_expenses: Optional[bool] = None,
        confirmed_income: Optional[bool] = None,
        unplanned_expenses: Any = None,
        unplanned_income: Any = None,
    ) -> MonthlyValidation:
        """
        Store confirmations and unplanned amounts without locking.

        None leaves a field as stored.

        Raises:
            ReconciliationLockedError: If the month is locked
        """
        correlation_id = create_correlation_id()
        workflow = self.reconciliation(month)
        self._apply_fields(
            workflow,
            confirmed_expenses,
            confirmed_income,
            unplanned_expenses,
            unplanned_income,
        )
        saved = self._upsert(workflow.snapshot(), correlation_id)
        self._audit_logger.log(AuditEventBuilder.month_saved(
            record_id=saved.id,
            month=saved.month,
            correlation_id=correlation_id,
        ))
        return saved

    def validate_month(
        self,
        month: Optional[date] = None,
        confirmed_expenses: Optional[bool] = None,
        confirmed_income: Optional[bool] = None,
        unplanned_expenses: Any = None,
        unplanned_income: Any = None,
    ) -> MonthlyValidation:
        """
        Lock a month with totals frozen from the current ledger.

        Returns the stored record. When a confirmation is missing the
        given fields are saved as an open draft and the month stays
        unlocked; check is_locked.
        An already locked month is returned unchanged.

        Raises:
            ReconciliationLockedError: If fields are given for a locked month
        """
        correlation_id = create_correlation_id()
        workflow = self.reconciliation(month)
        self._apply_fields(
            workflow,
            confirmed_expenses,
            confirmed_income,
            unplanned_expenses,
            unplanned_income,
        )

        if workflow.is_locked:
            return workflow.snapshot()

        ledger = self.ledger()
        if not workflow.validate(ledger.expenses, ledger.income):
            draft = self._upsert(workflow.snapshot(), correlation_id)
            self._audit_logger.log(AuditEventBuilder.validation_skipped(
                month=draft.month,
                confirmed_expenses=draft.confirmed_expenses,
                confirmed_income=draft.confirmed_income,
                correlation_id=correlation_id,
            ))
            return draft

        saved = self._upsert(workflow.snapshot(), correlation_id)
        self._audit_logger.log(AuditEventBuilder.month_validated(
            record_id=saved.id,
            month=saved.month,
            actual_income=saved.actual_total_income,
            actual_expenses=saved.actual_total_expenses,
            correlation_id=correlation_id,
        ))
        return saved

    def amend_month(
        self,
        month: Optional[date] = None,
        confirmed_expenses: Optional[bool] = None,
        confirmed_income: Optional[bool] = None,
        unplanned_expenses: Any = None,
        unplanned_income: Any = None,
        refresh_timestamp: bool = False,
    ) -> MonthlyValidation:
        """
        Reopen a locked month, apply edits, recompute its totals and lock it again.

        The original validation time is kept unless refresh_timestamp is set.

        Raises:
            InvalidTransitionError: If the month was never validated
        """
        correlation_id = create_correlation_id()
        workflow = self.reconciliation(month)
        workflow.begin_edit()
        self._audit_logger.log(AuditEventBuilder.month_reopened(
            record_id=workflow.snapshot().id,
            month=workflow.month,
            correlation_id=correlation_id,
        ))

        self._apply_fields(
            workflow,
            confirmed_expenses,
            confirmed_income,
            unplanned_expenses,
            unplanned_income,
        )
        ledger = self.ledger()
        record = workflow.update(ledger.expenses, ledger.income, refresh_timestamp=refresh_timestamp)

        saved = self._upsert(record, correlation_id)
        self._audit_logger.log(AuditEventBuilder.month_amended(
            record_id=saved.id,
            month=saved.month,
            actual_income=saved.actual_total_income,
            actual_expenses=saved.actual_total_expenses,
            timestamp_refreshed=refresh_timestamp,
            correlation_id=correlation_id,
        ))
        return saved

    def needs_validation_reminder(self) -> bool:
        """The current month is still open and salary day is close."""
        record = self._storage_call(
            "get_validation",
            self._reconciliation_storage.get_validation,
            self._user_id,
            self.current_month(),
        )
        return is_near_deadline(
            self.settings().salary_payment_day,
            today(self._clock),
            is_validated=record is not None and record.is_locked,
        )

    # =========================================================================
    # PROJECTION & HISTORY
    # =========================================================================

    def _validations(self) -> list[MonthlyValidation]:
        return self._storage_call(
            "list_validations",
            self._reconciliation_storage.list_validations,
            self._user_id,
        )

    def projection(self, goal_totals: Optional[GoalTotals] = None) -> ProjectionResult:
        ledger = self.ledger()
        funding = resolve_funding_target(self.settings(), goal_totals or GoalTotals())
        result = self._projection.project(
            ledger.net_balance(),
            self._validations(),
            remaining=funding.remaining,
        )
        self._audit_logger.log(AuditEventBuilder.projection_generated(
            monthly_net_balance=result.monthly_net_balance,
            trend=result.trend.kind.value,
            actual_months=sum(1 for point in result.points if point.actual is not None),
        ))
        return result

    def history(self) -> list[MonthHistoryEntry]:
        """Past months for the reconciliation history, newest first."""
        return monthly_history(self._validations(), today(self._clock))


def create_planner(
    user_id: Optional[UUID] = None,
    clock: Optional[Clock] = None,
) -> FinancePlanner:
    """
    Factory function to create a planner backed by in-memory storage.

    Args:
        user_id: Owner of every record the planner touches
        clock: Source of "now"; wall-clock UTC when omitted

    Returns:
        A FinancePlanner whose audit events are kept in memory
    """
    audit_logger = AuditLogger(InMemoryAuditStorage(), user_id=user_id)
    return FinancePlanner(
        user_id=user_id,
        clock=clock,
        ledger_storage=InMemoryLedgerStorage(),
        settings_storage=InMemorySettingsStorage(),
        reconciliation_storage=InMemoryReconciliationStorage(),
        audit_logger=audit_logger,
    )

"""
Core Data Models for the Financial Planning Engine

These models define the strict schemas for all data flowing through the engine.
They are designed to:
1. Enforce type safety at runtime
2. Reject invalid amounts instead of silently coercing them
3. Be serializable for storage and logging

DESIGN DECISION: Money is always Decimal. Floats never enter a total.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryKind(str, Enum):
    """Direction of a recurring cash flow."""
    EXPENSE = "expense"
    INCOME = "income"


class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    OTHER is the designated fallback for anything unrecognised.
    """
    HOUSING = "housing"
    UTILITIES = "utilities"
    FOOD = "food"
    TRANSPORT = "transport"
    SUBSCRIPTIONS = "subscriptions"
    HEALTH = "health"
    LEISURE = "leisure"
    SAVINGS = "savings"
    TAXES = "taxes"
    EDUCATION = "education"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    MAINTENANCE = "maintenance"
    INSURANCE = "insurance"
    CHILDCARE = "childcare"
    PETS = "pets"
    GIFTS = "gifts"
    DEBT = "debt"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


class IncomeCategory(str, Enum):
    """Supported income categories."""
    SALARY = "salary"
    FREELANCE = "freelance"
    BUSINESS = "business"
    INVESTMENTS = "investments"
    RENTAL = "rental"
    BONUS = "bonus"
    PENSION = "pension"
    BENEFITS = "benefits"
    ROYALTIES = "royalties"
    REFUNDS = "refunds"
    GIFT = "gift"
    OTHER = "other"


class ReconciliationState(str, Enum):
    """
    Lifecycle of a monthly validation record.

    EDITING is a transient sub-state of LOCKED. It is never persisted:
    a stored record is either open or locked.
    """
    OPEN = "open"
    LOCKED = "locked"
    EDITING = "editing"


class TrendKind(str, Enum):
    """Classification of real outcomes against the projection."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


# =============================================================================
# LEDGER MODELS
# =============================================================================

class RecurringItem(BaseModel):
    """
    A recurring monthly income or expense line.

    Edits overwrite in place; there is no version history.
    Inactive items stay in the ledger but never count toward totals.
    """
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique item ID"
    )
    user_id: Optional[UUID] = None
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name; the configured item name limit is enforced on input"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Monthly amount"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Category value; unrecognised values fall back to 'other'"
    )
    kind: EntryKind
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator('category')
    @classmethod
    def normalize_category(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower()
        return v or None


class CategoryTotal(BaseModel):
    """One slice of a category breakdown."""

    category: str
    total: Decimal
    item_count: int = Field(ge=0)


# =============================================================================
# SETTINGS & TARGET MODELS
# =============================================================================

class FinanceSettings(BaseModel):
    """
    Per-user finance settings.

    A funding target above zero switches the user into custom mode,
    where goal completion and already_funded are ignored.
    """

    salary_payment_day: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Anchor day for monthly cycles"
    )
    project_funding_target: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Explicit target; 0 derives the target from goals"
    )
    project_monthly_allocation: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Declared monthly contribution"
    )
    already_funded: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Money already raised toward goals (goal mode only)"
    )

    @property
    def is_custom_mode(self) -> bool:
        return self.project_funding_target > 0


class GoalTotals(BaseModel):
    """Goal costs supplied by the goals collaborator."""

    total_goals_cost: Decimal = Field(default=Decimal("0"), ge=0)
    completed_goals_cost: Decimal = Field(default=Decimal("0"), ge=0)


class FundingTarget(BaseModel):
    """How much money is still needed, and how that was decided."""

    total: Decimal
    financed: Decimal
    remaining: Decimal
    is_custom_mode: bool

    @property
    def progress_percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return float(self.financed / self.total * 100)


# =============================================================================
# FINANCING MODELS
# =============================================================================

class DeadlineStatus(BaseModel):
    """Financing duration compared against an optional deadline."""

    deadline_months: Optional[int] = None
    is_on_track: bool
    overrun_months: int = Field(ge=0)


class FinancingPlan(BaseModel):
    """A consistent (months, monthly amount) pair for one amount to finance."""

    amount_to_finance: Decimal
    months: int = Field(ge=1)
    monthly_amount: Decimal
    completion_month: Optional[date] = None
    deadline: Optional[DeadlineStatus] = None


# =============================================================================
# RECONCILIATION MODELS
# =============================================================================

class MonthlyValidation(BaseModel):
    """
    One reconciliation record per user per calendar month.

    CRITICAL: actual_total_* are a snapshot taken at validation time.
    Only MonthlyReconciliation.validate() / update() write them.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: Optional[UUID] = None
    month: date = Field(
        ...,
        description="First day of the reconciled month"
    )
    confirmed_expenses: bool = False
    confirmed_income: bool = False
    unplanned_expenses: Decimal = Field(default=Decimal("0"), ge=0)
    unplanned_income: Decimal = Field(default=Decimal("0"), ge=0)
    actual_total_income: Decimal = Decimal("0")
    actual_total_expenses: Decimal = Decimal("0")
    validated_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator('month', mode='before')
    @classmethod
    def drop_time(cls, v):
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator('month')
    @classmethod
    def normalize_month(cls, v: date) -> date:
        """Month keys are always the 1st."""
        return v.replace(day=1)

    @property
    def is_locked(self) -> bool:
        return self.validated_at is not None

    @property
    def net(self) -> Decimal:
        return self.actual_total_income - self.actual_total_expenses


class MonthHistoryEntry(BaseModel):
    """A past month as listed in the reconciliation history."""

    month: date
    validation: Optional[MonthlyValidation] = None

    @property
    def is_validated(self) -> bool:
        return self.validation is not None and self.validation.is_locked

    @property
    def net(self) -> Optional[Decimal]:
        if not self.is_validated:
            return None
        return self.validation.net


# =============================================================================
# PROJECTION MODELS
# =============================================================================

class ProjectionPoint(BaseModel):
    """
    One month of the forward series.

    actual is None when the month has no locked record. Charts must
    render that as a gap, never as zero.
    """

    month: date
    projected: Decimal
    actual: Optional[Decimal] = None


class TrendInterpretation(BaseModel):
    """Latest real outcome compared against the projection."""

    kind: TrendKind
    message: str
    reference_month: Optional[date] = None
    months_to_stabilize: Optional[int] = None


class ProjectionResult(BaseModel):
    """The forward series plus its interpretation."""

    monthly_net_balance: Decimal
    points: list[ProjectionPoint] = Field(default_factory=list)
    trend: TrendInterpretation

    @property
    def has_actuals(self) -> bool:
        return any(point.actual is not None for point in self.points)


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class BudgetStats(BaseModel):
    """Headline numbers for the finance overview."""

    savings_rate: float
    months_to_goal: Optional[int] = None
    monthly_net: Decimal
    yearly_projection: Decimal


class BudgetSummary(BaseModel):
    """Monthly budget summary built from the recurring ledger."""

    total_income: Decimal
    total_expenses: Decimal
    monthly_net_balance: Decimal
    expenses_by_category: list[CategoryTotal] = Field(default_factory=list)
    income_by_category: list[CategoryTotal] = Field(default_factory=list)
    funding: FundingTarget
    stats: BudgetStats


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found on an item draft."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_long', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage item validation.

    Stage 1: Schema validation (name and amount present and in range)
    Stage 2: Semantic validation (category, size and duplicate checks)
    """

    validated_at: datetime = Field(default_factory=_utcnow)

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)

    # Warnings don't block but should be shown
    warnings: list[str] = Field(default_factory=list)

    # Category the item will actually be filed under
    resolved_category: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

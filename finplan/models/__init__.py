"""
Data Models Package

This package contains all Pydantic models used by the planning engine.
All data flowing through the engine must conform to these schemas.
"""

from finplan.models.finance import (
    BudgetStats,
    BudgetSummary,
    CategoryTotal,
    DeadlineStatus,
    EntryKind,
    ExpenseCategory,
    FinanceSettings,
    FinancingPlan,
    FundingTarget,
    GoalTotals,
    IncomeCategory,
    MonthHistoryEntry,
    MonthlyValidation,
    ProjectionPoint,
    ProjectionResult,
    ReconciliationState,
    RecurringItem,
    TrendInterpretation,
    TrendKind,
    ValidationIssue,
    ValidationResult,
)
from finplan.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "BudgetStats",
    "BudgetSummary",
    "CategoryTotal",
    "DeadlineStatus",
    "EntryKind",
    "ExpenseCategory",
    "FinanceSettings",
    "FinancingPlan",
    "FundingTarget",
    "GoalTotals",
    "IncomeCategory",
    "MonthHistoryEntry",
    "MonthlyValidation",
    "ProjectionPoint",
    "ProjectionResult",
    "ReconciliationState",
    "RecurringItem",
    "TrendInterpretation",
    "TrendKind",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

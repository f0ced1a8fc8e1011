"""
Audit Models for the Financial Planning Engine

Every mutation of a user's ledger, settings or reconciliation records is
logged for audit purposes. This provides:
1. Traceability of when a month was locked and amended
2. Debugging information when totals look wrong
3. Ability to reconstruct what the ledger looked like at validation time

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Recurring ledger
    ITEM_CREATED = "item_created"
    ITEM_UPDATED = "item_updated"
    ITEM_DELETED = "item_deleted"
    ITEM_REJECTED = "item_rejected"

    # Settings
    SETTINGS_UPDATED = "settings_updated"

    # Monthly reconciliation
    MONTH_SAVED = "month_saved"
    MONTH_VALIDATED = "month_validated"
    VALIDATION_SKIPPED = "validation_skipped"
    MONTH_REOPENED = "month_reopened"
    MONTH_AMENDED = "month_amended"

    # Read-side calculations
    FINANCING_PLANNED = "financing_planned"
    PROJECTION_GENERATED = "projection_generated"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    user_id: Optional[UUID] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'recurring_item', 'month', 'settings')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one reconciliation session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": str(self.user_id) if self.user_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.item_created(item_id, "Rent", "expense", "1200")
        event = AuditEventBuilder.month_validated(record_id, month, income, expenses)
    """

    @staticmethod
    def item_created(
        item_id: UUID,
        name: str,
        kind: str,
        amount: Decimal,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_CREATED,
            user_id=user_id,
            entity_type="recurring_item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"Recurring {kind} added: {name}",
            details={
                "name": name,
                "kind": kind,
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def item_updated(
        item_id: UUID,
        changes: dict[str, Any],
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_UPDATED,
            user_id=user_id,
            entity_type="recurring_item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"Recurring item updated ({', '.join(sorted(changes)) or 'no fields'})",
            details={key: str(value) for key, value in changes.items()},
            is_user_action=True,
        )

    @staticmethod
    def item_deleted(
        item_id: UUID,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETED,
            user_id=user_id,
            entity_type="recurring_item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description="Recurring item deleted",
            is_user_action=True,
        )

    @staticmethod
    def item_rejected(
        issues: list[dict],
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="recurring_item",
            correlation_id=correlation_id,
            description=f"Recurring item rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        changes: dict[str, Any],
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            user_id=user_id,
            entity_type="settings",
            correlation_id=correlation_id,
            description="Finance settings updated",
            details={key: str(value) for key, value in changes.items()},
            is_user_action=True,
        )

    @staticmethod
    def month_saved(
        record_id: UUID,
        month: date,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_SAVED,
            user_id=user_id,
            entity_type="month",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Draft saved for {month:%B %Y}",
            details={"month": month.isoformat()},
            is_user_action=True,
        )

    @staticmethod
    def month_validated(
        record_id: UUID,
        month: date,
        actual_income: Decimal,
        actual_expenses: Decimal,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_VALIDATED,
            user_id=user_id,
            entity_type="month",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{month:%B %Y} validated and locked",
            details={
                "month": month.isoformat(),
                "actual_total_income": str(actual_income),
                "actual_total_expenses": str(actual_expenses),
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_skipped(
        month: date,
        confirmed_expenses: bool,
        confirmed_income: bool,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_SKIPPED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="month",
            correlation_id=correlation_id,
            description=f"{month:%B %Y} not validated: confirmations missing",
            details={
                "month": month.isoformat(),
                "confirmed_expenses": confirmed_expenses,
                "confirmed_income": confirmed_income,
            },
            is_user_action=True,
        )

    @staticmethod
    def month_reopened(
        record_id: UUID,
        month: date,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_REOPENED,
            user_id=user_id,
            entity_type="month",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{month:%B %Y} reopened for editing",
            details={"month": month.isoformat()},
            is_user_action=True,
        )

    @staticmethod
    def month_amended(
        record_id: UUID,
        month: date,
        actual_income: Decimal,
        actual_expenses: Decimal,
        timestamp_refreshed: bool,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_AMENDED,
            user_id=user_id,
            entity_type="month",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{month:%B %Y} amended",
            details={
                "month": month.isoformat(),
                "actual_total_income": str(actual_income),
                "actual_total_expenses": str(actual_expenses),
                "timestamp_refreshed": timestamp_refreshed,
            },
            is_user_action=True,
        )

    @staticmethod
    def financing_planned(
        amount_to_finance: Decimal,
        months: int,
        monthly_amount: Decimal,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FINANCING_PLANNED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="financing",
            correlation_id=correlation_id,
            description=f"Financing plan: {months} months",
            details={
                "amount_to_finance": str(amount_to_finance),
                "months": months,
                "monthly_amount": str(monthly_amount),
            },
        )

    @staticmethod
    def projection_generated(
        monthly_net_balance: Decimal,
        trend: str,
        actual_months: int,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECTION_GENERATED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="projection",
            correlation_id=correlation_id,
            description=f"Projection generated, trend: {trend}",
            details={
                "monthly_net_balance": str(monthly_net_balance),
                "trend": trend,
                "actual_months": actual_months,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        user_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

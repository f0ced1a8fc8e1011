"""
Abstract Storage Interface

DESIGN DECISION: The engine never talks to a database. It works on
records loaded through these interfaces, which allows us to:
1. Plug in whatever managed backend the application uses
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - CRUD on the four record types
the engine reads and writes, nothing more.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from finplan.models.audit import AuditEvent
from finplan.models.finance import (
    EntryKind,
    FinanceSettings,
    MonthlyValidation,
    RecurringItem,
)


class LedgerStorageInterface(ABC):
    """
    Recurring items for a user.

    No engine logic lives here: totals are computed from what list_items returns.
    """

    @abstractmethod
    def list_items(
        self,
        user_id: Optional[UUID],
        kind: Optional[EntryKind] = None,
    ) -> list[RecurringItem]:
        """
        List a user's recurring items, oldest first.

        Args:
            user_id: Owner of the items
            kind: Restrict to expenses or income

        Returns:
            Items including inactive ones
        """
        pass

    @abstractmethod
    def get_item(self, item_id: UUID) -> Optional[RecurringItem]:
        """Retrieve an item by ID, or None."""
        pass

    @abstractmethod
    def save_item(self, item: RecurringItem) -> RecurringItem:
        """
        Store a new item.

        Raises:
            DuplicateError: If an item with this ID exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def update_item(self, item: RecurringItem) -> RecurringItem:
        """
        Overwrite an existing item in place.

        Raises:
            NotFoundError: If the item doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete_item(self, item_id: UUID) -> bool:
        """
        Delete an item by ID.

        Returns:
            True if something was deleted
        """
        pass


class SettingsStorageInterface(ABC):
    """One FinanceSettings record per user."""

    @abstractmethod
    def get_settings(self, user_id: Optional[UUID]) -> FinanceSettings:
        """Return the user's settings, or defaults when none are stored."""
        pass

    @abstractmethod
    def save_settings(self, user_id: Optional[UUID], settings: FinanceSettings) -> FinanceSettings:
        """Replace the user's settings."""
        pass


class ReconciliationStorageInterface(ABC):
    """
    Monthly validation records keyed by (user_id, month).

    Upserts replace the whole record: last write wins, no field merge.
    """

    @abstractmethod
    def list_validations(self, user_id: Optional[UUID]) -> list[MonthlyValidation]:
        """All of a user's records, newest month first."""
        pass

    @abstractmethod
    def get_validation(
        self,
        user_id: Optional[UUID],
        month: date,
    ) -> Optional[MonthlyValidation]:
        """The record for a month (any day of it), or None."""
        pass

    @abstractmethod
    def upsert_validation(self, record: MonthlyValidation) -> MonthlyValidation:
        """
        Insert or replace the record for (record.user_id, record.month).

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """All events for one entity, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass

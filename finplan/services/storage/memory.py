"""
In-Memory Storage Implementation

Dict-backed implementations of the storage interfaces. Used by the test
suite and by callers that already hold their records in memory.

Records are copied on the way in and on the way out so callers can
never mutate stored state by holding on to a returned object.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from finplan.engine.clock import first_of_month
from finplan.models.audit import AuditEvent
from finplan.models.finance import (
    EntryKind,
    FinanceSettings,
    MonthlyValidation,
    RecurringItem,
)
from finplan.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    ReconciliationStorageInterface,
    SettingsStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Recurring items held in a dict keyed by item ID."""

    def __init__(self, items: Optional[list[RecurringItem]] = None):
        self._items: dict[UUID, RecurringItem] = {}
        for item in items or []:
            self.save_item(item)

    def list_items(
        self,
        user_id: Optional[UUID],
        kind: Optional[EntryKind] = None,
    ) -> list[RecurringItem]:
        matching = [
            item.model_copy(deep=True)
            for item in self._items.values()
            if item.user_id == user_id and (kind is None or item.kind == kind)
        ]
        matching.sort(key=lambda item: item.created_at)
        return matching

    def get_item(self, item_id: UUID) -> Optional[RecurringItem]:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item else None

    def save_item(self, item: RecurringItem) -> RecurringItem:
        if item.id in self._items:
            raise DuplicateError(f"Recurring item already exists: {item.id}")
        self._items[item.id] = item.model_copy(deep=True)
        return item.model_copy(deep=True)

    def update_item(self, item: RecurringItem) -> RecurringItem:
        if item.id not in self._items:
            raise NotFoundError(f"Recurring item not found: {item.id}")
        self._items[item.id] = item.model_copy(deep=True)
        return item.model_copy(deep=True)

    def delete_item(self, item_id: UUID) -> bool:
        return self._items.pop(item_id, None) is not None


class InMemorySettingsStorage(SettingsStorageInterface):
    """Settings per user; defaults when nothing is stored."""

    def __init__(self):
        self._settings: dict[Optional[UUID], FinanceSettings] = {}

    def get_settings(self, user_id: Optional[UUID]) -> FinanceSettings:
        stored = self._settings.get(user_id)
        return stored.model_copy() if stored else FinanceSettings()

    def save_settings(self, user_id: Optional[UUID], settings: FinanceSettings) -> FinanceSettings:
        self._settings[user_id] = settings.model_copy()
        return settings.model_copy()


class InMemoryReconciliationStorage(ReconciliationStorageInterface):
    """Validation records keyed by (user_id, first day of month)."""

    def __init__(self):
        self._records: dict[tuple[Optional[UUID], date], MonthlyValidation] = {}

    def list_validations(self, user_id: Optional[UUID]) -> list[MonthlyValidation]:
        records = [
            record.model_copy(deep=True)
            for (owner, _), record in self._records.items()
            if owner == user_id
        ]
        records.sort(key=lambda record: record.month, reverse=True)
        return records

    def get_validation(
        self,
        user_id: Optional[UUID],
        month: date,
    ) -> Optional[MonthlyValidation]:
        record = self._records.get((user_id, first_of_month(month)))
        return record.model_copy(deep=True) if record else None

    def upsert_validation(self, record: MonthlyValidation) -> MonthlyValidation:
        key = (record.user_id, record.month)
        existing = self._records.get(key)
        stored = record.model_copy(deep=True)
        if existing is not None:
            # Keep the identity of the row the upsert lands on
            stored = stored.model_copy(update={
                "id": existing.id,
                "created_at": existing.created_at,
            })
        self._records[key] = stored
        return stored.model_copy(deep=True)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event.model_copy(deep=True))
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        return [
            event.model_copy(deep=True)
            for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        if limit <= 0:
            return []
        return [event.model_copy(deep=True) for event in reversed(self._events[-limit:])]

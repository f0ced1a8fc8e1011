"""Services package."""

from finplan.services.storage import (
    AuditStorageInterface,
    DuplicateError,
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

__all__ = [
    # Storage interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    "ReconciliationStorageInterface",
    "SettingsStorageInterface",
    # Storage exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory storage
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "InMemoryReconciliationStorage",
    "InMemorySettingsStorage",
]

"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for the
records the planning engine reads and writes.
"""

from finplan.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    ReconciliationStorageInterface,
    SettingsStorageInterface,
    StorageError,
)
from finplan.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryReconciliationStorage,
    InMemorySettingsStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    "ReconciliationStorageInterface",
    "SettingsStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "InMemoryReconciliationStorage",
    "InMemorySettingsStorage",
]

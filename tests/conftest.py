"""
Shared fixtures for the planning engine tests.

Every test that needs "now" gets a FixedClock; nothing reads wall-clock time.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from finplan.audit import AuditLogger
from finplan.config import get_settings
from finplan.engine.clock import FixedClock
from finplan.models.finance import EntryKind, RecurringItem
from finplan.orchestrator import FinancePlanner
from finplan.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    InMemoryReconciliationStorage,
    InMemorySettingsStorage,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; make every test see the current environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock():
    """15 March 2024, midday UTC."""
    return FixedClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_item():
    """Build a RecurringItem with sensible defaults."""
    def _make(
        name="Item",
        amount="100",
        kind=EntryKind.EXPENSE,
        category=None,
        is_active=True,
        user_id=None,
    ):
        return RecurringItem(
            name=name,
            amount=Decimal(str(amount)),
            kind=kind,
            category=category,
            is_active=is_active,
            user_id=user_id,
        )
    return _make


@pytest.fixture
def sample_expenses(make_item):
    return [
        make_item("Rent", "1200", category="housing"),
        make_item("Groceries", "400", category="food"),
        make_item("Netflix", "15", category="subscriptions"),
        make_item("Old gym", "50", category="health", is_active=False),
    ]


@pytest.fixture
def sample_income(make_item):
    return [
        make_item("Salary", "3000", kind=EntryKind.INCOME, category="salary"),
        make_item("Side gig", "500", kind=EntryKind.INCOME, category="freelance"),
    ]


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def ledger_storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def reconciliation_storage():
    return InMemoryReconciliationStorage()


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def planner(clock, user_id, audit_storage, ledger_storage, reconciliation_storage):
    """A planner on in-memory storage whose audit trail the test can inspect."""
    return FinancePlanner(
        user_id=user_id,
        clock=clock,
        ledger_storage=ledger_storage,
        settings_storage=InMemorySettingsStorage(),
        reconciliation_storage=reconciliation_storage,
        audit_logger=AuditLogger(audit_storage, user_id=user_id),
    )

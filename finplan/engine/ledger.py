"""
Recurring Ledger

Reduces the active subset of a user's recurring items to monthly totals.

The monthly net balance computed here is the single input both the
financing solver and the projection engine build on.

IMPORTANT: The ledger does not validate amounts. A negative amount that
reached it is summed as-is; rejecting it is the job of the models and
of LedgerItemValidator upstream.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from finplan.engine.categories import categories_for, default_fallback, item_category
from finplan.models.finance import CategoryTotal, EntryKind, RecurringItem


ZERO = Decimal("0")


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _active(
    items: Iterable[RecurringItem],
    kind: Optional[EntryKind] = None,
) -> list[RecurringItem]:
    return [
        item for item in items
        if item.is_active and (kind is None or item.kind == kind)
    ]


def active_total(
    items: Iterable[RecurringItem],
    kind: Optional[EntryKind] = None,
) -> Decimal:
    """
    Sum of amounts over active items, optionally of a single kind.

    An empty ledger totals zero.
    """
    total = ZERO
    for item in _active(items, kind):
        total += _as_decimal(item.amount)
    return total


def totals_by_category(
    items: Iterable[RecurringItem],
    categories: Sequence[str],
    fallback: Optional[str] = None,
    detect_from_name: bool = False,
    kind: Optional[EntryKind] = None,
) -> dict[str, Decimal]:
    """
    Active totals per category, in the order of `categories`.

    Items whose category is not in `categories` are folded into the
    fallback. The fallback is appended at the end when it is not part of
    `categories` and something was folded into it.
    """
    fallback = fallback or default_fallback()
    totals: dict[str, Decimal] = {category: ZERO for category in categories}

    for item in _active(items, kind):
        category = item_category(
            item.name,
            item.category,
            categories,
            fallback=fallback,
            detect_from_name=detect_from_name,
        )
        totals[category] = totals.get(category, ZERO) + _as_decimal(item.amount)

    return totals


def category_breakdown(
    items: Iterable[RecurringItem],
    categories: Sequence[str],
    fallback: Optional[str] = None,
    detect_from_name: bool = False,
    sort_by_magnitude: bool = False,
) -> list[CategoryTotal]:
    """
    Non-empty category slices with item counts.

    Order follows `categories` unless sort_by_magnitude is set, in which
    case the largest total comes first.
    """
    fallback = fallback or default_fallback()
    items = _active(items)
    totals = totals_by_category(items, categories, fallback, detect_from_name)

    counts: dict[str, int] = {}
    for item in items:
        category = item_category(
            item.name, item.category, categories, fallback, detect_from_name
        )
        counts[category] = counts.get(category, 0) + 1

    slices = [
        CategoryTotal(category=category, total=total, item_count=counts[category])
        for category, total in totals.items()
        if counts.get(category)
    ]
    if sort_by_magnitude:
        slices.sort(key=lambda s: s.total, reverse=True)
    return slices


def monthly_net_balance(
    expenses: Iterable[RecurringItem],
    income: Iterable[RecurringItem],
) -> Decimal:
    """Active income minus active expenses."""
    return active_total(income) - active_total(expenses)


class RecurringLedger:
    """
    One user's recurring items, income and expenses together.

    Holds already-loaded records; it never talks to storage.
    """

    def __init__(self, items: Iterable[RecurringItem] = ()):
        self._items = list(items)

    @property
    def items(self) -> list[RecurringItem]:
        return list(self._items)

    @property
    def expenses(self) -> list[RecurringItem]:
        return [item for item in self._items if item.kind == EntryKind.EXPENSE]

    @property
    def income(self) -> list[RecurringItem]:
        return [item for item in self._items if item.kind == EntryKind.INCOME]

    def total(self, kind: EntryKind) -> Decimal:
        return active_total(self._items, kind)

    @property
    def total_expenses(self) -> Decimal:
        return self.total(EntryKind.EXPENSE)

    @property
    def total_income(self) -> Decimal:
        return self.total(EntryKind.INCOME)

    def net_balance(self) -> Decimal:
        return monthly_net_balance(self.expenses, self.income)

    def category_breakdown(
        self,
        kind: EntryKind,
        detect_from_name: bool = False,
        sort_by_magnitude: bool = True,
    ) -> list[CategoryTotal]:
        items = self.expenses if kind == EntryKind.EXPENSE else self.income
        return category_breakdown(
            items,
            categories_for(kind),
            detect_from_name=detect_from_name,
            sort_by_magnitude=sort_by_magnitude,
        )

    def __len__(self) -> int:
        return len(self._items)

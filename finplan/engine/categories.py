"""
Category catalog.

DESIGN DECISION: Category lookup is explicit. An unrecognised value is
reported as a fallback match rather than silently landing on whatever
happens to be last in a list.
"""

from typing import NamedTuple, Optional, Sequence

from finplan.config import get_settings
from finplan.models.finance import EntryKind, ExpenseCategory, IncomeCategory


EXPENSE_CATEGORIES: tuple[str, ...] = tuple(c.value for c in ExpenseCategory)
INCOME_CATEGORIES: tuple[str, ...] = tuple(c.value for c in IncomeCategory)

# Checked in order; the first category whose keyword appears in the name wins.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    # Expenses
    "housing": ("rent", "mortgage", "housing", "apartment", "lease", "hoa"),
    "utilities": ("electric", "water", "gas", "utility", "internet", "wifi", "phone", "mobile", "cable"),
    "transport": ("car", "auto", "fuel", "transport", "metro", "bus", "uber", "lyft", "parking"),
    "food": ("food", "grocery", "groceries", "restaurant", "dining", "meal", "lunch", "dinner", "breakfast"),
    "health": ("health", "medical", "doctor", "dentist", "pharmacy", "medicine", "gym", "fitness"),
    "subscriptions": ("netflix", "spotify", "subscription", "streaming", "premium", "plus", "membership"),
    "entertainment": ("entertainment", "movie", "game", "concert", "event", "hobby"),
    "education": ("education", "course", "school", "college", "tuition", "book", "learning"),
    "shopping": ("shopping", "clothes", "amazon", "retail", "purchase"),
    "savings": ("saving", "investment", "invest", "401k", "ira", "retirement"),
    "debt": ("debt", "loan", "credit", "payment", "interest"),
    "insurance": ("insurance", "policy", "coverage"),
    "childcare": ("child", "daycare", "babysit", "kid"),
    "pets": ("pet", "dog", "cat", "vet", "animal"),
    "gifts": ("gift", "donation", "charity", "present"),
    "taxes": ("tax", "irs", "federal", "state"),
    "leisure": ("leisure", "fun", "recreation"),
    "travel": ("travel", "vacation", "trip", "flight", "hotel"),
    "maintenance": ("maintenance", "repair", "fix"),
    # Income
    "salary": ("salary", "paycheck", "wage", "pay"),
    "freelance": ("freelance", "contract", "consulting", "gig"),
    "business": ("business", "profit", "revenue", "sales"),
    "investments": ("dividend", "investment", "stock", "bond", "capital"),
    "rental": ("rental", "tenant", "property"),
    "bonus": ("bonus", "commission", "incentive"),
    "pension": ("pension", "social security"),
    "benefits": ("benefit", "subsidy", "allowance", "stipend"),
    "royalties": ("royalty", "royalties", "licensing"),
    "refunds": ("refund", "rebate", "cashback", "return"),
}


class CategoryLookup(NamedTuple):
    """Result of resolving a category value against a catalog."""
    category: str
    is_fallback: bool


def categories_for(kind: EntryKind) -> tuple[str, ...]:
    if kind == EntryKind.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


def default_fallback() -> str:
    return get_settings().planner.fallback_category


def lookup_category(
    value: Optional[str],
    categories: Sequence[str],
    fallback: Optional[str] = None,
) -> CategoryLookup:
    """
    Resolve a stored category value against a catalog.

    Empty and unknown values resolve to the fallback, tagged as such.
    """
    fallback = fallback or default_fallback()
    if value:
        normalized = value.strip().lower()
        if normalized in categories:
            return CategoryLookup(normalized, False)
    return CategoryLookup(fallback, True)


def resolve_category(
    value: Optional[str],
    categories: Sequence[str],
    fallback: Optional[str] = None,
) -> str:
    return lookup_category(value, categories, fallback).category


def detect_category_from_name(
    name: str,
    categories: Sequence[str],
    fallback: Optional[str] = None,
) -> CategoryLookup:
    """Guess a category from keywords in an item name."""
    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if category not in categories:
            continue
        if any(keyword in lowered for keyword in keywords):
            return CategoryLookup(category, False)
    return CategoryLookup(fallback or default_fallback(), True)


def item_category(
    name: str,
    value: Optional[str],
    categories: Sequence[str],
    fallback: Optional[str] = None,
    detect_from_name: bool = False,
) -> str:
    """
    Category an item counts toward.

    The stored value wins when it is known. Otherwise the name is
    searched for keywords if detect_from_name is set, and the fallback
    is used as a last resort.
    """
    stored = lookup_category(value, categories, fallback)
    if not stored.is_fallback or not detect_from_name:
        return stored.category
    return detect_category_from_name(name, categories, fallback).category

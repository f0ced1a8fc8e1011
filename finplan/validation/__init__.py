"""Input validation package."""

from finplan.validation.validator import LedgerItemValidator

__all__ = ["LedgerItemValidator"]

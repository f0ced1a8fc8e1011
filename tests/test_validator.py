"""
Tests for the two-stage item validator.
"""

import pytest
from decimal import Decimal

from finplan.engine.errors import InvalidInputError
from finplan.models.finance import EntryKind
from finplan.validation import LedgerItemValidator


@pytest.fixture
def validator():
    return LedgerItemValidator()


class TestSchemaValidation:
    """Stage 1: structural checks."""

    def test_valid_draft(self, validator):
        result = validator.validate("Rent", Decimal("1200"), EntryKind.EXPENSE, category="housing")
        assert result.schema_valid is True
        assert result.semantic_valid is True
        assert result.is_valid is True
        assert result.issues == []
        assert result.resolved_category == "housing"

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_name_required(self, validator, name):
        result = validator.validate(name, Decimal("10"), EntryKind.EXPENSE)
        assert result.schema_valid is False
        assert result.issues[0].field == "name"
        assert result.issues[0].issue_type == "missing"

    def test_name_too_long(self, validator):
        result = validator.validate("x" * 51, Decimal("10"), EntryKind.EXPENSE)
        assert result.has_errors is True
        assert result.issues[0].issue_type == "too_long"

    def test_name_limit_from_settings(self, monkeypatch):
        monkeypatch.setenv("FINPLAN_MAX_ITEM_NAME_LENGTH", "5")
        result = LedgerItemValidator().validate("Groceries", Decimal("10"), EntryKind.EXPENSE)
        assert result.has_errors is True

    @pytest.mark.parametrize("amount,issue_type", [
        (None, "missing"),
        ("  ", "missing"),
        ("twelve", "invalid_format"),
        ("NaN", "invalid_format"),
        (True, "invalid_format"),
        (Decimal("-5"), "invalid_value"),
    ])
    def test_amount_checks(self, validator, amount, issue_type):
        result = validator.validate("Rent", amount, EntryKind.EXPENSE)
        assert result.schema_valid is False
        assert [i.issue_type for i in result.issues if i.field == "amount"] == [issue_type]

    def test_numeric_string_accepted(self, validator):
        assert validator.validate("Rent", "1200.50", EntryKind.EXPENSE).is_valid is True

    def test_semantic_stage_skipped_on_schema_failure(self, validator):
        result = validator.validate("", Decimal("0"), EntryKind.EXPENSE, category="nonsense")
        assert result.semantic_valid is False
        assert result.warnings == []
        assert result.resolved_category is None


class TestSemanticValidation:
    """Stage 2: warnings that never block."""

    def test_unknown_category_warns_and_resolves(self, validator):
        result = validator.validate("Thing", Decimal("10"), EntryKind.EXPENSE, category="nonsense")
        assert result.is_valid is True
        assert result.resolved_category == "other"
        assert any(i.issue_type == "unknown_category" for i in result.issues)

    def test_income_category_checked_against_income_catalog(self, validator):
        result = validator.validate("Rent", Decimal("10"), EntryKind.EXPENSE, category="salary")
        assert result.resolved_category == "other"
        assert len(result.warnings) == 1

    def test_high_amount_warns(self, validator):
        result = validator.validate("Yacht", Decimal("5000000"), EntryKind.EXPENSE)
        assert result.is_valid is True
        assert result.issues[0].issue_type == "suspicious_value"

    def test_zero_amount_warns(self, validator):
        result = validator.validate("Free trial", Decimal("0"), EntryKind.EXPENSE)
        assert result.is_valid is True
        assert len(result.warnings) == 1

    def test_duplicate_active_name_warns(self, validator, make_item):
        existing = [make_item("Rent", "1200")]
        result = validator.validate("rent", Decimal("1300"), EntryKind.EXPENSE, existing_items=existing)
        assert any(i.issue_type == "potential_duplicate" for i in result.issues)

    def test_inactive_or_other_kind_not_duplicate(self, validator, make_item):
        existing = [
            make_item("Rent", "1200", is_active=False),
            make_item("Rent", "500", kind=EntryKind.INCOME),
        ]
        result = validator.validate("Rent", Decimal("1300"), EntryKind.EXPENSE, existing_items=existing)
        assert result.warnings == []


class TestEnsureValid:
    """Tests for ensure_valid."""

    def test_raises_with_all_errors(self, validator):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.ensure_valid("", Decimal("-1"), EntryKind.EXPENSE)
        assert "Name is required" in str(exc_info.value)
        assert "negative" in str(exc_info.value)

    def test_warnings_pass(self, validator):
        result = validator.ensure_valid("Trial", Decimal("0"), EntryKind.EXPENSE)
        assert result.warnings


class TestSummary:
    """Tests for get_user_friendly_summary."""

    def test_all_clear(self, validator):
        result = validator.validate("Rent", Decimal("1200"), EntryKind.EXPENSE)
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_and_fixes_listed(self, validator):
        result = validator.validate("Rent", Decimal("-1"), EntryKind.EXPENSE)
        summary = validator.get_user_friendly_summary(result)
        assert "cannot be saved" in summary
        assert "Amount cannot be negative" in summary

    def test_warnings_listed(self, validator):
        result = validator.validate("Trial", Decimal("0"), EntryKind.EXPENSE)
        summary = validator.get_user_friendly_summary(result)
        assert "double-check" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Two-Stage Validation Pipeline for recurring item drafts

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Name present and within the length limit
- Amount present, numeric and not negative
- This catches malformed input before it reaches a model

STAGE 2 - SEMANTIC VALIDATION:
- Unknown category detection
- Absurd amount detection
- Zero amount detection
- Duplicate name detection
- This catches suspicious but storable data

IMPORTANT: Validation NEVER silently fixes issues.
Unknown categories are reported along with the category they will be
filed under; the caller decides whether to go ahead.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from finplan.config import get_settings
from finplan.engine.categories import categories_for, lookup_category
from finplan.engine.errors import InvalidInputError
from finplan.models.finance import (
    EntryKind,
    RecurringItem,
    ValidationIssue,
    ValidationResult,
)


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


class LedgerItemValidator:
    """
    Validates a recurring item draft through a two-stage pipeline.

    Stage 1: Schema validation
    Stage 2: Semantic validation (needs the user's existing items for duplicates)
    """

    def __init__(self):
        self._settings = get_settings().planner

    def _validate_schema(
        self,
        name: Optional[str],
        amount: Any,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        max_length = self._settings.max_item_name_length

        stripped = (name or "").strip()
        if not stripped:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
                severity="error",
                suggested_fix="Give the item a short descriptive name",
            ))
        elif len(stripped) > max_length:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Name is longer than {max_length} characters",
                severity="error",
                suggested_fix="Shorten the name",
            ))

        parsed = _parse_amount(amount)
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        elif parsed is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount ({amount!r}) is not a number",
                severity="error",
                suggested_fix="Enter the monthly amount as a plain number",
            ))
        elif parsed < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount cannot be negative",
                severity="error",
                suggested_fix="Record money coming in as an income item instead",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        name: str,
        amount: Decimal,
        kind: EntryKind,
        category: Optional[str],
        existing_items: Iterable[RecurringItem],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Every check here is a warning; nothing in this stage blocks a save.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if category:
            lookup = lookup_category(
                category,
                categories_for(kind),
                self._settings.fallback_category,
            )
            if lookup.is_fallback:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_category",
                    message=(
                        f"Category '{category}' is not a known {kind.value} category; "
                        f"it will be counted under '{lookup.category}'"
                    ),
                    severity="warning",
                    suggested_fix="Pick one of the listed categories",
                ))

        max_amount = Decimal(str(self._settings.max_reasonable_amount))
        if amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high for a monthly item",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
        elif amount == 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Amount is zero; the item will not change any total",
                severity="warning",
            ))

        lowered = name.strip().lower()
        for item in existing_items:
            if item.is_active and item.kind == kind and item.name.lower() == lowered:
                issues.append(ValidationIssue(
                    field="name",
                    issue_type="potential_duplicate",
                    message=f"An active {kind.value} named '{item.name}' already exists",
                    severity="warning",
                    suggested_fix="Edit the existing item instead of adding a second one",
                ))
                break

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(
        self,
        name: Optional[str],
        amount: Any,
        kind: EntryKind,
        category: Optional[str] = None,
        existing_items: Iterable[RecurringItem] = (),
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            name: Draft item name
            amount: Draft monthly amount (Decimal, int or numeric string)
            kind: Expense or income
            category: Draft category value, if any
            existing_items: The user's current items, for duplicate checks

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(name, amount)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                name,
                _parse_amount(amount),
                kind,
                category,
                existing_items,
            )
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        resolved = None
        if schema_valid:
            resolved = lookup_category(
                category,
                categories_for(kind),
                self._settings.fallback_category,
            ).category

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
            resolved_category=resolved,
        )

    def ensure_valid(
        self,
        name: Optional[str],
        amount: Any,
        kind: EntryKind,
        category: Optional[str] = None,
        existing_items: Iterable[RecurringItem] = (),
    ) -> ValidationResult:
        """
        Validate and raise on any error-level issue.

        Raises:
            InvalidInputError: Listing every error message
        """
        result = self.validate(name, amount, kind, category, existing_items)
        if result.has_errors:
            errors = [issue.message for issue in result.issues if issue.severity == "error"]
            raise InvalidInputError("; ".join(errors))
        return result

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("This item cannot be saved yet:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)

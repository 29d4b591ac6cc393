"""
Form Validation

Turns raw form input into a validated draft, or into a list of issues.

Two kinds of issue:
- errors block the submit (missing date, empty name, amount that is not
  a positive number up to MAX_AMOUNT). The submit becomes a no-op and the
  store is never called.
- warnings are shown but do not block (a date in the future).

IMPORTANT: Validation NEVER silently fixes input beyond trimming
whitespace and giving supplemental income its N/A savings tag.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from money_tracker.dates import local_today, parse_iso_date
from money_tracker.engine.allocation import MAX_AMOUNT, allocate
from money_tracker.models.entry import (
    ExpenseCategory,
    ExpenseDraft,
    IncomeClassification,
    IncomeDraft,
    SavingsTag,
    ValidationIssue,
    ValidationResult,
)


RawAmount = Union[str, int, float, Decimal, None]
RawDate = Union[str, date, None]


class EntryValidator:
    """Validates income and expense form submissions."""

    def _parse_amount(
        self,
        raw: RawAmount,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter an amount",
            ))
            return None

        if isinstance(raw, bool):
            raw = str(raw)

        try:
            # str() first so floats from number inputs keep their typed digits
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"'{raw}' is not a number",
            ))
            return None

        if not value.is_finite() or value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
            ))
            return None

        if value > MAX_AMOUNT:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be at most {MAX_AMOUNT:,}",
            ))
            return None

        return value

    def _parse_date(
        self,
        raw: RawDate,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Please pick a date",
            ))
            return None

        try:
            value = parse_iso_date(raw)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"'{raw}' is not a valid date",
            ))
            return None

        if value > local_today():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({value.isoformat()}) is in the future",
                severity="warning",
            ))

        return value

    def validate_income(
        self,
        amount: RawAmount,
        entry_date: RawDate,
        classification: IncomeClassification = IncomeClassification.REGULAR,
        savings_tag: SavingsTag = SavingsTag.INVESTMENT,
    ) -> ValidationResult:
        """
        Validate an income submission.

        On success the result carries an IncomeDraft with the
        allocation already computed.
        """
        issues: list[ValidationIssue] = []

        value = self._parse_amount(amount, issues)
        parsed_date = self._parse_date(entry_date, issues)

        if classification == IncomeClassification.SUPPLEMENTAL:
            savings_tag = SavingsTag.NOT_APPLICABLE
        elif savings_tag == SavingsTag.NOT_APPLICABLE:
            issues.append(ValidationIssue(
                field="savings_tag",
                issue_type="missing",
                message="Choose where the savings share goes",
            ))

        result = ValidationResult(issues=issues)
        if result.has_errors:
            return result

        split = allocate(value, classification)
        result.income_draft = IncomeDraft(
            date=parsed_date,
            amount=value,
            classification=classification,
            savings_tag=savings_tag,
            tithe_amount=split.tithe,
            wants_amount=split.wants,
            savings_amount=split.savings,
        )
        return result

    def validate_expense(
        self,
        name: Optional[str],
        amount: RawAmount,
        entry_date: RawDate,
        category: ExpenseCategory = ExpenseCategory.GENERAL,
    ) -> ValidationResult:
        """
        Validate an expense submission.

        On success the result carries an ExpenseDraft.
        """
        issues: list[ValidationIssue] = []

        clean_name = (name or "").strip()
        if not clean_name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Please enter a name for the expense",
            ))
        elif len(clean_name) > 200:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message="Expense name must be 200 characters or fewer",
            ))

        value = self._parse_amount(amount, issues)
        parsed_date = self._parse_date(entry_date, issues)

        result = ValidationResult(issues=issues)
        if result.has_errors:
            return result

        result.expense_draft = ExpenseDraft(
            date=parsed_date,
            name=clean_name,
            amount=value,
            category=category,
        )
        return result

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per issue, errors first, for showing under the form."""
        lines = [f"❌ {message}" for message in result.error_messages]
        lines.extend(f"⚠️ {message}" for message in result.warnings)
        return "\n".join(lines)

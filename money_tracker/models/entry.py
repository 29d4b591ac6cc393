"""
Core Data Models for Money Tracker

These models define the strict schemas for every entry the tracker handles.
They are designed to:
1. Parse loosely-typed records from the store into typed values once
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Entries are immutable once stored. There is no update
model - an entry is created from a draft and later deleted, nothing else.
The allocation figures on an income entry are stored verbatim, so changing
the allocation ratios never rewrites history.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class IncomeClassification(str, Enum):
    """
    Kinds of income.

    REGULAR income is split into tithe, wants and savings.
    SUPPLEMENTAL income goes entirely to wants.
    """
    REGULAR = "Regular"
    SUPPLEMENTAL = "Supplemental"


class SavingsTag(str, Enum):
    """
    Where the savings share of a regular income goes.

    NOT_APPLICABLE marks supplemental income, which saves nothing.
    """
    INVESTMENT = "Investment"
    EMERGENCY = "Emergency"
    NOT_APPLICABLE = "N/A"


class ExpenseCategory(str, Enum):
    """Supported expense categories."""
    GENERAL = "General"
    FOOD = "Food"
    TRANSPORT = "Transport"
    BILLS = "Bills"
    HEALTH = "Health"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    OTHER = "Other"


class EntryCollection(str, Enum):
    """The two collections kept by the entry store."""
    INCOME = "income"
    EXPENSES = "expenses"


# =============================================================================
# ALLOCATION
# =============================================================================

class Allocation(BaseModel):
    """The three-way split of one income amount."""
    model_config = ConfigDict(frozen=True)

    tithe: Decimal
    wants: Decimal
    savings: Decimal

    @property
    def total(self) -> Decimal:
        return self.tithe + self.wants + self.savings


# =============================================================================
# DRAFTS - what the user submits, before the store assigns an id
# =============================================================================

class IncomeDraft(BaseModel):
    """
    A validated income submission.

    Carries the allocation computed at submission time; the store
    persists these figures as-is.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    date: date
    amount: Decimal = Field(..., gt=0, description="Gross income")
    classification: IncomeClassification = IncomeClassification.REGULAR
    savings_tag: SavingsTag = SavingsTag.INVESTMENT
    tithe_amount: Decimal = Field(..., ge=0)
    wants_amount: Decimal = Field(..., ge=0)
    savings_amount: Decimal = Field(..., ge=0)

    @model_validator(mode='after')
    def validate_supplemental_tag(self) -> 'IncomeDraft':
        """Supplemental income never carries a savings destination."""
        if (
            self.classification == IncomeClassification.SUPPLEMENTAL
            and self.savings_tag != SavingsTag.NOT_APPLICABLE
        ):
            raise ValueError("Supplemental income must use the N/A savings tag")
        if (
            self.classification == IncomeClassification.REGULAR
            and self.savings_tag == SavingsTag.NOT_APPLICABLE
        ):
            raise ValueError("Regular income needs a savings destination")
        return self


class ExpenseDraft(BaseModel):
    """A validated expense submission."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    date: date
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.GENERAL


# =============================================================================
# STORED ENTRIES
# =============================================================================

class IncomeEntry(BaseModel):
    """
    An income event as held by the store.

    The numeric allocation fields are optional because older or
    hand-edited rows may lack them; aggregation treats a missing
    figure as zero.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    date: date
    amount: Decimal = Field(..., gt=0)
    classification: IncomeClassification = IncomeClassification.REGULAR
    savings_tag: SavingsTag = SavingsTag.INVESTMENT
    tithe_amount: Optional[Decimal] = None
    wants_amount: Optional[Decimal] = None
    savings_amount: Optional[Decimal] = None

    @classmethod
    def from_draft(cls, entry_id: str, draft: IncomeDraft) -> 'IncomeEntry':
        return cls(id=entry_id, **draft.model_dump())

    @property
    def allocation_residue(self) -> Decimal:
        """Amount minus the sum of the stored buckets (rounding leftover)."""
        allocated = (
            (self.tithe_amount or Decimal("0"))
            + (self.wants_amount or Decimal("0"))
            + (self.savings_amount or Decimal("0"))
        )
        return self.amount - allocated


class ExpenseEntry(BaseModel):
    """An expense event as held by the store."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    date: date
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.GENERAL

    @classmethod
    def from_draft(cls, entry_id: str, draft: ExpenseDraft) -> 'ExpenseEntry':
        return cls(id=entry_id, **draft.model_dump())


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem with a submitted form."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Outcome of validating one form submission.

    When valid, exactly one of income_draft / expense_draft is set.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)
    income_draft: Optional[IncomeDraft] = None
    expense_draft: Optional[ExpenseDraft] = None

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]

    @property
    def error_messages(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "error"]

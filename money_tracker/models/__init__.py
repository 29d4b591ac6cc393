"""
Data Models Package

This package contains all Pydantic models used in Money Tracker.
All data flowing through the system must conform to these schemas.
"""

from money_tracker.models.entry import (
    Allocation,
    EntryCollection,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseEntry,
    IncomeClassification,
    IncomeDraft,
    IncomeEntry,
    SavingsTag,
    ValidationIssue,
    ValidationResult,
)
from money_tracker.models.ledger import (
    CategoryTotal,
    DerivedTotals,
    MonthGroup,
    SubmitResult,
)
from money_tracker.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Entry models
    "Allocation",
    "EntryCollection",
    "ExpenseCategory",
    "ExpenseDraft",
    "ExpenseEntry",
    "IncomeClassification",
    "IncomeDraft",
    "IncomeEntry",
    "SavingsTag",
    "ValidationIssue",
    "ValidationResult",
    # Ledger models
    "CategoryTotal",
    "DerivedTotals",
    "MonthGroup",
    "SubmitResult",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]

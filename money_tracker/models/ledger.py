"""
Derived Ledger Models

Everything in this module is ephemeral: built from the current entry
lists by the aggregation engine and thrown away on the next change.
None of it is ever persisted.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field

from money_tracker.dates import month_key_label
from money_tracker.models.entry import (
    ExpenseCategory,
    ExpenseEntry,
    IncomeEntry,
    ValidationResult,
)


ZERO = Decimal("0")


class DerivedTotals(BaseModel):
    """
    Global running totals over all entries.

    wants_balance may be negative; that is the over-budget state,
    not an error.
    """

    tithe: Decimal = ZERO
    savings: Decimal = ZERO
    savings_investment: Decimal = ZERO
    savings_emergency: Decimal = ZERO
    wants: Decimal = ZERO
    spent: Decimal = ZERO
    wants_balance: Decimal = ZERO

    income: Decimal = ZERO
    income_count: int = 0
    expense_count: int = 0

    @property
    def is_over_budget(self) -> bool:
        return self.wants_balance < 0

    @property
    def budget_used_pct(self) -> float:
        """Share of the wants allocation already spent, clamped to 0-100."""
        if self.wants <= 0:
            return 0.0
        return float(min(Decimal("100"), self.spent / self.wants * 100))

    @property
    def investment_share_pct(self) -> float:
        if self.savings <= 0:
            return 0.0
        return float(self.savings_investment / self.savings * 100)

    @property
    def emergency_share_pct(self) -> float:
        if self.savings <= 0:
            return 0.0
        return float(self.savings_emergency / self.savings * 100)


class MonthGroup(BaseModel):
    """Entries whose date falls in one calendar month."""

    key: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    incomes: list[IncomeEntry] = Field(default_factory=list)
    expenses: list[ExpenseEntry] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return month_key_label(self.key)

    @property
    def income_total(self) -> Decimal:
        return sum((e.amount for e in self.incomes), ZERO)

    @property
    def spent_total(self) -> Decimal:
        return sum((e.amount for e in self.expenses), ZERO)


class CategoryTotal(BaseModel):
    """Spending rolled up for one expense category."""

    category: ExpenseCategory
    amount: Decimal = ZERO
    count: int = 0
    share_pct: float = Field(default=0.0, ge=0.0, le=100.0)


class SubmitResult(BaseModel):
    """
    Outcome of one add or delete action.

    ok is False when validation blocked the action (validation has
    errors, store never called) or when the store call failed
    (error_message set, in-memory lists untouched).
    """

    ok: bool
    entry: Optional[Union[IncomeEntry, ExpenseEntry]] = None
    validation: Optional[ValidationResult] = None
    error_message: Optional[str] = None

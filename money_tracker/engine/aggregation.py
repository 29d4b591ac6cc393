"""
Aggregation Engine

Folds the income and expense lists into the numbers the dashboard shows.

DESIGN DECISION: Always from scratch. Every function here is a pure
reducer over the FULL entry lists and is re-run on every change. There
are no running counters to drift out of sync after a delete.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence, TypeVar

from money_tracker.dates import month_key
from money_tracker.models.entry import (
    ExpenseCategory,
    ExpenseEntry,
    IncomeEntry,
    SavingsTag,
)
from money_tracker.models.ledger import (
    CategoryTotal,
    DerivedTotals,
    MonthGroup,
)


ZERO = Decimal("0")

Entry = TypeVar("Entry", IncomeEntry, ExpenseEntry)


def _sum(values: Iterable[Optional[Decimal]]) -> Decimal:
    # missing figures count as zero
    return sum((v or ZERO for v in values), ZERO)


def compute_totals(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
) -> DerivedTotals:
    """
    Compute the global totals.

    Savings are also split by tag; entries tagged anything other than
    Investment or Emergency still count toward the overall savings.
    """
    wants = _sum(e.wants_amount for e in incomes)
    spent = _sum(e.amount for e in expenses)

    return DerivedTotals(
        tithe=_sum(e.tithe_amount for e in incomes),
        savings=_sum(e.savings_amount for e in incomes),
        savings_investment=_sum(
            e.savings_amount for e in incomes
            if e.savings_tag == SavingsTag.INVESTMENT
        ),
        savings_emergency=_sum(
            e.savings_amount for e in incomes
            if e.savings_tag == SavingsTag.EMERGENCY
        ),
        wants=wants,
        spent=spent,
        wants_balance=wants - spent,
        income=_sum(e.amount for e in incomes),
        income_count=len(incomes),
        expense_count=len(expenses),
    )


def group_by_month(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
) -> list[MonthGroup]:
    """
    Bucket entries by calendar month, newest month first.

    A month shows up as soon as any entry falls in it. Entries keep
    their input order inside a group.
    """
    groups: dict[str, MonthGroup] = {}

    for entry in incomes:
        key = month_key(entry.date)
        groups.setdefault(key, MonthGroup(key=key)).incomes.append(entry)

    for entry in expenses:
        key = month_key(entry.date)
        groups.setdefault(key, MonthGroup(key=key)).expenses.append(entry)

    return [groups[key] for key in sorted(groups, reverse=True)]


def category_breakdown(expenses: Sequence[ExpenseEntry]) -> list[CategoryTotal]:
    """
    Spending per category, largest first.

    Only categories with at least one expense are returned. Ties are
    broken by category name so the order is stable.
    """
    amounts: dict[ExpenseCategory, Decimal] = {}
    counts: dict[ExpenseCategory, int] = {}

    for entry in expenses:
        amounts[entry.category] = amounts.get(entry.category, ZERO) + (entry.amount or ZERO)
        counts[entry.category] = counts.get(entry.category, 0) + 1

    total = _sum(amounts.values())

    breakdown = [
        CategoryTotal(
            category=category,
            amount=amount,
            count=counts[category],
            share_pct=float(amount / total * 100) if total > 0 else 0.0,
        )
        for category, amount in amounts.items()
    ]
    breakdown.sort(key=lambda c: (-c.amount, c.category.value))
    return breakdown


def sort_by_date_desc(entries: Iterable[Entry]) -> list[Entry]:
    """Newest first. Stable, so same-day entries keep their order."""
    return sorted(entries, key=lambda e: e.date, reverse=True)


def filter_by_month(
    entries: Iterable[Entry],
    key: Optional[str],
) -> list[Entry]:
    """Entries in one YYYY-MM month; all entries when key is None."""
    if key is None:
        return list(entries)
    return [e for e in entries if month_key(e.date) == key]

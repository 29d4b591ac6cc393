"""
Tests for the aggregation engine.

Totals, month groups and category breakdowns are pure functions of
the entry lists; these tests build the lists directly.
"""

import pytest
from datetime import date
from decimal import Decimal

from money_tracker.engine import (
    allocate,
    category_breakdown,
    compute_totals,
    filter_by_month,
    group_by_month,
    sort_by_date_desc,
)
from money_tracker.models.entry import (
    ExpenseCategory,
    ExpenseEntry,
    IncomeClassification,
    IncomeEntry,
    SavingsTag,
)
from money_tracker.models.ledger import DerivedTotals


def make_income(
    entry_id: str,
    amount: str,
    entry_date: date = date(2024, 1, 15),
    classification: IncomeClassification = IncomeClassification.REGULAR,
    tag: SavingsTag = SavingsTag.INVESTMENT,
) -> IncomeEntry:
    split = allocate(Decimal(amount), classification)
    return IncomeEntry(
        id=entry_id,
        date=entry_date,
        amount=Decimal(amount),
        classification=classification,
        savings_tag=tag,
        tithe_amount=split.tithe,
        wants_amount=split.wants,
        savings_amount=split.savings,
    )


def make_expense(
    entry_id: str,
    amount: str,
    entry_date: date = date(2024, 1, 20),
    category: ExpenseCategory = ExpenseCategory.GENERAL,
    name: str = "Coffee",
) -> ExpenseEntry:
    return ExpenseEntry(
        id=entry_id,
        date=entry_date,
        name=name,
        amount=Decimal(amount),
        category=category,
    )


class TestComputeTotals:
    """Tests for the global totals."""

    def test_empty_collections(self):
        """Test that no entries give all-zero totals."""
        totals = compute_totals([], [])
        assert totals.tithe == 0
        assert totals.savings == 0
        assert totals.savings_investment == 0
        assert totals.savings_emergency == 0
        assert totals.wants == 0
        assert totals.spent == 0
        assert totals.wants_balance == 0
        assert totals == DerivedTotals()

    def test_two_incomes_one_expense(self):
        """Test 1000 regular (Investment), 500 regular (Emergency) and a 300 expense."""
        incomes = [
            make_income("i1", "1000", tag=SavingsTag.INVESTMENT),
            make_income("i2", "500", tag=SavingsTag.EMERGENCY),
        ]
        expenses = [make_expense("e1", "300")]

        totals = compute_totals(incomes, expenses)

        assert totals.tithe == Decimal("150.00")
        assert totals.wants == Decimal("675.00")
        assert totals.spent == Decimal("300")
        assert totals.wants_balance == Decimal("375.00")
        assert totals.savings_investment == Decimal("450.00")
        assert totals.savings_emergency == Decimal("225.00")
        assert totals.savings == Decimal("675.00")
        assert totals.income == Decimal("1500")
        assert totals.income_count == 2
        assert totals.expense_count == 1

    def test_reordering_does_not_change_totals(self):
        """Test that totals do not depend on input order."""
        incomes = [
            make_income("i1", "1000"),
            make_income("i2", "333.33", tag=SavingsTag.EMERGENCY),
            make_income("i3", "120", classification=IncomeClassification.SUPPLEMENTAL,
                        tag=SavingsTag.NOT_APPLICABLE),
        ]
        expenses = [make_expense("e1", "10.10"), make_expense("e2", "99.99")]

        forward = compute_totals(incomes, expenses)
        backward = compute_totals(list(reversed(incomes)), list(reversed(expenses)))
        assert forward == backward

    def test_balance_can_go_negative(self):
        """Test that overspending gives a negative balance, unclamped."""
        totals = compute_totals(
            [make_income("i1", "100", classification=IncomeClassification.SUPPLEMENTAL,
                         tag=SavingsTag.NOT_APPLICABLE)],
            [make_expense("e1", "150")],
        )
        assert totals.wants_balance == Decimal("-50")
        assert totals.is_over_budget
        assert totals.budget_used_pct == 100.0

    def test_not_applicable_savings_excluded_from_partitions(self):
        """Test that a savings amount under the N/A tag counts only toward overall savings."""
        odd = IncomeEntry(
            id="i1",
            date=date(2024, 1, 1),
            amount=Decimal("100"),
            classification=IncomeClassification.SUPPLEMENTAL,
            savings_tag=SavingsTag.NOT_APPLICABLE,
            tithe_amount=Decimal("0"),
            wants_amount=Decimal("80"),
            savings_amount=Decimal("20"),
        )
        totals = compute_totals([odd], [])
        assert totals.savings == Decimal("20")
        assert totals.savings_investment == 0
        assert totals.savings_emergency == 0

    def test_missing_figures_count_as_zero(self):
        """Test that entries without allocation figures contribute zero."""
        bare = IncomeEntry(id="i1", date=date(2024, 1, 1), amount=Decimal("100"))
        totals = compute_totals([bare, make_income("i2", "1000")], [])
        assert totals.tithe == Decimal("100.00")
        assert totals.wants == Decimal("450.00")
        assert totals.income == Decimal("1100")

    def test_supplemental_adds_only_to_wants(self):
        """Test that supplemental income adds nothing to tithe or savings."""
        totals = compute_totals(
            [make_income("i1", "200", classification=IncomeClassification.SUPPLEMENTAL,
                         tag=SavingsTag.NOT_APPLICABLE)],
            [],
        )
        assert totals.wants == Decimal("200")
        assert totals.tithe == 0
        assert totals.savings == 0


class TestDerivedTotalsProperties:
    """Tests for the display helpers on DerivedTotals."""

    def test_budget_used_pct(self):
        """Test the share of wants spent."""
        totals = DerivedTotals(wants=Decimal("400"), spent=Decimal("100"))
        assert totals.budget_used_pct == 25.0

    def test_budget_used_pct_without_wants(self):
        """Test that no wants allocation gives 0%."""
        totals = DerivedTotals(spent=Decimal("10"), wants_balance=Decimal("-10"))
        assert totals.budget_used_pct == 0.0
        assert totals.is_over_budget

    def test_savings_shares(self):
        """Test investment and emergency shares of savings."""
        totals = DerivedTotals(
            savings=Decimal("200"),
            savings_investment=Decimal("150"),
            savings_emergency=Decimal("50"),
        )
        assert totals.investment_share_pct == 75.0
        assert totals.emergency_share_pct == 25.0

    def test_savings_shares_without_savings(self):
        """Test that empty savings give 0% shares."""
        assert DerivedTotals().investment_share_pct == 0.0
        assert DerivedTotals().emergency_share_pct == 0.0


class TestGroupByMonth:
    """Tests for the monthly history."""

    def test_month_boundary(self):
        """Test that Jan 31 and Feb 1 land in separate months, newest first."""
        income = make_income("i1", "1000", entry_date=date(2024, 1, 31))
        expense = make_expense("e1", "50", entry_date=date(2024, 2, 1))

        groups = group_by_month([income], [expense])

        assert [g.key for g in groups] == ["2024-02", "2024-01"]
        assert groups[0].expenses == [expense]
        assert groups[0].incomes == []
        assert groups[1].incomes == [income]
        assert groups[1].expenses == []

    def test_idempotent(self):
        """Test that grouping the same lists twice gives equal results."""
        incomes = [
            make_income("i1", "1000", entry_date=date(2024, 3, 1)),
            make_income("i2", "500", entry_date=date(2023, 12, 31)),
        ]
        expenses = [
            make_expense("e1", "20", entry_date=date(2024, 3, 5)),
            make_expense("e2", "30", entry_date=date(2024, 1, 9)),
        ]
        assert group_by_month(incomes, expenses) == group_by_month(incomes, expenses)

    def test_year_ordering(self):
        """Test that December sorts before the following January."""
        groups = group_by_month(
            [make_income("i1", "10", entry_date=date(2023, 12, 31)),
             make_income("i2", "10", entry_date=date(2024, 1, 1))],
            [],
        )
        assert [g.key for g in groups] == ["2024-01", "2023-12"]

    def test_entries_keep_input_order(self):
        """Test that a group keeps the order entries were given in."""
        first = make_expense("e1", "1", entry_date=date(2024, 5, 2))
        second = make_expense("e2", "2", entry_date=date(2024, 5, 20))
        groups = group_by_month([], [first, second])
        assert [e.id for e in groups[0].expenses] == ["e1", "e2"]

    def test_group_totals_and_label(self):
        """Test per-month income and spent totals."""
        groups = group_by_month(
            [make_income("i1", "1000", entry_date=date(2024, 1, 3)),
             make_income("i2", "250", entry_date=date(2024, 1, 28))],
            [make_expense("e1", "40.50", entry_date=date(2024, 1, 10))],
        )
        assert len(groups) == 1
        assert groups[0].label == "January 2024"
        assert groups[0].income_total == Decimal("1250")
        assert groups[0].spent_total == Decimal("40.50")

    def test_empty(self):
        """Test that no entries give no groups."""
        assert group_by_month([], []) == []


class TestCategoryBreakdown:
    """Tests for spending per category."""

    def test_ordering_and_shares(self):
        """Test that categories are sorted by amount with shares of the total."""
        breakdown = category_breakdown([
            make_expense("e1", "30", category=ExpenseCategory.FOOD),
            make_expense("e2", "50", category=ExpenseCategory.BILLS),
            make_expense("e3", "20", category=ExpenseCategory.FOOD),
        ])
        assert [c.category for c in breakdown] == [ExpenseCategory.BILLS, ExpenseCategory.FOOD]
        assert breakdown[0].amount == Decimal("50")
        assert breakdown[1].amount == Decimal("50")
        assert breakdown[1].count == 2
        assert breakdown[0].share_pct == pytest.approx(50.0)

    def test_only_used_categories(self):
        """Test that unused categories are left out."""
        breakdown = category_breakdown([make_expense("e1", "5", category=ExpenseCategory.HEALTH)])
        assert len(breakdown) == 1
        assert breakdown[0].share_pct == pytest.approx(100.0)

    def test_empty(self):
        """Test that no expenses give no breakdown."""
        assert category_breakdown([]) == []


class TestSortingAndFiltering:
    """Tests for list helpers used by the views."""

    def test_sort_by_date_desc(self):
        """Test newest-first ordering."""
        entries = [
            make_expense("old", "1", entry_date=date(2024, 1, 1)),
            make_expense("new", "1", entry_date=date(2024, 3, 1)),
            make_expense("mid", "1", entry_date=date(2024, 2, 1)),
        ]
        assert [e.id for e in sort_by_date_desc(entries)] == ["new", "mid", "old"]

    def test_filter_by_month(self):
        """Test selecting one month, or everything with no key."""
        entries = [
            make_expense("jan", "1", entry_date=date(2024, 1, 31)),
            make_expense("feb", "1", entry_date=date(2024, 2, 1)),
        ]
        assert [e.id for e in filter_by_month(entries, "2024-02")] == ["feb"]
        assert len(filter_by_month(entries, None)) == 2
        assert filter_by_month(entries, "2023-12") == []

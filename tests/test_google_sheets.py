"""
Tests for the Google Sheets entry store.

A fake client stands in for gspread; rows are plain lists of strings
as Sheets returns them.
"""

import asyncio
import gspread
import pytest
from datetime import date
from decimal import Decimal
from tenacity import wait_none

from money_tracker.models.entry import (
    EntryCollection,
    ExpenseCategory,
    ExpenseDraft,
    IncomeClassification,
    IncomeDraft,
    SavingsTag,
)
from money_tracker.services.storage import (
    EXPENSE_COLUMNS,
    INCOME_COLUMNS,
    GoogleSheetsEntryStore,
    StorageError,
)


def run(coro):
    return asyncio.run(coro)


class FakeWorksheet:
    """In-memory worksheet with the gspread calls the store uses."""

    def __init__(self, header):
        self.rows = [list(header)]
        self.appended_options = []
        self.error_after_append = None

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.appended_options.append(value_input_option)
        self.rows.append([str(v) for v in row])
        if self.error_after_append is not None:
            error, self.error_after_append = self.error_after_append, None
            raise error

    def col_values(self, col):
        return [row[col - 1] if len(row) >= col else "" for row in self.rows]

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.sheets = {
            EntryCollection.INCOME: FakeWorksheet(INCOME_COLUMNS),
            EntryCollection.EXPENSES: FakeWorksheet(EXPENSE_COLUMNS),
        }
        self.error = None

    def get_sheet(self, collection):
        if self.error is not None:
            raise self.error
        return self.sheets[collection]


@pytest.fixture
def client():
    return FakeSheetsClient()


@pytest.fixture
def store(client):
    return GoogleSheetsEntryStore(client=client)


def income_row(entry_id, owner, entry_date="2024-01-15", amount="1000",
               classification="Regular", tag="Investment",
               tithe="100.00", wants="450.00", savings="450.00"):
    return [entry_id, owner, entry_date, amount, classification, tag,
            tithe, wants, savings, "2024-01-15T10:00:00+00:00"]


def expense_row(entry_id, owner, entry_date="2024-01-20", name="Lunch",
                amount="12.50", category="Food"):
    return [entry_id, owner, entry_date, name, amount, category,
            "2024-01-20T10:00:00+00:00"]


class TestFetchAll:
    """Tests for reading a user's entries."""

    def test_parses_text_values(self, client, store):
        """Test that stringly-typed cells become typed entries."""
        client.sheets[EntryCollection.INCOME].rows.append(income_row("i1", "u1"))
        client.sheets[EntryCollection.EXPENSES].rows.append(expense_row("e1", "u1"))

        incomes, expenses = run(store.fetch_all("u1"))

        assert len(incomes) == 1
        income = incomes[0]
        assert income.id == "i1"
        assert income.date == date(2024, 1, 15)
        assert income.amount == Decimal("1000")
        assert income.wants_amount == Decimal("450.00")
        assert income.savings_tag == SavingsTag.INVESTMENT

        expense = expenses[0]
        assert expense.name == "Lunch"
        assert expense.amount == Decimal("12.50")
        assert expense.category == ExpenseCategory.FOOD

    def test_scoped_to_owner(self, client, store):
        """Test that other users' rows are never returned."""
        sheet = client.sheets[EntryCollection.INCOME]
        sheet.rows.append(income_row("i1", "u1"))
        sheet.rows.append(income_row("i2", "u2"))

        incomes, _ = run(store.fetch_all("u1"))
        assert [e.id for e in incomes] == ["i1"]

    def test_no_owner_returns_nothing(self, client, store):
        """Test that a missing owner id gives empty lists."""
        client.sheets[EntryCollection.INCOME].rows.append(income_row("i1", "u1"))
        assert run(store.fetch_all(None)) == ([], [])

    def test_newest_first(self, client, store):
        """Test date-descending order."""
        sheet = client.sheets[EntryCollection.EXPENSES]
        sheet.rows.append(expense_row("old", "u1", entry_date="2024-01-01"))
        sheet.rows.append(expense_row("new", "u1", entry_date="2024-03-01"))

        _, expenses = run(store.fetch_all("u1"))
        assert [e.id for e in expenses] == ["new", "old"]

    def test_short_rows_and_blank_figures(self, client, store):
        """Test that trailing blank cells read as missing figures."""
        client.sheets[EntryCollection.INCOME].rows.append(
            ["i1", "u1", "2024-01-15", "80", "Supplemental", "N/A"]
        )
        incomes, _ = run(store.fetch_all("u1"))
        assert incomes[0].tithe_amount is None
        assert incomes[0].classification == IncomeClassification.SUPPLEMENTAL

    @pytest.mark.parametrize("row", [
        income_row("i1", "u1", amount="lots"),
        income_row("i1", "u1", entry_date="15/01/2024"),
        income_row("i1", "u1", tag="Vacation"),
        income_row("i1", "u1", amount="-5"),
    ])
    def test_malformed_row_is_fatal(self, client, store, row):
        """Test that a row that cannot be parsed fails the whole read."""
        client.sheets[EntryCollection.INCOME].rows.append(row)
        with pytest.raises(StorageError):
            run(store.fetch_all("u1"))

    def test_backend_error_wrapped(self, client, store):
        """Test that backend exceptions surface as StorageError."""
        client.error = RuntimeError("quota exceeded")
        with pytest.raises(StorageError):
            run(store.fetch_all("u1"))


class TestInsert:
    """Tests for appending entries."""

    def test_insert_income(self, client, store):
        """Test that the stored row carries owner and allocation."""
        draft = IncomeDraft(
            date=date(2024, 1, 15),
            amount=Decimal("1000"),
            tithe_amount=Decimal("100.00"),
            wants_amount=Decimal("450.00"),
            savings_amount=Decimal("450.00"),
        )
        entry = run(store.insert_income("u1", draft))

        sheet = client.sheets[EntryCollection.INCOME]
        row = sheet.rows[-1]
        assert row[:9] == [
            entry.id, "u1", "2024-01-15", "1000", "Regular", "Investment",
            "100.00", "450.00", "450.00",
        ]
        assert sheet.appended_options == ["RAW"]

    def test_inserted_income_reads_back(self, store):
        """Test that an appended income is returned by fetch_all."""
        draft = IncomeDraft(
            date=date(2024, 1, 15),
            amount=Decimal("200"),
            classification=IncomeClassification.SUPPLEMENTAL,
            savings_tag=SavingsTag.NOT_APPLICABLE,
            tithe_amount=Decimal("0"),
            wants_amount=Decimal("200"),
            savings_amount=Decimal("0"),
        )
        entry = run(store.insert_income("u1", draft))
        incomes, _ = run(store.fetch_all("u1"))
        assert incomes == [entry]

    def test_insert_expense(self, client, store):
        """Test that the expense row is appended with a fresh id."""
        draft = ExpenseDraft(
            date=date(2024, 1, 20),
            name="Bus",
            amount=Decimal("2.50"),
            category=ExpenseCategory.TRANSPORT,
        )
        first = run(store.insert_expense("u1", draft))
        second = run(store.insert_expense("u1", draft))

        assert first.id != second.id
        rows = client.sheets[EntryCollection.EXPENSES].rows
        assert rows[1][:6] == [first.id, "u1", "2024-01-20", "Bus", "2.50", "Transport"]

    def test_insert_failure(self, client, store):
        """Test that a failing append raises StorageError."""
        client.error = RuntimeError("offline")
        draft = ExpenseDraft(date=date(2024, 1, 20), name="Bus", amount=Decimal("2"))
        with pytest.raises(StorageError):
            run(store.insert_expense("u1", draft))


class FakeApiResponse:
    """Minimal response object gspread's APIError can be built from."""

    text = "backend error"

    def json(self):
        return {"error": {"code": 503, "message": "backend error", "status": "UNAVAILABLE"}}


class TestRetriedAppend:
    """Tests for appends retried after a transient API error."""

    @pytest.fixture(autouse=True)
    def no_backoff(self, monkeypatch):
        monkeypatch.setattr(GoogleSheetsEntryStore._append_row.retry, "wait", wait_none())

    def test_row_written_once_when_error_follows_append(self, client, store):
        """Test that a retry does not append the same entry a second time."""
        sheet = client.sheets[EntryCollection.INCOME]
        sheet.error_after_append = gspread.exceptions.APIError(FakeApiResponse())
        draft = IncomeDraft(
            date=date(2024, 1, 15),
            amount=Decimal("1000"),
            tithe_amount=Decimal("100.00"),
            wants_amount=Decimal("450.00"),
            savings_amount=Decimal("450.00"),
        )

        entry = run(store.insert_income("u1", draft))

        assert [row[0] for row in sheet.rows[1:]] == [entry.id]
        incomes, _ = run(store.fetch_all("u1"))
        assert incomes == [entry]

    def test_duplicate_rows_read_once(self, client, store):
        """Test that rows repeating an id count only once."""
        sheet = client.sheets[EntryCollection.INCOME]
        sheet.rows.append(income_row("i1", "u1"))
        sheet.rows.append(income_row("i1", "u1"))

        incomes, _ = run(store.fetch_all("u1"))
        assert [e.id for e in incomes] == ["i1"]


class TestDelete:
    """Tests for deleting rows."""

    def test_deletes_owned_row(self, client, store):
        """Test that the matching row is removed."""
        sheet = client.sheets[EntryCollection.EXPENSES]
        sheet.rows.append(expense_row("e1", "u1"))
        sheet.rows.append(expense_row("e2", "u1"))

        assert run(store.delete_entry(EntryCollection.EXPENSES, "u1", "e1")) is True
        assert [r[0] for r in sheet.rows[1:]] == ["e2"]

    def test_will_not_delete_other_owner(self, client, store):
        """Test that a row owned by someone else is left alone."""
        sheet = client.sheets[EntryCollection.INCOME]
        sheet.rows.append(income_row("i1", "u2"))

        assert run(store.delete_entry(EntryCollection.INCOME, "u1", "i1")) is False
        assert len(sheet.rows) == 2

    def test_missing_row(self, store):
        """Test that an unknown id reports False."""
        assert run(store.delete_entry(EntryCollection.INCOME, "u1", "nope")) is False

    def test_header_is_never_matched(self, client, store):
        """Test that the header row cannot be deleted."""
        assert run(store.delete_entry(EntryCollection.INCOME, "owner_id", "id")) is False
        assert client.sheets[EntryCollection.INCOME].rows[0] == INCOME_COLUMNS

    def test_delete_failure(self, client, store):
        """Test that backend errors surface as StorageError."""
        client.error = RuntimeError("offline")
        with pytest.raises(StorageError):
            run(store.delete_entry(EntryCollection.INCOME, "u1", "i1"))

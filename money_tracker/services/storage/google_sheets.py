"""
Google Sheets Entry Store

DESIGN DECISION: Google Sheets is used as the hosted record store because:
1. Users can look at their own ledger directly in Sheets
2. No database setup required
3. Built-in backup and multi-device access (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for a personal ledger)
- No transactions (each operation is one row append or delete)
- Limited query capabilities (we filter and sort in Python)

Each collection is one worksheet. Every row carries an owner_id column
and every operation filters on it, which is what scopes a user's data.
Values are written RAW, so numbers come back as text and are parsed to
Decimal here, at the boundary, and nowhere else.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from money_tracker.config import GoogleSheetsSettings, get_settings
from money_tracker.dates import parse_iso_date, to_iso_date
from money_tracker.models.entry import (
    EntryCollection,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseEntry,
    IncomeClassification,
    IncomeDraft,
    IncomeEntry,
    SavingsTag,
)
from money_tracker.services.storage.interface import (
    ConnectionError,
    EntryStoreInterface,
    StorageError,
)


# Column mappings for Income sheet
INCOME_COLUMNS = [
    "id",
    "owner_id",
    "date",
    "amount",
    "classification",
    "savings_tag",
    "tithe_amount",
    "wants_amount",
    "savings_amount",
    "created_at",
]

# Column mappings for Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "owner_id",
    "date",
    "name",
    "amount",
    "category",
    "created_at",
]

# Retry only the transient API failures; anything else is surfaced at once
sheets_retry = retry(
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def _row_reader(row: list):
    """Index into a sheet row, treating missing and blank cells as ''."""
    # Sheets drops trailing empty cells, so short rows are normal
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and lazily creates the worksheets.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @sheets_retry
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except gspread.exceptions.APIError:
                raise
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_sheet(self, collection: EntryCollection) -> gspread.Worksheet:
        """Get or create the worksheet backing a collection."""
        if collection == EntryCollection.INCOME:
            return self._get_or_create_sheet(
                self._settings.income_sheet_name, INCOME_COLUMNS
            )
        return self._get_or_create_sheet(
            self._settings.expense_sheet_name, EXPENSE_COLUMNS
        )


class GoogleSheetsEntryStore(EntryStoreInterface):
    """
    Google Sheets implementation of the entry store.

    Entries are stored one per row. The store assigns a UUID4 id on insert.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    @staticmethod
    def _income_to_row(owner_id: str, entry: IncomeEntry) -> list:
        """Convert an IncomeEntry to a spreadsheet row."""
        return [
            entry.id,
            owner_id,
            to_iso_date(entry.date),
            str(entry.amount),
            entry.classification.value,
            entry.savings_tag.value,
            str(entry.tithe_amount) if entry.tithe_amount is not None else "",
            str(entry.wants_amount) if entry.wants_amount is not None else "",
            str(entry.savings_amount) if entry.savings_amount is not None else "",
            datetime.now(timezone.utc).isoformat(),
        ]

    @staticmethod
    def _expense_to_row(owner_id: str, entry: ExpenseEntry) -> list:
        """Convert an ExpenseEntry to a spreadsheet row."""
        return [
            entry.id,
            owner_id,
            to_iso_date(entry.date),
            entry.name,
            str(entry.amount),
            entry.category.value,
            datetime.now(timezone.utc).isoformat(),
        ]

    def _row_to_income(self, row: list) -> IncomeEntry:
        """Convert a spreadsheet row to an IncomeEntry."""
        get = _row_reader(row)

        return IncomeEntry(
            id=get(0),
            date=parse_iso_date(get(2)),
            amount=Decimal(get(3)),
            classification=IncomeClassification(get(4) or IncomeClassification.REGULAR.value),
            savings_tag=SavingsTag(get(5) or SavingsTag.INVESTMENT.value),
            tithe_amount=Decimal(get(6)) if get(6) else None,
            wants_amount=Decimal(get(7)) if get(7) else None,
            savings_amount=Decimal(get(8)) if get(8) else None,
        )

    def _row_to_expense(self, row: list) -> ExpenseEntry:
        """Convert a spreadsheet row to an ExpenseEntry."""
        get = _row_reader(row)

        return ExpenseEntry(
            id=get(0),
            date=parse_iso_date(get(2)),
            name=get(3),
            amount=Decimal(get(4)),
            category=ExpenseCategory(get(5) or ExpenseCategory.GENERAL.value),
        )

    # -------------------------------------------------------------------------
    # Sheet access (retried)
    # -------------------------------------------------------------------------

    @sheets_retry
    def _read_rows(self, collection: EntryCollection) -> list[list]:
        # Skip header
        return self._client.get_sheet(collection).get_all_values()[1:]

    @sheets_retry
    def _append_row(self, collection: EntryCollection, row: list) -> None:
        sheet = self._client.get_sheet(collection)
        # A retried append may follow one that landed before the error came back
        if row[0] in sheet.col_values(1)[1:]:
            return
        sheet.append_row(row, value_input_option="RAW")

    @sheets_retry
    def _delete_row(self, collection: EntryCollection, owner_id: str, entry_id: str) -> bool:
        sheet = self._client.get_sheet(collection)
        all_rows = sheet.get_all_values()

        # Start from 2 (row 1 is header)
        for idx, row in enumerate(all_rows[1:], start=2):
            if len(row) > 1 and row[0] == entry_id and row[1] == owner_id:
                sheet.delete_rows(idx)
                return True
        return False

    def _owned_rows(self, collection: EntryCollection, owner_id: str) -> list[list]:
        """The owner's rows, first occurrence of each id only."""
        seen: set[str] = set()
        rows = []
        for row in self._read_rows(collection):
            if len(row) > 1 and row[0] and row[1] == owner_id and row[0] not in seen:
                seen.add(row[0])
                rows.append(row)
        return rows

    # -------------------------------------------------------------------------
    # EntryStoreInterface
    # -------------------------------------------------------------------------

    async def fetch_all(
        self,
        owner_id: Optional[str],
    ) -> tuple[list[IncomeEntry], list[ExpenseEntry]]:
        """Fetch both collections for one owner, newest first."""
        if not owner_id:
            return [], []

        try:
            income_rows = self._owned_rows(EntryCollection.INCOME, owner_id)
            expense_rows = self._owned_rows(EntryCollection.EXPENSES, owner_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read entries: {e}")

        # A malformed stored row is a fatal read error, not something to skip
        try:
            incomes = [self._row_to_income(row) for row in income_rows]
            expenses = [self._row_to_expense(row) for row in expense_rows]
        except (ValueError, ArithmeticError) as e:
            raise StorageError(f"Malformed entry row: {e}")

        incomes.sort(key=lambda e: e.date, reverse=True)
        expenses.sort(key=lambda e: e.date, reverse=True)
        return incomes, expenses

    async def insert_income(self, owner_id: str, draft: IncomeDraft) -> IncomeEntry:
        """Append an income row and return the stored entry."""
        entry = IncomeEntry.from_draft(str(uuid4()), draft)
        try:
            self._append_row(EntryCollection.INCOME, self._income_to_row(owner_id, entry))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save income: {e}")
        return entry

    async def insert_expense(self, owner_id: str, draft: ExpenseDraft) -> ExpenseEntry:
        """Append an expense row and return the stored entry."""
        entry = ExpenseEntry.from_draft(str(uuid4()), draft)
        try:
            self._append_row(EntryCollection.EXPENSES, self._expense_to_row(owner_id, entry))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")
        return entry

    async def delete_entry(
        self,
        collection: EntryCollection,
        owner_id: str,
        entry_id: str,
    ) -> bool:
        """Delete a row by id if it belongs to owner_id."""
        try:
            return self._delete_row(collection, owner_id, entry_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete entry: {e}")

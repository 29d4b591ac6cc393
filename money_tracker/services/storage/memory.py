"""
In-Memory Entry Store

Used when no hosted store is configured (entries live for the process
lifetime only) and as the store in tests. Follows the same contract as
the Sheets store: owner scoping, store-assigned ids, newest-first reads.

Failures can be injected per operation to exercise the error paths.
"""

from typing import Optional
from uuid import uuid4

from money_tracker.models.entry import (
    EntryCollection,
    ExpenseDraft,
    ExpenseEntry,
    IncomeDraft,
    IncomeEntry,
)
from money_tracker.services.storage.interface import (
    EntryStoreInterface,
    StorageError,
)


class InMemoryEntryStore(EntryStoreInterface):
    """Dict-backed entry store keyed by entry id, each row tagged with its owner."""

    def __init__(self):
        self._incomes: dict[str, tuple[str, IncomeEntry]] = {}
        self._expenses: dict[str, tuple[str, ExpenseEntry]] = {}
        self._failures: dict[str, Exception] = {}

    def fail_next(self, operation: str, error: Optional[Exception] = None) -> None:
        """
        Make the next call to `operation` raise.

        operation is one of 'fetch_all', 'insert_income',
        'insert_expense', 'delete_entry'.
        """
        self._failures[operation] = error or StorageError(f"{operation} failed")

    def _check_failure(self, operation: str) -> None:
        error = self._failures.pop(operation, None)
        if error is not None:
            raise error

    async def fetch_all(
        self,
        owner_id: Optional[str],
    ) -> tuple[list[IncomeEntry], list[ExpenseEntry]]:
        self._check_failure("fetch_all")
        if not owner_id:
            return [], []

        incomes = [e for owner, e in self._incomes.values() if owner == owner_id]
        expenses = [e for owner, e in self._expenses.values() if owner == owner_id]
        incomes.sort(key=lambda e: e.date, reverse=True)
        expenses.sort(key=lambda e: e.date, reverse=True)
        return incomes, expenses

    async def insert_income(self, owner_id: str, draft: IncomeDraft) -> IncomeEntry:
        self._check_failure("insert_income")
        entry = IncomeEntry.from_draft(str(uuid4()), draft)
        self._incomes[entry.id] = (owner_id, entry)
        return entry

    async def insert_expense(self, owner_id: str, draft: ExpenseDraft) -> ExpenseEntry:
        self._check_failure("insert_expense")
        entry = ExpenseEntry.from_draft(str(uuid4()), draft)
        self._expenses[entry.id] = (owner_id, entry)
        return entry

    async def delete_entry(
        self,
        collection: EntryCollection,
        owner_id: str,
        entry_id: str,
    ) -> bool:
        self._check_failure("delete_entry")
        rows = self._incomes if collection == EntryCollection.INCOME else self._expenses

        stored = rows.get(entry_id)
        if stored is None or stored[0] != owner_id:
            return False
        del rows[entry_id]
        return True

"""
Abstract Entry Store Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing and unconfigured installs
3. Keep ledger logic decoupled from storage implementation

The interface is intentionally small: entries are inserted, listed and
deleted. There is no update operation because entries are immutable.

Every operation is scoped by owner id. A store never returns or deletes
another user's rows.
"""

from abc import ABC, abstractmethod
from typing import Optional

from money_tracker.models.entry import (
    EntryCollection,
    ExpenseDraft,
    ExpenseEntry,
    IncomeDraft,
    IncomeEntry,
)


class EntryStoreInterface(ABC):
    """
    Abstract interface for entry storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def fetch_all(
        self,
        owner_id: Optional[str],
    ) -> tuple[list[IncomeEntry], list[ExpenseEntry]]:
        """
        Fetch every entry owned by a user.

        Args:
            owner_id: The authenticated user's id, or None

        Returns:
            (incomes, expenses), each ordered by date descending.
            Two empty lists when owner_id is None or the user has no data.

        Raises:
            StorageError: If the read fails or a stored row is malformed
        """
        pass

    @abstractmethod
    async def insert_income(
        self,
        owner_id: str,
        draft: IncomeDraft,
    ) -> IncomeEntry:
        """
        Store a new income entry.

        Returns:
            The stored entry, carrying the id assigned by the store

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def insert_expense(
        self,
        owner_id: str,
        draft: ExpenseDraft,
    ) -> ExpenseEntry:
        """
        Store a new expense entry.

        Returns:
            The stored entry, carrying the id assigned by the store

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_entry(
        self,
        collection: EntryCollection,
        owner_id: str,
        entry_id: str,
    ) -> bool:
        """
        Permanently delete one entry.

        Returns:
            True if a row owned by owner_id was deleted,
            False if no such row exists

        Raises:
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass

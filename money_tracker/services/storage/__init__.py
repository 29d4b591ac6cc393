"""
Storage Services Package

Provides the abstract entry store interface and concrete implementations.
Google Sheets is the hosted backend; the in-memory store covers tests and
unconfigured installs.
"""

from money_tracker.services.storage.interface import (
    ConnectionError,
    EntryStoreInterface,
    StorageError,
)
from money_tracker.services.storage.memory import InMemoryEntryStore
from money_tracker.services.storage.google_sheets import (
    EXPENSE_COLUMNS,
    INCOME_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
)

__all__ = [
    # Interfaces
    "EntryStoreInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "EXPENSE_COLUMNS",
    "INCOME_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStore",
    "InMemoryEntryStore",
]

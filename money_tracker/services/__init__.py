"""Services package."""

from money_tracker.services.auth import (
    AuthError,
    FirebaseSessionGateway,
    LocalSessionGateway,
    Session,
    SessionEvent,
    SessionGatewayInterface,
    Subscription,
)
from money_tracker.services.storage import (
    ConnectionError,
    EntryStoreInterface,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
    InMemoryEntryStore,
    StorageError,
)

__all__ = [
    # Identity services
    "AuthError",
    "FirebaseSessionGateway",
    "LocalSessionGateway",
    "Session",
    "SessionEvent",
    "SessionGatewayInterface",
    "Subscription",
    # Storage services
    "ConnectionError",
    "EntryStoreInterface",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStore",
    "InMemoryEntryStore",
    "StorageError",
]

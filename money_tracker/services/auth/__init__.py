"""Identity services package."""

from money_tracker.services.auth.interface import (
    AuthError,
    Session,
    SessionEvent,
    SessionGatewayInterface,
    SessionListener,
    Subscription,
)
from money_tracker.services.auth.firebase import (
    FirebaseSessionGateway,
    error_message_for,
)
from money_tracker.services.auth.local import LocalSessionGateway

__all__ = [
    # Interface
    "AuthError",
    "Session",
    "SessionEvent",
    "SessionGatewayInterface",
    "SessionListener",
    "Subscription",
    # Firebase implementation
    "FirebaseSessionGateway",
    "error_message_for",
    # Local implementation
    "LocalSessionGateway",
]

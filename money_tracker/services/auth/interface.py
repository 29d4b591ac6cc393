"""
Abstract Session Gateway

DESIGN DECISION: The current identity is an explicitly owned object, not a
module-level global. The display layer is handed a gateway, asks it for
the current session and subscribes to changes; on teardown it
unsubscribes. Providers are swappable behind this interface.

Subscription bookkeeping lives in the base class so every provider
notifies listeners the same way.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, Field


logger = structlog.get_logger(__name__)


class SessionEvent(str, Enum):
    """Why the session changed."""
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"


class Session(BaseModel):
    """An authenticated identity."""

    user_id: str = Field(..., min_length=1)
    email: str
    id_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


SessionListener = Callable[[SessionEvent, Optional[Session]], None]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() on teardown."""

    def __init__(self, gateway: "SessionGatewayInterface", listener: SessionListener):
        self._gateway = gateway
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._gateway._remove_listener(self._listener)
            self.active = False


class AuthError(Exception):
    """
    Authentication failed.

    The message is meant to be shown to the user as-is.
    """
    pass


class SessionGatewayInterface(ABC):
    """
    Abstract interface for the identity provider.

    Any provider (Firebase, Supabase, ...) must implement sign-in,
    sign-up and sign-out, and call _set_session() whenever the
    current identity changes.
    """

    def __init__(self):
        self._session: Optional[Session] = None
        self._listeners: list[SessionListener] = []

    def current_session(self) -> Optional[Session]:
        """The signed-in session, or None."""
        return self._session

    def subscribe(self, listener: SessionListener) -> Subscription:
        """
        Register a listener for session changes.

        Args:
            listener: Called with (event, session) on every change

        Returns:
            A Subscription; call unsubscribe() to stop receiving events
        """
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_session(self, event: SessionEvent, session: Optional[Session]) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                # One broken listener must not stop the others
                logger.error(
                    "session_listener_failed",
                    session_event=event.value,
                    error=str(e),
                )

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """
        Sign in with email and password.

        Raises:
            AuthError: Bad credentials, disabled account or provider failure
        """
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Session:
        """
        Create an account and sign in.

        Raises:
            AuthError: Email taken, weak password or provider failure
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Drop the current session and notify listeners."""
        pass

    async def refresh(self) -> Optional[Session]:
        """
        Renew the current session's tokens.

        Providers whose sessions never expire keep this default.

        Raises:
            AuthError: The provider refused; the session has been dropped
        """
        return self._session

"""
Local Session Gateway

In-process accounts for development and tests, used when no hosted
identity provider is configured. Accounts live for the process lifetime.
Passwords are kept only as salted PBKDF2 hashes.
"""

import hashlib
import hmac
import os
from typing import Optional
from uuid import uuid4

from money_tracker.services.auth.interface import (
    AuthError,
    Session,
    SessionEvent,
    SessionGatewayInterface,
)


MIN_PASSWORD_LENGTH = 6


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)


class LocalSessionGateway(SessionGatewayInterface):
    """Session gateway with accounts held in memory."""

    def __init__(self):
        super().__init__()
        # email -> (user_id, salt, password_hash)
        self._accounts: dict[str, tuple[str, bytes, bytes]] = {}

    @staticmethod
    def _normalize(email: str) -> str:
        return (email or "").strip().lower()

    async def sign_up(self, email: str, password: str) -> Session:
        key = self._normalize(email)
        if "@" not in key:
            raise AuthError("That email address is not valid.")
        if key in self._accounts:
            raise AuthError("An account with this email already exists.")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")

        salt = os.urandom(16)
        user_id = str(uuid4())
        self._accounts[key] = (user_id, salt, _hash_password(password, salt))

        session = Session(user_id=user_id, email=key)
        self._set_session(SessionEvent.SIGNED_IN, session)
        return session

    async def sign_in(self, email: str, password: str) -> Session:
        key = self._normalize(email)
        account: Optional[tuple[str, bytes, bytes]] = self._accounts.get(key)
        if account is None:
            raise AuthError("Invalid email or password.")

        user_id, salt, stored = account
        if not hmac.compare_digest(stored, _hash_password(password or "", salt)):
            raise AuthError("Invalid email or password.")

        session = Session(user_id=user_id, email=key)
        self._set_session(SessionEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        self._set_session(SessionEvent.SIGNED_OUT, None)

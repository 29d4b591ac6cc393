"""
Firebase Authentication Gateway

Email/password identity through the Firebase Auth REST API:
- accounts:signUp
- accounts:signInWithPassword
- token (refresh-token exchange)

Sign-out is local: tokens are dropped and listeners notified. Firebase
error codes are turned into short messages the sign-in form can show.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import requests
import structlog

from money_tracker.config import AppSettings, FirebaseSettings, get_settings
from money_tracker.services.auth.interface import (
    AuthError,
    Session,
    SessionEvent,
    SessionGatewayInterface,
)


logger = structlog.get_logger(__name__)


# Firebase error code -> message for the user
ERROR_MESSAGES = {
    "EMAIL_EXISTS": "An account with this email already exists.",
    "EMAIL_NOT_FOUND": "No account found for this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "INVALID_EMAIL": "That email address is not valid.",
    "MISSING_PASSWORD": "Please enter a password.",
    "USER_DISABLED": "This account has been disabled.",
    "WEAK_PASSWORD": "Password should be at least 6 characters.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
    "TOKEN_EXPIRED": "Your session has expired. Please sign in again.",
    "INVALID_REFRESH_TOKEN": "Your session has expired. Please sign in again.",
}

DEFAULT_ERROR_MESSAGE = "Authentication failed. Please try again."


def error_message_for(code: str) -> str:
    """
    Map a Firebase error string to a user-facing message.

    Firebase sometimes appends detail after the code
    ("WEAK_PASSWORD : Password should be ..."), so only the
    leading token is looked up.
    """
    key = code.split(" ")[0].strip() if code else ""
    return ERROR_MESSAGES.get(key, DEFAULT_ERROR_MESSAGE)


class FirebaseSessionGateway(SessionGatewayInterface):
    """Session gateway backed by Firebase Auth (REST)."""

    def __init__(
        self,
        settings: Optional[FirebaseSettings] = None,
        app_settings: Optional[AppSettings] = None,
        http: Optional[requests.Session] = None,
    ):
        super().__init__()
        self._settings = settings or get_settings().firebase
        self._timeout = (app_settings or get_settings().app).request_timeout_seconds
        self._http = http or requests.Session()

    def _post(self, url: str, **kwargs) -> dict:
        """POST to Firebase and return the JSON body, raising AuthError on failure."""
        try:
            response = self._http.post(url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("firebase_request_failed", error=str(e))
            raise AuthError("Could not reach the sign-in service. Check your connection.")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            code = body.get("error", {}).get("message", "") if isinstance(body, dict) else ""
            logger.info("firebase_auth_rejected", status=response.status_code, code=code)
            raise AuthError(error_message_for(code))

        return body

    @staticmethod
    def _expiry(seconds: Optional[str]) -> Optional[datetime]:
        if not seconds:
            return None
        return datetime.now(timezone.utc) + timedelta(seconds=int(seconds))

    def _password_request(self, endpoint: str, email: str, password: str) -> Session:
        url = f"{self._settings.auth_base_url}/accounts:{endpoint}"
        body = self._post(
            url,
            params={"key": self._settings.web_api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        return Session(
            user_id=body["localId"],
            email=body.get("email", email),
            id_token=body.get("idToken", ""),
            refresh_token=body.get("refreshToken", ""),
            expires_at=self._expiry(body.get("expiresIn")),
        )

    async def sign_in(self, email: str, password: str) -> Session:
        session = self._password_request("signInWithPassword", email.strip(), password)
        self._set_session(SessionEvent.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str) -> Session:
        session = self._password_request("signUp", email.strip(), password)
        self._set_session(SessionEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        self._set_session(SessionEvent.SIGNED_OUT, None)

    async def refresh(self) -> Optional[Session]:
        """
        Exchange the refresh token for a fresh id token.

        Returns the refreshed session, or None when signed out. A
        rejected refresh token signs the user out before raising.
        """
        current = self.current_session()
        if current is None:
            return None

        try:
            body = self._post(
                f"{self._settings.token_base_url}/token",
                params={"key": self._settings.web_api_key},
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": current.refresh_token,
                },
            )
        except AuthError:
            self._set_session(SessionEvent.SIGNED_OUT, None)
            raise

        session = current.model_copy(update={
            "id_token": body.get("id_token", ""),
            "refresh_token": body.get("refresh_token", current.refresh_token),
            "expires_at": self._expiry(body.get("expires_in")),
        })
        self._set_session(SessionEvent.TOKEN_REFRESHED, session)
        return session

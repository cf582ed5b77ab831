"""Email/password sessions backed by Firebase Authentication."""

from __future__ import annotations

import logging
from typing import Any

import requests
from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from instaclone.errors import AuthError

logger = logging.getLogger(__name__)

SIGN_IN_URL = (
    "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
)

# Identity Toolkit error codes -> user-facing text.
SIGN_IN_ERRORS = {
    "EMAIL_NOT_FOUND": "There is no user record corresponding to this email.",
    "INVALID_PASSWORD": "The password is invalid.",
    "INVALID_LOGIN_CREDENTIALS": "The email or password is incorrect.",
    "INVALID_EMAIL": "The email address is badly formatted.",
    "USER_DISABLED": "The user account has been disabled by an administrator.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": (
        "Too many unsuccessful login attempts. Please try again later."
    ),
}


class AuthClient:
    """Hold the signed-in user for one client session.

    Accounts are created through the Admin SDK. The Admin SDK cannot check a
    password, so sign-in goes through the Identity Toolkit REST endpoint with
    the project's web API key, which is what the client SDKs call as well.
    """

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 10,
        app: Any = None,
        user_id: str | None = None,
    ) -> None:
        """Initialize the client, optionally with an already signed-in user."""
        self.api_key = api_key
        self.timeout = timeout
        self.app = app
        self._user_id = user_id

    @property
    def current_user_id(self) -> str | None:
        """Return the signed-in user's ID, or None."""
        return self._user_id

    def create_account(self, email: str, password: str) -> str:
        """Create an account and sign in as it. Returns the new user ID."""
        try:
            user_record = auth.create_user(
                email=email, password=password, app=self.app
            )
        except auth.EmailAlreadyExistsError as e:
            raise AuthError(
                "The email address is already in use by another account."
            ) from e
        except (ValueError, FirebaseError) as e:
            raise AuthError(str(e)) from e

        self._user_id = user_record.uid
        logger.info(f"Created account {user_record.uid}")
        return user_record.uid

    def sign_in(self, email: str, password: str) -> str:
        """Verify email and password. Returns the user ID."""
        if not self.api_key:
            raise AuthError("FIREBASE_API_KEY is not configured.")

        try:
            response = requests.post(
                SIGN_IN_URL,
                params={"key": self.api_key},
                json={
                    "email": email,
                    "password": password,
                    "returnSecureToken": True,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(
                f"Could not reach the authentication service: {e}"
            ) from e

        payload = _json_or_empty(response)
        if not response.ok:
            raise AuthError(_sign_in_error_message(payload, response.status_code))

        self._user_id = payload["localId"]
        logger.info(f"Signed in {self._user_id}")
        return self._user_id

    def sign_out(self) -> None:
        """Forget the current session. Nothing is sent to the backend."""
        self._user_id = None


def _json_or_empty(response: requests.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _sign_in_error_message(payload: dict[str, Any], status_code: int) -> str:
    message = payload.get("error", {}).get("message", "")
    # Some codes carry a detail after " : ", e.g. "WEAK_PASSWORD : ..."
    code = message.split(" : ", 1)[0].strip()
    if code in SIGN_IN_ERRORS:
        return SIGN_IN_ERRORS[code]
    return message or f"Authentication failed with status {status_code}."

"""
Auth abstraction over the hosted auth service.

The backend never stores credentials itself: it exchanges email/password for
an access token at the hosted service and resolves bearer tokens back to
users. Sign-in and sign-out are published on the auth event bus so open
sessions learn about them without polling.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

from backend.events import AuthEventBus
from shared.errors import NotAuthenticatedError, ServiceError
from shared.types import AuthEvent, AuthEventKind, AuthUser

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user: AuthUser
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class AuthClient(Protocol):
    """Operations the API needs from the auth service."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        ...

    def sign_out(self, access_token: str) -> None:
        ...

    def get_current_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        ...


@dataclass
class InMemoryAuthClient:
    """Test double holding users and issued tokens in memory."""

    events: Optional[AuthEventBus] = None
    users: dict = field(default_factory=dict)
    tokens: dict = field(default_factory=dict)

    def add_user(
        self, email: str, password: str, user_id: Optional[str] = None
    ) -> AuthUser:
        user = AuthUser(id=user_id or uuid.uuid4().hex, email=email)
        self.users[email.lower()] = (password, user)
        return user

    def issue_token(self, user: AuthUser) -> str:
        """Mint a token without a password round-trip (tests, scripts)."""
        token = secrets.token_urlsafe(24)
        self.tokens[token] = user
        return token

    def sign_in(self, email: str, password: str) -> AuthSession:
        entry = self.users.get((email or "").lower())
        if entry is None or entry[0] != password:
            raise NotAuthenticatedError(INVALID_CREDENTIALS_MESSAGE)
        user = entry[1]
        token = self.issue_token(user)
        _publish(self.events, AuthEventKind.SIGNED_IN, user)
        return AuthSession(access_token=token, user=user)

    def sign_out(self, access_token: str) -> None:
        user = self.tokens.pop(access_token, None)
        if user is not None:
            _publish(self.events, AuthEventKind.SIGNED_OUT, user)

    def get_current_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        if not access_token:
            return None
        return self.tokens.get(access_token)


def _publish(bus: Optional[AuthEventBus], kind: AuthEventKind, user: AuthUser) -> None:
    if bus is None:
        return
    try:
        bus.publish(AuthEvent(kind=kind, user_id=user.id, email=user.email))
    except Exception:
        # Sign-in/out already happened; subscribers will catch up on next request.
        logger.exception("Failed to publish %s for user %s", kind, user.id)


@dataclass
class SupabaseAuthClient:
    """
    Talks to the hosted auth REST API (GoTrue) with the project's anon key.
    """

    url: str
    anon_key: str
    events: Optional[AuthEventBus] = None
    timeout: float = REQUEST_TIMEOUT

    def __post_init__(self):
        self.url = self.url.rstrip("/")
        self._session = requests.Session()

    def _headers(self, access_token: Optional[str] = None) -> dict:
        headers = {"apikey": self.anon_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            response = self._session.post(
                f"{self.url}/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Sign-in request failed: %s", exc)
            raise ServiceError() from exc

        if response.status_code in (400, 401):
            raise NotAuthenticatedError(INVALID_CREDENTIALS_MESSAGE)
        if not response.ok:
            logger.error("Sign-in returned %s: %s", response.status_code, response.text)
            raise ServiceError()

        payload = response.json()
        user = _parse_user(payload["user"])
        _publish(self.events, AuthEventKind.SIGNED_IN, user)
        return AuthSession(
            access_token=payload["access_token"],
            user=user,
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
        )

    def sign_out(self, access_token: str) -> None:
        user = self.get_current_user(access_token)
        try:
            response = self._session.post(
                f"{self.url}/auth/v1/logout",
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Sign-out request failed: %s", exc)
            raise ServiceError() from exc
        if not response.ok and response.status_code not in (401, 403):
            logger.error("Sign-out returned %s: %s", response.status_code, response.text)
            raise ServiceError()
        if user is not None:
            _publish(self.events, AuthEventKind.SIGNED_OUT, user)

    def get_current_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        if not access_token:
            return None
        try:
            response = self._session.get(
                f"{self.url}/auth/v1/user",
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("User lookup failed: %s", exc)
            raise ServiceError() from exc
        if response.status_code in (401, 403):
            return None
        if not response.ok:
            logger.error("User lookup returned %s: %s", response.status_code, response.text)
            raise ServiceError()
        return _parse_user(response.json())

    def close(self) -> None:
        self._session.close()


def _parse_user(payload: dict) -> AuthUser:
    return AuthUser(id=payload["id"], email=payload.get("email"))

"""
Identity provider client for Supabase Auth (GoTrue REST API).

Sign-in uses the OAuth PKCE flow: ``sign_in`` returns the provider URL the
browser must visit, and ``complete_sign_in`` exchanges the ``code`` that the
provider appends to the redirect. Subscribers are notified synchronously on
every session change.
"""

from __future__ import annotations

import base64
import hashlib
import itertools
import secrets
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests
from pydantic import ValidationError
from requests.exceptions import RequestException

from .config import Settings, get_settings
from .logging import get_logger
from .schemas import AuthSession, AuthUser


logger = get_logger("identity")

SessionHandler = Callable[[Optional[AuthSession]], None]


class IdentityError(Exception):
    """Raised when an OAuth callback cannot be matched to a pending flow."""


class PkceFlowStore:
    """
    Pending PKCE verifiers keyed by flow id.

    Shared across browser sessions: the provider redirect opens a new one.
    Flows older than ``ttl_seconds`` are dropped, so abandoned sign-ins do
    not accumulate.
    """

    def __init__(
        self,
        ttl_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._verifiers: Dict[str, Tuple[str, float]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._verifiers)

    def _prune(self, now: float) -> None:
        expired = [
            flow_id
            for flow_id, (_, created) in self._verifiers.items()
            if now - created >= self.ttl_seconds
        ]
        for flow_id in expired:
            del self._verifiers[flow_id]

    def start(self) -> Tuple[str, str]:
        flow_id = secrets.token_urlsafe(16)
        verifier = secrets.token_urlsafe(64)
        now = self._clock()
        with self._lock:
            self._prune(now)
            self._verifiers[flow_id] = (verifier, now)
        return flow_id, verifier

    def pop(self, flow_id: str) -> Optional[str]:
        with self._lock:
            self._prune(self._clock())
            entry = self._verifiers.pop(flow_id, None)
        return entry[0] if entry else None


def code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class SupabaseAuth:
    """Holds the current session for one browser session."""

    def __init__(
        self,
        settings: Settings | None = None,
        flows: PkceFlowStore | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url = settings.auth_url
        self.api_key = settings.supabase_anon_key
        self.redirect_url = settings.app_url
        self.timeout = settings.request_timeout_seconds
        self.flows = flows or PkceFlowStore()
        self._session: Optional[AuthSession] = None
        self._handlers: Dict[int, SessionHandler] = {}
        self._tokens = itertools.count(1)

    # -- subscriptions -------------------------------------------------

    def subscribe(self, handler: SessionHandler) -> int:
        token = next(self._tokens)
        self._handlers[token] = handler
        return token

    def unsubscribe(self, token: int) -> None:
        self._handlers.pop(token, None)

    def _set_session(self, session: Optional[AuthSession]) -> None:
        self._session = session
        for handler in list(self._handlers.values()):
            handler(session)

    # -- HTTP ----------------------------------------------------------

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.api_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _post_token(self, grant_type: str, payload: Dict[str, Any]) -> Optional[AuthSession]:
        try:
            response = requests.post(
                f"{self.base_url}/token",
                params={"grant_type": grant_type},
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return AuthSession.model_validate(response.json())
        except (RequestException, ValueError, ValidationError) as exc:
            logger.warning("Token grant %r failed: %s", grant_type, exc)
            return None

    # -- provider operations -------------------------------------------

    def get_current_session(self) -> Optional[AuthSession]:
        session = self._session
        if session is None or not session.is_expired():
            return session

        refreshed = None
        if session.refresh_token:
            refreshed = self._post_token(
                "refresh_token", {"refresh_token": session.refresh_token}
            )
        self._set_session(refreshed)
        return refreshed

    def access_token(self) -> Optional[str]:
        """Bearer token for data calls; refreshes or clears an expired session."""
        session = self.get_current_session()
        return session.access_token if session else None

    def sign_in(self, provider_id: str) -> str:
        flow_id, verifier = self.flows.start()
        separator = "&" if "?" in self.redirect_url else "?"
        query = urlencode(
            {
                "provider": provider_id,
                "redirect_to": f"{self.redirect_url}{separator}flow={flow_id}",
                "code_challenge": code_challenge(verifier),
                "code_challenge_method": "s256",
            }
        )
        return f"{self.base_url}/authorize?{query}"

    def complete_sign_in(self, code: str, flow_id: str) -> Optional[AuthSession]:
        verifier = self.flows.pop(flow_id) if flow_id else None
        if verifier is None:
            raise IdentityError(f"Unknown or expired sign-in flow: {flow_id!r}")

        session = self._post_token(
            "pkce", {"auth_code": code, "code_verifier": verifier}
        )
        if session is not None:
            logger.info("Signed in as %s", session.user.id)
            self._set_session(session)
        return session

    def sign_out(self) -> bool:
        token = self._session.access_token if self._session else None
        succeeded = True
        if token:
            try:
                response = requests.post(
                    f"{self.base_url}/logout",
                    headers=self._headers(token),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            except RequestException as exc:
                logger.warning("Sign-out request failed: %s", exc)
                succeeded = False
        self._set_session(None)
        return succeeded

    def get_current_user(self) -> Optional[AuthUser]:
        session = self.get_current_session()
        if session is None:
            return None
        try:
            response = requests.get(
                f"{self.base_url}/user",
                headers=self._headers(session.access_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return AuthUser.model_validate(response.json())
        except (RequestException, ValueError, ValidationError) as exc:
            logger.warning("Could not resolve current user: %s", exc)
            return None


__all__ = [
    "IdentityError",
    "PkceFlowStore",
    "SessionHandler",
    "SupabaseAuth",
    "code_challenge",
]

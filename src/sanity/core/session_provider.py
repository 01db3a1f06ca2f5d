# src/sanity/core/session_provider.py
import asyncio
import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import aiohttp

from sanity.core.exceptions import AuthError
from sanity.core.http_utils import read_error_message

logger = logging.getLogger("SessionProvider")

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class SessionHandle:
    """The signed-in user's identity plus the opaque tokens the backend issued."""
    user_id: str
    email: str
    access_token: str
    refresh_token: str = ""
    expires_at: float = 0.0

    def is_expired(self, now: Optional[float] = None) -> bool:
        if not self.expires_at:
            return False
        return (now if now is not None else time.time()) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionHandle":
        return cls(
            user_id=str(data["user_id"]),
            email=str(data.get("email", "")),
            access_token=str(data["access_token"]),
            refresh_token=str(data.get("refresh_token", "")),
            expires_at=float(data.get("expires_at") or 0.0),
        )

    @classmethod
    def from_auth_response(cls, data: Mapping[str, Any]) -> "SessionHandle":
        user = data.get("user") or {}
        expires_at = data.get("expires_at")
        if not expires_at and data.get("expires_in"):
            expires_at = time.time() + float(data["expires_in"])
        return cls(
            user_id=str(user["id"]),
            email=str(user.get("email", "")),
            access_token=str(data["access_token"]),
            refresh_token=str(data.get("refresh_token", "")),
            expires_at=float(expires_at or 0.0),
        )


class SessionProvider:
    """
    Owns the user's identity. Signs in, signs up and signs out against the
    backend's auth API, remembers the session across restarts, and notifies
    subscribers whenever the session changes.
    """

    def __init__(self, auth_url: str, api_key: str, session_file: Optional[Path] = None,
                 timeout: float = 10.0):
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.session_file = session_file
        self.timeout = timeout
        self._session: Optional[SessionHandle] = None
        self._listeners: List[Callable[[Optional[SessionHandle]], None]] = []
        self._load_stored_session()

    # --- Session access ---
    def get_current_session(self) -> Optional[SessionHandle]:
        if self._session and self._session.is_expired():
            logger.info("Stored session for %s has expired.", self._session.email)
            self._set_session(None)
        return self._session

    def access_token(self) -> Optional[str]:
        session = self.get_current_session()
        return session.access_token if session else None

    def subscribe(self, on_change: Callable[[Optional[SessionHandle]], None]) -> Callable[[], None]:
        """Registers a listener. Returns a callable that removes it again."""
        self._listeners.append(on_change)

        def unsubscribe():
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    # --- Auth operations ---
    async def sign_in_with_password(self, email: str, password: str) -> SessionHandle:
        _require_credentials(email, password)
        data = await self._post("/token", {"email": email, "password": password},
                                params={"grant_type": "password"})
        if not data.get("access_token"):
            raise AuthError("Sign-in did not return a session")
        session = SessionHandle.from_auth_response(data)
        self._set_session(session)
        logger.info("Signed in as %s", session.email)
        return session

    async def sign_up(self, email: str, password: str) -> bool:
        """
        Creates an account.

        Returns:
            True when the backend still wants the email address confirmed,
            False when it signed the new user straight in.
        """
        _require_credentials(email, password)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
        data = await self._post("/signup", {"email": email, "password": password})
        if data.get("access_token"):
            self._set_session(SessionHandle.from_auth_response(data))
            logger.info("Signed up and signed in as %s", email)
            return False
        logger.info("Signed up %s; email confirmation pending", email)
        return True

    async def sign_out(self):
        """Ends the session. Local state is cleared even if the backend cannot be reached."""
        session = self._session
        if session is None:
            return
        try:
            await self._post("/logout", None, token=session.access_token)
        except AuthError as e:
            logger.warning("Sign-out request failed, clearing local session anyway: %s", e)
        finally:
            self._set_session(None)

    # --- Internals ---
    def _set_session(self, session: Optional[SessionHandle]):
        self._session = session
        self._store_session()
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener '%s' failed", getattr(listener, '__name__', 'lambda'))

    def _load_stored_session(self):
        if not self.session_file or not self.session_file.exists():
            return
        try:
            with open(self.session_file, 'r', encoding='utf-8') as f:
                session = SessionHandle.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.session_file, e)
            return
        if session.is_expired():
            logger.info("Discarding expired stored session for %s", session.email)
            self.session_file.unlink(missing_ok=True)
            return
        self._session = session
        logger.info("Restored session for %s", session.email)

    def _store_session(self):
        if not self.session_file:
            return
        try:
            if self._session is None:
                self.session_file.unlink(missing_ok=True)
                return
            self.session_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.session_file, 'w', encoding='utf-8') as f:
                json.dump(self._session.to_dict(), f, indent=2)
        except OSError as e:
            logger.error("Could not persist session to %s: %s", self.session_file, e)

    async def _post(self, path: str, payload: Optional[Dict[str, Any]],
                    params: Optional[Dict[str, str]] = None, token: Optional[str] = None) -> Dict[str, Any]:
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {token or self.api_key}"}
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.post(f"{self.auth_url}{path}", json=payload, params=params,
                                        headers=headers) as response:
                    if response.status >= 400:
                        raise AuthError(await read_error_message(response), response.status)
                    if response.status == 204:
                        return {}
                    body = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise AuthError(f"Could not reach the sign-in service: {e}") from e
        except asyncio.TimeoutError as e:
            raise AuthError(f"Sign-in service timed out after {self.timeout}s") from e
        return body if isinstance(body, dict) else {}


def _require_credentials(email: str, password: str):
    if not email or not email.strip():
        raise AuthError("Email is required")
    if not password:
        raise AuthError("Password is required")

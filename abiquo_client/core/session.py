"""
abiquo_client.core.session - Session state and cookie handling
===============================================================

Owns the mutable state of one logical Abiquo session:
- base URI, credentials and the logged-in user
- the session token taken from the ``auth`` cookie of every response
- the lock serializing every request/response exchange
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional
import logging
import threading

from urllib3 import HTTPHeaderDict

from abiquo_client.core.auth import COOKIE_HEADER_KEY, AuthenticationInformation
from abiquo_client.core.errors import PreconditionViolation

SET_COOKIE_HEADER_KEY = "Set-Cookie"
AUTH_COOKIE_PREFIX = "auth="


def _set_cookie_values(response_headers: Any) -> Optional[list]:
    """Return every Set-Cookie value in transport order, or None if absent."""
    if response_headers is None:
        return None
    if isinstance(response_headers, HTTPHeaderDict):
        values = response_headers.getlist(SET_COOKIE_HEADER_KEY)
        return values or None
    for key, value in response_headers.items():
        if key.lower() == SET_COOKIE_HEADER_KEY.lower():
            return list(value) if isinstance(value, (list, tuple)) else [value]
    return None


class SessionManager:
    """
    Single-owner session state of an Abiquo client.

    Every read-modify-write of the session token happens while holding
    ``lock``; use :meth:`exchange` to wrap a full request so that concurrent
    callers cannot drop a token update.

    Examples
    --------
    >>> sm = SessionManager()
    >>> sm.on_response({"Set-Cookie": ["auth=ABC123; Path=/; HttpOnly"]})
    >>> sm.session_token
    'auth=ABC123'
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.logger = logging.getLogger("abiquo_client.session")
        self._base_uri: Optional[str] = None
        self._credentials: Optional[AuthenticationInformation] = None
        self._session_token: Optional[str] = None
        self._current_user: Optional[Any] = None

    # ---------------- read-only state ----------------

    @property
    def base_uri(self) -> Optional[str]:
        return self._base_uri

    @property
    def credentials(self) -> Optional[AuthenticationInformation]:
        return self._credentials

    @property
    def session_token(self) -> Optional[str]:
        return self._session_token

    @property
    def current_user(self) -> Optional[Any]:
        return self._current_user

    @property
    def is_logged_in(self) -> bool:
        with self.lock:
            return (
                self._base_uri is not None
                and self._credentials is not None
                and self._current_user is not None
            )

    # ---------------- lifecycle ----------------

    def start(self, base_uri: str, credentials: AuthenticationInformation) -> None:
        """Reset the session and store the target and credentials for a login."""
        if credentials is None:
            raise PreconditionViolation("credentials must not be None")
        with self.lock:
            self.clear()
            self._base_uri = base_uri.rstrip("/")
            self._credentials = credentials

    def set_current_user(self, user: Any) -> None:
        with self.lock:
            self._current_user = user

    def clear(self) -> None:
        """Reset all session fields together."""
        with self.lock:
            self._base_uri = None
            self._credentials = None
            self._session_token = None
            self._current_user = None

    # ---------------- per-request ----------------

    def build_request_headers(self, extra_headers: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """
        Build the authentication headers for the next request.

        Without a session token the credentials' authorization headers are
        used, otherwise a single ``Cookie`` header replays the token.
        ``extra_headers`` are overlaid last, so a caller-supplied key wins.
        """
        with self.lock:
            if not self._session_token:
                if self._credentials is None:
                    raise PreconditionViolation("No credentials set, call login first")
                headers = dict(self._credentials.authorization_headers())
            else:
                headers = {COOKIE_HEADER_KEY: self._session_token}
        if extra_headers:
            for key, value in extra_headers.items():
                headers[key] = value
        return headers

    def on_response(self, response_headers: Any) -> None:
        """
        Refresh the session token from the response's Set-Cookie values.

        - No Set-Cookie header at all: the token is cleared.
        - Set-Cookie present: the first value starting with ``auth=`` wins and
          is stored up to its first ``;``.
        - Set-Cookie present without an ``auth=`` value: the token is kept.

        The asymmetry between the first and the last case mirrors what the
        Abiquo server does when a session ends; keep it.
        """
        values = _set_cookie_values(response_headers)
        with self.lock:
            if values is None:
                self._session_token = None
                return
            auth_cookie = next((v for v in values if v.startswith(AUTH_COOKIE_PREFIX)), None)
            if auth_cookie is None:
                return
            self._session_token = auth_cookie.split(";", 1)[0]

    @contextmanager
    def exchange(self) -> Iterator["SessionManager"]:
        """Hold the session lock for one full request/response exchange."""
        with self.lock:
            yield self

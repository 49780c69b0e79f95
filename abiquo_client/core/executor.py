"""
abiquo_client.core.executor - Single HTTP exchange
===================================================

Performs exactly one request/response round trip against the Abiquo API:
- No retries (urllib3 ``Retry(total=0)``)
- No client-side cookie jar; session cookies are handled by SessionManager
- Response headers returned as a multimap so repeated Set-Cookie values survive
- Proper error extraction from Abiquo error responses
"""

from __future__ import annotations

from http.cookiejar import DefaultCookiePolicy
from typing import Dict, Optional, Tuple
import logging
import time

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3 import HTTPHeaderDict
from urllib3.util.retry import Retry

from abiquo_client.core.config import ClientConfig
from abiquo_client.core.errors import PreconditionViolation, TransportError
from abiquo_client.general.uri import is_absolute_uri


class RequestExecutor:
    """
    Low-level HTTP executor for the Abiquo REST API.

    Stateless per call: it neither stores cookies nor retries. Use as a
    context manager for automatic cleanup of pooled connections.

    Parameters
    ----------
    cfg : ClientConfig, optional
        Transport configuration

    Examples
    --------
    >>> with RequestExecutor() as executor:
    ...     body, headers = executor.execute(
    ...         "GET", "https://abiquo.example.com/api/login",
    ...         {"Authorization": "Basic ..."},
    ...     )
    """

    def __init__(self, cfg: Optional[ClientConfig] = None) -> None:
        self.cfg = cfg or ClientConfig()
        self.timeout = float(self.cfg.timeout)
        self.verify = self.cfg.verify
        self.logger = logging.getLogger("abiquo_client.executor")

        self.session = self._build_session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- transport ----------------

    def _build_session(self) -> Session:
        sess = requests.Session()
        # cookies are replayed explicitly by SessionManager, never by the jar
        sess.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        sess.headers.update({"User-Agent": self.cfg.user_agent})

        retry = Retry(total=0, raise_on_status=False)
        adapter = HTTPAdapter(
            max_retries=retry,
            pool_connections=self.cfg.pool_connections,
            pool_maxsize=self.cfg.pool_maxsize,
        )
        sess.mount("https://", adapter)
        sess.mount("http://", adapter)
        return sess

    # ---------------- helpers ----------------

    def _extract_abiquo_error(self, r: Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text
        if not isinstance(data, dict):
            return r.text

        errors = data.get("collection")
        if not isinstance(errors, list):
            errors = [data]

        parts = []
        for err in errors:
            if not isinstance(err, dict):
                continue
            code = err.get("code")
            message = err.get("message")
            if code and message:
                parts.append(f"code={code} | message={message}")
            elif message:
                parts.append(f"message={message}")
        return "; ".join(parts) or r.text

    def _raise_for_error(self, r: Response, url: str) -> None:
        if r.status_code >= 400 or r.status_code in (301, 302, 303, 307, 308):
            body = self._extract_abiquo_error(r)
            raise TransportError(r.status_code, body, url, dict(r.headers))

    @staticmethod
    def _response_headers(r: Response) -> HTTPHeaderDict:
        raw_headers = getattr(r.raw, "headers", None)
        if isinstance(raw_headers, HTTPHeaderDict):
            return HTTPHeaderDict(raw_headers)
        return HTTPHeaderDict(r.headers)

    # ---------------- public ops ----------------

    def execute(
        self,
        method: str,
        absolute_uri: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> Tuple[str, HTTPHeaderDict]:
        """
        Execute one HTTP request.

        Parameters
        ----------
        method : str
            HTTP method, e.g. "GET"
        absolute_uri : str
            Absolute request URI
        headers : dict
            Request headers, sent as given
        body : str, optional
            Already serialized request body, sent verbatim

        Returns
        -------
        tuple
            Response body text and the response header multimap

        Raises
        ------
        TransportError
            On connection, TLS or timeout failures and on error statuses
        """
        if not is_absolute_uri(absolute_uri):
            raise PreconditionViolation(f"Invalid absolute URI: {absolute_uri!r}")

        data = body.encode("utf-8") if body is not None else None

        t0 = time.perf_counter()
        try:
            r = self.session.request(
                method=method.upper(),
                url=absolute_uri,
                headers=dict(headers),
                data=data,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            raise TransportError(0, str(e), absolute_uri) from e
        self._raise_for_error(r, absolute_uri)
        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("%s %s %sms", method.upper(), absolute_uri, round(dt, 1))
        return r.text, self._response_headers(r)

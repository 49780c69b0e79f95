"""
abiquo_client.core.errors - Client error taxonomy
==================================================

- PreconditionViolation: a caller passed an invalid argument or called an
  operation in a state it does not support. Never retried.
- TransportError: the HTTP exchange itself failed.
- DecodeError: a response body could not be decoded into the requested shape.
- NotFoundError: a lookup by name or id matched nothing.
"""

from __future__ import annotations

from typing import Dict, Optional


class AbiquoClientError(Exception):
    """Base class for all errors raised by abiquo_client."""


class PreconditionViolation(AbiquoClientError, ValueError):
    """Raised when a caller violates an operation's precondition."""


class TransportError(AbiquoClientError):
    """
    Exception raised when the HTTP exchange with the Abiquo API fails.

    Attributes
    ----------
    status : int
        HTTP status code, 0 when no response was received
    body : str
        Response body (truncated for display)
    url : str
        The URL that was called
    headers : dict
        Response headers
    """

    def __init__(
        self,
        status: int,
        body: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        snippet = (body or "")[:1200]
        super().__init__(f"Abiquo transport error {status} for {url}: {snippet}")
        self.status = status
        self.body = body or ""
        self.url = url
        self.headers = headers or {}


class DecodeError(AbiquoClientError, ValueError):
    """
    Raised when a response body cannot be decoded.

    Attributes
    ----------
    target : str
        Name of the shape the body was decoded into
    body : str
        The offending body
    """

    def __init__(self, target: str, body: str, reason: str):
        snippet = (body or "")[:300]
        super().__init__(f"Cannot decode response into {target}: {reason} (body: {snippet!r})")
        self.target = target
        self.body = body or ""
        self.reason = reason


class NotFoundError(AbiquoClientError, LookupError):
    """Raised when a lookup by name or id matches no resource."""

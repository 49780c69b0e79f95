"""
abiquo_client.client - Version-independent Abiquo client core
==============================================================

Request invocation shared by every resource method:
- Relative and absolute URI invocation with ordered query filters
- Typed decoding through an explicit model or decoder function
- Generic HATEOAS link dispatch by relation or media type
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union
import logging

from pydantic import BaseModel

from abiquo_client.core.auth import AuthenticationInformation
from abiquo_client.core.config import ClientConfig
from abiquo_client.core.errors import PreconditionViolation
from abiquo_client.core.executor import RequestExecutor
from abiquo_client.core.session import SessionManager
from abiquo_client.general.serialization import (
    Decoder,
    DictionaryParameters,
    decode,
    decode_dictionary,
    encode,
)
from abiquo_client.general.uri import (
    FilterPairs,
    concat_uri,
    create_filter_string,
    extract_relative_uri,
    is_absolute_uri,
    is_relative_uri,
)

Body = Union[str, BaseModel, None]


class BaseAbiquoClient:
    """
    Base class of the versioned Abiquo clients.

    Holds one logical session. All requests of an instance are serialized
    through its :class:`SessionManager`; independent instances can be used
    concurrently.

    Parameters
    ----------
    cfg : ClientConfig, optional
        Transport and polling configuration
    executor : RequestExecutor, optional
        HTTP executor, created from ``cfg`` when omitted

    Subclasses define:
    - ABIQUO_API_VERSION: str
    - login(base_uri, credentials) -> bool
    """

    ABIQUO_API_VERSION: str = ""

    def __init__(
        self,
        cfg: Optional[ClientConfig] = None,
        executor: Optional[RequestExecutor] = None,
    ) -> None:
        self.cfg = cfg or ClientConfig()
        self.executor = executor or RequestExecutor(self.cfg)
        self.session = SessionManager()
        self.logger = logging.getLogger("abiquo_client.client")
        self.task_polling_wait_time_ms = self.cfg.task_polling_wait_time_ms
        self.task_polling_timeout_ms = self.cfg.task_polling_timeout_ms

    def close(self) -> None:
        """Log out and close the underlying HTTP executor."""
        self.logout()
        self.executor.close()

    def __enter__(self) -> "BaseAbiquoClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- session accessors ----------------

    @property
    def is_logged_in(self) -> bool:
        return self.session.is_logged_in

    @property
    def session_token(self) -> Optional[str]:
        return self.session.session_token

    @property
    def current_user(self) -> Optional[Any]:
        return self.session.current_user

    @property
    def base_uri(self) -> Optional[str]:
        return self.session.base_uri

    @property
    def authentication_information(self) -> Optional[AuthenticationInformation]:
        return self.session.credentials

    # ---------------- login ----------------

    def login(self, base_uri: str, credentials: AuthenticationInformation) -> bool:
        raise NotImplementedError(f"{self.__class__.__name__} must implement login")

    def logout(self) -> None:
        """Reset the whole session. Never fails and makes no network call."""
        self.logger.debug("Logout %s", self.session.base_uri)
        self.session.clear()

    # ---------------- request execution ----------------

    def _execute_request(
        self,
        method: str,
        uri_suffix: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> str:
        with self.session.exchange():
            base_uri = self.session.base_uri
            if not base_uri:
                raise PreconditionViolation("No base URI set, call login first")
            request_uri = concat_uri(base_uri, uri_suffix)
            request_headers = self.session.build_request_headers(headers)
            self.logger.debug(
                "Executing %s %s (headers: %s, body: %d chars)",
                method, request_uri, sorted(request_headers), len(body or ""),
            )
            text, response_headers = self.executor.execute(method, request_uri, request_headers, body)
            self.session.on_response(response_headers)
        return text

    def invoke(
        self,
        uri_suffix: str,
        *,
        method: str = "GET",
        filters: Optional[FilterPairs] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Body = None,
    ) -> str:
        """
        Invoke a relative URI below the base URI and return the raw body.

        Parameters
        ----------
        uri_suffix : str
            Relative URI, e.g. "/admin/enterprises"
        method : str
            HTTP method
        filters : sequence of (key, value) or mapping, optional
            Query filter, rendered in the given order
        headers : dict, optional
            Extra request headers; these win over authentication headers
        body : str or pydantic model, optional
            Request body, strings are sent verbatim

        Returns
        -------
        str
            Response body
        """
        if not uri_suffix or not uri_suffix.strip():
            raise PreconditionViolation("uri_suffix must not be empty")
        if not is_relative_uri(uri_suffix):
            raise PreconditionViolation(f"Invalid relative URI: {uri_suffix!r}")
        if not self.is_logged_in:
            raise PreconditionViolation("Not logged in, call login first")

        if filters:
            separator = "&" if "?" in uri_suffix else "?"
            uri_suffix = f"{uri_suffix}{separator}{create_filter_string(filters)}"

        self.logger.debug("Invoke %s %s", method, uri_suffix)
        response = self._execute_request(method, uri_suffix, headers, encode(body))
        self.logger.debug("Invoke %s %s completed", method, uri_suffix)
        return response

    def invoke_as(
        self,
        decoder: Decoder,
        uri_suffix: str,
        *,
        method: str = "GET",
        filters: Optional[FilterPairs] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Body = None,
    ) -> Any:
        """
        Invoke a relative URI and decode the body.

        ``decoder`` is a pydantic model class or a ``Callable[[str], T]``.
        Decoding failures raise :class:`DecodeError`.
        """
        response = self.invoke(uri_suffix, method=method, filters=filters, headers=headers, body=body)
        return decode(decoder, response)

    def invoke_uri(
        self,
        absolute_uri: str,
        *,
        method: str = "GET",
        filters: Optional[FilterPairs] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Body = None,
    ) -> str:
        """Invoke an absolute URI located below the configured base URI."""
        if not is_absolute_uri(absolute_uri):
            raise PreconditionViolation(f"Invalid absolute URI: {absolute_uri!r}")
        if not self.is_logged_in:
            raise PreconditionViolation("Not logged in, call login first")
        uri_suffix = extract_relative_uri(self.session.base_uri, absolute_uri)
        return self.invoke(uri_suffix, method=method, filters=filters, headers=headers, body=body)

    def invoke_uri_as_dict(self, absolute_uri: str) -> DictionaryParameters:
        """Invoke an absolute URI and decode the body into a field map."""
        return decode_dictionary(self.invoke_uri(absolute_uri))

    # ---------------- links ----------------

    def get_dictionary_parameters_from_link(self, link: Any) -> DictionaryParameters:
        """Follow a link's ``href`` and return the response as a field map."""
        if link is None or not getattr(link, "href", None):
            raise PreconditionViolation("link must have a non-empty href")
        return self.invoke_uri_as_dict(link.href)

    def invoke_link_by_rel(self, links: Optional[Iterable[Any]], rel: str) -> DictionaryParameters:
        """
        Follow the first link whose ``rel`` equals ``rel`` exactly.

        Raises
        ------
        PreconditionViolation
            If ``links`` is None, ``rel`` is empty or no link matches
        """
        if links is None:
            raise PreconditionViolation("links must not be None")
        if not rel or not rel.strip():
            raise PreconditionViolation("rel must not be empty")
        link = next((l for l in links if l.rel == rel), None)
        if link is None:
            raise PreconditionViolation(f"No link with rel {rel!r} found")
        return self.get_dictionary_parameters_from_link(link)

    def invoke_links_by_type(self, links: Optional[Iterable[Any]], media_type: str) -> List[DictionaryParameters]:
        """
        Follow every link whose media type equals ``media_type``, in order.

        The first failing invocation aborts the whole call.
        """
        if links is None:
            raise PreconditionViolation("links must not be None")
        if not media_type or not media_type.strip():
            raise PreconditionViolation("media_type must not be empty")
        selected = [l for l in links if l.media_type == media_type]
        return [self.get_dictionary_parameters_from_link(l) for l in selected]

"""
abiquo_client.general.builders - Fluent filter and header builders
===================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from abiquo_client.core.errors import PreconditionViolation

ACCEPT_HEADER_KEY = "Accept"
CONTENT_TYPE_HEADER_KEY = "Content-Type"


class FilterBuilder:
    """
    Collects ordered query filter pairs.

    Examples
    --------
    >>> FilterBuilder().build_filter_part("force", True).get_filter()
    [('force', True)]
    """

    def __init__(self) -> None:
        self._filter: List[Tuple[str, Any]] = []

    def build_filter_part(self, filter_key: str, filter_value: Any) -> "FilterBuilder":
        if not filter_key or not filter_key.strip():
            raise PreconditionViolation("filter_key must not be empty")
        if filter_value is None:
            raise PreconditionViolation("filter_value must not be None")
        self._filter.append((filter_key, filter_value))
        return self

    def get_filter(self) -> List[Tuple[str, Any]]:
        return list(self._filter)


class HeaderBuilder:
    """
    Collects request headers; a key may only be set once.

    Examples
    --------
    >>> HeaderBuilder().build_accept("application/json").get_headers()
    {'Accept': 'application/json'}
    """

    def __init__(self) -> None:
        self._headers: Dict[str, str] = {}

    def _add(self, key: str, value: str) -> "HeaderBuilder":
        if not key or not key.strip():
            raise PreconditionViolation("header key must not be empty")
        if not value or not value.strip():
            raise PreconditionViolation(f"header value for {key!r} must not be empty")
        if key in self._headers:
            raise PreconditionViolation(f"header {key!r} already set")
        self._headers[key] = value
        return self

    def build_accept(self, accept_header_value: str) -> "HeaderBuilder":
        return self._add(ACCEPT_HEADER_KEY, accept_header_value)

    def build_content_type(self, content_type_header_value: str) -> "HeaderBuilder":
        return self._add(CONTENT_TYPE_HEADER_KEY, content_type_header_value)

    def build_custom(self, header_key: str, header_value: str) -> "HeaderBuilder":
        return self._add(header_key, header_value)

    def get_headers(self) -> Dict[str, str]:
        return dict(self._headers)

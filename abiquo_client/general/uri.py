"""
abiquo_client.general.uri - URI helpers
========================================

Helpers for joining, splitting and filtering Abiquo API URIs.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, Tuple, Union
from urllib.parse import urlsplit

from abiquo_client.core.errors import PreconditionViolation

CHARACTER_TO_TRIM_ON = "/"
FILTER_SEPARATOR = "&"

FilterPairs = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


def is_absolute_uri(uri: str) -> bool:
    """Return True if ``uri`` carries both a scheme and a network location."""
    if not uri or not isinstance(uri, str):
        return False
    parts = urlsplit(uri)
    return bool(parts.scheme) and bool(parts.netloc)


def is_relative_uri(uri: str) -> bool:
    """Return True if ``uri`` is a non-empty reference without scheme or host."""
    if not uri or not uri.strip():
        return False
    parts = urlsplit(uri)
    return not parts.scheme and not parts.netloc and " " not in uri


def concat_uri(base_uri: str, uri_suffix: str) -> str:
    """
    Join a base URI and a relative suffix with exactly one slash.

    Examples
    --------
    >>> concat_uri("https://abiquo.example.com/api/", "/admin/enterprises/")
    'https://abiquo.example.com/api/admin/enterprises'
    """
    if not base_uri or not base_uri.strip():
        raise PreconditionViolation("base_uri must not be empty")
    if not uri_suffix or not uri_suffix.strip():
        raise PreconditionViolation("uri_suffix must not be empty")
    return "{0}/{1}".format(
        base_uri.rstrip(CHARACTER_TO_TRIM_ON),
        uri_suffix.lstrip(CHARACTER_TO_TRIM_ON).rstrip(CHARACTER_TO_TRIM_ON),
    )


def _filter_items(filters: FilterPairs) -> Iterable[Tuple[str, Any]]:
    if isinstance(filters, Mapping):
        return filters.items()
    return filters


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def create_filter_string(filters: FilterPairs) -> str:
    """
    Render filter pairs as a query string in the given order.

    Values are rendered with ``str()`` (booleans lowercase) and are not
    URL-encoded.

    Examples
    --------
    >>> create_filter_string([("currentPage", 1), ("limit", 25)])
    'currentPage=1&limit=25'
    """
    if filters is None:
        raise PreconditionViolation("filters must not be None")
    parts = []
    for key, value in _filter_items(filters):
        if not key or not str(key).strip():
            raise PreconditionViolation("filter key must not be empty")
        if value is None:
            raise PreconditionViolation(f"filter value for {key!r} must not be None")
        parts.append(f"{key}={_render_value(value)}")
    return FILTER_SEPARATOR.join(parts)


def extract_last_segment(uri: str) -> str:
    """Return the last path segment of an absolute URI."""
    if not is_absolute_uri(uri):
        raise PreconditionViolation(f"Invalid absolute URI: {uri!r}")
    segment = urlsplit(uri).path.rstrip(CHARACTER_TO_TRIM_ON).rsplit(CHARACTER_TO_TRIM_ON, 1)[-1]
    if not segment:
        raise PreconditionViolation(f"URI has no path segment: {uri!r}")
    return segment


def extract_id_as_int(uri: str) -> int:
    """
    Return the last path segment of an absolute URI as an integer id.

    Examples
    --------
    >>> extract_id_as_int("https://abiquo.example.com/api/admin/enterprises/42")
    42
    """
    segment = extract_last_segment(uri)
    try:
        return int(segment)
    except ValueError:
        raise PreconditionViolation(f"Last segment of URI is not an integer: {uri!r}") from None


def extract_relative_uri(base_uri: str, absolute_uri: str) -> str:
    """
    Strip ``base_uri`` from ``absolute_uri``.

    ``base_uri`` must be a base of ``absolute_uri`` (same scheme, host and
    a path prefix ending on a segment boundary).

    Examples
    --------
    >>> extract_relative_uri(
    ...     "https://abiquo.example.com/api",
    ...     "https://abiquo.example.com/api/cloud/virtualdatacenters/3",
    ... )
    '/cloud/virtualdatacenters/3'
    """
    if not is_absolute_uri(base_uri):
        raise PreconditionViolation(f"Invalid absolute URI: {base_uri!r}")
    if not is_absolute_uri(absolute_uri):
        raise PreconditionViolation(f"Invalid absolute URI: {absolute_uri!r}")

    base = base_uri.rstrip(CHARACTER_TO_TRIM_ON)
    base_parts = urlsplit(base)
    uri_parts = urlsplit(absolute_uri)
    same_origin = (
        base_parts.scheme.lower() == uri_parts.scheme.lower()
        and base_parts.netloc.lower() == uri_parts.netloc.lower()
    )
    path_prefix = base_parts.path.rstrip(CHARACTER_TO_TRIM_ON)
    if not same_origin or not (
        uri_parts.path == path_prefix or uri_parts.path.startswith(path_prefix + CHARACTER_TO_TRIM_ON)
    ):
        raise PreconditionViolation(f"{base_uri!r} is not a base of {absolute_uri!r}")

    relative = uri_parts.path[len(path_prefix):]
    if uri_parts.query:
        relative = f"{relative}?{uri_parts.query}"
    if not relative.strip(CHARACTER_TO_TRIM_ON):
        raise PreconditionViolation(f"{absolute_uri!r} has no path below {base_uri!r}")
    return relative

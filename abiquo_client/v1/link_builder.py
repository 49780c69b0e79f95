"""
abiquo_client.v1.link_builder - Fluent Link construction
=========================================================
"""

from __future__ import annotations

from typing import Any, Dict

from abiquo_client.core.errors import PreconditionViolation
from abiquo_client.v1.model import Link


def _require(name: str, value: str) -> str:
    if not value or not str(value).strip():
        raise PreconditionViolation(f"{name} must not be empty")
    return value


class LinkBuilder:
    """
    Build a :class:`Link`; ``rel`` and ``href`` are mandatory.

    Examples
    --------
    >>> link = (
    ...     LinkBuilder()
    ...     .build_rel("enterprise")
    ...     .build_href("https://abiquo.example.com/api/admin/enterprises/1")
    ...     .get_link()
    ... )
    >>> link.rel
    'enterprise'
    """

    def __init__(self) -> None:
        self._fields: Dict[str, Any] = {}

    def build_rel(self, rel: str) -> "LinkBuilder":
        self._fields["rel"] = _require("rel", rel)
        return self

    def build_href(self, href: str) -> "LinkBuilder":
        self._fields["href"] = _require("href", href)
        return self

    def build_title(self, title: str) -> "LinkBuilder":
        self._fields["title"] = _require("title", title)
        return self

    def build_type(self, media_type: str) -> "LinkBuilder":
        self._fields["media_type"] = _require("type", media_type)
        return self

    def get_link(self) -> Link:
        missing = [name for name in ("rel", "href") if name not in self._fields]
        if missing:
            raise PreconditionViolation(f"Link is missing {', '.join(missing)}")
        return Link(**self._fields)

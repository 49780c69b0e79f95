"""
abiquo_client.factory - Versioned client factory
=================================================
"""

from __future__ import annotations

from typing import Any, Optional
import logging

from abiquo_client.client import BaseAbiquoClient

logger = logging.getLogger("abiquo_client.factory")

DEFAULT_VERSION = "v1"


def get_by_version(version: str = DEFAULT_VERSION, **kwargs: Any) -> Optional[BaseAbiquoClient]:
    """
    Create the client implementing an API version.

    Parameters
    ----------
    version : str
        Client version, e.g. "v1" (case-insensitive)
    **kwargs
        Passed to the client constructor (``cfg``, ``executor``)

    Returns
    -------
    BaseAbiquoClient or None
        None if no client implements ``version``

    Examples
    --------
    >>> get_by_version("v1").ABIQUO_API_VERSION
    '3.10'
    >>> get_by_version("v42") is None
    True
    """
    logger.debug("Creating client for version %r", version)
    if version and version.strip().lower() == "v1":
        from abiquo_client.v1.client import AbiquoClient
        return AbiquoClient(**kwargs)

    logger.error("No Abiquo client available for version %r", version)
    return None

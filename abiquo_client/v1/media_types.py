"""
abiquo_client.v1.media_types - Abiquo v1 media types
=====================================================

Media types used in ``Accept``/``Content-Type`` headers and in the
``type`` attribute of links. ``VND_ABIQUO_*`` are the plain types the
server emits in links; :func:`versioned` adds the API version parameter
used when requesting a representation.
"""

from __future__ import annotations

import re
from typing import Optional

ABIQUO_API_VERSION = "3.10"

APPLICATION_TYPE_JSON = "+json"
_PREFIX = "application/vnd.abiquo."

VND_ABIQUO_ACCEPTEDREQUEST = _PREFIX + "acceptedrequest" + APPLICATION_TYPE_JSON
VND_ABIQUO_ENTERPRISE = _PREFIX + "enterprise" + APPLICATION_TYPE_JSON
VND_ABIQUO_ENTERPRISES = _PREFIX + "enterprises" + APPLICATION_TYPE_JSON
VND_ABIQUO_JOB = _PREFIX + "job" + APPLICATION_TYPE_JSON
VND_ABIQUO_JOBS = _PREFIX + "jobs" + APPLICATION_TYPE_JSON
VND_ABIQUO_LINKS = _PREFIX + "links" + APPLICATION_TYPE_JSON
VND_ABIQUO_TASK = _PREFIX + "task" + APPLICATION_TYPE_JSON
VND_ABIQUO_TASKS = _PREFIX + "tasks" + APPLICATION_TYPE_JSON
VND_ABIQUO_USER = _PREFIX + "user" + APPLICATION_TYPE_JSON
VND_ABIQUO_USERS = _PREFIX + "users" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALAPPLIANCE = _PREFIX + "virtualappliance" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALAPPLIANCES = _PREFIX + "virtualappliances" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALDATACENTER = _PREFIX + "virtualdatacenter" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALDATACENTERS = _PREFIX + "virtualdatacenters" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALMACHINE = _PREFIX + "virtualmachine" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALMACHINES = _PREFIX + "virtualmachines" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALMACHINESTATE = _PREFIX + "virtualmachinestate" + APPLICATION_TYPE_JSON
VND_ABIQUO_VIRTUALMACHINETASK = _PREFIX + "virtualmachinetask" + APPLICATION_TYPE_JSON
VND_ABIQUO_VLAN = _PREFIX + "vlan" + APPLICATION_TYPE_JSON
VND_ABIQUO_VLANS = _PREFIX + "vlans" + APPLICATION_TYPE_JSON

# Resource name in group 1, e.g. "virtualdatacenter".
LINK_TYPE_PATTERN = re.compile(r"^application/vnd\.abiquo\.([\w-]+)\+json")


def versioned(media_type: str, version: str = ABIQUO_API_VERSION) -> str:
    """
    Append the API version parameter to a media type.

    Examples
    --------
    >>> versioned(VND_ABIQUO_TASK)
    'application/vnd.abiquo.task+json; version=3.10'
    """
    return f"{media_type}; version={version}"


def resource_name_from_media_type(media_type: Optional[str]) -> Optional[str]:
    """
    Return the resource name of an Abiquo media type, or None.

    Media type parameters (``; version=...``) are ignored.

    Examples
    --------
    >>> resource_name_from_media_type("application/vnd.abiquo.virtualmachine+json; version=3.10")
    'virtualmachine'
    >>> resource_name_from_media_type("text/plain") is None
    True
    """
    if not media_type:
        return None
    match = LINK_TYPE_PATTERN.match(media_type.strip())
    return match.group(1).lower() if match else None

"""
abiquo_client.v1.virtual_machine - Virtual machine helpers
===========================================================
"""

from __future__ import annotations

import re
from typing import Tuple, Union

from abiquo_client.core.errors import PreconditionViolation
from abiquo_client.v1 import relations
from abiquo_client.v1.model import Link, VirtualMachine
from abiquo_client.v1.uri_suffixes import VIRTUALMACHINE_BY_IDS

_VM_EDIT_PATTERN = re.compile(
    re.escape(VIRTUALMACHINE_BY_IDS)
    .replace(re.escape("{0}"), r"(\d+)")
    .replace(re.escape("{1}"), r"(\d+)")
    .replace(re.escape("{2}"), r"(\d+)")
)


def extract_ids(vm_or_edit_link: Union[VirtualMachine, Link]) -> Tuple[int, int, int]:
    """
    Return ``(virtual_datacenter_id, virtual_appliance_id, virtual_machine_id)``.

    Parameters
    ----------
    vm_or_edit_link : VirtualMachine or Link
        A virtual machine (its ``edit`` link is used) or an ``edit`` link

    Examples
    --------
    >>> from abiquo_client.v1.link_builder import LinkBuilder
    >>> link = LinkBuilder().build_rel("edit").build_href(
    ...     "https://abiquo.example.com/api/cloud/virtualdatacenters/1"
    ...     "/virtualappliances/2/virtualmachines/3").get_link()
    >>> extract_ids(link)
    (1, 2, 3)
    """
    if vm_or_edit_link is None:
        raise PreconditionViolation("virtual machine or link must not be None")

    if isinstance(vm_or_edit_link, VirtualMachine):
        if vm_or_edit_link.id is None:
            raise PreconditionViolation("virtual machine has no id")
        link = vm_or_edit_link.require_link(relations.EDIT)
    else:
        link = vm_or_edit_link
        if link.rel != relations.EDIT:
            raise PreconditionViolation(f"expected an {relations.EDIT!r} link, got {link.rel!r}")

    match = _VM_EDIT_PATTERN.search(link.href)
    if match is None:
        raise PreconditionViolation(f"Not a virtual machine URI: {link.href!r}")
    return int(match.group(1)), int(match.group(2)), int(match.group(3))

"""
abiquo_client.v1.client - Abiquo API v1 client
===============================================

Typed client for Abiquo API version 3.10:
- Login against ``/login`` with Basic or Bearer credentials
- HATEOAS link invocation resolving the DTO from the link's media type
- Enterprise, user, virtual datacenter, virtual appliance, virtual machine,
  task and private network resources
- Blocking wait on asynchronous tasks
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar, Union
import logging
import time

from abiquo_client.client import BaseAbiquoClient
from abiquo_client.core.auth import AuthenticationInformation
from abiquo_client.core.errors import (
    DecodeError,
    NotFoundError,
    PreconditionViolation,
    TransportError,
)
from abiquo_client.general.builders import FilterBuilder, HeaderBuilder
from abiquo_client.general.serialization import DictionaryParameters, decode, decode_dictionary
from abiquo_client.general.uri import (
    extract_id_as_int,
    extract_last_segment,
    is_absolute_uri,
)
from abiquo_client.v1 import media_types, relations, uri_suffixes
from abiquo_client.v1.link_builder import LinkBuilder
from abiquo_client.v1.model import (
    AbiquoDto,
    AcceptedRequest,
    Enterprise,
    Enterprises,
    Link,
    Task,
    Tasks,
    TaskState,
    TaskType,
    User,
    Users,
    VirtualAppliance,
    VirtualAppliances,
    VirtualDataCenter,
    VirtualDataCenters,
    VirtualMachine,
    VirtualMachines,
    VirtualMachineState,
    VirtualMachineStateEnum,
    VlanNetwork,
    VlanNetworks,
    model_for_media_type,
)
from abiquo_client.v1.tasks import TaskPoller

M = TypeVar("M", bound=AbiquoDto)

FILTER_KEY_FORCE = "force"
FILTER_KEY_HAS = "has"

# Task id reported for updates of machines that are not deployed yet.
UPDATED_WITHOUT_TASK_ID = "FakeTask"


def _accept(media_type: str) -> dict:
    return HeaderBuilder().build_accept(media_types.versioned(media_type)).get_headers()


def _strip_parameters(media_type: Optional[str]) -> str:
    return (media_type or "").split(";", 1)[0].strip()


class AbiquoClient(BaseAbiquoClient):
    """
    Abiquo API v1 client.

    Examples
    --------
    >>> client = AbiquoClient()
    >>> client.login("https://abiquo.example.com/api", BasicAuthentication("admin", "xabiquo"))
    True
    >>> [vdc.name for vdc in client.get_virtual_data_centers().collection]
    ['Production', 'Staging']
    """

    ABIQUO_API_VERSION = media_types.ABIQUO_API_VERSION

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.logger = logging.getLogger("abiquo_client.v1")

    # ---------------- login ----------------

    def login(self, base_uri: str, credentials: AuthenticationInformation) -> bool:
        """
        Start a new session and fetch the logged-in user.

        Any previous session is dropped first. An HTTP failure ends in a
        logged-out client and ``False``; an undecodable user representation
        ends in a logged-out client and a :class:`DecodeError`.
        """
        if not is_absolute_uri(base_uri):
            raise PreconditionViolation(f"Invalid absolute URI: {base_uri!r}")
        if credentials is None:
            raise PreconditionViolation("credentials must not be None")

        with self.session.exchange():
            self.logger.debug("Login to %s", base_uri)
            self.logout()
            self.session.start(base_uri, credentials)
            try:
                response = self._execute_request(
                    "GET", uri_suffixes.LOGIN, _accept(media_types.VND_ABIQUO_USER)
                )
                user = decode(User, response)
            except TransportError:
                self.logger.exception("Login to %s failed", base_uri)
                self.logout()
                return False
            except DecodeError:
                self.logger.error("Login to %s returned an invalid user", base_uri)
                self.logout()
                raise
            self.session.set_current_user(user)
        self.logger.info("Login to %s succeeded as %s", base_uri, user.nick)
        return True

    @property
    def tenant_id(self) -> int:
        """Id of the enterprise the current user belongs to."""
        user = self.current_user
        if user is None:
            raise PreconditionViolation("Not logged in, call login first")
        return extract_id_as_int(user.require_link(relations.ENTERPRISE).href)

    # ---------------- links ----------------

    def invoke_link(self, link: Link) -> Union[AbiquoDto, DictionaryParameters]:
        """
        Follow ``link`` and decode the target by the link's media type.

        Registered media types decode into their DTO; anything else decodes
        into ``DictionaryParameters``.
        """
        if link is None or not link.href:
            raise PreconditionViolation("link must have a non-empty href")
        model = model_for_media_type(link.media_type)
        headers = HeaderBuilder().build_accept(link.media_type).get_headers() if link.media_type else None
        response = self.invoke_uri(link.href, headers=headers)
        if model is None:
            self.logger.debug("No model registered for %r, returning a field map", link.media_type)
            return decode_dictionary(response)
        return decode(model, response)

    def invoke_link_as(self, model: Type[M], link: Link) -> M:
        """Follow ``link`` and decode it into ``model``; the media types must match."""
        if model is None or link is None:
            raise PreconditionViolation("model and link must not be None")
        if _strip_parameters(link.media_type) != model.MEDIA_TYPE:
            raise PreconditionViolation(
                f"Link media type {link.media_type!r} does not match {model.__name__} ({model.MEDIA_TYPE!r})"
            )
        headers = HeaderBuilder().build_accept(link.media_type).get_headers()
        return decode(model, self.invoke_uri(link.href, headers=headers))

    # ---------------- enterprises ----------------

    def get_enterprises(self) -> Enterprises:
        return self.invoke_as(Enterprises, uri_suffixes.ENTERPRISES,
                              headers=_accept(media_types.VND_ABIQUO_ENTERPRISES))

    def get_enterprise(self, enterprise_id: int) -> Enterprise:
        return self.invoke_as(Enterprise, uri_suffixes.ENTERPRISE_BY_ID.format(enterprise_id),
                              headers=_accept(media_types.VND_ABIQUO_ENTERPRISE))

    def get_current_enterprise(self) -> Enterprise:
        return self.get_enterprise(self.tenant_id)

    # ---------------- users ----------------

    def get_user(self, enterprise_id: int, user_id: int) -> User:
        uri_suffix = uri_suffixes.USER_BY_ENTERPRISE_ID_AND_USER_ID.format(enterprise_id, user_id)
        return self.invoke_as(User, uri_suffix, headers=_accept(media_types.VND_ABIQUO_USER))

    def get_user_of_current_enterprise(self, user_id: int) -> User:
        return self.get_user(self.tenant_id, user_id)

    def get_user_information(self, username: Optional[str] = None, enterprise_id: Optional[int] = None) -> User:
        """
        Return the logged-in user, or search a user by nick.

        Parameters
        ----------
        username : str, optional
            Nick to search for; the logged-in user is returned when omitted
        enterprise_id : int, optional
            Enterprise to search in, defaults to :attr:`tenant_id`

        Raises
        ------
        NotFoundError
            If no user of the enterprise has this nick
        """
        if username is None:
            if self.current_user is None:
                raise PreconditionViolation("Not logged in, call login first")
            return self.current_user

        if enterprise_id is None:
            enterprise_id = self.tenant_id
        filters = FilterBuilder().build_filter_part(FILTER_KEY_HAS, username).get_filter()
        users = self.invoke_as(
            Users,
            uri_suffixes.USERS_BY_ENTERPRISE_ID.format(enterprise_id),
            filters=filters,
            headers=_accept(media_types.VND_ABIQUO_USERS),
        )
        user = next((u for u in users.collection if u.nick == username), None)
        if user is None:
            raise NotFoundError(f"User {username!r} not found in enterprise {enterprise_id}")
        return user

    def switch_enterprise(self, enterprise: Union[Enterprise, int]) -> User:
        """
        Move the logged-in user to another enterprise.

        The user's ``enterprise`` link is replaced by the target's ``edit``
        link and the user is written back; the updated user becomes the
        current user.
        """
        if isinstance(enterprise, Enterprise):
            enterprise_id = extract_id_as_int(enterprise.require_link(relations.EDIT).href)
        else:
            enterprise_id = enterprise

        target = self.get_enterprise(enterprise_id)
        href = target.require_link(relations.EDIT).href
        current = self.get_user_of_current_enterprise(self.current_user.id)

        links = [l for l in current.links if l.rel != relations.ENTERPRISE]
        links.append(LinkBuilder().build_rel(relations.ENTERPRISE).build_href(href).get_link())
        moved = current.model_copy(update={"links": links})

        headers = (
            HeaderBuilder()
            .build_accept(media_types.versioned(media_types.VND_ABIQUO_USER))
            .build_content_type(media_types.versioned(media_types.VND_ABIQUO_USER))
            .get_headers()
        )
        updated = self.invoke_as(
            User,
            uri_suffixes.SWITCH_ENTERPRISE_BY_USER_ID.format(current.id),
            method="PUT",
            headers=headers,
            body=moved,
        )
        self.session.set_current_user(updated)
        self.logger.info("Switched to enterprise %s", enterprise_id)
        return updated

    # ---------------- virtual datacenters / appliances ----------------

    def get_virtual_data_centers(self) -> VirtualDataCenters:
        return self.invoke_as(VirtualDataCenters, uri_suffixes.VIRTUALDATACENTERS,
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALDATACENTERS))

    def get_virtual_data_center(self, virtual_data_center_id: int) -> VirtualDataCenter:
        return self.invoke_as(VirtualDataCenter,
                              uri_suffixes.VIRTUALDATACENTER_BY_ID.format(virtual_data_center_id),
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALDATACENTER))

    def get_virtual_appliances(self, virtual_data_center_id: int) -> VirtualAppliances:
        uri_suffix = uri_suffixes.VIRTUALAPPLIANCES_BY_VIRTUALDATACENTER_ID.format(virtual_data_center_id)
        return self.invoke_as(VirtualAppliances, uri_suffix,
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALAPPLIANCES))

    def get_virtual_appliance(self, virtual_data_center_id: int, virtual_appliance_id: int) -> VirtualAppliance:
        uri_suffix = uri_suffixes.VIRTUALAPPLIANCE_BY_VIRTUALDATACENTER_ID_AND_VIRTUALAPPLIANCE_ID.format(
            virtual_data_center_id, virtual_appliance_id
        )
        return self.invoke_as(VirtualAppliance, uri_suffix,
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALAPPLIANCE))

    # ---------------- virtual machines ----------------

    def get_all_virtual_machines(self) -> VirtualMachines:
        return self.invoke_as(VirtualMachines, uri_suffixes.VIRTUALMACHINES,
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALMACHINES))

    def get_virtual_machines(self, virtual_data_center_id: int, virtual_appliance_id: int) -> VirtualMachines:
        uri_suffix = uri_suffixes.VIRTUALMACHINES_BY_VIRTUALDATACENTER_ID_AND_VIRTUALAPPLIANCE_ID.format(
            virtual_data_center_id, virtual_appliance_id
        )
        return self.invoke_as(VirtualMachines, uri_suffix,
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALMACHINES))

    def get_virtual_machine(
        self, virtual_data_center_id: int, virtual_appliance_id: int, virtual_machine_id: int
    ) -> VirtualMachine:
        uri_suffix = uri_suffixes.VIRTUALMACHINE_BY_IDS.format(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id
        )
        return self.invoke_as(VirtualMachine, uri_suffix,
                              headers=_accept(media_types.VND_ABIQUO_VIRTUALMACHINE))

    def deploy_virtual_machine(
        self,
        virtual_data_center_id: int,
        virtual_appliance_id: int,
        virtual_machine_id: int,
        force: bool = False,
        wait_for_completion: bool = False,
    ) -> Task:
        """
        Deploy a virtual machine and return its deploy task.

        Parameters
        ----------
        force : bool
            Send ``force=true`` to deploy despite soft limits
        wait_for_completion : bool
            Block with the configured polling defaults until the task ends
        """
        filters = FilterBuilder().build_filter_part(FILTER_KEY_FORCE, True).get_filter() if force else None
        uri_suffix = uri_suffixes.DEPLOY_VIRTUALMACHINE_BY_IDS.format(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id
        )
        accepted = self.invoke_as(
            AcceptedRequest,
            uri_suffix,
            method="POST",
            filters=filters,
            headers=_accept(media_types.VND_ABIQUO_ACCEPTEDREQUEST),
            body="",
        )
        return self._follow_accepted_request(
            accepted, virtual_data_center_id, virtual_appliance_id, virtual_machine_id, wait_for_completion
        )

    def update_virtual_machine(
        self,
        virtual_data_center_id: int,
        virtual_appliance_id: int,
        virtual_machine_id: int,
        virtual_machine: VirtualMachine,
        force: bool = False,
        wait_for_completion: bool = False,
    ) -> Task:
        """
        Reconfigure a virtual machine and return its reconfigure task.

        A deployed machine answers with an accepted request that is followed
        like any other task. A machine that is not deployed is updated
        synchronously with an empty answer; a finished ``RECONFIGURE`` task
        with id ``FakeTask`` and no links is returned for it.
        """
        if virtual_machine is None:
            raise PreconditionViolation("virtual_machine must not be None")
        filters = FilterBuilder().build_filter_part(FILTER_KEY_FORCE, True).get_filter() if force else None
        headers = (
            HeaderBuilder()
            .build_accept(media_types.versioned(media_types.VND_ABIQUO_ACCEPTEDREQUEST))
            .build_content_type(media_types.versioned(media_types.VND_ABIQUO_VIRTUALMACHINE))
            .get_headers()
        )
        uri_suffix = uri_suffixes.VIRTUALMACHINE_BY_IDS.format(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id
        )
        response = self.invoke(uri_suffix, method="PUT", filters=filters, headers=headers, body=virtual_machine)
        if not response or not response.strip():
            self.logger.debug("Virtual machine %s updated without a task", virtual_machine_id)
            return Task(
                task_id=UPDATED_WITHOUT_TASK_ID,
                owner_id=str(virtual_machine_id),
                type=TaskType.RECONFIGURE,
                state=TaskState.FINISHED_SUCCESSFULLY,
                timestamp=int(time.time()),
            )
        accepted = decode(AcceptedRequest, response)
        return self._follow_accepted_request(
            accepted, virtual_data_center_id, virtual_appliance_id, virtual_machine_id, wait_for_completion
        )

    def change_state_of_virtual_machine(
        self,
        virtual_data_center_id: int,
        virtual_appliance_id: int,
        virtual_machine_id: int,
        state: Union[VirtualMachineState, VirtualMachineStateEnum, str],
        wait_for_completion: bool = False,
    ) -> Task:
        """Request a power state change (``ON``, ``OFF``, ``PAUSED``) and return its task."""
        if not isinstance(state, VirtualMachineState):
            state = VirtualMachineState(state=VirtualMachineStateEnum(state))
        headers = (
            HeaderBuilder()
            .build_accept(media_types.versioned(media_types.VND_ABIQUO_ACCEPTEDREQUEST))
            .build_content_type(media_types.versioned(media_types.VND_ABIQUO_VIRTUALMACHINESTATE))
            .get_headers()
        )
        uri_suffix = uri_suffixes.CHANGE_VIRTUALMACHINE_STATE_BY_IDS.format(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id
        )
        accepted = self.invoke_as(AcceptedRequest, uri_suffix, method="PUT", headers=headers, body=state)
        return self._follow_accepted_request(
            accepted, virtual_data_center_id, virtual_appliance_id, virtual_machine_id, wait_for_completion
        )

    def _follow_accepted_request(
        self,
        accepted: AcceptedRequest,
        virtual_data_center_id: int,
        virtual_appliance_id: int,
        virtual_machine_id: int,
        wait_for_completion: bool,
    ) -> Task:
        task_id = extract_last_segment(accepted.require_link(relations.STATUS).href)
        task = self.get_task_of_virtual_machine(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id, task_id
        )
        if wait_for_completion:
            return self.wait_for_task_completion(task)
        return task

    # ---------------- tasks ----------------

    def get_all_tasks_of_virtual_machine(
        self, virtual_data_center_id: int, virtual_appliance_id: int, virtual_machine_id: int
    ) -> Tasks:
        uri_suffix = uri_suffixes.VIRTUALMACHINE_TASKS_BY_IDS.format(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id
        )
        return self.invoke_as(Tasks, uri_suffix, headers=_accept(media_types.VND_ABIQUO_TASKS))

    def get_task_of_virtual_machine(
        self, virtual_data_center_id: int, virtual_appliance_id: int, virtual_machine_id: int, task_id: str
    ) -> Task:
        uri_suffix = uri_suffixes.VIRTUALMACHINE_TASK_BY_IDS_AND_TASK_ID.format(
            virtual_data_center_id, virtual_appliance_id, virtual_machine_id, task_id
        )
        return self.invoke_as(Task, uri_suffix, headers=_accept(media_types.VND_ABIQUO_TASK))

    def _fetch_task(self, self_link: Link) -> Task:
        return decode(Task, self.invoke_uri(self_link.href, headers=_accept(media_types.VND_ABIQUO_TASK)))

    def wait_for_task_completion(
        self,
        task: Task,
        task_polling_wait_time_ms: Optional[int] = None,
        task_polling_timeout_ms: Optional[int] = None,
    ) -> Task:
        """
        Block until ``task`` is terminal or the timeout elapses.

        Defaults to :attr:`task_polling_wait_time_ms` and
        :attr:`task_polling_timeout_ms`. A timeout returns the last snapshot.
        """
        poller = TaskPoller(self._fetch_task)
        return poller.wait_for_completion(
            task,
            task_polling_wait_time_ms if task_polling_wait_time_ms is not None else self.task_polling_wait_time_ms,
            task_polling_timeout_ms if task_polling_timeout_ms is not None else self.task_polling_timeout_ms,
        )

    # ---------------- networks ----------------

    def get_private_networks(self, virtual_data_center_id: int) -> VlanNetworks:
        uri_suffix = uri_suffixes.PRIVATE_NETWORKS_BY_VIRTUALDATACENTER_ID.format(virtual_data_center_id)
        return self.invoke_as(VlanNetworks, uri_suffix, headers=_accept(media_types.VND_ABIQUO_VLANS))

    def get_private_network(self, virtual_data_center_id: int, network_id: int) -> VlanNetwork:
        uri_suffix = uri_suffixes.PRIVATE_NETWORK_BY_VIRTUALDATACENTER_ID_AND_PRIVATE_NETWORK_ID.format(
            virtual_data_center_id, network_id
        )
        return self.invoke_as(VlanNetwork, uri_suffix, headers=_accept(media_types.VND_ABIQUO_VLAN))

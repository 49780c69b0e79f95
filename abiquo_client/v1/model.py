"""
abiquo_client.v1.model - Pydantic DTOs of the Abiquo v1 API
============================================================

All DTOs map the API's camelCase JSON keys onto snake_case attributes
(``taskId`` -> ``task_id``) and keep unknown keys, so a decoded resource can
be sent back unchanged (see ``AbiquoClient.switch_enterprise``).

``MEDIA_TYPE`` ties each DTO to the media type of its representation and
``MODEL_REGISTRY`` resolves the DTO class from a link's ``type``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from abiquo_client.core.errors import PreconditionViolation
from abiquo_client.v1 import media_types

T = TypeVar("T")


class AbiquoDto(BaseModel):
    """Base of every v1 DTO."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    MEDIA_TYPE: ClassVar[Optional[str]] = None


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskState(str, Enum):
    FINISHED_SUCCESSFULLY = "FINISHED_SUCCESSFULLY"
    FINISHED_UNSUCCESSFULLY = "FINISHED_UNSUCCESSFULLY"
    QUEUEING = "QUEUEING"
    PENDING = "PENDING"
    STARTED = "STARTED"
    ABORTED = "ABORTED"
    CANCELLED = "CANCELLED"
    ACK_ERROR = "ACK_ERROR"

    @property
    def is_terminal(self) -> bool:
        """True for every state after which the task never changes again."""
        return self in TERMINAL_TASK_STATES


TERMINAL_TASK_STATES = frozenset({
    TaskState.FINISHED_SUCCESSFULLY,
    TaskState.FINISHED_UNSUCCESSFULLY,
    TaskState.ABORTED,
    TaskState.CANCELLED,
    TaskState.ACK_ERROR,
})


class TaskType(str, Enum):
    DEPLOY = "DEPLOY"
    UNDEPLOY = "UNDEPLOY"
    RECONFIGURE = "RECONFIGURE"
    POWER_ON = "POWER_ON"
    POWER_OFF = "POWER_OFF"
    PAUSE = "PAUSE"
    RESUME = "RESUME"
    RESET = "RESET"
    SHUTDOWN = "SHUTDOWN"
    SNAPSHOT = "SNAPSHOT"
    REFRESH = "REFRESH"
    INSTANCE = "INSTANCE"
    HIGH_AVAILABILITY = "HIGH_AVAILABILITY"


class JobState(str, Enum):
    PENDING = "PENDING"
    STARTED = "STARTED"
    DONE = "DONE"
    FAILED = "FAILED"
    ROLLBACK_DONE = "ROLLBACK_DONE"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    CANCELLED = "CANCELLED"


class VirtualMachineStateEnum(str, Enum):
    NOT_ALLOCATED = "NOT_ALLOCATED"
    ALLOCATED = "ALLOCATED"
    CONFIGURED = "CONFIGURED"
    ON = "ON"
    PAUSED = "PAUSED"
    OFF = "OFF"
    LOCKED = "LOCKED"
    UNKNOWN = "UNKNOWN"


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

class Link(AbiquoDto):
    """A typed hyperlink to a related resource."""

    rel: str
    href: str
    title: Optional[str] = None
    media_type: Optional[str] = Field(default=None, alias="type")
    hreflang: Optional[str] = None
    disk_controller: Optional[str] = None
    disk_controller_type: Optional[str] = None
    disk_label: Optional[str] = None
    length: Optional[str] = None


class LinkBaseDto(AbiquoDto):
    """DTO carrying a ``links`` list."""

    links: List[Link] = Field(default_factory=list)

    def get_link_by_rel(self, rel: str) -> Optional[Link]:
        """Return the first link with exactly this ``rel``, or None."""
        if not rel or not rel.strip():
            raise PreconditionViolation("rel must not be empty")
        return next((l for l in self.links if l.rel == rel), None)

    def get_links_by_type(self, media_type: str) -> List[Link]:
        """Return every link with exactly this media type, in order."""
        if not media_type or not media_type.strip():
            raise PreconditionViolation("media_type must not be empty")
        return [l for l in self.links if l.media_type == media_type]

    def require_link(self, rel: str) -> Link:
        """Like :meth:`get_link_by_rel` but raise if no link matches."""
        link = self.get_link_by_rel(rel)
        if link is None:
            raise PreconditionViolation(f"{type(self).__name__} has no link with rel {rel!r}")
        return link


class CollectionDto(LinkBaseDto, Generic[T]):
    """Paged collection wrapper: ``{"links": [...], "collection": [...], "totalSize": n}``."""

    collection: List[T] = Field(default_factory=list)
    total_size: Optional[int] = None


# ---------------------------------------------------------------------------
# Enterprises and users
# ---------------------------------------------------------------------------

class Enterprise(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_ENTERPRISE

    id: Optional[int] = None
    name: str
    is_reservation_restricted: Optional[bool] = None
    workflow: Optional[bool] = None
    two_factor_authentication_mandatory: Optional[bool] = None
    repository_soft_in_mb: Optional[int] = None
    repository_hard_in_mb: Optional[int] = None
    theme: Optional[str] = None


class Enterprises(CollectionDto[Enterprise]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_ENTERPRISES


class User(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_USER

    id: Optional[int] = None
    nick: str
    name: str
    surname: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    locale: Optional[str] = None
    active: bool = True
    auth_type: Optional[str] = None
    locked: Optional[bool] = None
    first_login: Optional[bool] = None
    available_virtual_datacenters: Optional[str] = None
    public_ssh_key: Optional[str] = None


class Users(CollectionDto[User]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_USERS


# ---------------------------------------------------------------------------
# Cloud resources
# ---------------------------------------------------------------------------

class VirtualDataCenter(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALDATACENTER

    id: Optional[int] = None
    name: str
    hypervisor_type: Optional[str] = None
    vlan: Optional[Dict[str, Any]] = None


class VirtualDataCenters(CollectionDto[VirtualDataCenter]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALDATACENTERS


class VirtualAppliance(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALAPPLIANCE

    id: Optional[int] = None
    name: str
    state: Optional[str] = None
    error: Optional[int] = None
    high_disponibility: Optional[int] = None
    public_app: Optional[int] = None
    nodecollector: Optional[str] = None


class VirtualAppliances(CollectionDto[VirtualAppliance]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALAPPLIANCES


class VirtualMachine(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALMACHINE

    id: Optional[int] = None
    name: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    uuid: Optional[str] = None
    cpu: Optional[int] = None
    cores_per_socket: Optional[int] = None
    ram: Optional[int] = None
    high_disponibility: Optional[int] = None
    state: Optional[VirtualMachineStateEnum] = None
    id_state: Optional[int] = None
    id_type: Optional[int] = None
    keymap: Optional[str] = None
    password: Optional[str] = None
    vdrp_ip: Optional[str] = Field(default=None, alias="vdrpIP")
    vdrp_port: Optional[int] = None
    vdrp_enabled: Optional[bool] = None
    monitored: Optional[bool] = None
    protected: Optional[bool] = None
    protected_cause: Optional[str] = None
    variables: Optional[Dict[str, str]] = None
    metadata: Optional[Dict[str, Any]] = None


class VirtualMachines(CollectionDto[VirtualMachine]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALMACHINES


class VirtualMachineState(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VIRTUALMACHINESTATE

    state: VirtualMachineStateEnum


class VlanNetwork(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VLAN

    id: Optional[int] = None
    name: str
    address: Optional[str] = None
    gateway: Optional[str] = None
    mask: Optional[int] = None
    tag: Optional[int] = None
    type: Optional[str] = None
    primary_dns: Optional[str] = None
    secondary_dns: Optional[str] = None
    sufix_dns: Optional[str] = None
    default_network: Optional[bool] = None
    unmanaged: Optional[bool] = None
    ipv6: Optional[bool] = None
    strict: Optional[bool] = None


class VlanNetworks(CollectionDto[VlanNetwork]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_VLANS


# ---------------------------------------------------------------------------
# Asynchronous operations
# ---------------------------------------------------------------------------

class AcceptedRequest(LinkBaseDto):
    """Response of an asynchronous call; its ``status`` link names the task."""

    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_ACCEPTEDREQUEST

    message: Optional[str] = None


class Job(LinkBaseDto):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_JOB

    id: str
    parent_task_id: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    state: Optional[Union[JobState, str]] = None
    rollback_state: Optional[Union[JobState, str]] = None
    timestamp: Optional[int] = None
    creation_timestamp: Optional[int] = None


class Jobs(CollectionDto[Job]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_JOBS


class Task(LinkBaseDto):
    """
    Handle of an asynchronous server-side job.

    A task is never updated in place; polling replaces the whole snapshot.
    """

    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_TASK

    task_id: str
    owner_id: str
    user_id: Optional[str] = None
    type: Union[TaskType, str]
    state: TaskState
    timestamp: int
    creation_timestamp: Optional[int] = None
    jobs: Optional[Jobs] = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


class Tasks(CollectionDto[Task]):
    MEDIA_TYPE: ClassVar[Optional[str]] = media_types.VND_ABIQUO_TASKS


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

MODEL_REGISTRY: Dict[str, Type[AbiquoDto]] = {
    "acceptedrequest": AcceptedRequest,
    "enterprise": Enterprise,
    "enterprises": Enterprises,
    "job": Job,
    "jobs": Jobs,
    "task": Task,
    "tasks": Tasks,
    "virtualmachinetask": Task,
    "user": User,
    "users": Users,
    "virtualappliance": VirtualAppliance,
    "virtualappliances": VirtualAppliances,
    "virtualdatacenter": VirtualDataCenter,
    "virtualdatacenters": VirtualDataCenters,
    "virtualmachine": VirtualMachine,
    "virtualmachines": VirtualMachines,
    "virtualmachinestate": VirtualMachineState,
    "vlan": VlanNetwork,
    "vlans": VlanNetworks,
}


def model_for_media_type(media_type: Optional[str]) -> Optional[Type[AbiquoDto]]:
    """
    Resolve the DTO class of a media type, or None if it is not registered.

    Examples
    --------
    >>> model_for_media_type("application/vnd.abiquo.virtualdatacenter+json").__name__
    'VirtualDataCenter'
    """
    name = media_types.resource_name_from_media_type(media_type)
    if name is None:
        return None
    return MODEL_REGISTRY.get(name)

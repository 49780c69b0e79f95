"""
abiquo_client.api.models - Pydantic models for API responses
=============================================================
"""

from typing import List, Optional
import logging

from pydantic import BaseModel, Field

from abiquo_client.core.errors import PreconditionViolation
from abiquo_client.v1.model import Task, VirtualDataCenter, VirtualMachine
from abiquo_client.v1.virtual_machine import extract_ids
from abiquo_client.v1 import relations

logger = logging.getLogger("abiquo_client.api")


class MachineSummary(BaseModel):
    """A virtual machine with the ids needed to address it."""

    id: Optional[int] = Field(default=None, description="Virtual machine id")
    name: Optional[str] = Field(default=None, description="Internal name, e.g. ABQ_...")
    label: Optional[str] = Field(default=None, description="Display name")
    state: Optional[str] = Field(default=None, description="Power state, e.g. ON")
    cpu: Optional[int] = None
    ram: Optional[int] = Field(default=None, description="RAM in MB")
    uuid: Optional[str] = None
    virtual_data_center_id: Optional[int] = None
    virtual_appliance_id: Optional[int] = None

    @classmethod
    def from_dto(cls, vm: VirtualMachine) -> "MachineSummary":
        vdc_id = vapp_id = None
        edit = vm.get_link_by_rel(relations.EDIT)
        if edit is not None:
            try:
                vdc_id, vapp_id, _ = extract_ids(edit)
            except PreconditionViolation as e:
                logger.debug("No ids for virtual machine %s: %s", vm.id, e)
        return cls(
            id=vm.id,
            name=vm.name,
            label=vm.label,
            state=vm.state.value if vm.state else None,
            cpu=vm.cpu,
            ram=vm.ram,
            uuid=vm.uuid,
            virtual_data_center_id=vdc_id,
            virtual_appliance_id=vapp_id,
        )


class MachineListResponse(BaseModel):
    count: int
    items: List[MachineSummary]


class VirtualDataCenterSummary(BaseModel):
    id: Optional[int] = None
    name: str
    hypervisor_type: Optional[str] = None

    @classmethod
    def from_dto(cls, vdc: VirtualDataCenter) -> "VirtualDataCenterSummary":
        return cls(id=vdc.id, name=vdc.name, hypervisor_type=vdc.hypervisor_type)


class VirtualDataCenterListResponse(BaseModel):
    count: int
    items: List[VirtualDataCenterSummary]


class TaskResponse(BaseModel):
    """Snapshot of an asynchronous task."""

    task_id: str
    owner_id: str
    type: str
    state: str
    is_terminal: bool = Field(description="True if the task will not change any more")
    timestamp: int

    @classmethod
    def from_dto(cls, task: Task) -> "TaskResponse":
        return cls(
            task_id=task.task_id,
            owner_id=task.owner_id,
            type=getattr(task.type, "value", task.type),
            state=task.state.value,
            is_terminal=task.is_terminal,
            timestamp=task.timestamp,
        )

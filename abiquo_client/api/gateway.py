"""
abiquo_client.api.gateway - FastAPI Abiquo Gateway
===================================================

Optional REST API gateway exposing machine, virtual datacenter and task
operations of an Abiquo installation.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from abiquo_client import __version__
from abiquo_client.core.connection import ConnectionContext
from abiquo_client.core.errors import PreconditionViolation, TransportError
from abiquo_client.v1.model import VirtualMachine
from abiquo_client.api.models import (
    MachineListResponse,
    MachineSummary,
    TaskResponse,
    VirtualDataCenterListResponse,
    VirtualDataCenterSummary,
)

logger = logging.getLogger("abiquo_client.api")


class AbiquoGateway:
    """
    Configuration and client factory for the API gateway.

    Reads configuration from environment variables by default.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        auth_type: Optional[str] = None,
        tenant_id: Optional[int] = None,
        verify_tls: Optional[bool] = None,
        api_key: Optional[str] = None,
    ):
        self.uri = (uri or os.environ.get("ABIQUO_URI", "")).rstrip("/")
        self.user = user or os.environ.get("ABIQUO_USER", "")
        self.password = password or os.environ.get("ABIQUO_PASS", "")
        self.oauth2_token = oauth2_token or os.environ.get("ABIQUO_OAUTH2_TOKEN", "")
        self.auth_type = auth_type or os.environ.get("ABIQUO_AUTH_TYPE")
        self.tenant_id = tenant_id

        if verify_tls is not None:
            self.verify_tls = verify_tls
        else:
            self.verify_tls = os.environ.get("ABIQUO_VERIFY_TLS", "true").lower() != "false"

        self.api_key = api_key or os.environ.get("ABIQUO_API_KEY", "")

    def validate(self) -> None:
        """Validate configuration. Raises RuntimeError if invalid."""
        if not self.uri:
            raise RuntimeError("Missing ABIQUO_URI environment variable")
        if not self.oauth2_token and not (self.user and self.password):
            raise RuntimeError("Missing ABIQUO_USER/ABIQUO_PASS or ABIQUO_OAUTH2_TOKEN")
        if not self.api_key:
            raise RuntimeError("Missing ABIQUO_API_KEY - required for security")

    def build_connection(self) -> ConnectionContext:
        return ConnectionContext(
            uri=self.uri,
            user=self.user or None,
            password=self.password or None,
            oauth2_token=self.oauth2_token or None,
            auth_type=self.auth_type,
            tenant_id=self.tenant_id,
            verify=self.verify_tls,
        )

    def build_client(self):
        """Create a logged-in client; close it (or use ``with``) when done."""
        return self.build_connection().enter()


# Global gateway instance (lazy init)
_gateway: Optional[AbiquoGateway] = None


def get_gateway() -> AbiquoGateway:
    """Get or create the global gateway instance."""
    global _gateway
    if _gateway is None:
        _gateway = AbiquoGateway()
    return _gateway


def _upstream_error(e: TransportError) -> HTTPException:
    if e.status == 404:
        return HTTPException(status_code=404, detail={"url": e.url, "error": str(e)})
    return HTTPException(
        status_code=502,
        detail={"upstream_status": e.status, "url": e.url, "error": str(e)},
    )


def _machines(vms: List[VirtualMachine]) -> MachineListResponse:
    items = [MachineSummary.from_dto(vm) for vm in vms]
    return MachineListResponse(count=len(items), items=items)


def create_app(
    gateway: Optional[AbiquoGateway] = None,
    validate_on_startup: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Parameters
    ----------
    gateway : AbiquoGateway, optional
        Custom gateway configuration. If None, reads from environment.
    validate_on_startup : bool
        If True, validate configuration on startup.

    Returns
    -------
    FastAPI
        Configured FastAPI application
    """
    global _gateway

    if gateway:
        _gateway = gateway
    else:
        _gateway = AbiquoGateway()

    if validate_on_startup:
        try:
            _gateway.validate()
        except RuntimeError as e:
            # Allow app creation without validation for testing
            logger.warning("Gateway configuration incomplete: %s", e)

    app = FastAPI(
        title="Abiquo Gateway",
        description="""
## Abiquo Cloud API Gateway

A REST API gateway for an Abiquo installation.

### Resources
- **Machines**: list, search by name, get by id, deploy
- **Virtual datacenters**: list, search by name, get by id
- **Tasks**: poll asynchronous operations

### Authentication
Include your API key in the `x-api-key` header.
        """,
        version=__version__,
        openapi_tags=[
            {"name": "Machines", "description": "Virtual machine operations"},
            {"name": "Virtual Datacenters", "description": "Virtual datacenter lookup"},
            {"name": "Tasks", "description": "Asynchronous task status"},
        ],
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Dependencies
    # -------------------------------------------------------------------------

    def require_api_key(x_api_key: str = Header(...)) -> None:
        gw = get_gateway()
        if gw.api_key and x_api_key != gw.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    def open_client():
        try:
            client = get_gateway().build_client()
        except (RuntimeError, ValueError) as e:
            raise HTTPException(status_code=502, detail={"error": str(e)})
        except TransportError as e:
            raise _upstream_error(e)
        try:
            yield client
        finally:
            client.close()

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Health check endpoint."""
        return {"ok": True, "version": __version__}

    @app.get("/machines", response_model=MachineListResponse, tags=["Machines"])
    def list_machines(
        vdc: Optional[int] = Query(default=None, description="Virtual datacenter id", examples=[1]),
        vapp: Optional[int] = Query(default=None, description="Virtual appliance id", examples=[2]),
        name: Optional[str] = Query(default=None, description="Machine name (case-insensitive)"),
        _: None = Depends(require_api_key),
        client=Depends(open_client),
    ) -> MachineListResponse:
        """List machines, optionally scoped to a virtual datacenter/appliance or filtered by name."""
        if vapp is not None and vdc is None:
            raise HTTPException(status_code=400, detail="vapp requires vdc")
        try:
            if name is not None:
                vms = [
                    vm for vm in client.get_all_virtual_machines().collection
                    if vm.name and vm.name.lower() == name.lower()
                ]
                if not vms:
                    raise HTTPException(status_code=404, detail=f"Machine {name!r} not found")
                return _machines(vms)

            if vdc is None:
                return _machines(client.get_all_virtual_machines().collection)

            if vapp is not None:
                vapp_ids = [vapp]
            else:
                vapp_ids = [a.id for a in client.get_virtual_appliances(vdc).collection]
            vms = []
            for vapp_id in vapp_ids:
                vms.extend(client.get_virtual_machines(vdc, vapp_id).collection)
            return _machines(vms)
        except TransportError as e:
            raise _upstream_error(e)

    @app.get("/machines/{machine_id}", response_model=MachineSummary, tags=["Machines"])
    def get_machine(
        machine_id: int,
        vdc: Optional[int] = Query(default=None, description="Virtual datacenter id"),
        vapp: Optional[int] = Query(default=None, description="Virtual appliance id"),
        _: None = Depends(require_api_key),
        client=Depends(open_client),
    ) -> MachineSummary:
        """Get a machine by id; without vdc/vapp all machines are searched."""
        if (vdc is None) != (vapp is None):
            raise HTTPException(status_code=400, detail="vdc and vapp must be given together")
        try:
            if vdc is not None:
                return MachineSummary.from_dto(client.get_virtual_machine(vdc, vapp, machine_id))
            vm = next(
                (vm for vm in client.get_all_virtual_machines().collection if vm.id == machine_id),
                None,
            )
        except TransportError as e:
            raise _upstream_error(e)
        if vm is None:
            raise HTTPException(status_code=404, detail=f"Machine {machine_id} not found")
        return MachineSummary.from_dto(vm)

    @app.post(
        "/machines/{vdc}/{vapp}/{vm}/deploy",
        response_model=TaskResponse,
        tags=["Machines"],
        summary="Deploy a machine",
    )
    def deploy_machine(
        vdc: int,
        vapp: int,
        vm: int,
        force: bool = Query(default=False, description="Deploy despite soft limits"),
        wait: bool = Query(default=False, description="Block until the deploy task ends"),
        _: None = Depends(require_api_key),
        client=Depends(open_client),
    ) -> TaskResponse:
        try:
            task = client.deploy_virtual_machine(vdc, vapp, vm, force=force, wait_for_completion=wait)
        except TransportError as e:
            raise _upstream_error(e)
        except PreconditionViolation as e:
            raise HTTPException(status_code=502, detail={"error": str(e)})
        return TaskResponse.from_dto(task)

    @app.get("/tasks/{vdc}/{vapp}/{vm}/{task_id}", response_model=TaskResponse, tags=["Tasks"])
    def get_task(
        vdc: int,
        vapp: int,
        vm: int,
        task_id: str,
        _: None = Depends(require_api_key),
        client=Depends(open_client),
    ) -> TaskResponse:
        try:
            return TaskResponse.from_dto(client.get_task_of_virtual_machine(vdc, vapp, vm, task_id))
        except TransportError as e:
            raise _upstream_error(e)

    @app.get("/virtualdatacenters", response_model=VirtualDataCenterListResponse, tags=["Virtual Datacenters"])
    def list_virtual_data_centers(
        name: Optional[str] = Query(default=None, description="Name (case-insensitive)"),
        _: None = Depends(require_api_key),
        client=Depends(open_client),
    ) -> VirtualDataCenterListResponse:
        try:
            vdcs = client.get_virtual_data_centers().collection
        except TransportError as e:
            raise _upstream_error(e)
        if name is not None:
            vdcs = [v for v in vdcs if v.name.lower() == name.lower()]
            if not vdcs:
                raise HTTPException(status_code=404, detail=f"Virtual datacenter {name!r} not found")
        items = [VirtualDataCenterSummary.from_dto(v) for v in vdcs]
        return VirtualDataCenterListResponse(count=len(items), items=items)

    @app.get(
        "/virtualdatacenters/{vdc_id}",
        response_model=VirtualDataCenterSummary,
        tags=["Virtual Datacenters"],
    )
    def get_virtual_data_center(
        vdc_id: int,
        _: None = Depends(require_api_key),
        client=Depends(open_client),
    ) -> VirtualDataCenterSummary:
        try:
            return VirtualDataCenterSummary.from_dto(client.get_virtual_data_center(vdc_id))
        except TransportError as e:
            raise _upstream_error(e)

    return app

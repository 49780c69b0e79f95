"""
Abiquo Python Client (abiquo_client)
====================================

A typed client for the Abiquo cloud-management REST API: enterprises,
users, virtual datacenters, virtual appliances, virtual machines, private
networks and asynchronous tasks.

Usage
-----
>>> from abiquo_client import ConnectionContext
>>>
>>> with ConnectionContext() as conn:       # reads ABIQUO_* env vars
...     client = conn.enter()
...     vdcs = client.get_virtual_data_centers()
...     task = client.deploy_virtual_machine(1, 2, 3, wait_for_completion=True)

Subpackages
-----------
- abiquo_client.core: Credentials, configuration, HTTP executor and session state
- abiquo_client.general: URI helpers, filter/header builders and decoding
- abiquo_client.v1: Abiquo API v1 client, DTOs and task polling
- abiquo_client.api: Optional FastAPI REST gateway

"""

__version__ = "0.1.0"

# Core exports - available at package root
from abiquo_client.core.auth import (
    AuthenticationInformation,
    BasicAuthentication,
    BearerAuthentication,
)
from abiquo_client.core.config import ClientConfig
from abiquo_client.core.errors import (
    AbiquoClientError,
    DecodeError,
    NotFoundError,
    PreconditionViolation,
    TransportError,
)
from abiquo_client.core.connection import ConnectionContext, load_env_file

from abiquo_client.client import BaseAbiquoClient
from abiquo_client.factory import get_by_version
from abiquo_client.v1.client import AbiquoClient

__all__ = [
    # Version
    "__version__",
    # Core
    "AuthenticationInformation",
    "BasicAuthentication",
    "BearerAuthentication",
    "ClientConfig",
    "ConnectionContext",
    "load_env_file",
    # Errors
    "AbiquoClientError",
    "DecodeError",
    "NotFoundError",
    "PreconditionViolation",
    "TransportError",
    # Clients
    "BaseAbiquoClient",
    "AbiquoClient",
    "get_by_version",
]

"""
abiquo_client.core - Core connectivity and authentication
==========================================================

This module provides the foundational classes for talking to Abiquo:

- BasicAuthentication / BearerAuthentication: credentials
- ClientConfig: transport and task polling configuration
- RequestExecutor: single HTTP round trip without retries or cookie jar
- SessionManager: session token handling under one lock
- ConnectionContext: high-level connection manager

"""

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
from abiquo_client.core.executor import RequestExecutor
from abiquo_client.core.connection import ConnectionContext, load_env_file
from abiquo_client.core.session import SessionManager

__all__ = [
    "AuthenticationInformation",
    "BasicAuthentication",
    "BearerAuthentication",
    "ClientConfig",
    "AbiquoClientError",
    "DecodeError",
    "NotFoundError",
    "PreconditionViolation",
    "TransportError",
    "RequestExecutor",
    "SessionManager",
    "ConnectionContext",
    "load_env_file",
]

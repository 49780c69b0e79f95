"""
abiquo_client.core.connection - High-level connection management
==================================================================

Resolves connection settings from arguments, the environment or a ``.env``
file and hands out a logged-in client.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from abiquo_client.core.auth import (
    AuthenticationInformation,
    BasicAuthentication,
    BearerAuthentication,
)
from abiquo_client.core.config import (
    DEFAULT_TASK_POLLING_TIMEOUT_MILLISECONDS,
    DEFAULT_TASK_POLLING_WAIT_TIME_MILLISECONDS,
    ClientConfig,
)

logger = logging.getLogger("abiquo_client.connection")

AUTH_TYPE_PLAIN = "plain"
AUTH_TYPE_OAUTH2 = "oauth2"


def load_env_file(path: Optional[str] = None, override: bool = False) -> bool:
    """
    Load ``ABIQUO_*`` settings from a ``.env`` file into the environment.

    Parameters
    ----------
    path : str, optional
        File to load; when omitted, the nearest ``.env`` found walking up
        from the current working directory
    override : bool
        Replace variables that are already set

    Returns
    -------
    bool
        True if at least one variable was set
    """
    if path is None:
        path = find_dotenv(usecwd=True)
        if not path:
            logger.debug("No .env file found from %s", os.getcwd())
            return False
    loaded = load_dotenv(dotenv_path=path, override=override)
    logger.debug("Loaded environment from %s: %s", path, loaded)
    return loaded


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class ConnectionContext:
    """
    High-level connection manager for an Abiquo installation.

    Supports environment variable configuration and context manager usage.

    Parameters
    ----------
    uri : str, optional
        API base URI. Falls back to ABIQUO_URI env var.
    user : str, optional
        Username for basic auth. Falls back to ABIQUO_USER env var.
    password : str, optional
        Password for basic auth. Falls back to ABIQUO_PASS env var.
    oauth2_token : str, optional
        Bearer token. Falls back to ABIQUO_OAUTH2_TOKEN env var.
    auth_type : str, optional
        "plain" or "oauth2". Falls back to ABIQUO_AUTH_TYPE, then to
        "oauth2" if only a token is available, else "plain".
    api_version : str, optional
        Client version. Falls back to ABIQUO_API_VERSION env var, then "v1".
    tenant_id : int, optional
        Enterprise to switch to after login. Falls back to ABIQUO_TENANT_ID.
    verify : bool, optional
        TLS verification. Falls back to ABIQUO_VERIFY_TLS env var.
    timeout : float, optional
        Request timeout in seconds. Falls back to ABIQUO_TIMEOUT env var.

    Examples
    --------
    >>> with ConnectionContext() as conn:   # reads ABIQUO_* env vars
    ...     client = conn.enter()
    ...     vdcs = client.get_virtual_data_centers()
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        auth_type: Optional[str] = None,
        api_version: Optional[str] = None,
        tenant_id: Optional[int] = None,
        verify: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._uri = (uri or os.environ.get("ABIQUO_URI", "")).rstrip("/")
        self._user = user or os.environ.get("ABIQUO_USER", "")
        self._password = password or os.environ.get("ABIQUO_PASS", "")
        self._oauth2_token = oauth2_token or os.environ.get("ABIQUO_OAUTH2_TOKEN", "")
        self._api_version = api_version or os.environ.get("ABIQUO_API_VERSION", "v1")

        if tenant_id is not None:
            self._tenant_id: Optional[int] = tenant_id
        else:
            raw_tenant = os.environ.get("ABIQUO_TENANT_ID", "").strip()
            self._tenant_id = int(raw_tenant) if raw_tenant else None

        if verify is not None:
            self._verify = verify
        else:
            self._verify = os.environ.get("ABIQUO_VERIFY_TLS", "true").lower() != "false"

        if timeout is not None:
            self._timeout = float(timeout)
        else:
            self._timeout = float(os.environ.get("ABIQUO_TIMEOUT", "60"))

        resolved_auth_type = auth_type or os.environ.get("ABIQUO_AUTH_TYPE")
        if not resolved_auth_type:
            has_basic = self._user and self._password
            resolved_auth_type = AUTH_TYPE_OAUTH2 if self._oauth2_token and not has_basic else AUTH_TYPE_PLAIN
        self._auth_type = resolved_auth_type.strip().lower()

        # Validate configuration
        if not self._uri:
            raise ValueError(
                "Missing uri. Set ABIQUO_URI environment variable "
                "or pass uri parameter."
            )
        if self._auth_type not in (AUTH_TYPE_PLAIN, AUTH_TYPE_OAUTH2):
            raise ValueError(f"Invalid auth_type {self._auth_type!r}, expected 'plain' or 'oauth2'")
        if self._auth_type == AUTH_TYPE_PLAIN and not (self._user and self._password):
            raise ValueError(
                "Missing credentials. Set ABIQUO_USER/ABIQUO_PASS environment "
                "variables or pass user/password parameters."
            )
        if self._auth_type == AUTH_TYPE_OAUTH2 and not self._oauth2_token:
            raise ValueError(
                "Missing token. Set ABIQUO_OAUTH2_TOKEN environment variable "
                "or pass oauth2_token parameter."
            )

        self._cfg = ClientConfig(
            timeout=self._timeout,
            verify=self._verify,
            task_polling_wait_time_ms=_env_int(
                "ABIQUO_TASK_POLL_MS", DEFAULT_TASK_POLLING_WAIT_TIME_MILLISECONDS
            ),
            task_polling_timeout_ms=_env_int(
                "ABIQUO_TASK_TIMEOUT_MS", DEFAULT_TASK_POLLING_TIMEOUT_MILLISECONDS
            ),
        )
        self._client = None

    @property
    def uri(self) -> str:
        """The configured API base URI."""
        return self._uri

    @property
    def auth_type(self) -> str:
        return self._auth_type

    @property
    def tenant_id(self) -> Optional[int]:
        return self._tenant_id

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    @property
    def client(self):
        """The client handed out by :meth:`enter`, or None."""
        return self._client

    def authentication_information(self) -> AuthenticationInformation:
        if self._auth_type == AUTH_TYPE_OAUTH2:
            return BearerAuthentication(self._oauth2_token)
        return BasicAuthentication(self._user, self._password)

    def enter(self):
        """
        Create a client, log in and switch to the configured tenant.

        Returns
        -------
        AbiquoClient
            A logged-in client

        Raises
        ------
        ValueError
            If no client implements the configured API version
        RuntimeError
            If the login is rejected
        """
        # Import here to avoid circular imports
        from abiquo_client.factory import get_by_version

        if self._client is not None:
            return self._client

        client = get_by_version(self._api_version, cfg=self._cfg)
        if client is None:
            raise ValueError(f"Unsupported API version {self._api_version!r}")

        logger.debug("Entering %s as %s", self._uri, self._auth_type)
        if not client.login(self._uri, self.authentication_information()):
            client.close()
            raise RuntimeError(f"Login to {self._uri} failed")
        logger.info("Entered %s", self._uri)

        if self._tenant_id is not None:
            try:
                client.switch_enterprise(self._tenant_id)
            except Exception:
                client.close()
                raise

        self._client = client
        return client

    def close(self) -> None:
        """Log out and close the client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ConnectionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

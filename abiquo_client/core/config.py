"""
abiquo_client.core.config - Client configuration
=================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

DEFAULT_TASK_POLLING_WAIT_TIME_MILLISECONDS = 5 * 1000
DEFAULT_TASK_POLLING_TIMEOUT_MILLISECONDS = 30 * 1000


@dataclass
class ClientConfig:
    """
    Transport and polling configuration for an Abiquo client.

    Parameters
    ----------
    timeout : float
        Request timeout in seconds (default: 60.0)
    verify : bool or str
        SSL verification (True, False, or path to CA bundle)
    user_agent : str
        User-Agent header value
    task_polling_wait_time_ms : int
        Wait between two task status checks (default: 5000)
    task_polling_timeout_ms : int
        Time after which waiting for a task gives up (default: 30000)
    pool_connections : int
        Number of connection pools kept by the transport
    pool_maxsize : int
        Maximum connections per pool

    Examples
    --------
    >>> cfg = ClientConfig(timeout=30.0, verify=False)
    """
    timeout: float = 60.0
    verify: Union[bool, str] = True
    user_agent: str = "abiquo-client/0.1"
    task_polling_wait_time_ms: int = DEFAULT_TASK_POLLING_WAIT_TIME_MILLISECONDS
    task_polling_timeout_ms: int = DEFAULT_TASK_POLLING_TIMEOUT_MILLISECONDS
    pool_connections: int = 10
    pool_maxsize: int = 10

    def __post_init__(self) -> None:
        if self.task_polling_wait_time_ms <= 0:
            raise ValueError("task_polling_wait_time_ms must be positive")
        if self.task_polling_timeout_ms <= 0:
            raise ValueError("task_polling_timeout_ms must be positive")

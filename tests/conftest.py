"""
Pytest configuration and shared fixtures.
"""

import json

import pytest
from typing import Any, Dict, List, Tuple
from urllib3 import HTTPHeaderDict

from abiquo_client.core.auth import BasicAuthentication
from abiquo_client.core.errors import TransportError
from abiquo_client.v1.client import AbiquoClient

BASE_URI = "https://abiquo.example.com/api"

AUTH_COOKIE = "auth=ABC123; Expires=Thu, 01 Jan 2099 00:00:00 GMT; Path=/; Secure; HttpOnly"
SESSION_COOKIE = "ABQSESSIONID=9F8E7D6C; Path=/; HttpOnly"


def set_cookie_headers(*values: str) -> HTTPHeaderDict:
    """Response headers carrying one Set-Cookie line per value."""
    headers = HTTPHeaderDict({"Content-Type": "application/json"})
    for value in values:
        headers.add("Set-Cookie", value)
    return headers


class FakeExecutor:
    """
    Stand-in for RequestExecutor answering from a route table.

    Each route holds a queue of responses; the last one is repeated.
    Unknown routes answer with a 404 TransportError.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, uri_suffix: str, body: Any = "", headers: Any = None) -> "FakeExecutor":
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if headers is None:
            headers = set_cookie_headers(AUTH_COOKIE)
        self.routes.setdefault((method, BASE_URI + uri_suffix), []).append((body, headers))
        return self

    def fail(self, method: str, uri_suffix: str, status: int = 500, body: str = "boom") -> "FakeExecutor":
        url = BASE_URI + uri_suffix
        self.routes.setdefault((method, url), []).append(TransportError(status, body, url))
        return self

    def execute(self, method, absolute_uri, headers, body=None):
        self.calls.append({"method": method, "uri": absolute_uri, "headers": dict(headers), "body": body})
        queue = self.routes.get((method, absolute_uri))
        if not queue:
            raise TransportError(404, "not found", absolute_uri)
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def link(rel: str, href: str, media_type: str = None) -> Dict[str, Any]:
    data = {"rel": rel, "href": href}
    if media_type:
        data["type"] = media_type
    return data


@pytest.fixture
def fake_executor():
    """Route-table executor with no routes."""
    return FakeExecutor()


@pytest.fixture
def credentials():
    return BasicAuthentication("admin", "xabiquo")


@pytest.fixture
def sample_user():
    """Logged-in user of enterprise 1."""
    return {
        "id": 1,
        "nick": "admin",
        "name": "Cloud",
        "surname": "Administrator",
        "email": "admin@abiquo.example.com",
        "locale": "en_US",
        "active": True,
        "authType": "ABIQUO",
        "availableVirtualDatacenters": "",
        "links": [
            link("edit", BASE_URI + "/admin/enterprises/1/users/1", "application/vnd.abiquo.user+json"),
            link("enterprise", BASE_URI + "/admin/enterprises/1", "application/vnd.abiquo.enterprise+json"),
            link("role", BASE_URI + "/admin/roles/1", "application/vnd.abiquo.role+json"),
        ],
    }


@pytest.fixture
def sample_enterprise():
    return {
        "id": 2,
        "name": "Tenant B",
        "isReservationRestricted": False,
        "workflow": False,
        "links": [
            link("edit", BASE_URI + "/admin/enterprises/2", "application/vnd.abiquo.enterprise+json"),
        ],
    }


@pytest.fixture
def sample_virtual_machine():
    return {
        "id": 3,
        "name": "ABQ_4f1c3e9a",
        "label": "web-01",
        "uuid": "4f1c3e9a-2b7d-4c61-9a0e-8a3f2c1d5e7b",
        "cpu": 2,
        "coresPerSocket": 1,
        "ram": 2048,
        "state": "OFF",
        "vdrpIP": "10.60.1.5",
        "vdrpPort": 5900,
        "monitored": False,
        "backupPolicy": {"name": "daily"},
        "links": [
            link(
                "edit",
                BASE_URI + "/cloud/virtualdatacenters/1/virtualappliances/2/virtualmachines/3",
                "application/vnd.abiquo.virtualmachine+json",
            ),
            link(
                "virtualdatacenter",
                BASE_URI + "/cloud/virtualdatacenters/1",
                "application/vnd.abiquo.virtualdatacenter+json",
            ),
            link("ips", BASE_URI + "/cloud/virtualdatacenters/1/virtualappliances/2/virtualmachines/3/network/nics"),
        ],
    }


@pytest.fixture
def sample_virtual_data_center():
    return {
        "id": 1,
        "name": "Production",
        "hypervisorType": "VMX_04",
        "links": [
            link("edit", BASE_URI + "/cloud/virtualdatacenters/1", "application/vnd.abiquo.virtualdatacenter+json"),
        ],
    }


def make_task(state: str = "STARTED", task_id: str = "5b3c1f0e-task") -> Dict[str, Any]:
    self_href = (
        BASE_URI + "/cloud/virtualdatacenters/1/virtualappliances/2/virtualmachines/3/tasks/" + task_id
    )
    return {
        "taskId": task_id,
        "ownerId": "3",
        "userId": "1",
        "type": "DEPLOY",
        "state": state,
        "timestamp": 1700000000,
        "creationTimestamp": 1699999990,
        "jobs": {"collection": [{"id": task_id + ".1", "type": "CONFIGURE", "state": "STARTED"}]},
        "links": [link("self", self_href, "application/vnd.abiquo.task+json")],
    }


@pytest.fixture
def sample_task():
    return make_task()


@pytest.fixture
def logged_in_client(fake_executor, credentials, sample_user):
    """AbiquoClient logged in as ``admin`` through ``fake_executor``."""
    fake_executor.add("GET", "/login", sample_user, set_cookie_headers(AUTH_COOKIE, SESSION_COOKIE))
    client = AbiquoClient(executor=fake_executor)
    assert client.login(BASE_URI, credentials) is True
    fake_executor.calls.clear()
    return client

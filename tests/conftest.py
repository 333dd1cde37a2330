"""Shared fixtures: a configuration and a recording mock transport."""

import json
from typing import Any, Callable

import httpx
import pytest

from azure_testplan_client.client import TestPlanClient
from azure_testplan_client.config import ClientConfig
from azure_testplan_client.rest import RestClient


class Recorder:
    """Collects requests and answers them with queued responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def queue(self, data: Any = None, status_code: int = 200) -> None:
        if data is None:
            self.responses.append(httpx.Response(status_code=status_code))
        else:
            self.responses.append(httpx.Response(status_code=status_code, json=data))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(status_code=200, json={})
        return self.responses.pop(0)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig(
        organization="My Org",
        project_name="Test Project",
        team="My Team",
        pat="secret-token",
        instance="dev.azure.com",
    )


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture()
def rest(config, recorder) -> RestClient:
    client = RestClient(config, transport=httpx.MockTransport(recorder.handler))
    yield client
    client.close()


@pytest.fixture()
def client(config, rest) -> TestPlanClient:
    return TestPlanClient(config, rest=rest)


@pytest.fixture()
def make_rest(config) -> Callable[[Callable[[httpx.Request], httpx.Response]], RestClient]:
    """Build a RestClient around an arbitrary handler."""

    def _make(handler):
        return RestClient(config, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture()
def make_client(recorder) -> Callable[[ClientConfig], TestPlanClient]:
    """Build a TestPlanClient for another configuration, answered by the recorder."""

    def _make(other_config):
        rest = RestClient(other_config, transport=httpx.MockTransport(recorder.handler))
        return TestPlanClient(other_config, rest=rest)

    return _make

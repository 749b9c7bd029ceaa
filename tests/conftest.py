"""
Shared fixtures: a scripted backend behind ``httpx.MockTransport`` and a
``TestClient`` factory for any connector.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from config.settings import config
from main import create_app

BACKEND_URL = "https://backend.test"
ROUTING_PREFIX = "https://hero/connectors/test/"


@dataclass
class Expectation:
    method: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    status: int = 200
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    delay: float = 0.0

    def matches(self, request: httpx.Request) -> bool:
        if request.method != self.method:
            return False
        # raw_path keeps %2F encoded (GitLab project ids)
        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        if raw_path != self.path:
            return False
        actual = dict(request.url.params)
        return all(actual.get(k) == str(v) for k, v in self.params.items())

    def respond(self, request: httpx.Request) -> httpx.Response:
        if self.body is None:
            return httpx.Response(self.status, headers=self.headers)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status, json=self.body, headers=self.headers)
        return httpx.Response(self.status, text=str(self.body), headers=self.headers)


class MockBackend:
    """Records every backend call and answers from registered expectations."""

    def __init__(self) -> None:
        self.expectations: List[Expectation] = []
        self.calls: List[httpx.Request] = []
        self.completed: List[httpx.Request] = []

    def expect(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        status: int = 200,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
    ) -> Expectation:
        exp = Expectation(
            method=method,
            path=path,
            params={k: str(v) for k, v in (params or {}).items()},
            status=status,
            body=body,
            headers=headers or {},
            delay=delay,
        )
        self.expectations.append(exp)
        return exp

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        for exp in self.expectations:
            if exp.matches(request):
                if exp.delay:
                    await asyncio.sleep(exp.delay)
                self.completed.append(request)
                return exp.respond(request)
        return httpx.Response(418, json={"unexpected": f"{request.method} {request.url}"})

    # ── Inspection helpers ───────────────────────────────────────────────

    def calls_to(self, method: str, path: str) -> List[httpx.Request]:
        return [
            c for c in self.calls
            if c.method == method and c.url.raw_path.decode("ascii").split("?", 1)[0] == path
        ]

    @staticmethod
    def json_body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def make_client(backend: MockBackend) -> Callable[[str], TestClient]:
    def _make(connector_name: str) -> TestClient:
        app = create_app(connector_name, transport=httpx.MockTransport(backend.handler))
        return TestClient(app)

    return _make


@pytest.fixture
def connector_headers() -> Dict[str, str]:
    return {
        "X-Connector-Authorization": "Bearer backend-token",
        "X-Connector-Base-Url": BACKEND_URL,
        "X-Routing-Prefix": ROUTING_PREFIX,
    }


@pytest.fixture(autouse=True)
def _default_settings(monkeypatch):
    """Every test starts with hub auth off and no service credentials."""
    monkeypatch.setattr(config, "hub_auth_secret", "")
    monkeypatch.setattr(config, "coupa_api_key", "")
    monkeypatch.setattr(config, "greenbox_url", "")
    monkeypatch.setattr(config, "default_locale", "en")

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from issuedesk_core.config import IssueDeskConfig
from tools import ToolContext, ToolRegistry


class FakeGitHub:
    """In-memory stand-in for api.github.com.

    REST routes answer from a table keyed by (method, path). GraphQL posts
    are answered in order from a queue. Every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], tuple[int, dict[str, Any]]] = {}
        self._graphql: list[tuple[int, dict[str, Any]] | Exception] = []
        self.fail_with: Exception | None = None

    def on(self, method: str, path: str, status: int = 200, json: Any = None, text: str | None = None) -> None:
        kwargs: dict[str, Any] = {"text": text} if text is not None else {"json": json}
        self._routes[(method, path)] = (status, kwargs)

    def graphql(self, data: Any = None, errors: list | None = None, status: int = 200, text: str | None = None) -> None:
        if text is not None:
            self._graphql.append((status, {"text": text}))
            return
        payload: dict[str, Any] = {"data": data}
        if errors:
            payload["errors"] = errors
        self._graphql.append((status, {"json": payload}))

    def graphql_fail(self, exc: Exception) -> None:
        """Queue a GraphQL request that gets no response."""
        self._graphql.append(exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        if request.url.path == "/graphql":
            if not self._graphql:
                raise AssertionError("unexpected GraphQL request")
            answer = self._graphql.pop(0)
            if isinstance(answer, Exception):
                raise answer
            status, kwargs = answer
            return httpx.Response(status, **kwargs)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        status, kwargs = route
        return httpx.Response(status, **kwargs)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    @property
    def graphql_requests(self) -> list[dict[str, Any]]:
        return [
            json.loads(r.content) for r in self.requests if r.url.path == "/graphql"
        ]


@pytest.fixture(autouse=True)
def github_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("GITHUB_API_URL", "https://api.github.com")
    monkeypatch.delenv("GITHUB_GRAPHQL_URL", raising=False)
    monkeypatch.delenv("COPILOT_LOGIN", raising=False)
    IssueDeskConfig.reset()
    yield
    IssueDeskConfig.reset()
    ToolRegistry.reset()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def ctx(fake_github: FakeGitHub) -> ToolContext:
    return ToolContext(extra={"http_transport": fake_github.transport})

"""GitHub API clients and shared utilities.

This module contains the REST and GraphQL clients, authentication, and the
error helpers shared by all GitHub tool modules. Clients are built per
invocation through get_client()/get_graphql_client() so a request can carry
its own token.

Status handling is left to callers: the REST client returns the raw
httpx.Response and each handler decides which status means success.
Only failures to get any response at all are raised here.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from issuedesk_core.config import get_config
from logging_config import get_logger

from .._base import STATUS, TRANSPORT, ToolContext, ToolResult
from .._params import Pagination
from ._types import IssueNumber, SubIssueRequest

logger = get_logger("github")

API_VERSION = "2022-11-28"
ACCEPT = "application/vnd.github+json"


# =============================================================================
# Exceptions
# =============================================================================


class GitHubError(Exception):
    """Base exception for GitHub API failures."""


class GitHubTransportError(GitHubError):
    """The request never produced a response (DNS, TLS, connect, timeout)."""

    def __init__(self, method: str, url: str, cause: Exception):
        super().__init__(f"{method} {url}: {cause}")
        self.method = method
        self.url = url
        self.cause = cause


class GitHubStatusError(GitHubError):
    """The request completed with a non-success status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"non-success status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class GitHubGraphQLError(GitHubError):
    """A GraphQL response carried an ``errors`` array."""

    def __init__(self, messages: list[str]):
        super().__init__("; ".join(messages) if messages else "unknown GraphQL error")
        self.messages = messages


# =============================================================================
# Result helpers
# =============================================================================


def status_error(message: str, response: httpx.Response) -> ToolResult:
    """Report a non-success status with the raw response body."""
    logger.warning(f"{message}: status {response.status_code}")
    return ToolResult.error(f"{message}: {response.text}", STATUS)


def api_error(message: str, exc: GitHubError) -> ToolResult:
    """Report a raised client error, keeping transport failures distinct."""
    if isinstance(exc, GitHubTransportError):
        logger.warning(f"{message}: {exc}")
        return ToolResult.error(f"{message}: {exc}", TRANSPORT)
    if isinstance(exc, GitHubStatusError):
        return ToolResult.error(f"{message}: {exc.body}", STATUS)
    return ToolResult.error(f"{message}: {exc}", STATUS)


def json_result(data: Any) -> ToolResult:
    return ToolResult.ok(json.dumps(data))


def json_response(message: str, response: httpx.Response) -> ToolResult:
    """Re-serialize a success body; a body that is not JSON is a failure."""
    try:
        data = response.json()
    except ValueError:
        return status_error(message, response)
    return json_result(data)


# =============================================================================
# REST client
# =============================================================================


def _get_headers(token: str) -> dict[str, str]:
    """Get headers for GitHub API requests."""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": ACCEPT,
        "X-GitHub-Api-Version": API_VERSION,
    }


class GitHubClient:
    """REST client exposing the issue and sub-issue endpoints."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=_get_headers(self.token),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_data: dict | None = None,
    ) -> httpx.Response:
        """Make a GitHub API request.

        Args:
            method: HTTP method (GET, POST, PATCH, ...)
            endpoint: API endpoint (e.g., "/repos/{owner}/{repo}/issues")
            params: Query parameters
            json_data: JSON body data

        Returns:
            The response, whatever its status

        Raises:
            GitHubTransportError: If no response was received
        """
        async with self._http() as client:
            try:
                response = await client.request(method, endpoint, params=params, json=json_data)
            except httpx.TransportError as e:
                raise GitHubTransportError(method, endpoint, e) from e
        logger.debug(f"{method} {endpoint} -> {response.status_code}")
        return response

    async def send_raw(
        self,
        method: str,
        endpoint: str,
        content: bytes,
        headers: dict[str, str],
    ) -> httpx.Response:
        """Send a hand-built request body with explicit headers.

        httpx's verb helpers do not accept a body for DELETE, so endpoints
        that need one go through here.
        """
        async with self._http() as client:
            request = client.build_request(method, endpoint, content=content, headers=headers)
            try:
                response = await client.send(request)
            except httpx.TransportError as e:
                raise GitHubTransportError(method, endpoint, e) from e
        logger.debug(f"{method} {endpoint} -> {response.status_code}")
        return response

    # --- Issues ---

    async def get_issue(self, owner: str, repo: str, number: IssueNumber) -> httpx.Response:
        return await self.request("GET", f"/repos/{owner}/{repo}/issues/{number}")

    async def create_issue(self, owner: str, repo: str, data: dict) -> httpx.Response:
        return await self.request("POST", f"/repos/{owner}/{repo}/issues", json_data=data)

    async def edit_issue(
        self, owner: str, repo: str, number: IssueNumber, data: dict
    ) -> httpx.Response:
        return await self.request(
            "PATCH", f"/repos/{owner}/{repo}/issues/{number}", json_data=data
        )

    async def list_issues(self, owner: str, repo: str, params: dict) -> httpx.Response:
        return await self.request("GET", f"/repos/{owner}/{repo}/issues", params=params)

    async def search_issues(self, params: dict) -> httpx.Response:
        return await self.request("GET", "/search/issues", params=params)

    async def create_comment(
        self, owner: str, repo: str, number: IssueNumber, body: str
    ) -> httpx.Response:
        return await self.request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            json_data={"body": body},
        )

    async def list_comments(
        self, owner: str, repo: str, number: IssueNumber, pagination: Pagination
    ) -> httpx.Response:
        return await self.request(
            "GET",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            params=pagination.to_params(),
        )

    # --- Sub-issues ---

    async def add_sub_issue(
        self, owner: str, repo: str, number: IssueNumber, req: SubIssueRequest
    ) -> httpx.Response:
        return await self.request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{number}/sub_issues",
            json_data=req.to_payload(),
        )

    async def list_sub_issues(
        self, owner: str, repo: str, number: IssueNumber, pagination: Pagination
    ) -> httpx.Response:
        return await self.request(
            "GET",
            f"/repos/{owner}/{repo}/issues/{number}/sub_issues",
            params=pagination.to_params(),
        )

    async def reprioritize_sub_issue(
        self, owner: str, repo: str, number: IssueNumber, req: SubIssueRequest
    ) -> httpx.Response:
        return await self.request(
            "PATCH",
            f"/repos/{owner}/{repo}/issues/{number}/sub_issues/priority",
            json_data=req.to_payload(),
        )


# =============================================================================
# GraphQL client
# =============================================================================


class GitHubGraphQLClient:
    """Minimal GraphQL client: one POST per query or mutation."""

    def __init__(
        self,
        token: str,
        url: str = "https://api.github.com/graphql",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def execute(self, document: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL document and return its ``data`` member.

        Raises:
            GitHubTransportError: If no response was received
            GitHubStatusError: On a non-2xx HTTP status
            GitHubGraphQLError: If the payload carries errors
        """
        async with httpx.AsyncClient(
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    self.url, json={"query": document, "variables": variables}
                )
            except httpx.TransportError as e:
                raise GitHubTransportError("POST", self.url, e) from e

        if response.status_code >= 400:
            raise GitHubStatusError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise GitHubStatusError(response.status_code, response.text) from e
        if not isinstance(payload, dict):
            raise GitHubStatusError(response.status_code, response.text)
        errors = payload.get("errors")
        if errors:
            messages = [
                item["message"]
                for item in errors
                if isinstance(item, dict) and isinstance(item.get("message"), str)
            ]
            raise GitHubGraphQLError(messages)
        return payload.get("data") or {}

    async def query(self, document: str, variables: dict[str, Any]) -> dict[str, Any]:
        return await self.execute(document, variables)

    async def mutate(self, document: str, input: dict[str, Any]) -> dict[str, Any]:
        return await self.execute(document, {"input": input})


# =============================================================================
# Per-invocation accessors
# =============================================================================


def is_configured() -> bool:
    """Check if GitHub is configured."""
    return bool(get_config().github_token)


def _token_for(ctx: ToolContext) -> str:
    token = ctx.extra.get("github_token") or get_config().github_token
    if not token:
        raise ValueError("GITHUB_TOKEN not configured")
    return token


def get_client(ctx: ToolContext) -> GitHubClient:
    """Build a REST client for this invocation."""
    config = get_config()
    return GitHubClient(
        token=_token_for(ctx),
        base_url=config.github_api_url,
        timeout=config.github_timeout,
        transport=ctx.extra.get("http_transport"),
    )


def get_graphql_client(ctx: ToolContext) -> GitHubGraphQLClient:
    """Build a GraphQL client for this invocation."""
    config = get_config()
    return GitHubGraphQLClient(
        token=_token_for(ctx),
        url=config.github_graphql_url,
        timeout=config.github_timeout,
        transport=ctx.extra.get("http_transport"),
    )

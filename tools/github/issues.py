"""GitHub issues tools.

Tools for reading, creating, updating and searching issues and their
comments. These forward to the REST API and return its JSON unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .._base import ToolContext, ToolDef, ToolResult
from .._params import (
    ParamError,
    optional_int,
    optional_param,
    optional_string_array,
    pagination_params,
    required_int,
    required_param,
    with_pagination,
)
from ._client import GitHubError, api_error, get_client, json_response, status_error
from ._types import IssueNumber

SEARCH_SORTS = [
    "comments",
    "reactions",
    "reactions-+1",
    "reactions--1",
    "reactions-smile",
    "reactions-thinking_face",
    "reactions-heart",
    "reactions-tada",
    "interactions",
    "created",
    "updated",
]


def parse_iso_timestamp(timestamp: str) -> datetime:
    """Parse ``YYYY-MM-DDThh:mm:ssZ`` (any RFC 3339 offset) or ``YYYY-MM-DD``."""
    if not timestamp:
        raise ValueError("empty timestamp")

    try:
        return datetime.strptime(timestamp, "%Y-%m-%dT%H:%M:%S%z")
    except ValueError:
        pass

    try:
        return datetime.strptime(timestamp, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        pass

    raise ValueError(
        f"invalid ISO 8601 timestamp: {timestamp} "
        "(supported formats: YYYY-MM-DDThh:mm:ssZ or YYYY-MM-DD)"
    )


def _enum(args: dict[str, Any], name: str, allowed: list[str]) -> str:
    value = optional_param(args, name, str, "")
    if value and value not in allowed:
        raise ParamError(f"parameter {name} must be one of: {', '.join(allowed)}")
    return value


# =============================================================================
# Handler Functions
# =============================================================================


async def get_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Get details of a specific issue."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        issue_number = IssueNumber(required_int(args, "issue_number"))
    except ParamError as e:
        return ToolResult.invalid(str(e))

    try:
        response = await get_client(ctx).get_issue(owner, repo, issue_number)
    except GitHubError as e:
        return api_error("failed to get issue", e)

    if response.status_code != 200:
        return status_error("failed to get issue", response)
    return json_response("failed to get issue", response)


async def add_issue_comment(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Add a comment to an issue."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        issue_number = IssueNumber(required_int(args, "issue_number"))
        body = required_param(args, "body", str)
    except ParamError as e:
        return ToolResult.invalid(str(e))

    try:
        response = await get_client(ctx).create_comment(owner, repo, issue_number, body)
    except GitHubError as e:
        return api_error("failed to create comment", e)

    if response.status_code != 201:
        return status_error("failed to create comment", response)
    return json_response("failed to create comment", response)


async def search_issues(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Search issues, scoping the query to is:issue (and a repo if given)."""
    try:
        query = required_param(args, "query", str)
        owner = optional_param(args, "owner", str, "")
        repo = optional_param(args, "repo", str, "")
        sort = _enum(args, "sort", SEARCH_SORTS)
        order = _enum(args, "order", ["asc", "desc"])
        pagination = pagination_params(args)
    except ParamError as e:
        return ToolResult.invalid(str(e))

    if "is:issue" not in query:
        query = f"is:issue {query}"
    if owner and repo:
        query = f"repo:{owner}/{repo} {query}"

    params: dict[str, Any] = {"q": query, **pagination.to_params()}
    if sort:
        params["sort"] = sort
    if order:
        params["order"] = order

    try:
        response = await get_client(ctx).search_issues(params)
    except GitHubError as e:
        return api_error("failed to search issues", e)

    if response.status_code != 200:
        return status_error("failed to search issues", response)
    return json_response("failed to search issues", response)


async def create_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Create a new issue."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        title = required_param(args, "title", str)
        body = optional_param(args, "body", str, "")
        assignees = optional_string_array(args, "assignees")
        labels = optional_string_array(args, "labels")
        milestone = optional_int(args, "milestone")
    except ParamError as e:
        return ToolResult.invalid(str(e))

    data: dict[str, Any] = {"title": title, "body": body, "assignees": assignees, "labels": labels}
    if milestone:
        data["milestone"] = milestone

    try:
        response = await get_client(ctx).create_issue(owner, repo, data)
    except GitHubError as e:
        return api_error("failed to create issue", e)

    if response.status_code != 201:
        return status_error("failed to create issue", response)
    return json_response("failed to create issue", response)


async def list_issues(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """List and filter repository issues."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        state = _enum(args, "state", ["open", "closed", "all"])
        labels = optional_string_array(args, "labels")
        sort = _enum(args, "sort", ["created", "updated", "comments"])
        direction = _enum(args, "direction", ["asc", "desc"])
        since = optional_param(args, "since", str, "")
        pagination = pagination_params(args)
    except ParamError as e:
        return ToolResult.invalid(str(e))

    params: dict[str, Any] = pagination.to_params()
    if state:
        params["state"] = state
    if labels:
        params["labels"] = ",".join(labels)
    if sort:
        params["sort"] = sort
    if direction:
        params["direction"] = direction
    if since:
        try:
            timestamp = parse_iso_timestamp(since)
        except ValueError as e:
            return ToolResult.invalid(f"failed to list issues: {e}")
        params["since"] = timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    try:
        response = await get_client(ctx).list_issues(owner, repo, params)
    except GitHubError as e:
        return api_error("failed to list issues", e)

    if response.status_code != 200:
        return status_error("failed to list issues", response)
    return json_response("failed to list issues", response)


async def update_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Update an existing issue. Only supplied fields are sent."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        issue_number = IssueNumber(required_int(args, "issue_number"))
        title = optional_param(args, "title", str, "")
        body = optional_param(args, "body", str, "")
        state = _enum(args, "state", ["open", "closed"])
        labels = optional_string_array(args, "labels")
        assignees = optional_string_array(args, "assignees")
        milestone = optional_int(args, "milestone")
    except ParamError as e:
        return ToolResult.invalid(str(e))

    data: dict[str, Any] = {}
    if title:
        data["title"] = title
    if body:
        data["body"] = body
    if state:
        data["state"] = state
    if labels:
        data["labels"] = labels
    if assignees:
        data["assignees"] = assignees
    if milestone:
        data["milestone"] = milestone

    try:
        response = await get_client(ctx).edit_issue(owner, repo, issue_number, data)
    except GitHubError as e:
        return api_error("failed to update issue", e)

    if response.status_code != 200:
        return status_error("failed to update issue", response)
    return json_response("failed to update issue", response)


async def get_issue_comments(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """List comments on an issue."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        issue_number = IssueNumber(required_int(args, "issue_number"))
        pagination = pagination_params(args)
    except ParamError as e:
        return ToolResult.invalid(str(e))

    try:
        response = await get_client(ctx).list_comments(owner, repo, issue_number, pagination)
    except GitHubError as e:
        return api_error("failed to get issue comments", e)

    if response.status_code != 200:
        return status_error("failed to get issue comments", response)
    return json_response("failed to get issue comments", response)


# =============================================================================
# Tool Definitions
# =============================================================================

_OWNER = {"type": "string", "description": "Repository owner"}
_REPO = {"type": "string", "description": "Repository name"}
_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

TOOLS = [
    ToolDef(
        name="github_get_issue",
        description="Get details of a specific issue in a GitHub repository.",
        title="Get issue details",
        read_only=True,
        parameters={
            "type": "object",
            "properties": {
                "owner": {"type": "string", "description": "The owner of the repository"},
                "repo": {"type": "string", "description": "The name of the repository"},
                "issue_number": {"type": "integer", "description": "The number of the issue"},
            },
            "required": ["owner", "repo", "issue_number"],
        },
        handler=get_issue,
    ),
    ToolDef(
        name="github_add_issue_comment",
        description="Add a comment to a specific issue in a GitHub repository.",
        title="Add comment to issue",
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "Issue number to comment on"},
                "body": {"type": "string", "description": "Comment content"},
            },
            "required": ["owner", "repo", "issue_number", "body"],
        },
        handler=add_issue_comment,
    ),
    ToolDef(
        name="github_search_issues",
        description="Search for issues in GitHub repositories using issues search syntax already scoped to is:issue",
        title="Search issues",
        read_only=True,
        parameters={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query using GitHub issues search syntax"},
                "owner": {"type": "string", "description": "Optional repository owner. Used with repo to scope the search."},
                "repo": {"type": "string", "description": "Optional repository name. Used with owner to scope the search."},
                "sort": {
                    "type": "string",
                    "description": "Sort field by number of matches of categories, defaults to best match",
                    "enum": SEARCH_SORTS,
                },
                "order": {"type": "string", "description": "Sort order", "enum": ["asc", "desc"]},
                **with_pagination(),
            },
            "required": ["query"],
        },
        handler=search_issues,
    ),
    ToolDef(
        name="github_create_issue",
        description="Create a new issue in a GitHub repository.",
        title="Open new issue",
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "title": {"type": "string", "description": "Issue title"},
                "body": {"type": "string", "description": "Issue body content"},
                "assignees": {**_STRING_ARRAY, "description": "Usernames to assign to this issue"},
                "labels": {**_STRING_ARRAY, "description": "Labels to apply to this issue"},
                "milestone": {"type": "integer", "description": "Milestone number"},
            },
            "required": ["owner", "repo", "title"],
        },
        handler=create_issue,
    ),
    ToolDef(
        name="github_list_issues",
        description="List issues in a GitHub repository.",
        title="List issues",
        read_only=True,
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "state": {"type": "string", "description": "Filter by state", "enum": ["open", "closed", "all"]},
                "labels": {**_STRING_ARRAY, "description": "Filter by labels"},
                "sort": {"type": "string", "description": "Sort order", "enum": ["created", "updated", "comments"]},
                "direction": {"type": "string", "description": "Sort direction", "enum": ["asc", "desc"]},
                "since": {"type": "string", "description": "Filter by date (ISO 8601 timestamp)"},
                **with_pagination(),
            },
            "required": ["owner", "repo"],
        },
        handler=list_issues,
    ),
    ToolDef(
        name="github_update_issue",
        description="Update an existing issue in a GitHub repository.",
        title="Edit issue",
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "Issue number to update"},
                "title": {"type": "string", "description": "New title"},
                "body": {"type": "string", "description": "New description"},
                "state": {"type": "string", "description": "New state", "enum": ["open", "closed"]},
                "labels": {**_STRING_ARRAY, "description": "New labels"},
                "assignees": {**_STRING_ARRAY, "description": "New assignees"},
                "milestone": {"type": "integer", "description": "New milestone number"},
            },
            "required": ["owner", "repo", "issue_number"],
        },
        handler=update_issue,
    ),
    ToolDef(
        name="github_get_issue_comments",
        description="Get comments for a specific issue in a GitHub repository.",
        title="Get issue comments",
        read_only=True,
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "Issue number"},
                **with_pagination(),
            },
            "required": ["owner", "repo", "issue_number"],
        },
        handler=get_issue_comments,
    ),
]

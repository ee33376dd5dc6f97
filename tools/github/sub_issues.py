"""GitHub sub-issue tools.

A parent issue owns an ordered list of child issues. These tools add,
list, remove and reorder entries in that list. Children are addressed by
their issue ID (not their number), and reordering is expressed relative
to a sibling rather than as an absolute index.
"""

from __future__ import annotations

import json
from typing import Any

from .._base import ToolContext, ToolDef, ToolResult
from .._params import (
    ParamError,
    optional_int,
    optional_param,
    pagination_params,
    required_int,
    required_param,
    with_pagination,
)
from ._client import (
    ACCEPT,
    API_VERSION,
    GitHubError,
    api_error,
    get_client,
    json_response,
    status_error,
)
from ._types import IssueID, IssueNumber, SubIssueRequest, anchor_from_ids


def _parent_args(args: dict[str, Any]) -> tuple[str, str, IssueNumber]:
    owner = required_param(args, "owner", str)
    repo = required_param(args, "repo", str)
    issue_number = IssueNumber(required_int(args, "issue_number"))
    return owner, repo, issue_number


# =============================================================================
# Handler Functions
# =============================================================================


async def add_sub_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Attach an issue as a child of the parent issue.

    With replace_parent the child's existing parent link is severed first;
    otherwise GitHub's own conflict rule applies when the child already has
    a different parent.
    """
    try:
        owner, repo, issue_number = _parent_args(args)
        sub_issue_id = IssueID(required_int(args, "sub_issue_id"))
        replace_parent = optional_param(args, "replace_parent", bool, False)
    except ParamError as e:
        return ToolResult.invalid(str(e))

    request = SubIssueRequest(sub_issue_id=sub_issue_id, replace_parent=replace_parent)
    client = get_client(ctx)
    try:
        response = await client.add_sub_issue(owner, repo, issue_number, request)
    except GitHubError as e:
        return api_error("failed to add sub-issue", e)

    if response.status_code != 201:
        return status_error("failed to add sub-issue", response)
    return json_response("failed to add sub-issue", response)


async def list_sub_issues(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """List the children of an issue in their current order."""
    try:
        owner, repo, issue_number = _parent_args(args)
        pagination = pagination_params(args, per_page_key="per_page")
    except ParamError as e:
        return ToolResult.invalid(str(e))

    client = get_client(ctx)
    try:
        response = await client.list_sub_issues(owner, repo, issue_number, pagination)
    except GitHubError as e:
        return api_error("failed to list sub-issues", e)

    if response.status_code != 200:
        return status_error("failed to list sub-issues", response)
    return json_response("failed to list sub-issues", response)


async def remove_sub_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Sever the link between a parent issue and one of its children.

    The endpoint is a DELETE with a JSON body, so the request is built by
    hand with the same headers the structured calls send.
    """
    try:
        owner, repo, issue_number = _parent_args(args)
        sub_issue_id = IssueID(required_int(args, "sub_issue_id"))
    except ParamError as e:
        return ToolResult.invalid(str(e))

    body = json.dumps(SubIssueRequest(sub_issue_id=sub_issue_id).to_payload())
    headers = {
        "Accept": ACCEPT,
        "Content-Type": "application/json",
        "X-GitHub-Api-Version": API_VERSION,
    }

    client = get_client(ctx)
    try:
        response = await client.send_raw(
            "DELETE",
            f"/repos/{owner}/{repo}/issues/{issue_number}/sub_issue",
            content=body.encode(),
            headers=headers,
        )
    except GitHubError as e:
        return api_error("failed to remove sub-issue", e)

    if response.status_code != 200:
        return status_error("failed to remove sub-issue", response)

    # any JSON shape is accepted
    return json_response("failed to remove sub-issue", response)


async def reprioritize_sub_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Move a child issue to sit directly after or before a sibling."""
    try:
        owner, repo, issue_number = _parent_args(args)
        sub_issue_id = IssueID(required_int(args, "sub_issue_id"))
        anchor = anchor_from_ids(
            optional_int(args, "after_id"), optional_int(args, "before_id")
        )
    except ParamError as e:
        return ToolResult.invalid(str(e))

    request = SubIssueRequest(sub_issue_id=sub_issue_id, anchor=anchor)
    client = get_client(ctx)
    try:
        response = await client.reprioritize_sub_issue(owner, repo, issue_number, request)
    except GitHubError as e:
        return api_error("failed to reprioritize sub-issue", e)

    if response.status_code != 200:
        return status_error("failed to reprioritize sub-issue", response)
    return json_response("failed to reprioritize sub-issue", response)


# =============================================================================
# Tool Definitions
# =============================================================================

_OWNER = {"type": "string", "description": "Repository owner"}
_REPO = {"type": "string", "description": "Repository name"}

TOOLS = [
    ToolDef(
        name="github_add_sub_issue",
        description="Add a sub-issue to a parent issue in a GitHub repository.",
        title="Add sub-issue",
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "The number of the parent issue"},
                "sub_issue_id": {
                    "type": "integer",
                    "description": "The ID of the sub-issue to add. ID is not the same as issue number",
                },
                "replace_parent": {
                    "type": "boolean",
                    "description": "When true, replaces the sub-issue's current parent issue",
                },
            },
            "required": ["owner", "repo", "issue_number", "sub_issue_id"],
        },
        handler=add_sub_issue,
    ),
    ToolDef(
        name="github_list_sub_issues",
        description="List sub-issues for a specific issue in a GitHub repository.",
        title="List sub-issues",
        read_only=True,
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "Issue number"},
                **with_pagination(per_page_key="per_page"),
            },
            "required": ["owner", "repo", "issue_number"],
        },
        handler=list_sub_issues,
    ),
    ToolDef(
        name="github_remove_sub_issue",
        description="Remove a sub-issue from a parent issue in a GitHub repository.",
        title="Remove sub-issue",
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "The number of the parent issue"},
                "sub_issue_id": {
                    "type": "integer",
                    "description": "The ID of the sub-issue to remove. ID is not the same as issue number",
                },
            },
            "required": ["owner", "repo", "issue_number", "sub_issue_id"],
        },
        handler=remove_sub_issue,
    ),
    ToolDef(
        name="github_reprioritize_sub_issue",
        description="Reprioritize a sub-issue to a different position in the parent issue's sub-issue list.",
        title="Reprioritize sub-issue",
        parameters={
            "type": "object",
            "properties": {
                "owner": _OWNER,
                "repo": _REPO,
                "issue_number": {"type": "integer", "description": "The number of the parent issue"},
                "sub_issue_id": {
                    "type": "integer",
                    "description": "The ID of the sub-issue to reprioritize. ID is not the same as issue number",
                },
                "after_id": {
                    "type": "integer",
                    "description": "The ID of the sub-issue to be prioritized after (either after_id OR before_id should be specified)",
                },
                "before_id": {
                    "type": "integer",
                    "description": "The ID of the sub-issue to be prioritized before (either after_id OR before_id should be specified)",
                },
            },
            "required": ["owner", "repo", "issue_number", "sub_issue_id"],
        },
        handler=reprioritize_sub_issue,
    ),
]

"""Assign the Copilot coding agent to an issue.

GitHub has no "add one assignee" primitive for bot actors. The only way in
is replaceActorsForAssignable, which overwrites the whole assignee set, so
assignment is a read-modify-write:

1. Walk the repository's suggested actors until the agent's login shows up.
2. Read the issue's node id and its current assignee ids.
3. Replace the assignees with current + agent.

Step 2 and 3 are not atomic. An assignee added by someone else between the
read and the mutation is dropped by the mutation. GitHub offers no
conditional write for this field; the window is kept as short as possible
by doing nothing between the two calls. Re-running the tool is safe: the
agent is already in the set and the mutation reproduces it unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from issuedesk_core.config import get_config
from logging_config import get_logger

from .._base import (
    UNAVAILABLE,
    PromptArgument,
    PromptDef,
    ToolContext,
    ToolDef,
    ToolResult,
)
from .._params import ParamError, required_int, required_param
from ._client import (
    GitHubError,
    GitHubGraphQLClient,
    GitHubGraphQLError,
    api_error,
    get_graphql_client,
)
from ._types import ActorPage, IssueAssignees, IssueNumber, NodeID, SuggestedActor

logger = get_logger("github")

ACTOR_PAGE_SIZE = 100

COPILOT_DOCS_URL = (
    "https://docs.github.com/en/copilot/using-github-copilot/"
    "using-copilot-coding-agent-to-work-on-tasks/about-assigning-tasks-to-copilot"
)

# Automation matches on this exact text to tell "not offered here" apart
# from a failure. Do not reword.
COPILOT_UNAVAILABLE_MESSAGE = (
    "copilot isn't available as an assignee for this issue. "
    f"Please inform the user to visit {COPILOT_DOCS_URL} for more information."
)

ASSIGNED_MESSAGE = "successfully assigned copilot to issue"

SUGGESTED_ACTORS_QUERY = """
query($owner: String!, $name: String!, $endCursor: String) {
  repository(owner: $owner, name: $name) {
    suggestedActors(first: %d, after: $endCursor, capabilities: [CAN_BE_ASSIGNED]) {
      nodes {
        ... on Bot {
          id
          login
          __typename
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
""" % ACTOR_PAGE_SIZE

ISSUE_ASSIGNEES_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      id
      assignees(first: 100) {
        nodes {
          id
        }
      }
    }
  }
}
"""

REPLACE_ACTORS_MUTATION = """
mutation($input: ReplaceActorsForAssignableInput!) {
  replaceActorsForAssignable(input: $input) {
    __typename
  }
}
"""


# =============================================================================
# Reconciliation steps
# =============================================================================


async def iter_suggested_actor_pages(
    client: GitHubGraphQLClient, owner: str, repo: str
) -> AsyncIterator[ActorPage]:
    """Yield pages of assignable actors, fetching the next page only on demand."""
    cursor: str | None = None
    while True:
        data = await client.query(
            SUGGESTED_ACTORS_QUERY,
            {"owner": owner, "name": repo, "endCursor": cursor},
        )
        repository = data.get("repository")
        if repository is None:
            raise GitHubGraphQLError([f"could not resolve repository {owner}/{repo}"])

        connection = repository["suggestedActors"]
        # Non-bot actors come back as empty objects from the inline fragment
        actors = [
            SuggestedActor(
                id=NodeID(node["id"]),
                login=node["login"],
                typename=node.get("__typename", "Bot"),
            )
            for node in connection.get("nodes") or []
            if node and node.get("login")
        ]
        page_info = connection["pageInfo"]
        yield ActorPage(
            actors=actors,
            has_next_page=bool(page_info["hasNextPage"]),
            end_cursor=page_info.get("endCursor"),
        )

        if not page_info["hasNextPage"]:
            return
        cursor = page_info["endCursor"]


async def find_actor(pages: AsyncIterator[ActorPage], login: str) -> SuggestedActor | None:
    """Return the first actor whose login matches exactly, or None when exhausted."""
    async for page in pages:
        for actor in page.actors:
            if actor.login == login:
                return actor
    return None


async def read_issue_assignees(
    client: GitHubGraphQLClient, owner: str, repo: str, number: IssueNumber
) -> IssueAssignees:
    data = await client.query(
        ISSUE_ASSIGNEES_QUERY,
        {"owner": owner, "name": repo, "number": int(number)},
    )
    issue = (data.get("repository") or {}).get("issue")
    if issue is None:
        raise GitHubGraphQLError([f"could not resolve issue #{number} in {owner}/{repo}"])
    return IssueAssignees(
        id=NodeID(issue["id"]),
        assignee_ids=[NodeID(node["id"]) for node in issue["assignees"]["nodes"]],
    )


def merge_assignees(current: list[NodeID], actor_id: NodeID) -> list[NodeID]:
    """Union of the current assignees and one more actor, order kept."""
    merged = list(dict.fromkeys(current))
    if actor_id not in merged:
        merged.append(actor_id)
    return merged


async def replace_assignees(
    client: GitHubGraphQLClient, assignable_id: NodeID, actor_ids: list[NodeID]
) -> None:
    await client.mutate(
        REPLACE_ACTORS_MUTATION,
        {"assignableId": assignable_id, "actorIds": list(actor_ids)},
    )


# =============================================================================
# Handler Functions
# =============================================================================


async def assign_copilot_to_issue(args: dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Assign the coding agent to an issue, keeping existing assignees."""
    try:
        owner = required_param(args, "owner", str)
        repo = required_param(args, "repo", str)
        issue_number = IssueNumber(required_int(args, "issueNumber"))
    except ParamError as e:
        return ToolResult.invalid(str(e))

    login = get_config().copilot_login
    client = get_graphql_client(ctx)
    log_extra = {"owner": owner, "repo": repo, "issue_number": issue_number}

    try:
        agent = await find_actor(iter_suggested_actor_pages(client, owner, repo), login)
    except GitHubError as e:
        return api_error("failed to list suggested actors", e)

    if agent is None:
        logger.info(f"{login} is not a suggested actor", extra=log_extra)
        return ToolResult(text=COPILOT_UNAVAILABLE_MESSAGE, category=UNAVAILABLE)

    try:
        snapshot = await read_issue_assignees(client, owner, repo, issue_number)
    except GitHubError as e:
        return api_error("failed to get issue ID", e)

    actor_ids = merge_assignees(snapshot.assignee_ids, agent.id)
    try:
        await replace_assignees(client, snapshot.id, actor_ids)
    except GitHubError as e:
        return api_error("failed to replace actors for assignable", e)

    logger.info(f"assigned {login} ({len(actor_ids)} assignees)", extra=log_extra)
    return ToolResult.ok(ASSIGNED_MESSAGE)


# =============================================================================
# Prompt
# =============================================================================


async def assign_coding_agent_prompt(args: dict[str, Any]) -> list[dict[str, str]]:
    repo = args.get("repo", "")
    if not repo:
        raise ParamError("missing required parameter: repo")

    return [
        {
            "role": "system",
            "content": (
                "You are a personal assistant for GitHub the Copilot GitHub Coding Agent. "
                "Your task is to help the user assign tasks to the Coding Agent based on their "
                "open GitHub issues. You can use `github_assign_copilot_to_issue` tool to assign "
                "the Coding Agent to issues that are suitable for autonomous work, and "
                "`github_search_issues` tool to find issues that match the user's criteria. "
                "You can also use `github_list_issues` to get a list of issues in the repository."
            ),
        },
        {
            "role": "user",
            "content": f"Please go and get a list of the most recent 10 issues from the {repo} GitHub repository",
        },
        {
            "role": "assistant",
            "content": f"Sure! I will get a list of the 10 most recent issues for the repo {repo}.",
        },
        {
            "role": "user",
            "content": (
                "For each issue, please check if it is a clearly defined coding task with "
                "acceptance criteria and a low to medium complexity to identify issues that are "
                "suitable for an AI Coding Agent to work on. Then assign each of the identified "
                "issues to Copilot."
            ),
        },
        {
            "role": "assistant",
            "content": (
                "Certainly! Let me carefully check which ones are clearly scoped issues that are "
                "good to assign to the coding agent, and I will summarize and assign them now."
            ),
        },
        {
            "role": "user",
            "content": (
                "Great, if you are unsure if an issue is good to assign, ask me first, rather "
                "than assigning copilot. If you are certain the issue is clear and suitable you "
                "can assign it to Copilot without asking."
            ),
        },
    ]


# =============================================================================
# Tool Definitions
# =============================================================================


@dataclass
class ToolDescription:
    """Builds a description from a summary, expected outcomes and links."""

    summary: str
    outcomes: list[str] = field(default_factory=list)
    reference_links: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [self.summary]
        if self.outcomes:
            parts.append("\n\nThis tool can help with the following outcomes:\n")
            parts.extend(f"- {outcome}\n" for outcome in self.outcomes)
        if self.reference_links:
            parts.append("\n\nMore information can be found at:\n")
            parts.extend(f"- {link}\n" for link in self.reference_links)
        return "".join(parts)


ASSIGN_COPILOT_DESCRIPTION = ToolDescription(
    summary="Assign Copilot to a specific issue in a GitHub repository.",
    outcomes=["a Pull Request created with source code changes to resolve the issue"],
    reference_links=[COPILOT_DOCS_URL],
)

TOOLS = [
    ToolDef(
        name="github_assign_copilot_to_issue",
        description=str(ASSIGN_COPILOT_DESCRIPTION),
        title="Assign Copilot to issue",
        idempotent=True,
        parameters={
            "type": "object",
            "properties": {
                "owner": {"type": "string", "description": "Repository owner"},
                "repo": {"type": "string", "description": "Repository name"},
                "issueNumber": {"type": "integer", "description": "Issue number"},
            },
            "required": ["owner", "repo", "issueNumber"],
        },
        handler=assign_copilot_to_issue,
    ),
]

PROMPTS = [
    PromptDef(
        name="AssignCodingAgent",
        description="Assign GitHub Coding Agent to multiple tasks in a GitHub repository.",
        arguments=[
            PromptArgument(
                name="repo",
                description="The repository to assign tasks in (owner/repo).",
                required=True,
            )
        ],
        handler=assign_coding_agent_prompt,
    ),
]

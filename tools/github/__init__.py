"""GitHub issue tools package.

This package exposes GitHub issue operations to an orchestrator: issues
and comments, the sub-issue hierarchy, and Copilot coding-agent assignment.

Requires: GITHUB_TOKEN env var (Personal Access Token), unless each request
supplies its own token.
"""

from __future__ import annotations

MODULE_NAME = "github"
MODULE_VERSION = "3.0.0"

from logging_config import get_logger

# Import from submodules
from ._client import (
    GitHubClient,
    GitHubGraphQLClient,
    get_client,
    get_graphql_client,
    is_configured,
)

from .issues import TOOLS as ISSUE_TOOLS
from .sub_issues import TOOLS as SUB_ISSUE_TOOLS
from .assignment import TOOLS as ASSIGNMENT_TOOLS, PROMPTS

logger = get_logger("github")

# Aggregate all tools
TOOLS = ISSUE_TOOLS + SUB_ISSUE_TOOLS + ASSIGNMENT_TOOLS

# System prompt for LLM context
SYSTEM_PROMPT = """
## GitHub Issues
You can read and manage GitHub issues, their sub-issues, and hand issues to the Copilot coding agent.

**Issues:**
- `github_list_issues` / `github_search_issues` - Find issues
- `github_get_issue` / `github_create_issue` / `github_update_issue` - Manage issues
- `github_get_issue_comments` / `github_add_issue_comment` - Read and add comments

**Sub-issues:**
- `github_list_sub_issues` - List a parent's sub-issues in priority order
- `github_add_sub_issue` / `github_remove_sub_issue` - Link or unlink a sub-issue (takes the issue ID, not its number)
- `github_reprioritize_sub_issue` - Move a sub-issue after or before a sibling (give exactly one)

**Coding agent:**
- `github_assign_copilot_to_issue` - Assign Copilot; existing assignees are kept
""".strip()


# --- Lifecycle Hooks ---


async def initialize() -> None:
    """Initialize GitHub module."""
    if is_configured():
        logger.info(f"GitHub API configured (v{MODULE_VERSION})")
    else:
        logger.warning("GITHUB_TOKEN not set, requests must supply their own token")


async def cleanup() -> None:
    """Cleanup on module unload."""
    pass


# Re-export handler functions for direct use if needed
from .issues import (
    add_issue_comment,
    create_issue,
    get_issue,
    get_issue_comments,
    list_issues,
    search_issues,
    update_issue,
)
from .sub_issues import (
    add_sub_issue,
    list_sub_issues,
    remove_sub_issue,
    reprioritize_sub_issue,
)
from .assignment import COPILOT_UNAVAILABLE_MESSAGE, assign_copilot_to_issue

__all__ = [
    # Module info
    "MODULE_NAME",
    "MODULE_VERSION",
    "SYSTEM_PROMPT",
    "TOOLS",
    "PROMPTS",
    # Lifecycle
    "initialize",
    "cleanup",
    # Clients
    "GitHubClient",
    "GitHubGraphQLClient",
    "get_client",
    "get_graphql_client",
    "is_configured",
    # Handler functions
    "get_issue",
    "add_issue_comment",
    "search_issues",
    "create_issue",
    "list_issues",
    "update_issue",
    "get_issue_comments",
    "add_sub_issue",
    "list_sub_issues",
    "remove_sub_issue",
    "reprioritize_sub_issue",
    "assign_copilot_to_issue",
    "COPILOT_UNAVAILABLE_MESSAGE",
]

"""Identifier and request types shared by the GitHub tool modules.

GitHub names an issue three ways and they are not interchangeable:

- IssueNumber: the repository-scoped number shown in the UI (#42).
- IssueID: the REST database id; sub-issue endpoints expect this.
- NodeID: the opaque GraphQL global id; GraphQL mutations expect this.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NewType, Union

from .._params import ParamError

IssueNumber = NewType("IssueNumber", int)
IssueID = NewType("IssueID", int)
NodeID = NewType("NodeID", str)


@dataclass(frozen=True)
class After:
    """Place the sub-issue immediately after this sibling."""

    id: IssueID


@dataclass(frozen=True)
class Before:
    """Place the sub-issue immediately before this sibling."""

    id: IssueID


Anchor = Union[After, Before]


def anchor_from_ids(after_id: int, before_id: int) -> Anchor:
    """Build an anchor from two optional ids, exactly one of which is non-zero."""
    if after_id == 0 and before_id == 0:
        raise ParamError("either after_id or before_id must be specified")
    if after_id != 0 and before_id != 0:
        raise ParamError("only one of after_id or before_id should be specified, not both")
    if after_id:
        return After(IssueID(after_id))
    return Before(IssueID(before_id))


@dataclass(frozen=True)
class SubIssueRequest:
    """Payload for the sub-issue add, remove and reprioritize endpoints."""

    sub_issue_id: IssueID
    replace_parent: bool | None = None
    anchor: Anchor | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"sub_issue_id": int(self.sub_issue_id)}
        if self.replace_parent is not None:
            payload["replace_parent"] = self.replace_parent
        if isinstance(self.anchor, After):
            payload["after_id"] = int(self.anchor.id)
        elif isinstance(self.anchor, Before):
            payload["before_id"] = int(self.anchor.id)
        return payload


@dataclass(frozen=True)
class SuggestedActor:
    id: NodeID
    login: str
    typename: str = "Bot"


@dataclass(frozen=True)
class ActorPage:
    actors: list[SuggestedActor]
    has_next_page: bool
    end_cursor: str | None


@dataclass(frozen=True)
class IssueAssignees:
    """Snapshot of an issue's node id and current assignee node ids."""

    id: NodeID
    assignee_ids: list[NodeID]

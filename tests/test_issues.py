from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import pytest

from tools._base import STATUS, VALIDATION
from tools.github import issues

REPO = "/repos/octo/demo"


def test_get_issue_returns_upstream_json(fake_github, ctx):
    issue = {"number": 3, "title": "Crash on start", "assignees": []}
    fake_github.on("GET", f"{REPO}/issues/3", json=issue)

    result = asyncio.run(issues.get_issue({"owner": "octo", "repo": "demo", "issue_number": 3}, ctx))

    assert json.loads(result.text) == issue


def test_get_issue_surfaces_literal_error_body(fake_github, ctx):
    fake_github.on("GET", f"{REPO}/issues/3", status=500, text='{"message":"boom"}')

    result = asyncio.run(issues.get_issue({"owner": "octo", "repo": "demo", "issue_number": 3}, ctx))

    assert result.is_error
    assert result.category == STATUS
    assert result.text == 'failed to get issue: {"message":"boom"}'


@pytest.mark.parametrize(
    "args, message",
    [
        ({"repo": "demo", "issue_number": 3}, "missing required parameter: owner"),
        ({"owner": "", "repo": "demo", "issue_number": 3}, "missing required parameter: owner"),
        ({"owner": 5, "repo": "demo", "issue_number": 3}, "parameter owner is not of type string"),
        ({"owner": "octo", "repo": "demo", "issue_number": "3"}, "parameter issue_number is not of type integer"),
    ],
)
def test_get_issue_validates_before_calling_github(fake_github, ctx, args, message):
    result = asyncio.run(issues.get_issue(args, ctx))

    assert result.category == VALIDATION
    assert result.text == message
    assert fake_github.requests == []


def test_add_issue_comment_expects_created(fake_github, ctx):
    fake_github.on("POST", f"{REPO}/issues/3/comments", status=201, json={"id": 99, "body": "hi"})

    result = asyncio.run(
        issues.add_issue_comment({"owner": "octo", "repo": "demo", "issue_number": 3, "body": "hi"}, ctx)
    )

    assert json.loads(result.text)["id"] == 99
    assert fake_github.body() == {"body": "hi"}


def test_add_issue_comment_treats_200_as_failure(fake_github, ctx):
    fake_github.on("POST", f"{REPO}/issues/3/comments", status=200, json={"id": 99})

    result = asyncio.run(
        issues.add_issue_comment({"owner": "octo", "repo": "demo", "issue_number": 3, "body": "hi"}, ctx)
    )

    assert result.is_error


def test_create_issue_sends_all_fields(fake_github, ctx):
    fake_github.on("POST", f"{REPO}/issues", status=201, json={"number": 8})

    asyncio.run(
        issues.create_issue(
            {
                "owner": "octo",
                "repo": "demo",
                "title": "New",
                "body": "Details",
                "assignees": ["alice"],
                "labels": ["bug", "p1"],
                "milestone": 2,
            },
            ctx,
        )
    )

    assert fake_github.body() == {
        "title": "New",
        "body": "Details",
        "assignees": ["alice"],
        "labels": ["bug", "p1"],
        "milestone": 2,
    }


def test_create_issue_rejects_non_string_labels(fake_github, ctx):
    result = asyncio.run(
        issues.create_issue({"owner": "octo", "repo": "demo", "title": "New", "labels": [1]}, ctx)
    )

    assert result.category == VALIDATION
    assert fake_github.requests == []


def test_update_issue_sends_only_supplied_fields(fake_github, ctx):
    fake_github.on("PATCH", f"{REPO}/issues/3", json={"number": 3, "state": "closed"})

    result = asyncio.run(
        issues.update_issue({"owner": "octo", "repo": "demo", "issue_number": 3, "state": "closed"}, ctx)
    )

    assert not result.is_error
    assert fake_github.body() == {"state": "closed"}


def test_update_issue_rejects_unknown_state(fake_github, ctx):
    result = asyncio.run(
        issues.update_issue({"owner": "octo", "repo": "demo", "issue_number": 3, "state": "all"}, ctx)
    )

    assert result.category == VALIDATION
    assert fake_github.requests == []


def test_list_issues_forwards_filters(fake_github, ctx):
    fake_github.on("GET", f"{REPO}/issues", json=[])

    asyncio.run(
        issues.list_issues(
            {
                "owner": "octo",
                "repo": "demo",
                "state": "all",
                "labels": ["bug", "ui"],
                "sort": "updated",
                "direction": "asc",
                "since": "2024-03-01",
                "page": 2,
                "perPage": 50,
            },
            ctx,
        )
    )

    params = fake_github.requests[0].url.params
    assert params["state"] == "all"
    assert params["labels"] == "bug,ui"
    assert params["sort"] == "updated"
    assert params["direction"] == "asc"
    assert params["since"] == "2024-03-01T00:00:00Z"
    assert params["page"] == "2"
    assert params["per_page"] == "50"


def test_list_issues_rejects_bad_timestamp(fake_github, ctx):
    result = asyncio.run(issues.list_issues({"owner": "octo", "repo": "demo", "since": "last week"}, ctx))

    assert result.text == (
        "failed to list issues: invalid ISO 8601 timestamp: last week "
        "(supported formats: YYYY-MM-DDThh:mm:ssZ or YYYY-MM-DD)"
    )
    assert fake_github.requests == []


def test_parse_iso_timestamp_accepts_both_formats():
    assert issues.parse_iso_timestamp("2023-01-15T14:30:00Z") == datetime(
        2023, 1, 15, 14, 30, tzinfo=timezone.utc
    )
    assert issues.parse_iso_timestamp("2023-01-15") == datetime(2023, 1, 15, tzinfo=timezone.utc)


def test_search_issues_scopes_query(fake_github, ctx):
    fake_github.on("GET", "/search/issues", json={"total_count": 0, "items": []})

    asyncio.run(
        issues.search_issues(
            {"query": "crash", "owner": "octo", "repo": "demo", "sort": "created", "order": "desc"}, ctx
        )
    )

    params = fake_github.requests[0].url.params
    assert params["q"] == "repo:octo/demo is:issue crash"
    assert params["sort"] == "created"
    assert params["order"] == "desc"


def test_search_issues_keeps_existing_is_issue(fake_github, ctx):
    fake_github.on("GET", "/search/issues", json={"total_count": 0, "items": []})

    asyncio.run(issues.search_issues({"query": "is:issue label:bug"}, ctx))

    assert fake_github.requests[0].url.params["q"] == "is:issue label:bug"


def test_get_issue_comments_paginates(fake_github, ctx):
    fake_github.on("GET", f"{REPO}/issues/3/comments", json=[{"id": 1}])

    result = asyncio.run(
        issues.get_issue_comments({"owner": "octo", "repo": "demo", "issue_number": 3, "perPage": 5}, ctx)
    )

    assert json.loads(result.text) == [{"id": 1}]
    assert fake_github.requests[0].url.params["per_page"] == "5"

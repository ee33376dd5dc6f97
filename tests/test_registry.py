from __future__ import annotations

import asyncio
import dataclasses

import pytest

from tools import ToolContext, ToolDef, ToolRegistry, ToolResult, cleanup_tools, init_tools
from tools._base import INTERNAL, VALIDATION
from tools._params import ParamError

EXPECTED_TOOLS = {
    "github_get_issue",
    "github_add_issue_comment",
    "github_search_issues",
    "github_create_issue",
    "github_list_issues",
    "github_update_issue",
    "github_get_issue_comments",
    "github_add_sub_issue",
    "github_list_sub_issues",
    "github_remove_sub_issue",
    "github_reprioritize_sub_issue",
    "github_assign_copilot_to_issue",
}


async def _echo(args, ctx):
    return ToolResult.ok(args["text"])


async def _explode(args, ctx):
    raise RuntimeError("kaboom")


def _tool(name, handler):
    return ToolDef(name=name, description="test", parameters={"type": "object"}, handler=handler)


def test_execute_dispatches_to_handler():
    registry = ToolRegistry()
    registry.register(_tool("echo", _echo))

    result = asyncio.run(registry.execute("echo", {"text": "hi"}, ToolContext()))

    assert result == ToolResult(text="hi")


def test_execute_unknown_tool_is_a_validation_error():
    registry = ToolRegistry()

    result = asyncio.run(registry.execute("nope", {}, ToolContext()))

    assert result.category == VALIDATION
    assert result.text.startswith("Unknown tool 'nope'")


def test_execute_turns_handler_exceptions_into_internal_errors():
    registry = ToolRegistry()
    registry.register(_tool("explode", _explode))

    result = asyncio.run(registry.execute("explode", {}, ToolContext()))

    assert result.is_error
    assert result.category == INTERNAL
    assert result.text == "Error executing explode: kaboom"


def test_register_rejects_name_clash_across_modules():
    registry = ToolRegistry()
    registry.register(_tool("echo", _echo), source_module="a")

    with pytest.raises(ValueError, match="already registered by 'a'"):
        registry.register(_tool("echo", _echo), source_module="b")


def test_init_tools_registers_github_module():
    registry = asyncio.run(init_tools(ToolRegistry()))

    assert set(registry.get_tool_names()) == EXPECTED_TOOLS
    assert [p["name"] for p in registry.get_prompts()] == ["AssignCodingAgent"]
    assert "github_reprioritize_sub_issue" in registry.get_system_prompts()


def test_init_tools_fills_an_empty_registry_it_is_given():
    registry = ToolRegistry()

    asyncio.run(init_tools(registry))

    assert len(registry) == len(EXPECTED_TOOLS)
    assert len(ToolRegistry.get_instance()) == 0


def test_cleanup_tools_unregisters_module():
    registry = asyncio.run(init_tools(ToolRegistry()))

    asyncio.run(cleanup_tools(registry))

    assert len(registry) == 0
    assert registry.get_system_prompts() == ""


def test_mcp_format_carries_annotations():
    registry = asyncio.run(init_tools(ToolRegistry()))
    tools = {t["name"]: t for t in registry.get_tools(format="mcp")}

    listing = tools["github_list_sub_issues"]
    assert listing["annotations"]["readOnlyHint"] is True
    assert "per_page" in listing["inputSchema"]["properties"]

    assign = tools["github_assign_copilot_to_issue"]
    assert assign["annotations"]["readOnlyHint"] is False
    assert assign["annotations"]["idempotentHint"] is True
    assert assign["inputSchema"]["required"] == ["owner", "repo", "issueNumber"]


def test_tool_context_carries_only_request_overrides():
    assert [f.name for f in dataclasses.fields(ToolContext)] == ["extra"]
    assert ToolContext().extra == {}


def test_get_tools_defaults_to_openai_format():
    registry = ToolRegistry()
    registry.register(_tool("echo", _echo))

    assert registry.get_tools() == [
        {
            "type": "function",
            "function": {"name": "echo", "description": "test", "parameters": {"type": "object"}},
        }
    ]


def test_openai_and_claude_formats():
    registry = asyncio.run(init_tools(ToolRegistry()))

    openai = registry.get_tools(format="openai")
    claude = registry.get_tools(format="claude")

    assert all(t["type"] == "function" for t in openai)
    assert all("input_schema" in t for t in claude)


def test_render_prompt_requires_arguments():
    registry = asyncio.run(init_tools(ToolRegistry()))

    with pytest.raises(ParamError, match="missing required parameter: repo"):
        asyncio.run(registry.render_prompt("AssignCodingAgent", {}))
    with pytest.raises(KeyError):
        asyncio.run(registry.render_prompt("Nope", {}))

"""Base types for the tool system.

ToolDef describes a callable tool (name, JSON-schema parameters, handler),
ToolContext carries per-invocation information, and ToolResult is the single
response every handler produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

# Result categories
VALIDATION = "validation"
TRANSPORT = "transport"
STATUS = "status"
UNAVAILABLE = "unavailable"
INTERNAL = "internal"


@dataclass
class ToolResult:
    """Outcome of a tool invocation.

    ``category`` is None for a plain success. Errors carry one of
    VALIDATION, TRANSPORT, STATUS or INTERNAL. UNAVAILABLE marks a
    well-defined non-result that is not an error.
    """

    text: str
    is_error: bool = False
    category: str | None = None

    @classmethod
    def ok(cls, text: str) -> ToolResult:
        return cls(text=text)

    @classmethod
    def error(cls, text: str, category: str = STATUS) -> ToolResult:
        return cls(text=text, is_error=True, category=category)

    @classmethod
    def invalid(cls, text: str) -> ToolResult:
        return cls(text=text, is_error=True, category=VALIDATION)

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "is_error": self.is_error, "category": self.category}

    def __str__(self) -> str:
        return f"Error: {self.text}" if self.is_error else self.text


@dataclass
class ToolContext:
    """Per-invocation context passed to every handler.

    ``extra`` holds request-scoped overrides, e.g. ``github_token`` to act
    as a different identity or ``http_transport`` to route upstream calls.
    """

    extra: dict[str, Any] = field(default_factory=dict)


ToolHandler = Callable[[dict[str, Any], ToolContext], Awaitable[ToolResult]]


@dataclass
class ToolDef:
    """Definition of a single tool."""

    name: str
    description: str
    parameters: dict[str, Any]
    handler: ToolHandler
    title: str = ""
    read_only: bool = False
    idempotent: bool = False

    def to_openai_format(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_mcp_format(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
            "annotations": {
                "title": self.title or self.name,
                "readOnlyHint": self.read_only,
                "idempotentHint": self.idempotent,
            },
        }

    def to_claude_format(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


@dataclass
class PromptArgument:
    name: str
    description: str
    required: bool = False


PromptHandler = Callable[[dict[str, Any]], Awaitable[list[dict[str, str]]]]


@dataclass
class PromptDef:
    """A reusable conversation template offered to the orchestrator."""

    name: str
    description: str
    arguments: list[PromptArgument]
    handler: PromptHandler

    def to_mcp_format(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [
                {"name": a.name, "description": a.description, "required": a.required}
                for a in self.arguments
            ],
        }

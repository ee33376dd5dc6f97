"""Tool registry for the issuedesk tool system.

The ToolRegistry is a singleton that manages all registered tools and prompts
and provides methods for tool discovery and execution.
"""

from __future__ import annotations

from typing import Any, ClassVar

from logging_config import get_logger

from ._base import INTERNAL, PromptDef, ToolContext, ToolDef, ToolResult
from ._params import ParamError

logger = get_logger("tools")


class ToolRegistry:
    """Central registry for all tools.

    This is a singleton class that manages tool registration, discovery,
    and execution.

    Usage:
        registry = ToolRegistry.get_instance()
        registry.register(tool_def, source_module="github")
        tools = registry.get_tools(format="mcp")
        result = await registry.execute("tool_name", {"arg": "value"}, context)
    """

    _instance: ClassVar[ToolRegistry | None] = None

    def __init__(self) -> None:
        """Initialize the registry. Use get_instance() instead of direct instantiation."""
        self._tools: dict[str, ToolDef] = {}
        self._tool_sources: dict[str, str] = {}  # tool_name -> module_name
        self._prompts: dict[str, PromptDef] = {}
        self._system_prompts: dict[str, str] = {}  # module_name -> system prompt

    @classmethod
    def get_instance(cls) -> ToolRegistry:
        """Get or create the singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance. Useful for testing."""
        cls._instance = None

    def register(self, tool: ToolDef, source_module: str = "builtin") -> None:
        """Register a tool definition.

        Args:
            tool: The tool definition to register
            source_module: Name of the module providing this tool

        Raises:
            ValueError: If a tool with the same name is already registered
                       by a different module
        """
        if tool.name in self._tools:
            existing_source = self._tool_sources.get(tool.name)
            if existing_source != source_module:
                raise ValueError(
                    f"Tool '{tool.name}' already registered by '{existing_source}'"
                )

        self._tools[tool.name] = tool
        self._tool_sources[tool.name] = source_module

    def unregister_module(self, module_name: str) -> list[str]:
        """Unregister all tools from a specific module.

        Returns:
            List of tool names that were unregistered
        """
        removed = []
        for tool_name, source in list(self._tool_sources.items()):
            if source == module_name:
                del self._tools[tool_name]
                del self._tool_sources[tool_name]
                removed.append(tool_name)
        self._system_prompts.pop(module_name, None)
        return removed

    def get_tools(self, format: str = "openai") -> list[dict[str, Any]]:
        """Get tool definitions.

        Args:
            format: Output format - "openai", "mcp", or "claude"

        Returns:
            List of tool definitions in the requested format
        """
        tools = []
        for tool in self._tools.values():
            if format == "mcp":
                tools.append(tool.to_mcp_format())
            elif format == "claude":
                tools.append(tool.to_claude_format())
            else:  # openai
                tools.append(tool.to_openai_format())

        return tools

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    async def execute(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Execute a tool by name.

        Handlers report expected failures in their ToolResult. Anything they
        raise is logged with its traceback and returned as an internal error.
        """
        tool = self._tools.get(tool_name)
        if not tool:
            return ToolResult.invalid(
                f"Unknown tool '{tool_name}'. Available tools: {', '.join(self._tools.keys())}"
            )

        try:
            return await tool.handler(arguments, context)
        except Exception as e:
            error_msg = f"Error executing {tool_name}: {e}"
            logger.exception(error_msg, extra={"tool": tool_name})
            return ToolResult.error(error_msg, INTERNAL)

    # --- Prompts ---

    def register_prompt(self, prompt: PromptDef) -> None:
        self._prompts[prompt.name] = prompt

    def get_prompts(self) -> list[dict[str, Any]]:
        return [p.to_mcp_format() for p in self._prompts.values()]

    async def render_prompt(self, name: str, arguments: dict[str, Any]) -> list[dict[str, str]]:
        """Render a prompt's messages.

        Raises:
            KeyError: If no prompt has that name
            ParamError: If a required argument is missing
        """
        prompt = self._prompts.get(name)
        if prompt is None:
            raise KeyError(name)
        for arg in prompt.arguments:
            if arg.required and not arguments.get(arg.name):
                raise ParamError(f"missing required parameter: {arg.name}")
        return await prompt.handler(arguments)

    # --- System prompts ---

    def register_system_prompt(self, module_name: str, prompt: str) -> None:
        """Register a system prompt from a tool module."""
        if prompt and prompt.strip():
            self._system_prompts[module_name] = prompt.strip()

    def get_system_prompts(self) -> str:
        """Get all system prompts joined with blank lines."""
        return "\n\n".join(self._system_prompts.values())

    def __len__(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

    def __contains__(self, tool_name: str) -> bool:
        """Check if a tool is registered."""
        return tool_name in self._tools

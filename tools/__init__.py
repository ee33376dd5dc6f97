"""Tool system.

Tool modules are packages under tools/ exporting:

- MODULE_NAME: str - Unique identifier
- TOOLS: list[ToolDef] - Tool definitions
- PROMPTS: list[PromptDef] - Prompt definitions (optional)
- SYSTEM_PROMPT: str - Added to system context (optional)
- initialize() / cleanup() - Lifecycle hooks (optional)
"""

from __future__ import annotations

from types import ModuleType

from logging_config import get_logger

from ._base import PromptDef, ToolContext, ToolDef, ToolResult
from ._registry import ToolRegistry

logger = get_logger("tools")


def _tool_modules() -> list[ModuleType]:
    from . import github

    return [github]


async def init_tools(registry: ToolRegistry | None = None) -> ToolRegistry:
    """Initialize every tool module and register its tools and prompts."""
    if registry is None:
        registry = ToolRegistry.get_instance()

    for module in _tool_modules():
        initialize = getattr(module, "initialize", None)
        if initialize is not None:
            await initialize()

        for tool in module.TOOLS:
            registry.register(tool, source_module=module.MODULE_NAME)
        for prompt in getattr(module, "PROMPTS", []):
            registry.register_prompt(prompt)
        registry.register_system_prompt(module.MODULE_NAME, getattr(module, "SYSTEM_PROMPT", ""))

        logger.info(f"Loaded {len(module.TOOLS)} tools from '{module.MODULE_NAME}'")

    return registry


async def cleanup_tools(registry: ToolRegistry | None = None) -> None:
    if registry is None:
        registry = ToolRegistry.get_instance()
    for module in _tool_modules():
        cleanup = getattr(module, "cleanup", None)
        if cleanup is not None:
            await cleanup()
        registry.unregister_module(module.MODULE_NAME)


__all__ = [
    "PromptDef",
    "ToolContext",
    "ToolDef",
    "ToolRegistry",
    "ToolResult",
    "cleanup_tools",
    "init_tools",
]

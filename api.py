"""FastAPI surface for the issuedesk tools.

Lists registered tools and prompts and executes them by name. Every tool
call answers 200 with a ToolResult body; callers inspect ``is_error`` and
``category`` rather than the HTTP status.
"""
from __future__ import annotations

import os
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from issuedesk_core import get_config, get_version, init_platform
from logging_config import get_logger
from tools import ToolContext, ToolRegistry, cleanup_tools
from tools._params import ParamError

logger = get_logger("api")

app = FastAPI(title="issuedesk API", version=get_version())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors before returning 422."""
    logger.warning(f"Validation error on {request.url}: {str(exc.errors())[:500]}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
    )

# CORS - allow all origins unless CORS_ORIGINS narrows it
cors_origins_env = os.getenv("CORS_ORIGINS", "")
if cors_origins_env:
    cors_origins = [o.strip() for o in cors_origins_env.split(",")]
    allow_creds = True
else:
    cors_origins = ["*"]
    allow_creds = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_creds,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ToolCallRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)


class PromptRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)


def get_registry() -> ToolRegistry:
    return ToolRegistry.get_instance()


@app.on_event("startup")
async def startup():
    """Register tool modules on startup."""
    logger.info("Starting up...")
    registry = await init_platform()
    logger.info(f"{len(registry)} tools registered")


@app.on_event("shutdown")
async def shutdown():
    await cleanup_tools()


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "version": get_version()}


# ============== Tools ==============


@app.get("/api/tools")
def list_tools(format: str = "mcp"):
    """List tool definitions in openai, mcp or claude format."""
    if format not in ("openai", "mcp", "claude"):
        raise HTTPException(status_code=400, detail=f"Unknown format '{format}'")
    return {"tools": get_registry().get_tools(format=format)}


@app.get("/api/system-prompt")
def system_prompt():
    return {"prompt": get_registry().get_system_prompts()}


@app.post("/api/tools/{tool_name}")
async def call_tool(
    tool_name: str,
    request: ToolCallRequest,
    x_github_token: str | None = Header(default=None),
):
    """Execute a tool. X-GitHub-Token, when sent, replaces the configured token."""
    registry = get_registry()
    if tool_name not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown tool '{tool_name}'")

    extra: dict[str, Any] = {}
    if x_github_token:
        extra["github_token"] = x_github_token

    ctx = ToolContext(extra=extra)
    result = await registry.execute(tool_name, request.arguments, ctx)
    if result.is_error:
        logger.info(f"{tool_name} failed ({result.category}): {result.text[:200]}")
    return result.to_dict()


# ============== Prompts ==============


@app.get("/api/prompts")
def list_prompts():
    return {"prompts": get_registry().get_prompts()}


@app.post("/api/prompts/{prompt_name}")
async def get_prompt(prompt_name: str, request: PromptRequest):
    try:
        messages = await get_registry().render_prompt(prompt_name, request.arguments)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown prompt '{prompt_name}'")
    except ParamError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"messages": messages}


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(app, host=config.api_host, port=config.api_port)

"""MCP server exposing the generated Simkl tools and resources over stdio."""

from __future__ import annotations

import json
import logging
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from pydantic import create_model

from . import resources
from .client import SimklClient
from .config import Settings, env_token, load_settings
from .dispatch import RequestClient, TokenAccessor, ToolResult, text_content
from .registry import ToolRegistry
from .resources import MIME_TYPE, RESOURCE_TEMPLATES, find_template

logger = logging.getLogger(__name__)

SERVER_NAME = "simkl-mcp-server"

SimklMyStatsArguments = create_model("SimklMyStatsArguments")


def register_custom_tools(registry: ToolRegistry, client: RequestClient, get_token: TokenAccessor) -> None:
    """Tools that need more than one request and so are not generated."""

    async def my_stats(args: dict[str, Any]) -> ToolResult:
        settings = await client.request("/users/settings", method="POST", token=get_token())
        user_id = ((settings or {}).get("account") or {}).get("id")
        if not user_id:
            return text_content("failed to get current user id")

        stats = await client.request(f"/users/{user_id}/stats", method="POST", token=get_token())
        return text_content(json.dumps(stats, indent=2, ensure_ascii=False))

    registry.register_tool(
        "simkl_my_stats",
        description="Get watching statistics for the current authenticated user",
        arguments=SimklMyStatsArguments,
        handler=my_stats,
    )


def build_registry(client: RequestClient, get_token: TokenAccessor = env_token) -> ToolRegistry:
    try:
        from .generated.tools import register_tools
    except ModuleNotFoundError as e:
        raise RuntimeError(
            "simkl_mcp/generated/tools.py is missing; run `python -m generator` first"
        ) from e

    registry = ToolRegistry()
    register_tools(registry, client, get_token)
    register_custom_tools(registry, client, get_token)
    logger.info("Registered %d tools", len(registry))
    return registry


def create_server(
    registry: ToolRegistry,
    client: SimklClient,
    get_token: TokenAccessor = env_token,
) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        tools = []
        for entry in registry.list_tools():
            annotations = entry.get("annotations")
            tools.append(types.Tool(
                name=entry["name"],
                description=entry["description"],
                inputSchema=entry["inputSchema"],
                annotations=types.ToolAnnotations(**annotations) if annotations else None,
            ))
        return tools

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        result = await registry.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(types.CallToolResult(
            content=[types.TextContent(type="text", text=item["text"]) for item in result["content"]],
            isError=bool(result.get("isError")),
        ))

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(mimeType=MIME_TYPE, **entry)
            for template in RESOURCE_TEMPLATES
            for entry in template.resources()
        ]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(
                name=template.name,
                uriTemplate=template.uri_template,
                description=template.description,
                mimeType=MIME_TYPE,
            )
            for template in RESOURCE_TEMPLATES
        ]

    async def read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        contents = await resources.read_resource(client, get_token, str(req.params.uri))
        return types.ServerResult(types.ReadResourceResult(
            contents=[types.TextResourceContents(**content) for content in contents],
        ))

    @server.completion()
    async def complete(
        ref: types.PromptReference | types.ResourceTemplateReference,
        argument: types.CompletionArgument,
        context: types.CompletionContext | None,
    ) -> types.Completion | None:
        template = find_template(getattr(ref, "uri", ""))
        if template is None:
            return None
        values = template.complete(argument.name, argument.value)
        return types.Completion(values=values, total=len(values), hasMore=False)

    # Registered directly: error envelopes go out as isError results, and
    # each resource item keeps its own #index URI
    server.request_handlers[types.CallToolRequest] = call_tool
    server.request_handlers[types.ReadResourceRequest] = read_resource
    return server


async def serve(settings: Settings | None = None) -> None:
    settings = settings or load_settings()
    async with SimklClient(settings.base_url, settings.client_id, settings.timeout) as client:
        server = create_server(build_registry(client), client)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())

"""In-process tool registry.

Tools are registered once at startup with a pydantic argument model. Calls
are validated against that model before the handler runs, and failures come
back as error envelopes rather than exceptions.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from .client import SimklApiError
from .dispatch import MissingPathParameterError, ToolResult

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable[ToolResult]]


@dataclass
class RegisteredTool:
    name: str
    description: str
    arguments: type[BaseModel]
    handler: Handler
    annotations: dict[str, bool] = field(default_factory=dict)

    def definition(self) -> dict[str, Any]:
        """Tool listing entry: name, description, inputSchema, annotations."""
        entry: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.arguments.model_json_schema(),
        }
        if self.annotations:
            entry["annotations"] = dict(self.annotations)
        return entry


def _error_response(tool: str, status: int, message: str, source: str) -> ToolResult:
    payload = {
        "error": True,
        "status": status,
        "message": message,
        "tool": tool,
        "source": source,
    }
    return {
        "content": [{"type": "text", "text": json.dumps(payload, indent=2)}],
        "isError": True,
    }


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> RegisteredTool:
        return self._tools[name]

    def register_tool(
        self,
        name: str,
        *,
        description: str,
        arguments: type[BaseModel],
        handler: Handler,
        annotations: dict[str, bool] | None = None,
    ) -> RegisteredTool:
        if name in self._tools:
            raise ValueError(f"Duplicate tool name: {name}")
        tool = RegisteredTool(
            name=name,
            description=description,
            arguments=arguments,
            handler=handler,
            annotations=dict(annotations or {}),
        )
        self._tools[name] = tool
        return tool

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.definition() for tool in self._tools.values()]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        if name not in self._tools:
            return _error_response(name, 0, f"Unknown tool: {name}", "simkl_mcp")
        tool = self._tools[name]

        try:
            validated = tool.arguments.model_validate(arguments or {})
        except ValidationError as e:
            return _error_response(name, 0, str(e), "validation")

        args = validated.model_dump(exclude_unset=True)
        try:
            return await tool.handler(args)
        except MissingPathParameterError as e:
            return _error_response(name, 0, str(e), "validation")
        except SimklApiError as e:
            logger.warning("%s failed: %s", name, e)
            message = str(e)
            if e.response_body:
                message = f"{message}: {e.response_body}"
            return _error_response(name, e.status_code, message, "simkl_api")

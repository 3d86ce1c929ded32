"""Build the template context from the whitelist and the API description.

Resolves each whitelist entry against the description, builds its argument
fields, handler and annotations, and collects formatters by tool name.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from simkl_mcp.dispatch import Formatter, ToolHandler
from simkl_mcp.tools_config import ToolConfig

from .annotations import derive_annotations
from .loader import get_operation
from .naming import extract_query_placeholders, normalize_path, resolve_tool_name
from .schema_parser import (
    CLIENT_ID_PARAM,
    DESCRIPTION_LIMIT,
    ParamField,
    build_param_schema,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolRecord:
    name: str
    description: str
    fields: tuple[ParamField, ...]
    annotations: dict[str, bool]
    handler: ToolHandler

    @property
    def model_name(self) -> str:
        """Class name of the generated argument model."""
        return "".join(part.capitalize() for part in self.name.split("_")) + "Arguments"


def clean_description(operation: dict[str, Any]) -> str:
    """Summary, else the first line of the description, without HTML."""
    summary = operation.get("summary") or ""
    description = operation.get("description") or ""
    text = summary or description.split("\n")[0]
    text = re.sub(r"<[^>]*>", "", text)
    text = re.sub(r"&#\d+;", "", text)
    return text.strip()[:DESCRIPTION_LIMIT]


def _with_body_param(operation: dict[str, Any]) -> list[dict[str, Any]]:
    """Copy the parameter list, adding a synthetic body parameter if needed."""
    params = list(operation.get("parameters") or [])
    request_body = operation.get("requestBody")
    if request_body is not None:
        content = request_body.get("content") or {}
        schema = (content.get("application/json") or {}).get("schema") or {"type": "object"}
        params.append({"name": "body", "in": "body", "required": True, "schema": schema})
    return params


def build_handler(
    path: str,
    method: str,
    params: list[dict[str, Any]],
    response_format: str,
    tool_name: str,
    flatten: dict[str, str],
    formatter: Formatter | None = None,
) -> ToolHandler:
    """Capture everything a call needs: method, path, query keys, body rule."""
    markers = set(extract_query_placeholders(path))
    query_keys = tuple(
        p["name"] for p in params
        if p.get("in") == "query" and p["name"] != CLIENT_ID_PARAM and p["name"] not in markers
    )
    return ToolHandler(
        tool_name=tool_name,
        method=method.upper(),
        path=path,
        query_keys=query_keys,
        flatten=dict(flatten),
        response_type=response_format,
        formatter=formatter,
    )


def build_context(spec: dict[str, Any], whitelist: list[ToolConfig]) -> dict[str, Any]:
    """Compile every whitelist entry, in order, into a ToolRecord."""
    tools: list[ToolRecord] = []
    formatters: dict[str, Formatter] = {}

    for config in whitelist:
        normalized = normalize_path(config.path)
        operation = get_operation(spec, normalized, config.method)
        if operation is None:
            logger.warning("%s %s not found in API description, skipping", config.method, config.path)
            continue

        params = _with_body_param(operation)
        name = resolve_tool_name(config.path)

        response_format = config.response_format
        formatter = None
        if response_format is not None and response_format.type == "simple":
            formatter = response_format.template
            formatters[name] = formatter

        fields, flatten = build_param_schema(config.path, params, config.omit_params)
        handler = build_handler(
            config.path,
            config.method,
            params,
            response_format.type if response_format else "json",
            name,
            flatten,
            formatter,
        )

        tools.append(ToolRecord(
            name=name,
            description=clean_description(operation),
            fields=tuple(fields),
            annotations=derive_annotations(config.method, config.path),
            handler=handler,
        ))

    return {
        "tools": tools,
        "formatters": formatters,
        "tool_count": len(tools),
        "api_version": spec.get("info", {}).get("version", "unknown"),
    }

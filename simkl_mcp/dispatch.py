"""Generic request dispatch for generated tools.

A ToolHandler is pure data: method, path template, query keys, flatten map
and response format. The generated module builds one per tool and binds it
to a client and token accessor at registration time.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, Union
from urllib.parse import quote

_PLACEHOLDER = re.compile(r":(\w+)")

# Same unreserved set as JavaScript's encodeURIComponent
_PATH_SAFE = "!~*'()"

BODY_METHODS = {"POST", "PUT", "PATCH"}

Formatter = Callable[[Any, dict[str, Any]], Union[str, list[str]]]
TokenAccessor = Callable[[], Optional[str]]
ToolResult = dict[str, Any]


class RequestClient(Protocol):
    async def request(
        self,
        endpoint: str,
        *,
        method: str,
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        token: Optional[str] = None,
    ) -> Any: ...


class MissingPathParameterError(ValueError):
    """A required placeholder (path or `?:name` marker) had no value at call time."""

    def __init__(self, name: str):
        super().__init__(f"missing required path parameter: {name}")
        self.name = name


def encode_path_value(value: Any, name: str) -> str:
    if value is None:
        raise MissingPathParameterError(name)
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe=_PATH_SAFE)


def text_content(formatted: Union[str, list[str]]) -> ToolResult:
    """Wrap formatter output in a tool result envelope, one item per string."""
    if isinstance(formatted, (list, tuple)):
        return {"content": [{"type": "text", "text": text} for text in formatted]}
    return {"content": [{"type": "text", "text": formatted}]}


@dataclass(frozen=True)
class ToolHandler:
    tool_name: str
    method: str
    path: str
    query_keys: tuple[str, ...] = ()
    flatten: dict[str, str] = field(default_factory=dict)
    response_type: str = "json"
    formatter: Optional[Formatter] = None

    def __post_init__(self) -> None:
        if self.response_type == "simple" and self.formatter is None:
            raise ValueError(f"{self.tool_name}: simple response format needs a formatter")

    @property
    def has_body(self) -> bool:
        return self.method.upper() in BODY_METHODS

    def build_endpoint(self, args: dict[str, Any]) -> tuple[str, list[str]]:
        """Substitute path placeholders; return the endpoint and query-style names."""
        path, _, marker_part = self.path.partition("?")
        endpoint = _PLACEHOLDER.sub(
            lambda m: encode_path_value(args.get(m.group(1)), m.group(1)),
            path,
        )
        return endpoint, _PLACEHOLDER.findall(marker_part)

    def build_query(self, args: dict[str, Any], markers: list[str]) -> dict[str, Any]:
        query = {}
        for key in markers:
            if args.get(key) is None:
                raise MissingPathParameterError(key)
            query[key] = args[key]
        for key in self.query_keys:
            value = args.get(key)
            if value is not None:
                query[key] = value
        return query

    def build_body(self, args: dict[str, Any]) -> Any:
        if not self.flatten:
            return args.get("body")
        body = {}
        for singular, plural in self.flatten.items():
            value = args.get(singular)
            if value is not None:
                body[plural] = [value]
        return body

    def format(self, result: Any, args: dict[str, Any]) -> ToolResult:
        if self.response_type == "simple":
            return text_content(self.formatter(result, args))
        return text_content(json.dumps(result, indent=2, ensure_ascii=False))

    async def __call__(
        self,
        client: RequestClient,
        get_token: TokenAccessor,
        args: dict[str, Any],
    ) -> ToolResult:
        endpoint, markers = self.build_endpoint(args)
        options: dict[str, Any] = {"method": self.method.upper()}

        query = self.build_query(args, markers)
        if query:
            options["query"] = query
        if self.has_body:
            options["body"] = self.build_body(args)

        # The token can rotate between calls
        result = await client.request(endpoint, token=get_token(), **options)
        return self.format(result, args)

    def bind(
        self,
        client: RequestClient,
        get_token: TokenAccessor,
    ) -> Callable[[dict[str, Any]], Awaitable[ToolResult]]:
        async def handle(args: dict[str, Any]) -> ToolResult:
            return await self(client, get_token, args)

        handle.__name__ = self.tool_name
        return handle

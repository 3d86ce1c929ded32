"""MCP resources: the user's watchlist and trending titles as text.

Two URI templates:
  simkl://watchlist/{type}/{status}   all pages of /sync/all-items/{type}/{status}
  simkl://trending/{type}/{interval}  /{type}/trending/{interval}

Every item is one text/plain content at {uri}#{index}.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .client import SimklClient
from .dispatch import TokenAccessor, encode_path_value

logger = logging.getLogger(__name__)

MIME_TYPE = "text/plain"
WATCHLIST_PAGE_SIZE = 100

ResourceContent = dict[str, str]
Reader = Callable[[SimklClient, TokenAccessor, str, dict[str, str]], Awaitable[list[ResourceContent]]]


class ResourceNotFoundError(LookupError):
    def __init__(self, uri: str):
        super().__init__(f"Unknown resource: {uri}")
        self.uri = uri


@dataclass(frozen=True)
class ResourceTemplate:
    name: str
    uri_template: str
    description: str
    # Allowed values per variable, in URI order
    variables: dict[str, tuple[str, ...]]
    read: Reader

    @property
    def pattern(self) -> re.Pattern[str]:
        regex = re.escape(self.uri_template)
        for variable in self.variables:
            regex = regex.replace(re.escape(f"{{{variable}}}"), f"(?P<{variable}>[^/#?]+)")
        return re.compile(f"^{regex}$")

    def match(self, uri: str) -> dict[str, str] | None:
        m = self.pattern.match(uri)
        return m.groupdict() if m else None

    def expand(self, **values: str) -> str:
        return self.uri_template.format(**values)

    def resources(self) -> list[dict[str, str]]:
        """Every concrete URI the template covers."""
        first, second = self.variables
        return [
            {
                "uri": self.expand(**{first: a, second: b}),
                "name": f"{self.name} {a} {b}",
                "description": f"{self.name}: {a} {b}",
            }
            for a in self.variables[first]
            for b in self.variables[second]
        ]

    def complete(self, variable: str, prefix: str) -> list[str]:
        return [v for v in self.variables.get(variable, ()) if v.startswith(prefix)]


def _contents(uri: str, lines: list[str], empty: str) -> list[ResourceContent]:
    if not lines:
        return [{"uri": uri, "mimeType": MIME_TYPE, "text": empty}]
    return [
        {"uri": f"{uri}#{index}", "mimeType": MIME_TYPE, "text": line}
        for index, line in enumerate(lines)
    ]


async def read_watchlist(
    client: SimklClient,
    get_token: TokenAccessor,
    uri: str,
    variables: dict[str, str],
) -> list[ResourceContent]:
    kind, status = variables["type"], variables["status"]
    endpoint = f"/sync/all-items/{encode_path_value(kind, 'type')}/{encode_path_value(status, 'status')}"

    items: list[Any] = []
    page, page_count = 1, 1
    while page <= page_count:
        result = await client.request_paginated(
            endpoint,
            query={"extended": "full"},
            token=get_token(),
            page=page,
            limit=WATCHLIST_PAGE_SIZE,
        )
        if isinstance(result.data, dict):
            items.extend(result.data.get(kind) or [])
        if result.pagination is not None:
            page_count = result.pagination.page_count
        page += 1

    lines = []
    for index, item in enumerate(items):
        media = item.get("show") or item.get("movie") or item.get("anime") or {}
        simkl_id = (media.get("ids") or {}).get("simkl") or "unknown"
        added = (item.get("added_to_watchlist_at") or "").split("T")[0] or "unknown"
        lines.append(
            f"{index}: [SIMKL #{simkl_id}] - {media.get('title') or 'unknown'}"
            f" ({media.get('year') or 'N/A'}) - added on {added}"
        )
    return _contents(uri, lines, f"no {kind} with status {status}")


async def read_trending(
    client: SimklClient,
    get_token: TokenAccessor,
    uri: str,
    variables: dict[str, str],
) -> list[ResourceContent]:
    kind, interval = variables["type"], variables["interval"]
    endpoint = f"/{encode_path_value(kind, 'type')}/trending/{encode_path_value(interval, 'interval')}"
    items = await client.request(endpoint, query={"extended": "full"}) or []

    lines = []
    for index, item in enumerate(items):
        ids = item.get("ids") or {}
        rating = ((item.get("ratings") or {}).get("simkl") or {}).get("rating") or "N/A"
        lines.append(
            f"{index}: [SIMKL #{ids.get('simkl') or ids.get('simkl_id') or 'unknown'}]"
            f" - {item.get('title') or 'unknown'} ({item.get('year') or 'N/A'}) - rating: {rating}"
        )
    return _contents(uri, lines, f"no trending {kind} for {interval}")


RESOURCE_TEMPLATES: list[ResourceTemplate] = [
    ResourceTemplate(
        name="watchlist",
        uri_template="simkl://watchlist/{type}/{status}",
        description="user watchlist by type and status",
        variables={
            "type": ("shows", "movies", "anime"),
            "status": ("watching", "plantowatch", "hold", "completed", "dropped"),
        },
        read=read_watchlist,
    ),
    ResourceTemplate(
        name="trending",
        uri_template="simkl://trending/{type}/{interval}",
        description="trending content by type and interval",
        variables={
            "type": ("tv", "movies", "anime"),
            "interval": ("daily", "weekly", "monthly"),
        },
        read=read_trending,
    ),
]


def find_template(uri_template: str) -> ResourceTemplate | None:
    return next((t for t in RESOURCE_TEMPLATES if t.uri_template == uri_template), None)


async def read_resource(client: SimklClient, get_token: TokenAccessor, uri: str) -> list[ResourceContent]:
    """Read a simkl:// URI; raises ResourceNotFoundError when no template matches."""
    for template in RESOURCE_TEMPLATES:
        variables = template.match(uri)
        if variables is not None:
            logger.debug("Reading %s resource %s", template.name, uri)
            return await template.read(client, get_token, uri, variables)
    raise ResourceNotFoundError(uri)

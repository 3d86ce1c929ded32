"""Whitelist of Simkl API operations exposed as MCP tools.

Each entry names a path (Simkl docs syntax, :name placeholders) and method.
Entries with a "simple" response format point at a module-level formatter
taking (result, args) and returning a string or a list of strings; the
generated module imports formatters from here by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .dispatch import Formatter


@dataclass(frozen=True)
class ResponseFormat:
    type: str = "json"
    template: Optional[Formatter] = None

    def __post_init__(self) -> None:
        if self.type not in ("json", "simple"):
            raise ValueError(f"Unknown response format: {self.type}")
        if self.type == "simple" and self.template is None:
            raise ValueError("simple response format needs a template")


@dataclass(frozen=True)
class ToolConfig:
    path: str
    method: str
    response_format: Optional[ResponseFormat] = None
    omit_params: frozenset[str] = field(default_factory=frozenset)


JSON = ResponseFormat("json")


def simple(template: Formatter) -> ResponseFormat:
    return ResponseFormat("simple", template)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

def _simkl_id(item: dict[str, Any]) -> Any:
    ids = item.get("ids") or {}
    return ids.get("simkl_id") or ids.get("simkl")


def _media_title(args: dict[str, Any], kinds: tuple[str, ...] = ("movie", "show")) -> str:
    body = args.get("body") or {}
    for kind in kinds:
        media = args.get(kind) or body.get(kind)
        if media and media.get("title"):
            return media["title"]
    return "unknown"


def format_search_results(results: Any, args: dict[str, Any]) -> list[str]:
    results = results or []
    if not results:
        return [f'no results for "{args.get("q")}"']
    return [
        f"{i}: [SIMKL #{(r.get('ids') or {}).get('simkl_id')}] - {r.get('title')}"
        f" ({r.get('year') or 'N/A'}) - imdb:{(r.get('ids') or {}).get('imdb') or 'N/A'}"
        for i, r in enumerate(results[:10])
    ]


def format_scrobble_start(_: Any, args: dict[str, Any]) -> str:
    return f"started: {_media_title(args)}"


def format_scrobble_pause(_: Any, args: dict[str, Any]) -> str:
    progress = args.get("progress")
    if progress is None:
        progress = (args.get("body") or {}).get("progress")
    return f"paused at {progress}%: {_media_title(args)}"


def format_scrobble_stop(_: Any, args: dict[str, Any]) -> str:
    return f"stopped: {_media_title(args)}"


def format_added_to_watchlist(_: Any, args: dict[str, Any]) -> str:
    return f"added to watchlist: {_media_title(args, ('movie', 'show', 'anime'))}"


def format_title_list(results: Any, args: dict[str, Any]) -> list[str]:
    return [
        f"{i}: [SIMKL #{_simkl_id(r)}] - {r.get('title')} ({r.get('year') or 'N/A'})"
        for i, r in enumerate((results or [])[:20])
    ]


def format_best_list(results: Any, args: dict[str, Any]) -> list[str]:
    lines = []
    for i, r in enumerate((results or [])[:20]):
        rating = ((r.get("ratings") or {}).get("simkl") or {}).get("rating") or "N/A"
        lines.append(
            f"{i}: [SIMKL #{_simkl_id(r)}] - {r.get('title')} ({r.get('year') or 'N/A'}) - rating: {rating}"
        )
    return lines


def format_airing_list(results: Any, args: dict[str, Any]) -> list[str]:
    lines = []
    for i, r in enumerate((results or [])[:20]):
        episode = (r.get("episode") or {}).get("episode") or "?"
        lines.append(
            f"{i}: [SIMKL #{_simkl_id(r)}] - {r.get('title')} - ep {episode} at {r.get('date') or 'TBA'}"
        )
    return lines


def format_watchlist(response: Any, args: dict[str, Any]) -> list[str]:
    kind = args.get("type")
    items = []
    if isinstance(response, dict):
        items = response.get(kind) or []
    if not items:
        return [f"no {kind} with status {args.get('status')}"]

    lines = []
    for i, item in enumerate(items[:20]):
        media = item.get("show") or item.get("movie") or item.get("anime") or {}
        title = media.get("title") or "unknown"
        year = media.get("year") or "N/A"
        simkl_id = (media.get("ids") or {}).get("simkl") or "unknown"
        watched = item.get("watched_episodes_count") or 0
        total = item.get("total_episodes_count") or 0
        progress = f" - {watched}/{total} episodes" if total > 0 else ""
        lines.append(f"{i}: [SIMKL #{simkl_id}] - {title} ({year}){progress}")
    return lines


# ---------------------------------------------------------------------------
# Whitelist
# ---------------------------------------------------------------------------

TOOLS_WHITELIST: list[ToolConfig] = [
    # search
    ToolConfig("/search/:type", "get", simple(format_search_results)),
    ToolConfig("/search/id", "get", JSON),

    # scrobble
    ToolConfig("/scrobble/start", "post", simple(format_scrobble_start)),
    ToolConfig("/scrobble/pause", "post", simple(format_scrobble_pause)),
    ToolConfig("/scrobble/stop", "post", simple(format_scrobble_stop)),

    # sync
    ToolConfig("/sync/add-to-list", "post", simple(format_added_to_watchlist)),
    ToolConfig("/sync/history", "post", JSON),
    ToolConfig("/sync/history/remove", "post", JSON),
    ToolConfig("/sync/ratings", "post", JSON),
    ToolConfig("/sync/ratings/remove", "post", JSON),

    # discovery
    ToolConfig("/tv/trending/:interval", "get", simple(format_title_list)),
    ToolConfig("/movies/trending/:interval", "get", simple(format_title_list)),
    ToolConfig("/anime/trending/:interval", "get", simple(format_title_list)),

    ToolConfig("/tv/:id", "get", JSON),
    ToolConfig("/movies/:id", "get", JSON),
    ToolConfig("/anime/:id", "get", JSON),

    ToolConfig("/tv/episodes/:id", "get", JSON),
    ToolConfig("/anime/episodes/:id", "get", JSON),

    ToolConfig("/tv/best/:filter", "get", simple(format_best_list)),
    ToolConfig("/anime/best/:filter", "get", simple(format_best_list)),

    ToolConfig("/tv/airing?:date", "get", simple(format_airing_list)),
    ToolConfig("/anime/airing?:date", "get", simple(format_airing_list)),

    # genre filtering
    ToolConfig("/tv/genres/:genre/:type/:country/:network/:year/:sort", "get", simple(format_title_list)),
    ToolConfig("/anime/genres/:genre/:type/:network/:year/:sort", "get", simple(format_title_list)),
    ToolConfig("/movies/genres/:genre/:type/:country/:year/:sort", "get", simple(format_title_list)),

    # user stats
    ToolConfig("/users/:user_id/stats", "post", JSON),

    # watchlist (sync)
    ToolConfig("/sync/all-items/:type/:status", "get", simple(format_watchlist)),
]

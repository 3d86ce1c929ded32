"""Map whitelist paths to MCP tool names.

Whitelist paths use the Simkl docs syntax:
  - :name     path placeholder        /tv/:id          -> /tv/{id}
  - ?:name    query-style placeholder /tv/airing?:date -> /tv/airing?{date}

Tool names come from a fixed table keyed by the raw whitelist path. There is
no fallback: an unknown path means the API surface moved and a human has to
pick the name.

Examples:
  /search/:type               -> simkl_search_by_text
  /sync/all-items/:type/:status -> simkl_get_watchlist
  /tv/airing?:date            -> simkl_get_airing_shows
"""

from __future__ import annotations

import re

_PLACEHOLDER = re.compile(r":(\w+)")

TOOL_NAMES: dict[str, str] = {
    "/search/:type": "simkl_search_by_text",
    "/search/id": "simkl_search_by_id",
    "/scrobble/start": "simkl_start_watching",
    "/scrobble/pause": "simkl_pause_watching",
    "/scrobble/stop": "simkl_stop_watching",
    "/sync/add-to-list": "simkl_add_to_watchlist",
    "/sync/history": "simkl_mark_watched",
    "/sync/history/remove": "simkl_remove_from_history",
    "/sync/ratings": "simkl_add_rating",
    "/sync/ratings/remove": "simkl_remove_rating",
    "/sync/all-items/:type/:status": "simkl_get_watchlist",
    "/tv/trending/:interval": "simkl_get_trending_shows",
    "/movies/trending/:interval": "simkl_get_trending_movies",
    "/anime/trending/:interval": "simkl_get_trending_anime",
    "/tv/:id": "simkl_get_show_by_id",
    "/movies/:id": "simkl_get_movie_by_id",
    "/anime/:id": "simkl_get_anime_by_id",
    "/tv/episodes/:id": "simkl_get_show_episodes",
    "/anime/episodes/:id": "simkl_get_anime_episodes",
    "/tv/best/:filter": "simkl_get_best_shows",
    "/anime/best/:filter": "simkl_get_best_anime",
    "/tv/airing?:date": "simkl_get_airing_shows",
    "/anime/airing?:date": "simkl_get_airing_anime",
    "/tv/genres/:genre/:type/:country/:network/:year/:sort": "simkl_get_shows_by_genre",
    "/anime/genres/:genre/:type/:network/:year/:sort": "simkl_get_anime_by_genre",
    "/movies/genres/:genre/:type/:country/:year/:sort": "simkl_get_movies_by_genre",
    "/users/:user_id/stats": "simkl_get_user_stats",
}


class ToolNameError(LookupError):
    """Raised when a whitelist path has no entry in TOOL_NAMES."""

    def __init__(self, path: str):
        super().__init__(f"No name mapping found for path: {path}")
        self.path = path


def normalize_path(path: str) -> str:
    """Rewrite :name placeholders to the {name} form used by the API description."""
    return _PLACEHOLDER.sub(r"{\1}", path)


def extract_path_params(path: str) -> list[str]:
    """Return placeholder names in left-to-right order, query-style ones included."""
    return _PLACEHOLDER.findall(path)


def extract_query_placeholders(path: str) -> list[str]:
    """Return the names of ?:name placeholders."""
    if "?" not in path:
        return []
    return _PLACEHOLDER.findall(path.split("?", 1)[1])


def resolve_tool_name(path: str) -> str:
    """Look up the tool name for a raw whitelist path."""
    name = TOOL_NAMES.get(path)
    if name is None:
        raise ToolNameError(path)
    return name

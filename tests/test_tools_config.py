"""Tests for the whitelist, its naming table and the response formatters."""

import inspect

import pytest

from generator.naming import TOOL_NAMES, normalize_path
from simkl_mcp import tools_config
from simkl_mcp.config import Settings, env_token, load_settings
from simkl_mcp.tools_config import (
    TOOLS_WHITELIST,
    ResponseFormat,
    format_airing_list,
    format_best_list,
    format_scrobble_pause,
    format_scrobble_start,
    format_search_results,
    format_title_list,
    format_watchlist,
)


class TestWhitelist:
    """Whitelist and naming table must agree."""

    def test_every_path_is_named(self):
        for entry in TOOLS_WHITELIST:
            assert entry.path in TOOL_NAMES

    def test_table_covers_exactly_the_whitelist(self):
        assert {entry.path for entry in TOOLS_WHITELIST} == set(TOOL_NAMES)

    def test_names_are_unique(self):
        assert len(set(TOOL_NAMES.values())) == len(TOOL_NAMES)

    def test_no_duplicate_operations(self):
        keys = [(normalize_path(e.path), e.method) for e in TOOLS_WHITELIST]
        assert len(keys) == len(set(keys))

    def test_methods_are_lowercase(self):
        assert {e.method for e in TOOLS_WHITELIST} <= {"get", "post"}

    def test_simple_formatters_are_importable_by_name(self):
        for entry in TOOLS_WHITELIST:
            fmt = entry.response_format
            if fmt is None or fmt.type != "simple":
                continue
            assert inspect.isfunction(fmt.template)
            assert getattr(tools_config, fmt.template.__name__) is fmt.template


class TestResponseFormat:
    def test_simple_requires_template(self):
        with pytest.raises(ValueError, match="template"):
            ResponseFormat("simple")

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown response format"):
            ResponseFormat("xml")


class TestFormatters:
    def test_search_results(self):
        results = [
            {"title": "Alien", "year": 1979, "ids": {"simkl_id": 1, "imdb": "tt0078748"}},
            {"title": "Aliens", "ids": {"simkl_id": 2}},
        ]
        assert format_search_results(results, {"q": "alien"}) == [
            "0: [SIMKL #1] - Alien (1979) - imdb:tt0078748",
            "1: [SIMKL #2] - Aliens (N/A) - imdb:N/A",
        ]

    def test_search_results_capped_at_ten(self):
        results = [{"title": str(i), "ids": {}} for i in range(15)]
        assert len(format_search_results(results, {"q": "x"})) == 10

    def test_no_search_results(self):
        assert format_search_results([], {"q": "zzz"}) == ['no results for "zzz"']

    def test_scrobble_start_reads_body(self):
        args = {"body": {"progress": 5, "movie": {"title": "Heat"}}}
        assert format_scrobble_start({}, args) == "started: Heat"

    def test_scrobble_pause(self):
        args = {"body": {"progress": 42.5, "show": {"title": "Lost"}}}
        assert format_scrobble_pause({}, args) == "paused at 42.5%: Lost"

    def test_scrobble_unknown_title(self):
        assert format_scrobble_start({}, {}) == "started: unknown"

    def test_title_list(self):
        results = [{"title": "Dune", "year": 2021, "ids": {"simkl_id": 9}}]
        assert format_title_list(results, {}) == ["0: [SIMKL #9] - Dune (2021)"]

    def test_title_list_falls_back_to_simkl_key(self):
        results = [{"title": "Dune", "ids": {"simkl": 9}}]
        assert format_title_list(results, {}) == ["0: [SIMKL #9] - Dune (N/A)"]

    def test_best_list(self):
        results = [{"title": "Fargo", "year": 2014, "ids": {"simkl_id": 3}, "ratings": {"simkl": {"rating": 8.9}}}]
        assert format_best_list(results, {}) == ["0: [SIMKL #3] - Fargo (2014) - rating: 8.9"]

    def test_airing_list(self):
        results = [{"title": "Severance", "ids": {"simkl_id": 4}, "episode": {"episode": 3}, "date": "2025-01-31"}]
        assert format_airing_list(results, {}) == ["0: [SIMKL #4] - Severance - ep 3 at 2025-01-31"]

    def test_watchlist(self):
        response = {
            "shows": [{
                "show": {"title": "Lost", "year": 2004, "ids": {"simkl": 7}},
                "watched_episodes_count": 10,
                "total_episodes_count": 121,
            }],
        }
        args = {"type": "shows", "status": "watching"}
        assert format_watchlist(response, args) == ["0: [SIMKL #7] - Lost (2004) - 10/121 episodes"]

    def test_empty_watchlist(self):
        assert format_watchlist(None, {"type": "movies", "status": "plantowatch"}) == [
            "no movies with status plantowatch",
        ]


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SIMKL_API_BASE_URL", "SIMKL_CLIENT_ID", "SIMKL_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        assert load_settings() == Settings()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SIMKL_API_BASE_URL", "http://localhost:8080")
        monkeypatch.setenv("SIMKL_CLIENT_ID", "abc")
        monkeypatch.setenv("SIMKL_TIMEOUT", "5")
        assert load_settings() == Settings("http://localhost:8080", "abc", 5.0)

    def test_token_read_each_time(self, monkeypatch):
        monkeypatch.delenv("SIMKL_ACCESS_TOKEN", raising=False)
        assert env_token() is None
        monkeypatch.setenv("SIMKL_ACCESS_TOKEN", "fresh")
        assert env_token() == "fresh"

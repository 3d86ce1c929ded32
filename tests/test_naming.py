"""Tests for the naming module."""

import pytest

from generator.naming import (
    TOOL_NAMES,
    ToolNameError,
    extract_path_params,
    extract_query_placeholders,
    normalize_path,
    resolve_tool_name,
)


class TestNormalizePath:
    """Test :name -> {name} rewriting."""

    def test_no_placeholders(self):
        assert normalize_path("/search/id") == "/search/id"

    def test_single_placeholder(self):
        assert normalize_path("/tv/:id") == "/tv/{id}"

    def test_multiple_placeholders(self):
        assert normalize_path("/sync/all-items/:type/:status") == "/sync/all-items/{type}/{status}"

    def test_query_placeholder(self):
        assert normalize_path("/tv/airing?:date") == "/tv/airing?{date}"

    def test_underscore_names(self):
        assert normalize_path("/users/:user_id/stats") == "/users/{user_id}/stats"


class TestExtractPathParams:
    """Test placeholder extraction order."""

    def test_genre_path_order(self):
        params = extract_path_params("/tv/genres/:genre/:type/:country/:network/:year/:sort")
        assert params == ["genre", "type", "country", "network", "year", "sort"]

    def test_anime_genre_path_order(self):
        params = extract_path_params("/anime/genres/:genre/:type/:network/:year/:sort")
        assert params == ["genre", "type", "network", "year", "sort"]

    def test_no_placeholders(self):
        assert extract_path_params("/scrobble/start") == []

    def test_query_placeholder_included(self):
        assert extract_path_params("/tv/airing?:date") == ["date"]

    def test_query_placeholders_only_after_question_mark(self):
        assert extract_query_placeholders("/tv/airing?:date") == ["date"]
        assert extract_query_placeholders("/tv/:id") == []


class TestResolveToolName:
    """Test the static name table."""

    def test_search(self):
        assert resolve_tool_name("/search/:type") == "simkl_search_by_text"

    def test_watchlist(self):
        assert resolve_tool_name("/sync/all-items/:type/:status") == "simkl_get_watchlist"

    def test_query_style_path(self):
        assert resolve_tool_name("/tv/airing?:date") == "simkl_get_airing_shows"

    def test_unknown_path_is_fatal(self):
        with pytest.raises(ToolNameError) as exc:
            resolve_tool_name("/lists/:id")
        assert "/lists/:id" in str(exc.value)
        assert exc.value.path == "/lists/:id"

    def test_lookup_uses_raw_path(self):
        """Normalized paths are not keys of the table."""
        with pytest.raises(ToolNameError):
            resolve_tool_name("/tv/{id}")

    def test_names_are_unique(self):
        names = list(TOOL_NAMES.values())
        assert len(names) == len(set(names))

    def test_names_prefixed_and_valid_identifiers(self):
        for name in TOOL_NAMES.values():
            assert name.startswith("simkl_")
            assert name.isidentifier()

"""Shared fixtures for the Simkl tool compiler and runtime tests.

SIMKL_SPEC is a trimmed OpenAPI description covering the shapes the
whitelist relies on: enum path params, query-style placeholders, request
bodies with and without array-of-object properties.
"""

from __future__ import annotations

import copy
import importlib.util
from types import ModuleType
from typing import Any

import pytest

from generator.codegen import render
from generator.context_builder import build_context


def _object_array(**properties: Any) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "object", "properties": properties}}


SIMKL_SPEC: dict[str, Any] = {
    "openapi": "3.0.0",
    "info": {"title": "Simkl API", "version": "1.0-test"},
    "paths": {
        "/search/{type}": {
            "get": {
                "summary": "Search by <b>text</b>",
                "parameters": [
                    {
                        "name": "type",
                        "in": "path",
                        "required": True,
                        "schema": {"type": "string", "enum": ["tv", "anime", "movie"]},
                        "description": "Media\ntype",
                    },
                    {"name": "q", "in": "query", "required": True, "schema": {"type": "string"}, "description": "Search query"},
                    {"name": "page", "in": "query", "schema": {"type": "integer"}},
                    {"name": "client_id", "in": "query", "required": True, "schema": {"type": "string"}},
                ],
            },
        },
        "/search/id": {
            "get": {
                "description": "Find items by external id.\nAccepts imdb, tvdb and others.",
                "parameters": [
                    {"name": "imdb", "in": "query", "schema": {"type": "string"}},
                    {"name": "simkl", "in": "query", "schema": {"type": "integer"}},
                ],
            },
        },
        "/scrobble/start": {
            "post": {
                "summary": "Start watching",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "progress": {"type": "number"},
                                    "movie": {
                                        "type": "object",
                                        "properties": {"title": {"type": "string"}},
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
        "/sync/history": {
            "post": {
                "summary": "Add items to watched history",
                "parameters": [
                    {"name": "Authorization", "in": "header", "required": True, "schema": {"type": "string"}},
                ],
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "movies": _object_array(title={"type": "string"}),
                                    "shows": _object_array(title={"type": "string"}),
                                },
                            },
                        },
                    },
                },
            },
        },
        "/sync/ratings/remove": {
            "post": {
                "summary": "Remove ratings",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "movies": _object_array(title={"type": "string"}, year={"type": "integer"}),
                                },
                            },
                        },
                    },
                },
            },
        },
        "/tv/{id}": {
            "get": {
                "summary": "Get TV show details",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                    {"name": "extended", "in": "query", "schema": {"type": "string", "enum": ["full"]}},
                ],
            },
        },
        "/tv/airing?{date}": {
            "get": {
                "summary": "Airing shows",
                "parameters": [
                    {"name": "date", "in": "query", "schema": {"type": "string"}, "description": "today, tomorrow or a date"},
                    {"name": "sort", "in": "query", "schema": {"type": "string", "enum": ["time", "rank"]}},
                ],
            },
        },
        "/tv/genres/{genre}/{type}/{country}/{network}/{year}/{sort}": {
            "get": {
                "summary": "Shows by genre",
                "parameters": [
                    {"name": "genre", "in": "path", "required": True, "schema": {"type": "string"}},
                    {"name": "page", "in": "query", "schema": {"type": "integer"}},
                ],
            },
        },
        "/sync/all-items/{type}/{status}": {
            "get": {
                "summary": "Get all items in the user's watchlist",
                "parameters": [
                    {
                        "name": "type",
                        "in": "path",
                        "required": True,
                        "schema": {"type": "string", "enum": ["shows", "movies", "anime"]},
                    },
                    {
                        "name": "status",
                        "in": "path",
                        "required": True,
                        "schema": {"type": "string", "enum": ["watching", "plantowatch", "completed"]},
                    },
                    {"name": "extended", "in": "query", "schema": {"type": "string"}},
                ],
            },
        },
        "/users/{user_id}/stats": {
            "post": {
                "summary": "Get user stats",
                "parameters": [
                    {"name": "user_id", "in": "path", "required": True, "schema": {"type": "number"}},
                ],
            },
        },
    },
}


class FakeClient:
    """Records request() calls and returns a canned response."""

    def __init__(self, response: Any = None):
        self.response = response
        self.calls: list[dict[str, Any]] = []

    async def request(self, endpoint, *, method, query=None, body=None, token=None):
        self.calls.append({
            "endpoint": endpoint,
            "method": method,
            "query": query,
            "body": body,
            "token": token,
        })
        return self.response


@pytest.fixture
def spec() -> dict[str, Any]:
    """A fresh copy of the fixture description for each test."""
    return copy.deepcopy(SIMKL_SPEC)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


def load_module(source: str, tmp_path, name: str) -> ModuleType:
    path = tmp_path / f"{name}.py"
    path.write_text(source, encoding="utf-8")
    module_spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def generated(spec, tmp_path) -> ModuleType:
    """Render the real whitelist against the fixture spec and import the result."""
    from simkl_mcp.tools_config import TOOLS_WHITELIST

    context = build_context(spec, TOOLS_WHITELIST)
    return load_module(render(context), tmp_path, "generated_tools_under_test")

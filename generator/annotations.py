"""MCP tool annotations derived from HTTP method and path."""

from __future__ import annotations

_IDEMPOTENT_METHODS = {"get", "put", "delete"}
_DESTRUCTIVE_PATH_WORDS = ("remove", "delete")


def derive_annotations(method: str, path: str) -> dict[str, bool]:
    """Return the hints that apply, e.g. {"readOnlyHint": True, "idempotentHint": True}."""
    method = method.lower()
    hints: dict[str, bool] = {}

    if method == "get":
        hints["readOnlyHint"] = True

    if method == "delete" or any(word in path for word in _DESTRUCTIVE_PATH_WORDS):
        hints["destructiveHint"] = True

    if method in _IDEMPOTENT_METHODS:
        hints["idempotentHint"] = True

    return hints

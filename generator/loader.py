"""Load the Simkl OpenAPI description.

Reads spec/simkl-openapi3.json and looks operations up by normalized path.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

SPEC_PATH = Path(__file__).parent.parent / "spec" / "simkl-openapi3.json"


def load_spec(path: Path | None = None) -> dict[str, Any]:
    """Load the OpenAPI description from disk."""
    spec_file = path or SPEC_PATH
    with open(spec_file, encoding="utf-8") as f:
        return json.load(f)


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths", {})


def get_operation(spec: dict[str, Any], path: str, method: str) -> dict[str, Any] | None:
    """Return the operation for a normalized path and method, or None."""
    path_item = get_paths(spec).get(path) or {}
    return path_item.get(method.lower())

"""Turn OpenAPI parameter lists into pydantic field declarations.

Handles:
- Path placeholders (:id, :type) and query-style placeholders (?:date)
- Query parameters (optional unless the caller says otherwise)
- Request body (synthetic "body" parameter)
- Array-of-object body properties flattened to one singular field
- Enum values as Literal[...]
- Recursion cap for self-referencing schemas

Type expressions are plain strings evaluated by the generated module, where
Any, Literal, Optional, Union, create_model and PASSTHROUGH are in scope.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from .naming import extract_path_params, extract_query_placeholders

logger = logging.getLogger(__name__)

MAX_DEPTH = 5
DESCRIPTION_LIMIT = 200

# Query parameter the HTTP client adds to every request
CLIENT_ID_PARAM = "client_id"

ANY_TYPE = "Any"
NUMBER_TYPE = "Union[int, float]"

_SINGULAR_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"movies$", re.IGNORECASE), "movie"),
    (re.compile(r"shows$", re.IGNORECASE), "show"),
    (re.compile(r"series$", re.IGNORECASE), "series"),
    (re.compile(r"episodes$", re.IGNORECASE), "episode"),
    (re.compile(r"anime$", re.IGNORECASE), "anime"),
    (re.compile(r"ies$", re.IGNORECASE), "y"),
    (re.compile(r"s$", re.IGNORECASE), ""),
]


@dataclass(frozen=True)
class ParamField:
    """One argument of a generated tool."""

    name: str
    type_expr: str
    required: bool = True
    description: str = ""
    origin: str = "path"

    @property
    def annotation(self) -> str:
        if self.required:
            return self.type_expr
        return f"Optional[{self.type_expr}]"

    @property
    def default(self) -> str:
        return "..." if self.required else "None"


def _strip_html(text: str) -> str:
    """Strip HTML tags and collapse whitespace."""
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text


def clean_param_description(text: str | None) -> str:
    if not text:
        return ""
    return _strip_html(text)[:DESCRIPTION_LIMIT]


def singularize(word: str) -> str:
    """Singular form of a Simkl body property name (movies -> movie)."""
    for pattern, replacement in _SINGULAR_RULES:
        if pattern.search(word):
            return pattern.sub(replacement, word, count=1)
    return word


def _model_name(word: str) -> str:
    parts = re.split(r"[^0-9a-zA-Z]+", word)
    return "".join(p[:1].upper() + p[1:] for p in parts if p) or "Object"


def _literal(values: list[Any]) -> str:
    return "Literal[" + ", ".join(repr(v) for v in values) + "]"


def _object_expr(schema: dict[str, Any], depth: int, name: str) -> str:
    required = set(schema.get("required") or [])
    entries = []
    for prop_name, prop_schema in schema["properties"].items():
        prop_type = translate_schema(prop_schema, depth + 1, name + _model_name(prop_name))
        if prop_name in required:
            entries.append(f"{prop_name!r}: ({prop_type}, ...)")
        else:
            entries.append(f"{prop_name!r}: (Optional[{prop_type}], None)")
    fields = ", ".join(entries)
    return f"create_model({name!r}, __config__=PASSTHROUGH, **{{{fields}}})"


def translate_schema(schema: dict[str, Any] | None, depth: int = 0, name: str = "Object") -> str:
    """Translate a JSON schema fragment into a pydantic type expression.

    Anything deeper than MAX_DEPTH levels, or any $ref, becomes Any. This
    keeps self-referencing schemas finite.
    """
    if not schema or depth > MAX_DEPTH:
        return ANY_TYPE

    if "$ref" in schema:
        return ANY_TYPE

    schema_type = schema.get("type")

    if schema_type == "array":
        items = schema.get("items")
        item_type = translate_schema(items, depth + 1, name + "Item") if items else ANY_TYPE
        return f"list[{item_type}]"

    if schema_type == "object" and schema.get("properties"):
        return _object_expr(schema, depth, name)

    if schema.get("enum"):
        return _literal(schema["enum"])

    if schema_type == "string":
        return "str"
    if schema_type in ("number", "integer"):
        return NUMBER_TYPE
    if schema_type == "boolean":
        return "bool"
    if schema_type == "object":
        return "dict[str, Any]"

    return ANY_TYPE


def _scalar_type(schema: dict[str, Any], name: str) -> str:
    """Direct dispatch for non-body parameters."""
    if schema.get("enum"):
        return _literal(schema["enum"])

    schema_type = schema.get("type")
    if schema_type in ("integer", "number"):
        return NUMBER_TYPE
    if schema_type == "boolean":
        return "bool"
    if schema_type == "string":
        return "str"
    if schema_type == "array":
        items = schema.get("items")
        return f"list[{translate_schema(items, 0, _model_name(name) + 'Item')}]" if items else "list[Any]"
    return ANY_TYPE


def _placeholder_type(schema: dict[str, Any]) -> str:
    if schema.get("enum"):
        return _literal(schema["enum"])
    if schema.get("type") == "number":
        return NUMBER_TYPE
    return "str"


def _is_object_array(schema: dict[str, Any]) -> bool:
    return schema.get("type") == "array" and (schema.get("items") or {}).get("type") == "object"


def _flatten_body(
    schema: dict[str, Any],
    fields: list[ParamField],
    flatten: dict[str, str],
) -> bool:
    """Emit one singular field per array-of-object property.

    Returns True when anything was flattened; the caller then skips the
    regular body field for this parameter.
    """
    dropped = []
    flattened = []
    for prop_name, prop_schema in schema["properties"].items():
        if not _is_object_array(prop_schema):
            dropped.append(prop_name)
            continue
        singular = singularize(prop_name)
        item_type = translate_schema(prop_schema["items"], 1, _model_name(singular))
        fields.append(ParamField(
            name=singular,
            type_expr=item_type,
            required=False,
            origin="flattened",
        ))
        flatten[singular] = prop_name
        flattened.append(prop_name)

    if not flattened:
        return False
    if dropped:
        logger.warning(
            "Body flattening drops non-array fields %s (flattened: %s)",
            ", ".join(dropped),
            ", ".join(flattened),
        )
    return True


def build_param_schema(
    path: str,
    params: list[dict[str, Any]],
    omit: frozenset[str] | set[str] = frozenset(),
) -> tuple[list[ParamField], dict[str, str]]:
    """Build the ordered argument list and flatten map for one operation.

    Placeholders come first, in path order, and are always required; query
    style ones (`?:date`) take type and description from their query
    descriptor. Every other parameter follows in the order the API
    description lists them.
    """
    fields: list[ParamField] = []
    flatten: dict[str, str] = {}
    query_placeholders = set(extract_query_placeholders(path))

    for placeholder in extract_path_params(path):
        if placeholder in omit:
            continue

        location = "query" if placeholder in query_placeholders else "path"
        existing = next(
            (p for p in params if p.get("name") == placeholder and p.get("in") == location),
            None,
        )
        if existing is None:
            fields.append(ParamField(
                name=placeholder,
                type_expr="str",
                required=True,
                origin=location,
            ))
            continue

        fields.append(ParamField(
            name=placeholder,
            type_expr=_placeholder_type(existing.get("schema") or {}),
            required=True,
            description=clean_param_description(existing.get("description")),
            origin=location,
        ))

    for param in params:
        location = param.get("in", "query")
        name = param.get("name", "")
        if location in ("header", "path") or name == CLIENT_ID_PARAM or name in omit:
            continue
        if location == "query" and name in query_placeholders:
            continue

        schema = param.get("schema") or {}

        if location == "body" and schema.get("type") == "object" and schema.get("properties"):
            if _flatten_body(schema, fields, flatten):
                continue

        field_name = "body" if location == "body" else name
        required = param.get("required") is not False and location != "query"

        if location == "body" or (schema.get("type") == "object" and schema.get("properties")):
            type_expr = translate_schema(schema, 0, _model_name(field_name))
        else:
            type_expr = _scalar_type(schema, field_name)

        fields.append(ParamField(
            name=field_name,
            type_expr=type_expr,
            required=required,
            description=clean_param_description(param.get("description")),
            origin=location,
        ))

    return fields, flatten

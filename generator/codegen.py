"""Render templates and write generated output.

Takes the context from context_builder and produces
simkl_mcp/generated/tools.py.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

from simkl_mcp import tools_config

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"
OUTPUT_PATH = Path(__file__).parent.parent / "simkl_mcp" / "generated" / "tools.py"


def _formatter_name(formatter: Any) -> str:
    """Name under which the generated module can import a formatter."""
    name = getattr(formatter, "__name__", "")
    if getattr(tools_config, name, None) is not formatter:
        raise ValueError(
            f"Formatter {formatter!r} must be a module-level function in simkl_mcp.tools_config"
        )
    return name


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    env.filters["formatter_name"] = _formatter_name
    return env


def render(context: dict[str, Any]) -> str:
    """Render the tools template to Python source."""
    template = _environment().get_template("tools.py.j2")
    return template.render(**context)


def generate(context: dict[str, Any], output_path: Path | None = None) -> Path:
    """Render the tools template and write it to output_path."""
    output = render(context)

    output_path = output_path or OUTPUT_PATH
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output, encoding="utf-8")

    print(f"Generated {output_path} ({context['tool_count']} tools)")
    return output_path

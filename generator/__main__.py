"""Entry point: python -m generator

Reads spec/simkl-openapi3.json and the whitelist in simkl_mcp/tools_config.py,
generates simkl_mcp/generated/tools.py.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from simkl_mcp.tools_config import TOOLS_WHITELIST

from .codegen import OUTPUT_PATH, generate
from .context_builder import build_context
from .loader import SPEC_PATH, load_spec


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="python -m generator")
    parser.add_argument("--spec", type=Path, default=SPEC_PATH, help="OpenAPI description (JSON)")
    parser.add_argument("--output", type=Path, default=OUTPUT_PATH, help="generated module path")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    spec = load_spec(args.spec)
    context = build_context(spec, TOOLS_WHITELIST)
    generate(context, args.output)

if __name__ == "__main__":
    main()

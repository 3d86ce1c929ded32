"""Entry point: python -m simkl_mcp

Serves the generated tools over stdio. Logs go to stderr; stdout is the MCP
channel.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from .server import serve


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(serve())

if __name__ == "__main__":
    main()

"""Simkl MCP server: generated Simkl API tools plus their runtime."""

__version__ = "1.0.0"

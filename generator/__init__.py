"""Build-time compiler from the Simkl whitelist and OpenAPI description to MCP tools."""

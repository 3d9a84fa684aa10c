"""Service components of the debug MCP server."""

"""Debug MCP Server - interactive, resumable browser test debugging."""

from importlib import metadata

try:
    __version__ = metadata.version("debug-mcp")
except metadata.PackageNotFoundError:
    pass

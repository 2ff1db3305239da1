"""
Bear MCP - Bear notes exposed as a Model Context Protocol server.
This package implements an MCP server that lets an AI agent search, read and
organize notes in the Bear app. Reads go straight to Bear's SQLite database
(read-only); writes are handed to Bear through its x-callback-url scheme.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bear-mcp")
except PackageNotFoundError:
    __version__ = "1.0.0"

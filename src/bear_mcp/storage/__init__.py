"""Storage layer for the Bear MCP server."""

from bear_mcp.storage.action_channel import UrlSchemeActionChannel, WriteActionChannel
from bear_mcp.storage.base import NoteStore, Repository, TagStore
from bear_mcp.storage.connection import ConnectionState, StoreConnection
from bear_mcp.storage.note_repository import NoteRepository
from bear_mcp.storage.tag_repository import TagRepository

__all__ = [
    "ConnectionState",
    "NoteRepository",
    "NoteStore",
    "Repository",
    "StoreConnection",
    "TagRepository",
    "TagStore",
    "UrlSchemeActionChannel",
    "WriteActionChannel",
]

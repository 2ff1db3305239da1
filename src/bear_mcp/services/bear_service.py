"""Service layer for Bear operations.

Reads are answered from Bear's database, writes are sent to Bear as callback
URLs. Writes return as soon as Bear has been handed the action; a note created
or edited here can take a moment to show up in searches, and nothing in this
service waits for it.
"""

import logging
from typing import List, Optional

from bear_mcp.config import config
from bear_mcp.models.schema import Note, Tag
from bear_mcp.observability import log_context
from bear_mcp.storage.action_channel import UrlSchemeActionChannel, WriteActionChannel
from bear_mcp.storage.base import NoteStore, TagStore
from bear_mcp.storage.connection import StoreConnection
from bear_mcp.storage.note_repository import NoteRepository
from bear_mcp.storage.tag_repository import TagRepository
from bear_mcp.utils import format_tag_line

logger = logging.getLogger(__name__)


def compose_note_text(text: str, tags: Optional[List[str]] = None) -> str:
    """Put a hashtag line above the body so Bear picks the tags up."""
    tag_line = format_tag_line(tags)
    if not tag_line:
        return text
    return f"{tag_line}\n\n{text}"


def compose_full_note(title: str, text: str, tags: Optional[List[str]] = None) -> str:
    """Serialize a whole note: title heading, then tag line, then body."""
    lines = [f"# {title}"]
    tag_line = format_tag_line(tags)
    if tag_line:
        lines.append(tag_line)
    return "\n".join(lines) + "\n\n" + text


class BearService:
    """Service combining Bear's read path and write path."""

    def __init__(
        self,
        connection: Optional[StoreConnection] = None,
        notes: Optional[NoteStore] = None,
        tags: Optional[TagStore] = None,
        channel: Optional[WriteActionChannel] = None,
    ):
        """Initialize the service.

        Args:
            connection: Handle on Bear's database. Created from config if None.
            notes: Note read store. Built on ``connection`` if None.
            tags: Tag read store. Built on ``connection`` if None.
            channel: Write channel. A URL-scheme channel from config if None.
        """
        if connection is None:
            connection = StoreConnection(config.candidate_database_paths())
        self.connection = connection
        self.notes = notes if notes is not None else NoteRepository(connection)
        self.tags = tags if tags is not None else TagRepository(connection)
        if channel is None:
            channel = UrlSchemeActionChannel(
                scheme=config.url_scheme, open_command=config.open_command
            )
        self.channel = channel

    def shutdown(self) -> None:
        """Release the database connection."""
        self.connection.close()

    # =========================================================================
    # Write operations (callback URLs)
    # =========================================================================

    def create_note(self, title: str, text: str, tags: Optional[List[str]] = None) -> None:
        """Ask Bear to create a note, tags written as hashtags above the text."""
        self.channel.call("create", {"title": title, "text": compose_note_text(text, tags)})
        logger.info("Created note", extra=log_context(title=title, tags=tags))

    def append_to_note(self, note_id: str, text: str) -> None:
        """Add text at the end of a note."""
        self.channel.call("add-text", {"id": note_id, "text": text, "mode": "append"})
        logger.info("Appended to note", extra=log_context(note_id=note_id))

    def prepend_to_note(self, note_id: str, text: str) -> None:
        """Add text at the beginning of a note."""
        self.channel.call("add-text", {"id": note_id, "text": text, "mode": "prepend"})
        logger.info("Prepended to note", extra=log_context(note_id=note_id))

    def replace_note_content(
        self,
        note_id: str,
        title: str,
        text: str,
        tags: Optional[List[str]] = None,
    ) -> None:
        """Replace a note's entire text.

        The new text always starts with the title as an H1 heading, followed
        by the tag line (if any tags are given) and then the body.
        """
        self.channel.call(
            "add-text",
            {
                "id": note_id,
                "text": compose_full_note(title, text, tags),
                "mode": "replace_all",
            },
        )
        logger.info("Replaced note content", extra=log_context(note_id=note_id, tags=tags))

    def trash_note(self, note_id: str) -> None:
        self.channel.call("trash", {"id": note_id})
        logger.info("Trashed note", extra=log_context(note_id=note_id))

    def archive_note(self, note_id: str) -> None:
        self.channel.call("archive", {"id": note_id})
        logger.info("Archived note", extra=log_context(note_id=note_id))

    def unarchive_note(self, note_id: str) -> None:
        self.channel.call("unarchive", {"id": note_id})
        logger.info("Unarchived note", extra=log_context(note_id=note_id))

    def rename_tag(self, name: str, new_name: str) -> None:
        """Rename a tag on every note that carries it."""
        self.channel.call("rename-tag", {"name": name, "new_name": new_name})
        logger.info("Renamed tag", extra=log_context(name=name, new_name=new_name))

    def delete_tag(self, name: str) -> None:
        """Remove a tag from every note that carries it."""
        self.channel.call("delete-tag", {"name": name})
        logger.info("Deleted tag", extra=log_context(name=name))

    # =========================================================================
    # Read operations (database)
    # =========================================================================

    def search_notes(self, term: Optional[str] = None, tag: Optional[str] = None) -> List[Note]:
        """Search notes by tag substring or text; neither lists recent notes."""
        return self.notes.search(term=term, tag=tag)

    def get_note(self, note_id: str) -> Optional[Note]:
        """Get a note with its content, or None if Bear has no such note."""
        return self.notes.get(note_id)

    def list_notes_by_tag(self, tag: str) -> List[Note]:
        return self.notes.list_by_tag(tag)

    def list_tags(self) -> List[Tag]:
        return self.tags.list_tags()

    def list_archived_notes(self) -> List[Note]:
        return self.notes.list_archived()

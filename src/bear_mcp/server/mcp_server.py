"""MCP server implementation for Bear."""

import atexit
import json
import logging
import uuid
from typing import Any, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from bear_mcp.config import config
from bear_mcp.exceptions import BearError, ValidationError
from bear_mcp.observability import log_context, timed_operation
from bear_mcp.services.bear_service import BearService

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 500
MAX_CONTENT_LENGTH = 1_000_000  # 1 MB

SERVER_INSTRUCTIONS = (
    "Access to the user's Bear notes. Reads come straight from Bear's "
    "database. Changes are sent to the Bear app, which applies them on its "
    "own schedule: a note you just created or edited may not appear in "
    "search results for a moment."
)


def _validate_input_lengths(
    title: Optional[str] = None, content: Optional[str] = None
) -> None:
    """Validate input string lengths at the MCP boundary."""
    if title and len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Title exceeds maximum length of {MAX_TITLE_LENGTH} characters",
            field="title",
        )
    if content and len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(
            f"Content exceeds maximum length of {MAX_CONTENT_LENGTH} characters",
            field="text",
        )


def _require(value: Optional[str], field: str) -> str:
    """Reject missing or blank identifiers and names."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} must not be empty", field=field)
    return value.strip()


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


class BearMcpServer:
    """MCP server for Bear."""

    def __init__(self, service: Optional[BearService] = None):
        """Initialize the MCP server.

        Args:
            service: Pre-built BearService. When None, one is created from
                the global config.
        """
        self.mcp = FastMCP(config.server_name, instructions=SERVER_INSTRUCTIONS)
        self.bear_service = service if service is not None else BearService()
        # Register shutdown hook for resource cleanup
        atexit.register(self.shutdown)
        # Register tools
        self._register_tools()

    def shutdown(self) -> None:
        """Clean up resources on server exit."""
        self.bear_service.shutdown()

    def format_error_response(self, error: Exception) -> str:
        """Format an error response in a consistent way.

        Args:
            error: The exception that occurred

        Returns:
            Formatted error message with appropriate level of detail
        """
        # Generate a unique error ID for traceability in logs
        error_id = str(uuid.uuid4())[:8]

        if isinstance(error, BearError):
            # Structured domain errors - use the error code and message
            logger.error(
                f"[{error.code.name}] [{error_id}]: {error.message}",
                extra=log_context(error_id=error_id, **error.to_dict()),
            )
            return error.message
        elif isinstance(error, ValueError):
            # Log full detail but return generic ref to avoid leaking internals
            logger.error(f"Validation error [{error_id}]: {str(error)}")
            return f"Invalid input (ref: {error_id})"
        else:
            # Unexpected errors - log with full stack trace but return generic message
            logger.error(f"Unexpected error [{error_id}]: {str(error)}", exc_info=True)
            return f"An unexpected error occurred (ref: {error_id})"

    def _error(self, error: Exception) -> ToolError:
        """Build the error-flagged tool result for a failed operation.

        FastMCP prefixes the text with "Error executing tool <name>: ".
        """
        return ToolError(self.format_error_response(error))

    def _register_tools(self) -> None:
        """Register MCP tools."""

        @self.mcp.tool(name="bear_create_note")
        def bear_create_note(
            title: str, text: str, tags: Optional[List[str]] = None
        ) -> str:
            """Create a new note in Bear.
            Args:
                title: Note title
                text: Note content (Markdown)
                tags: Tags to add to the note (without #)
            """
            with timed_operation("bear_create_note", title=title[:30]):
                try:
                    _validate_input_lengths(title=title, content=text)
                    self.bear_service.create_note(title, text, tags)
                    return f"Created note: {title}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_search")
        def bear_search(term: Optional[str] = None, tag: Optional[str] = None) -> str:
            """Search for notes in Bear by text or tag.

            With neither argument, returns the most recently modified notes.
            Results do not include note content; use bear_get_note for that.
            Args:
                term: Search term (free text, matched in title and content)
                tag: Filter by tag (without #, partial names match)
            """
            with timed_operation("bear_search", term=term, tag=tag) as op:
                try:
                    notes = self.bear_service.search_notes(term=term, tag=tag)
                    op["result_count"] = len(notes)
                    return _to_json([note.to_payload() for note in notes])
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_get_note")
        def bear_get_note(note_id: str) -> str:
            """Get the full content of a specific note.
            Args:
                note_id: Note ID (from search results)
            """
            with timed_operation("bear_get_note", note_id=note_id) as op:
                try:
                    note_id = _require(note_id, "note_id")
                    note = self.bear_service.get_note(note_id)
                    if note is None:
                        op["found"] = False
                        return f"Note not found: {note_id}"
                    op["found"] = True
                    return _to_json(note.to_payload())
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_append")
        def bear_append(note_id: str, text: str) -> str:
            """Append text to an existing note.
            Args:
                note_id: Note ID (from search results)
                text: Text to append
            """
            with timed_operation("bear_append", note_id=note_id):
                try:
                    note_id = _require(note_id, "note_id")
                    _validate_input_lengths(content=text)
                    self.bear_service.append_to_note(note_id, text)
                    return f"Appended text to note: {note_id}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_prepend")
        def bear_prepend(note_id: str, text: str) -> str:
            """Prepend text to the beginning of an existing note.
            Args:
                note_id: Note ID (from search results)
                text: Text to prepend
            """
            with timed_operation("bear_prepend", note_id=note_id):
                try:
                    note_id = _require(note_id, "note_id")
                    _validate_input_lengths(content=text)
                    self.bear_service.prepend_to_note(note_id, text)
                    return f"Prepended text to note: {note_id}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_replace_content")
        def bear_replace_content(
            note_id: str,
            title: str,
            text: str,
            tags: Optional[List[str]] = None,
        ) -> str:
            """Replace the entire content of an existing note.

            Always structures the note as: title (H1) first, then tags,
            then content.
            Args:
                note_id: Note ID (from search results)
                title: Note title (becomes the H1 heading on the first line)
                text: New content (Markdown), placed after title and tags
                tags: Tags to set on the note (placed between title and content)
            """
            with timed_operation("bear_replace_content", note_id=note_id):
                try:
                    note_id = _require(note_id, "note_id")
                    _validate_input_lengths(title=title, content=text)
                    self.bear_service.replace_note_content(note_id, title, text, tags)
                    return f"Replaced content of note: {note_id}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_list_tags")
        def bear_list_tags() -> str:
            """List all tags in Bear with note counts."""
            with timed_operation("bear_list_tags") as op:
                try:
                    tags = self.bear_service.list_tags()
                    op["result_count"] = len(tags)
                    return _to_json([tag.to_payload() for tag in tags])
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_list_by_tag")
        def bear_list_by_tag(tag: str) -> str:
            """List all notes with a specific tag.
            Args:
                tag: Tag to filter by (without #, exact name, any case)
            """
            with timed_operation("bear_list_by_tag", tag=tag) as op:
                try:
                    tag = _require(tag, "tag")
                    notes = self.bear_service.list_notes_by_tag(tag)
                    op["result_count"] = len(notes)
                    return _to_json(
                        {
                            "tag": tag,
                            "count": len(notes),
                            "notes": [note.to_payload() for note in notes],
                        }
                    )
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_rename_tag")
        def bear_rename_tag(name: str, new_name: str) -> str:
            """Rename an existing tag in Bear.
            Args:
                name: Current tag name (without #)
                new_name: New tag name (without #)
            """
            with timed_operation("bear_rename_tag", name=name, new_name=new_name):
                try:
                    name = _require(name, "name")
                    new_name = _require(new_name, "new_name")
                    self.bear_service.rename_tag(name, new_name)
                    return f"Renamed tag '{name}' to '{new_name}'"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_delete_tag")
        def bear_delete_tag(name: str) -> str:
            """Delete an existing tag from all notes in Bear.
            Args:
                name: Tag name to delete (without #)
            """
            with timed_operation("bear_delete_tag", name=name):
                try:
                    name = _require(name, "name")
                    self.bear_service.delete_tag(name)
                    return f"Deleted tag: {name}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_trash_note")
        def bear_trash_note(note_id: str) -> str:
            """Move a note to trash.
            Args:
                note_id: Note ID
            """
            with timed_operation("bear_trash_note", note_id=note_id):
                try:
                    note_id = _require(note_id, "note_id")
                    self.bear_service.trash_note(note_id)
                    return f"Moved note to trash: {note_id}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_archive_note")
        def bear_archive_note(note_id: str) -> str:
            """Archive a note (moves it out of main view but keeps it accessible).
            Args:
                note_id: Note ID
            """
            with timed_operation("bear_archive_note", note_id=note_id):
                try:
                    note_id = _require(note_id, "note_id")
                    self.bear_service.archive_note(note_id)
                    return f"Archived note: {note_id}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_unarchive_note")
        def bear_unarchive_note(note_id: str) -> str:
            """Restore an archived note back to the main view.
            Args:
                note_id: Note ID
            """
            with timed_operation("bear_unarchive_note", note_id=note_id):
                try:
                    note_id = _require(note_id, "note_id")
                    self.bear_service.unarchive_note(note_id)
                    return f"Unarchived note: {note_id}"
                except Exception as e:
                    raise self._error(e) from e

        @self.mcp.tool(name="bear_list_archived")
        def bear_list_archived() -> str:
            """List all archived notes."""
            with timed_operation("bear_list_archived") as op:
                try:
                    notes = self.bear_service.list_archived_notes()
                    op["result_count"] = len(notes)
                    return _to_json(
                        {"count": len(notes), "notes": [note.to_payload() for note in notes]}
                    )
                except Exception as e:
                    raise self._error(e) from e

    def run(self) -> None:
        """Run the MCP server over stdio."""
        self.mcp.run()

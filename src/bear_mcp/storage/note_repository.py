"""Repository for reading notes from Bear's database.

Every query excludes what Bear hides from its main note list unless stated
otherwise: trashed notes and archived notes. Listings never carry note text;
only ``get`` returns the full content.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from sqlalchemy import String, and_, func, or_, select
from sqlalchemy.engine import Connection, Row
from sqlalchemy.sql import Select

from bear_mcp.models.db_models import DBNote, DBTag, note_tags
from bear_mcp.models.schema import Note, as_flag, from_core_data_timestamp
from bear_mcp.storage.base import Repository
from bear_mcp.utils import escape_like_pattern

logger = logging.getLogger(__name__)

# Result caps
SEARCH_LIMIT = 100
RECENT_LIMIT = 50
LIST_LIMIT = 100

LIKE_ESCAPE = "\\"

_is_active = and_(DBNote.trashed == 0, DBNote.archived == 0)


def _note_columns(with_content: bool = False) -> list:
    columns = [
        DBNote.unique_identifier.label("id"),
        DBNote.title.label("title"),
        DBNote.creation_date.label("created"),
        DBNote.modification_date.label("modified"),
        DBNote.trashed.label("trashed"),
        DBNote.archived.label("archived"),
    ]
    if with_content:
        columns.append(DBNote.text.label("content"))
    return columns


def _contains(value: str) -> str:
    return f"%{escape_like_pattern(value.casefold())}%"


def _folded(column):
    # casefold() is registered on every connection by StoreConnection
    return func.casefold(column, type_=String)


def _joined_with_tags(stmt: Select) -> Select:
    return stmt.join(note_tags, DBNote.pk == note_tags.c.Z_5NOTES).join(
        DBTag, note_tags.c.Z_13TAGS == DBTag.pk
    )


def _row_to_note(row: Row, tags: List[str], with_content: bool = False) -> Note:
    values = row._mapping
    return Note(
        id=values["id"],
        title=values["title"] or "",
        content=(values["content"] or "") if with_content else None,
        tags=tags,
        created_at=from_core_data_timestamp(values["created"]),
        modified_at=from_core_data_timestamp(values["modified"]),
        is_trashed=as_flag(values["trashed"]),
        is_archived=as_flag(values["archived"]),
    )


class NoteRepository(Repository):
    """Read-only queries over Bear's notes."""

    def search(self, term: Optional[str] = None, tag: Optional[str] = None) -> List[Note]:
        """Search active notes by tag or by text.

        A tag filter takes precedence over a search term. With neither, the
        most recently modified notes are returned.

        Args:
            term: Case-insensitive substring matched against title and text.
            tag: Case-insensitive substring matched against tag names.

        Returns:
            Notes without content, newest modification first.
        """
        stmt = select(*_note_columns()).where(_is_active)
        limit = SEARCH_LIMIT
        if tag:
            stmt = (
                _joined_with_tags(stmt)
                .where(_folded(DBTag.title).like(_contains(tag), escape=LIKE_ESCAPE))
                .distinct()
            )
        elif term:
            pattern = _contains(term)
            stmt = stmt.where(
                or_(
                    _folded(DBNote.title).like(pattern, escape=LIKE_ESCAPE),
                    _folded(DBNote.text).like(pattern, escape=LIKE_ESCAPE),
                )
            )
        else:
            limit = RECENT_LIMIT
        stmt = stmt.order_by(DBNote.modification_date.desc()).limit(limit)

        return self._fetch_listing(stmt, "search notes", term=term, tag=tag)

    def get(self, note_id: str) -> Optional[Note]:
        """Get a note with its full content.

        Args:
            note_id: Bear's unique identifier for the note.

        Returns:
            The note, or None if no note has that identifier.
        """
        stmt = select(*_note_columns(with_content=True)).where(
            DBNote.unique_identifier == note_id
        )
        with self._query("get note content", note_id=note_id) as conn:
            row = conn.execute(stmt).first()
            if row is None:
                return None
            tags = self._tags_for(conn, [note_id]).get(note_id, [])
        return _row_to_note(row, tags, with_content=True)

    def list_by_tag(self, tag: str) -> List[Note]:
        """List active notes carrying exactly this tag (case-insensitive)."""
        stmt = (
            _joined_with_tags(select(*_note_columns()))
            .where(_folded(DBTag.title) == tag.casefold())
            .where(_is_active)
            .distinct()
            .order_by(DBNote.modification_date.desc())
            .limit(LIST_LIMIT)
        )
        return self._fetch_listing(stmt, "list notes by tag", tag=tag)

    def list_archived(self) -> List[Note]:
        """List archived notes that are not in the trash."""
        stmt = (
            select(*_note_columns())
            .where(DBNote.archived == 1, DBNote.trashed == 0)
            .order_by(DBNote.modification_date.desc())
            .limit(LIST_LIMIT)
        )
        return self._fetch_listing(stmt, "list archived notes")

    def get_tags_for_notes(self, note_ids: Sequence[str]) -> Dict[str, List[str]]:
        """Get tag names for several notes with a single query.

        Args:
            note_ids: Bear identifiers of the notes.

        Returns:
            Mapping of note identifier to its tag names, sorted by name.
            Notes without tags are absent from the mapping.
        """
        if not note_ids:
            return {}
        with self._query("get note tags", note_count=len(note_ids)) as conn:
            return self._tags_for(conn, note_ids)

    def _fetch_listing(self, stmt: Select, operation: str, **context) -> List[Note]:
        with self._query(operation, **context) as conn:
            rows = conn.execute(stmt).all()
            tags_by_note = self._tags_for(conn, [row._mapping["id"] for row in rows])

        logger.debug(f"{operation}: {len(rows)} notes")
        return [
            _row_to_note(row, tags_by_note.get(row._mapping["id"], []))
            for row in rows
        ]

    @staticmethod
    def _tags_for(conn: Connection, note_ids: Sequence[str]) -> Dict[str, List[str]]:
        if not note_ids:
            return {}
        stmt = (
            select(
                DBNote.unique_identifier.label("note_id"),
                DBTag.title.label("name"),
            )
            .select_from(DBTag)
            .join(note_tags, DBTag.pk == note_tags.c.Z_13TAGS)
            .join(DBNote, note_tags.c.Z_5NOTES == DBNote.pk)
            .where(DBNote.unique_identifier.in_(list(note_ids)))
            .order_by(DBTag.title)
        )
        result: Dict[str, List[str]] = defaultdict(list)
        for note_id, name in conn.execute(stmt).all():
            result[note_id].append(name)
        return dict(result)

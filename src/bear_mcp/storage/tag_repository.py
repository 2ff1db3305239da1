"""Repository for reading tags from Bear's database."""
import logging
from typing import List

from sqlalchemy import and_, case, distinct, func, select

from bear_mcp.models.db_models import DBNote, DBTag, note_tags
from bear_mcp.models.schema import Tag
from bear_mcp.storage.base import Repository

logger = logging.getLogger(__name__)


class TagRepository(Repository):
    """Read-only queries over Bear's tags."""

    def list_tags(self) -> List[Tag]:
        """Get all tags that are in use, with their note counts.

        Only notes that are neither trashed nor archived are counted, and
        tags left with no such note are not returned.

        Returns:
            Tags ordered by name.
        """
        note_count = func.count(
            distinct(
                case(
                    (and_(DBNote.trashed == 0, DBNote.archived == 0), DBNote.pk),
                )
            )
        )
        stmt = (
            select(DBTag.title.label("name"), note_count.label("note_count"))
            .select_from(DBTag)
            .outerjoin(note_tags, DBTag.pk == note_tags.c.Z_13TAGS)
            .outerjoin(DBNote, note_tags.c.Z_5NOTES == DBNote.pk)
            .group_by(DBTag.title)
            .having(note_count > 0)
            .order_by(DBTag.title)
        )
        with self._query("list tags") as conn:
            rows = conn.execute(stmt).all()

        logger.debug(f"list tags: {len(rows)} tags")
        return [Tag(name=name, note_count=count) for name, count in rows]

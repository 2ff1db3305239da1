"""Test doubles for the Bear MCP server.

BearStoreBuilder writes a throwaway SQLite file with Bear's schema so the read
path runs real queries against real SQLite. FakeActionChannel stands in for
the URL opener and records every action it is asked to dispatch.

Design principles:
- Never mock SQLite on the read path; build a real store file instead
- Deterministic: notes get strictly increasing modification times in
  insertion order unless a test sets them explicitly
"""
import datetime
import uuid
from datetime import timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from bear_mcp.exceptions import ActionError
from bear_mcp.models.db_models import Base, DBNote, DBTag, note_tags
from bear_mcp.models.schema import to_core_data_timestamp

BASE_TIME = datetime.datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class BearStoreBuilder:
    """Builds a Bear-shaped database file for tests."""

    def __init__(self, path: Path):
        self.path = path
        self.engine = create_engine(f"sqlite:///{path}")
        Base.metadata.create_all(self.engine)
        self._tag_pks: Dict[str, int] = {}
        self._sequence = 0

    def add_tag(self, name: str) -> int:
        """Insert a tag (once) and return its Z_PK."""
        if name in self._tag_pks:
            return self._tag_pks[name]
        with Session(self.engine) as session:
            tag = DBTag(title=name)
            session.add(tag)
            session.commit()
            self._tag_pks[name] = tag.pk
        return self._tag_pks[name]

    def add_note(
        self,
        title: str,
        text: str = "",
        tags: Iterable[str] = (),
        note_id: Optional[str] = None,
        created: Optional[datetime.datetime] = None,
        modified: Optional[datetime.datetime] = None,
        trashed: bool = False,
        archived: bool = False,
    ) -> str:
        """Insert a note with its tag links and return its identifier."""
        self._sequence += 1
        note_id = note_id or str(uuid.uuid4()).upper()
        modified = modified or BASE_TIME + datetime.timedelta(minutes=self._sequence)
        created = created or modified
        tag_pks = [self.add_tag(name) for name in tags]

        with Session(self.engine) as session:
            note = DBNote(
                unique_identifier=note_id,
                title=title,
                text=text,
                creation_date=to_core_data_timestamp(created),
                modification_date=to_core_data_timestamp(modified),
                trashed=int(trashed),
                archived=int(archived),
            )
            session.add(note)
            session.flush()
            for tag_pk in tag_pks:
                session.execute(
                    note_tags.insert().values(Z_5NOTES=note.pk, Z_13TAGS=tag_pk)
                )
            session.commit()
        return note_id

    def close(self) -> None:
        self.engine.dispose()


class FakeActionChannel:
    """Records dispatched actions instead of opening URLs.

    Set ``fail`` to make every call raise ActionError, as a real channel does
    when the URL opener is unavailable.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[Tuple[str, Dict[str, str]]] = []

    def call(self, action: str, params: Mapping[str, str]) -> None:
        if self.fail:
            raise ActionError(action, params, original_error=OSError("open: not found"))
        self.calls.append((action, dict(params)))

    @property
    def last_call(self) -> Tuple[str, Dict[str, str]]:
        return self.calls[-1]

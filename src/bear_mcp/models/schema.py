"""Data models for the Bear MCP server."""

import datetime
from datetime import timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Seconds between the Unix epoch and the Core Data reference date
# (2001-01-01T00:00:00Z) that Bear stores its timestamps against.
CORE_DATA_EPOCH_OFFSET = 978_307_200


def from_core_data_timestamp(value: Optional[float]) -> Optional[datetime.datetime]:
    """Convert a Bear (Core Data) timestamp to a timezone-aware UTC datetime.

    Args:
        value: Seconds since 2001-01-01 UTC, as stored in Bear's database.

    Returns:
        The corresponding UTC datetime, or None if the column was NULL.
    """
    if value is None:
        return None
    return datetime.datetime.fromtimestamp(
        float(value) + CORE_DATA_EPOCH_OFFSET, tz=timezone.utc
    )


def to_core_data_timestamp(dt_value: datetime.datetime) -> float:
    """Convert a datetime to Bear's Core Data timestamp.

    Naive datetimes are treated as UTC.
    """
    if dt_value.tzinfo is None:
        dt_value = dt_value.replace(tzinfo=timezone.utc)
    return dt_value.timestamp() - CORE_DATA_EPOCH_OFFSET


def as_flag(value: Any) -> bool:
    """Map Bear's nullable integer flag columns to booleans."""
    return bool(value)


class Note(BaseModel):
    """A Bear note as seen through the read path.

    ``content`` is only populated when a single note is fetched; listings
    leave it unset to keep responses small.
    """

    id: str = Field(..., description="Bear's stable unique identifier")
    title: str = Field(default="", description="Title of the note")
    content: Optional[str] = Field(
        default=None, description="Full Markdown text (single-note fetch only)"
    )
    tags: List[str] = Field(default_factory=list, description="Tag names on the note")
    created_at: Optional[datetime.datetime] = Field(
        default=None, description="When the note was created (UTC)"
    )
    modified_at: Optional[datetime.datetime] = Field(
        default=None, description="When the note was last modified (UTC)"
    )
    is_trashed: bool = Field(default=False, description="Note is in the trash")
    is_archived: bool = Field(default=False, description="Note is archived")

    model_config = {"frozen": True}

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict; unset fields such as ``content`` are left out."""
        return self.model_dump(mode="json", exclude_none=True)


class Tag(BaseModel):
    """A Bear tag with the number of active notes carrying it."""

    name: str = Field(..., description="Tag name, casing as stored by Bear")
    note_count: int = Field(
        default=0, ge=0, description="Non-trashed, non-archived notes with this tag"
    )

    model_config = {"frozen": True}

    def __str__(self) -> str:
        """Return string representation of tag."""
        return self.name

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

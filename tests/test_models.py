"""Tests for the data models and the timestamp codec."""
import datetime
import json
from datetime import timezone

import pytest
from pydantic import ValidationError

from bear_mcp.models.schema import (
    CORE_DATA_EPOCH_OFFSET,
    Note,
    Tag,
    as_flag,
    from_core_data_timestamp,
    to_core_data_timestamp,
)


class TestTimestampCodec:
    """Tests for Core Data timestamp conversion."""

    @pytest.mark.parametrize("value", [0, 1.5, 725_000_000, 757_382_400.25])
    def test_conversion_adds_core_data_offset(self, value):
        """A stored value V converts to Unix time V + 978307200."""
        expected = datetime.datetime.fromtimestamp(
            value + 978_307_200, tz=timezone.utc
        )
        assert from_core_data_timestamp(value) == expected

    def test_reference_date(self):
        """Zero is the Core Data reference date."""
        assert from_core_data_timestamp(0) == datetime.datetime(
            2001, 1, 1, tzinfo=timezone.utc
        )
        assert CORE_DATA_EPOCH_OFFSET == 978_307_200

    def test_null_timestamp(self):
        assert from_core_data_timestamp(None) is None

    def test_result_is_timezone_aware(self):
        assert from_core_data_timestamp(100).tzinfo is not None

    def test_inverse_conversion(self):
        dt_value = datetime.datetime(2024, 5, 17, 8, 30, tzinfo=timezone.utc)
        assert from_core_data_timestamp(to_core_data_timestamp(dt_value)) == dt_value

    def test_inverse_treats_naive_as_utc(self):
        naive = datetime.datetime(2024, 5, 17, 8, 30)
        aware = naive.replace(tzinfo=timezone.utc)
        assert to_core_data_timestamp(naive) == to_core_data_timestamp(aware)


class TestFlags:
    @pytest.mark.parametrize("value,expected", [(0, False), (1, True), (None, False)])
    def test_as_flag(self, value, expected):
        assert as_flag(value) is expected


class TestNoteModel:
    """Tests for the Note model."""

    def test_payload_omits_unset_content(self):
        note = Note(id="A1", title="Listed", tags=["work"])
        payload = note.to_payload()
        assert "content" not in payload
        assert payload["tags"] == ["work"]
        assert payload["is_trashed"] is False

    def test_payload_keeps_content(self):
        note = Note(id="A1", title="Fetched", content="# Fetched\nbody")
        assert note.to_payload()["content"] == "# Fetched\nbody"

    def test_payload_is_json_serializable(self):
        note = Note(
            id="A1",
            title="Dated",
            created_at=from_core_data_timestamp(0),
            modified_at=from_core_data_timestamp(60),
        )
        data = json.loads(json.dumps(note.to_payload()))
        assert data["created_at"].startswith("2001-01-01T00:00:00")
        assert data["modified_at"].startswith("2001-01-01T00:01:00")

    def test_note_is_immutable(self):
        note = Note(id="A1", title="Frozen")
        with pytest.raises(ValidationError):
            note.title = "Changed"


class TestTagModel:
    def test_str_is_name(self):
        assert str(Tag(name="Work", note_count=3)) == "Work"

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            Tag(name="broken", note_count=-1)

    def test_payload(self):
        assert Tag(name="Work", note_count=3).to_payload() == {
            "name": "Work",
            "note_count": 3,
        }

"""Common test fixtures for the Bear MCP server."""

import pytest

from bear_mcp.services.bear_service import BearService
from bear_mcp.storage.connection import StoreConnection
from bear_mcp.storage.note_repository import NoteRepository
from bear_mcp.storage.tag_repository import TagRepository
from tests.fakes import BearStoreBuilder, FakeActionChannel


@pytest.fixture
def bear_db_path(tmp_path):
    """Location of the test Bear database."""
    return tmp_path / "database.sqlite"


@pytest.fixture
def store(bear_db_path):
    """Create an empty Bear-shaped database to fill in per test."""
    builder = BearStoreBuilder(bear_db_path)
    yield builder
    builder.close()


@pytest.fixture
def connection(store):
    """Read-only connection on the test database."""
    conn = StoreConnection([store.path])
    yield conn
    conn.close()


@pytest.fixture
def note_repository(connection):
    """Create a test note repository."""
    return NoteRepository(connection)


@pytest.fixture
def tag_repository(connection):
    """Create a test tag repository."""
    return TagRepository(connection)


@pytest.fixture
def fake_channel():
    """Action channel that records calls instead of opening URLs."""
    return FakeActionChannel()


@pytest.fixture
def bear_service(connection, fake_channel):
    """Create a test BearService on the test database and fake channel."""
    service = BearService(connection=connection, channel=fake_channel)
    yield service
    service.shutdown()

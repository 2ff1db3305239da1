"""Base classes and interfaces for the storage layer."""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from bear_mcp.exceptions import QueryError
from bear_mcp.models.schema import Note, Tag
from bear_mcp.observability import log_context
from bear_mcp.storage.connection import StoreConnection

logger = logging.getLogger(__name__)


class NoteStore(Protocol):
    """Read side of the notes store: note queries that never modify anything."""

    def search(self, term: Optional[str] = None, tag: Optional[str] = None) -> List[Note]:
        ...

    def get(self, note_id: str) -> Optional[Note]:
        ...

    def list_by_tag(self, tag: str) -> List[Note]:
        ...

    def list_archived(self) -> List[Note]:
        ...


class TagStore(Protocol):
    """Read side of the tag store."""

    def list_tags(self) -> List[Tag]:
        ...


class Repository:
    """Base for repositories reading from Bear's database.

    All repositories built on the same StoreConnection share its single
    read-only connection.
    """

    def __init__(self, connection: StoreConnection):
        """Initialize the repository.

        Args:
            connection: Shared handle on Bear's database.
        """
        self.connection = connection

    @contextmanager
    def _query(self, operation: str, **context) -> Iterator[Connection]:
        """Yield a database connection, wrapping query failures in QueryError.

        Errors locating or opening the database (StoreNotFoundError,
        StoreOpenError) propagate unchanged.
        """
        engine = self.connection.get_engine()
        try:
            with engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(
                f"Query failed: {operation}",
                extra=log_context(error=str(e), **context),
            )
            raise QueryError(
                f"Failed to {operation}", operation=operation, original_error=e
            ) from e

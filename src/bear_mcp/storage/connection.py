"""Read-only connection to Bear's SQLite database.

The database file belongs to the Bear app, which keeps writing to it while we
run. We open it with SQLite's ``mode=ro`` URI flag and keep a single pooled
connection for the life of the process.
"""
import logging
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import quote

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from bear_mcp.exceptions import StoreNotFoundError, StoreOpenError
from bear_mcp.observability import log_context

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle states of a StoreConnection."""

    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    CLOSED = "closed"


def _readonly_uri(path: Path) -> str:
    """Build a SQLite URI that opens ``path`` read-only."""
    return f"file:{quote(str(path))}?mode=ro"


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _register_functions(dbapi_connection, connection_record) -> None:
    # SQLite's own lower() and LIKE only fold ASCII letters
    dbapi_connection.create_function(
        "casefold", 1, _casefold, deterministic=True
    )


class StoreConnection:
    """Lazily opened, read-only handle on Bear's database.

    The connection is established on the first call to ``get_engine()``,
    reused by every read afterwards, and released by ``close()``.
    """

    def __init__(self, candidate_paths: Iterable[Path]):
        """Initialize the connection holder.

        Args:
            candidate_paths: Ordered database locations; the first one that
                exists is opened.
        """
        self.candidate_paths: List[Path] = [Path(p) for p in candidate_paths]
        self._engine: Optional[Engine] = None
        self._path: Optional[Path] = None
        self._state = ConnectionState.UNINITIALIZED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def path(self) -> Optional[Path]:
        """Path of the opened database, None until connected."""
        return self._path

    def find_database_path(self) -> Path:
        """Return the first candidate path that exists.

        Raises:
            StoreNotFoundError: If no candidate exists.
        """
        for path in self.candidate_paths:
            if path.is_file():
                logger.info("Found Bear database", extra=log_context(path=str(path)))
                return path

        raise StoreNotFoundError(searched=len(self.candidate_paths))

    def get_engine(self) -> Engine:
        """Get the shared engine, opening the database on first use.

        Raises:
            StoreNotFoundError: If no candidate path exists.
            StoreOpenError: If the database cannot be opened, or the
                connection has already been closed.
        """
        if self._state is ConnectionState.CLOSED:
            raise StoreOpenError("Bear database connection has been closed")
        if self._engine is None:
            path = self.find_database_path()
            self._engine = self._open(path)
            self._path = path
            self._state = ConnectionState.CONNECTED
            logger.info("Connected to Bear database")
        return self._engine

    def _open(self, path: Path) -> Engine:
        uri = _readonly_uri(path)

        def connect() -> sqlite3.Connection:
            return sqlite3.connect(uri, uri=True, check_same_thread=False)

        engine = create_engine("sqlite://", creator=connect, poolclass=StaticPool)
        event.listen(engine, "connect", _register_functions)
        try:
            # Reading the schema version forces SQLite to parse the file header,
            # so unreadable or corrupt files fail here rather than mid-query.
            with engine.connect() as conn:
                conn.exec_driver_sql("PRAGMA schema_version").scalar()
        except (SQLAlchemyError, sqlite3.Error) as e:
            engine.dispose()
            logger.error("Failed to open database", extra=log_context(error=str(e)))
            raise StoreOpenError(path=str(path), original_error=e) from e
        return engine

    def close(self) -> None:
        """Release the connection. Calling it again is a no-op."""
        if self._state is ConnectionState.CLOSED:
            return
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Closed Bear database connection")
        self._state = ConnectionState.CLOSED

"""
Base repository class providing common database operations.
"""

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, TYPE_CHECKING

from issuetrack.core.errors import IndexWriteFailed

from ..constants import FTS_TABLE

if TYPE_CHECKING:
    from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate a record id."""
    return uuid.uuid4().hex


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    """Convert a sqlite3.Row to a plain dict (None passes through)."""
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}


# Messages SQLite gives for violations of constraints declared on our tables
_DECLARED_CONSTRAINTS = ("unique", "foreign key", "not null", "check", "primary key")


def _is_index_error(error: sqlite3.DatabaseError) -> bool:
    message = str(error).lower()
    return FTS_TABLE in message or "fts5" in message


def _is_declared_constraint(error: sqlite3.IntegrityError) -> bool:
    """
    True for UNIQUE, FOREIGN KEY, NOT NULL and CHECK violations.

    A bare "constraint failed" comes from inside the FTS5 module when a
    sync trigger hits a damaged index, not from our own tables.
    """
    message = str(error).lower()
    return any(kind in message for kind in _DECLARED_CONSTRAINTS)


class BaseRepository:
    """
    Base class for all repository implementations.

    Provides common database access patterns and utilities.
    """

    # Repositories over tables the search index mirrors set this, so writes
    # are refused while an index rebuild holds the maintenance lock
    guards_search_index = False

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize repository with database connection.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection to use for operations.
        """
        self._conn = conn

    def cursor(self):
        """Get a new cursor for database operations."""
        return self._conn.cursor()

    def commit(self) -> None:
        """Commit the current transaction."""
        self._conn.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self._conn.rollback()

    @contextmanager
    def write(self) -> Iterator[sqlite3.Cursor]:
        """
        Run a write inside one transaction.

        Any trigger-driven index update happens inside the same
        transaction; if it fails, the whole write is rolled back and
        IndexWriteFailed is raised.

        Raises
        ------
        MaintenanceInProgress
            If this repository guards the search index and a rebuild is running
        IndexWriteFailed
            If the search index half of the write failed
        """
        if self.guards_search_index:
            self._conn.maintenance_lock.ensure_available()

        try:
            with self._conn.transaction(immediate=True) as cursor:
                yield cursor
        except sqlite3.IntegrityError as e:
            if not self.guards_search_index or (
                _is_declared_constraint(e) and not _is_index_error(e)
            ):
                raise
            logger.error("Search index write failed, transaction rolled back: %s", e)
            raise IndexWriteFailed(f"Search index write failed: {e}") from e
        except sqlite3.DatabaseError as e:
            if _is_index_error(e):
                logger.error("Search index write failed, transaction rolled back: %s", e)
                raise IndexWriteFailed(f"Search index write failed: {e}") from e
            raise

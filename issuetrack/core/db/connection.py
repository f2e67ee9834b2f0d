"""
Database connection management for the issue tracker.

Provides a DatabaseConnection class that handles SQLite connection
lifecycle, WAL mode configuration, explicit transactions, and context
manager support.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from issuetrack.core.config import get_busy_timeout, get_default_db_path

from .locks import MaintenanceLock, maintenance_lock_for

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    SQLite database connection with WAL mode and context manager support.

    The connection runs in autocommit mode; multi-statement writes go through
    ``transaction()`` so the primary write and the search index update
    performed by its triggers commit or roll back together.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database connection.

        Parameters
        ----------
        db_path : str, optional
            Path to database file. If None, uses ISSUETRACK_DB_PATH or the
            default location.
        """
        if db_path is None:
            db_path = str(get_default_db_path())

        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self) -> None:
        """Establish database connection with WAL mode and foreign keys."""
        self._conn = sqlite3.connect(
            self.db_path,
            timeout=get_busy_timeout(),
            check_same_thread=False,
            isolation_level=None,
        )
        self._conn.row_factory = sqlite3.Row

        # WAL lets the API server read while the CLI rebuilds the index;
        # readers keep seeing the last committed state until the swap commits
        cursor = self._conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.fetchone()
        cursor.execute("PRAGMA foreign_keys=ON")

        logger.debug("Database connection established: %s", self.db_path)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the underlying SQLite connection."""
        if self._conn is None:
            self._connect()
        return self._conn

    @property
    def maintenance_lock(self) -> MaintenanceLock:
        """Maintenance lock shared by every connection to this file."""
        return maintenance_lock_for(self.db_path)

    def cursor(self) -> sqlite3.Cursor:
        """Get a new cursor for the database connection."""
        return self.connection.cursor()

    @contextmanager
    def transaction(self, immediate: bool = False) -> Iterator[sqlite3.Cursor]:
        """
        Run a block inside one transaction.

        Commits on success and rolls back on any exception. Joins the
        already-open transaction when nested.

        Parameters
        ----------
        immediate : bool
            Take the write lock up front (``BEGIN IMMEDIATE``).
        """
        conn = self.connection
        if conn.in_transaction:
            yield conn.cursor()
            return

        conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
        try:
            yield conn.cursor()
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()

    def commit(self) -> None:
        """Commit the current transaction."""
        self.connection.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.connection.rollback()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Database connection closed: %s", self.db_path)

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.close()


"""
Out-of-band maintenance for the issue search index.

Used for recovery after corruption or a schema change, never on the
request path. Each operation runs as one transaction: queries see either
the complete old index or the complete new one.
"""

import logging
import sqlite3
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..constants import FTS_TABLE, FTS_TRIGGERS, REBUILD_BATCH_SIZE
from .sync import IndexSynchronizer

if TYPE_CHECKING:
    from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


class IndexMaintenance:
    """
    Drops, rebuilds and checks the issues_fts index and its triggers.

    The index carries no state of its own: ``rebuild()`` recreates it from
    the issues table alone.
    """

    def __init__(self, conn: "DatabaseConnection", synchronizer: Optional[IndexSynchronizer] = None):
        """
        Initialize maintenance operator.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection
        synchronizer : IndexSynchronizer, optional
            Trigger/table installer; a fresh one by default
        """
        self._conn = conn
        self._sync = synchronizer or IndexSynchronizer()

    def drop(self) -> None:
        """Remove the sync triggers and the index. Safe to repeat."""
        with self._conn.maintenance_lock.hold():
            with self._conn.transaction(immediate=True) as cursor:
                self._sync.uninstall(cursor)
        logger.info("Dropped search index and sync triggers")

    def rebuild(self) -> int:
        """
        Recreate the triggers and index, then index every issue.

        Runs in a single write transaction; if interrupted it rolls back to
        the previous index and can simply be run again.

        Returns
        -------
        int
            Number of issues indexed
        """
        with self._conn.maintenance_lock.hold():
            with self._conn.transaction(immediate=True) as cursor:
                self._sync.uninstall(cursor)
                self._sync.install(cursor)
                count = self._sync.populate(cursor, REBUILD_BATCH_SIZE)
        logger.info("Rebuilt search index with %d issues", count)
        return count

    def status(self) -> Dict[str, Any]:
        """
        Describe the current index state.

        Returns
        -------
        Dict[str, Any]
            ``index_exists``, ``hooks`` (trigger names present),
            ``documents`` (None without an index) and ``issues``
        """
        cursor = self._conn.cursor()
        exists = self._sync.index_exists(cursor)
        cursor.execute("SELECT COUNT(*) FROM issues")
        issues = cursor.fetchone()[0]
        return {
            "index_exists": exists,
            "hooks": self._sync.installed_hooks(cursor),
            "documents": self._sync.document_count(cursor) if exists else None,
            "issues": issues,
        }

    def verify(self) -> bool:
        """
        Check that the index is intact and covers every issue.

        Runs the FTS5 integrity-check and compares document and issue
        counts.

        Returns
        -------
        bool
            True if the index and all sync triggers are present and healthy
        """
        try:
            state = self.status()
        except sqlite3.DatabaseError as e:
            logger.warning("Search index status check failed: %s", e)
            return False

        if not state["index_exists"]:
            logger.warning("Search index is missing")
            return False
        if len(state["hooks"]) != len(FTS_TRIGGERS):
            logger.warning("Search sync triggers missing, found: %s", state["hooks"])
            return False
        if state["documents"] != state["issues"]:
            logger.warning(
                "Search index holds %d documents for %d issues",
                state["documents"],
                state["issues"],
            )
            return False

        try:
            self._conn.cursor().execute(
                f"INSERT INTO {FTS_TABLE}({FTS_TABLE}) VALUES('integrity-check')"
            )
        except sqlite3.DatabaseError as e:
            logger.warning("Search index integrity check failed: %s", e)
            return False
        return True

"""
Database schema management for the issue tracker.

Provides SchemaManager class that handles table creation, indexes,
the FTS5 search index, and the triggers that keep it in sync.
"""

import logging
from typing import TYPE_CHECKING

from .constants import FTS_TABLE, FTS_TRIGGERS, REBUILD_BATCH_SIZE
from .search.sync import IndexSynchronizer

if TYPE_CHECKING:
    from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

ISSUE_COUNTER_ID = "issue_counter"

TABLES = ("projects", "issues", "labels", "issue_labels", "comments", "counters")

INDEXES = (
    ("idx_issues_status", "issues", "status"),
    ("idx_issues_priority", "issues", "priority"),
    ("idx_issues_project_id", "issues", "project_id"),
    ("idx_issues_number", "issues", "number"),
    ("idx_issues_due_date", "issues", "due_date"),
    ("idx_issues_parent_id", "issues", "parent_id"),
    ("idx_issue_labels_issue_id", "issue_labels", "issue_id"),
    ("idx_issue_labels_label_id", "issue_labels", "label_id"),
    ("idx_comments_issue_id", "comments", "issue_id"),
)


class SchemaManager:
    """
    Manages database schema creation.

    This class handles:
    - Initial table creation
    - Counter seeding for issue numbers
    - FTS5 virtual table and sync trigger setup
    - Index creation
    - Backfilling an empty search index
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize schema manager.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection to use for schema operations.
        """
        self._conn = conn
        self._sync = IndexSynchronizer()

    def ensure(self) -> None:
        """
        Ensure all database schema exists and is up to date.

        The schema is checked with plain reads first. The write lock is only
        taken when something is missing, so opening an up-to-date database
        never waits on another connection's write.
        """
        if self._is_current():
            logger.debug("Database schema up to date at %s", self._conn.db_path)
            return

        with self._conn.transaction(immediate=True) as cursor:
            # Create core tables
            self._create_projects_table(cursor)
            self._create_issues_table(cursor)
            self._create_labels_table(cursor)
            self._create_issue_labels_table(cursor)
            self._create_comments_table(cursor)
            self._create_counters_table(cursor)

            # Create FTS table and triggers
            self._sync.install(cursor)

            # Create indexes
            self._create_indexes(cursor)

            # Check if the search index needs backfilling
            self._check_fts_backfill(cursor)

        logger.info("Database schema initialized at %s", self._conn.db_path)

    def _is_current(self) -> bool:
        """True if every schema object exists and the index needs no backfill."""
        cursor = self._conn.cursor()
        cursor.execute("SELECT type, name FROM sqlite_master")
        present = {(row[0], row[1]) for row in cursor.fetchall()}

        expected = (
            [("table", name) for name in TABLES]
            + [("table", FTS_TABLE)]
            + [("trigger", name) for name in FTS_TRIGGERS]
            + [("index", name) for name, _, _ in INDEXES]
        )
        if not all(item in present for item in expected):
            return False

        cursor.execute("SELECT 1 FROM counters WHERE id = ?", (ISSUE_COUNTER_ID,))
        if cursor.fetchone() is None:
            return False

        return not self._needs_backfill(cursor)

    def _create_projects_table(self, cursor) -> None:
        """Create projects table for grouping issues."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                status TEXT NOT NULL DEFAULT 'active',
                color TEXT NOT NULL DEFAULT '#FFD700',
                icon TEXT NOT NULL DEFAULT 'folder',
                sort_order INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

    def _create_issues_table(self, cursor) -> None:
        """Create issues table."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS issues (
                id TEXT PRIMARY KEY,
                number INTEGER NOT NULL UNIQUE,
                title TEXT NOT NULL,
                description TEXT,
                status TEXT NOT NULL DEFAULT 'backlog',
                priority TEXT NOT NULL DEFAULT 'none',
                assignee TEXT,
                project_id TEXT REFERENCES projects(id) ON DELETE SET NULL,
                parent_id TEXT,
                due_date TEXT,
                sort_order INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

    def _create_labels_table(self, cursor) -> None:
        """Create labels table."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS labels (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                color TEXT NOT NULL DEFAULT '#6B7280',
                description TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

    def _create_issue_labels_table(self, cursor) -> None:
        """Create junction table for issue-label relationships."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS issue_labels (
                issue_id TEXT NOT NULL,
                label_id TEXT NOT NULL,
                PRIMARY KEY (issue_id, label_id),
                FOREIGN KEY (issue_id) REFERENCES issues(id) ON DELETE CASCADE,
                FOREIGN KEY (label_id) REFERENCES labels(id) ON DELETE CASCADE
            )
        """)

    def _create_comments_table(self, cursor) -> None:
        """Create comments table."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS comments (
                id TEXT PRIMARY KEY,
                issue_id TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (issue_id) REFERENCES issues(id) ON DELETE CASCADE
            )
        """)

    def _create_counters_table(self, cursor) -> None:
        """Create counters table and seed the issue number counter."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS counters (
                id TEXT PRIMARY KEY,
                value INTEGER NOT NULL DEFAULT 0
            )
        """)
        cursor.execute(
            "INSERT OR IGNORE INTO counters (id, value) VALUES (?, 0)",
            (ISSUE_COUNTER_ID,),
        )

    def _create_indexes(self, cursor) -> None:
        """Create performance indexes."""
        for idx_name, table, column in INDEXES:
            cursor.execute(
                f"CREATE INDEX IF NOT EXISTS {idx_name} ON {table}({column})"
            )

    def _needs_backfill(self, cursor) -> bool:
        """True if issues exist but the search index holds no documents."""
        if self._sync.document_count(cursor) > 0:
            return False
        cursor.execute("SELECT EXISTS (SELECT 1 FROM issues)")
        return bool(cursor.fetchone()[0])

    def _check_fts_backfill(self, cursor) -> None:
        """Index existing issues when the search index is empty."""
        if self._needs_backfill(cursor):
            logger.info("Backfilling search index...")
            count = self._sync.populate(cursor, REBUILD_BATCH_SIZE)
            logger.info("Backfilled search index with %d issues", count)

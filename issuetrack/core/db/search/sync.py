"""
Write-path hooks that keep issues_fts consistent with the issues table.

The hooks are SQLite triggers, so every insert, title/description update and
delete on ``issues`` updates the index inside the same statement, and
therefore inside the same transaction, as the row change. Application code
never writes to the index directly; a failed index write aborts the
triggering statement.
"""

import logging
import sqlite3
from typing import List

from ..constants import FTS_TABLE, FTS_TRIGGERS

logger = logging.getLogger(__name__)

# External-content FTS5 table: stores only the inverted index and reads
# title/description back from issues for snippet()
CREATE_INDEX_SQL = f"""
    CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5(
        title,
        description,
        content='issues',
        content_rowid='rowid',
        tokenize='porter unicode61'
    )
"""

_INSERT_HOOK, _UPDATE_HOOK, _DELETE_HOOK = FTS_TRIGGERS

CREATE_HOOKS_SQL = (
    f"""
    CREATE TRIGGER IF NOT EXISTS {_INSERT_HOOK} AFTER INSERT ON issues BEGIN
        INSERT INTO {FTS_TABLE}(rowid, title, description)
        VALUES (new.rowid, new.title, COALESCE(new.description, ''));
    END
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS {_UPDATE_HOOK} AFTER UPDATE OF title, description ON issues
    WHEN old.title IS NOT new.title OR old.description IS NOT new.description
    BEGIN
        INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, title, description)
        VALUES ('delete', old.rowid, old.title, COALESCE(old.description, ''));
        INSERT INTO {FTS_TABLE}(rowid, title, description)
        VALUES (new.rowid, new.title, COALESCE(new.description, ''));
    END
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS {_DELETE_HOOK} AFTER DELETE ON issues BEGIN
        INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, title, description)
        VALUES ('delete', old.rowid, old.title, COALESCE(old.description, ''));
    END
    """,
)


class IndexSynchronizer:
    """
    Installs and removes the issues_fts index and its triggers.

    All methods take the caller's cursor so they run inside the caller's
    transaction (schema bootstrap or index rebuild).
    """

    def install(self, cursor: sqlite3.Cursor) -> None:
        """Create the index table and the three sync triggers if missing."""
        cursor.execute(CREATE_INDEX_SQL)
        for statement in CREATE_HOOKS_SQL:
            cursor.execute(statement)

    def uninstall(self, cursor: sqlite3.Cursor) -> None:
        """Drop the triggers, then the index table. No-op when absent."""
        for name in FTS_TRIGGERS:
            cursor.execute(f"DROP TRIGGER IF EXISTS {name}")
        cursor.execute(f"DROP TABLE IF EXISTS {FTS_TABLE}")

    def installed_hooks(self, cursor: sqlite3.Cursor) -> List[str]:
        """Names of the sync triggers currently present."""
        placeholders = ",".join(["?"] * len(FTS_TRIGGERS))
        cursor.execute(
            f"""
            SELECT name FROM sqlite_master
            WHERE type = 'trigger' AND name IN ({placeholders})
            ORDER BY name
        """,
            FTS_TRIGGERS,
        )
        return [row[0] for row in cursor.fetchall()]

    def index_exists(self, cursor: sqlite3.Cursor) -> bool:
        """True if the issues_fts table exists."""
        cursor.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (FTS_TABLE,),
        )
        return cursor.fetchone() is not None

    def document_count(self, cursor: sqlite3.Cursor) -> int:
        """
        Number of documents held by the index itself.

        Counted from the docsize shadow table; a COUNT(*) on an
        external-content table would read the issues table instead.
        """
        cursor.execute(f"SELECT COUNT(*) FROM {FTS_TABLE}_docsize")
        return cursor.fetchone()[0]

    def populate(self, cursor: sqlite3.Cursor, batch_size: int) -> int:
        """
        Insert one document per issue into an empty index.

        Returns
        -------
        int
            Number of documents inserted
        """
        source = cursor.connection.cursor()
        source.execute(
            "SELECT rowid, title, COALESCE(description, '') FROM issues ORDER BY rowid"
        )
        total = 0
        while True:
            rows = source.fetchmany(batch_size)
            if not rows:
                break
            cursor.executemany(
                f"INSERT INTO {FTS_TABLE}(rowid, title, description) VALUES (?, ?, ?)",
                [tuple(row) for row in rows],
            )
            total += len(rows)
            logger.debug("Indexed %d issues so far", total)
        return total

"""
Shared fixtures for issuetrack tests.
"""
import os
import tempfile

import pytest

from issuetrack.core.db import Database
from issuetrack.core.models import Issue


@pytest.fixture
def db_path():
    """Path to a fresh temporary database file, removed afterwards."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Clean up WAL files too
    for suffix in ["", "-wal", "-shm"]:
        try:
            os.unlink(path + suffix)
        except FileNotFoundError:
            pass


@pytest.fixture
def temp_db(db_path):
    """Create a temporary database for testing."""
    db = Database(db_path)
    yield db
    db.close()


@pytest.fixture
def make_issue(temp_db):
    """Factory creating issues in temp_db: make_issue("Title", "Description")."""

    def _make(title, description=None, **fields):
        return temp_db.issues.create(Issue(title=title, description=description, **fields))

    return _make


def fts_rowids(db, query):
    """Rowids the raw index returns for an FTS5 query (no join, no sanitizing)."""
    cursor = db.conn.cursor()
    cursor.execute("SELECT rowid FROM issues_fts WHERE issues_fts MATCH ?", (query,))
    return {row[0] for row in cursor.fetchall()}


def issue_rowid(db, issue_id):
    cursor = db.conn.cursor()
    cursor.execute("SELECT rowid FROM issues WHERE id = ?", (issue_id,))
    return cursor.fetchone()[0]

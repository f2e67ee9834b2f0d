"""
Tests that the search index stays consistent with the issues table.
"""
import random
import sqlite3

import pytest

from conftest import fts_rowids, issue_rowid
from issuetrack.core.db.search.sync import IndexSynchronizer
from issuetrack.core.errors import IndexWriteFailed
from issuetrack.core.models import Issue


def indexed_documents(db):
    return IndexSynchronizer().document_count(db.conn.cursor())


# =============================================================================
# 1. Single writes
# =============================================================================
def test_create_is_indexed_immediately(temp_db, make_issue):
    issue = make_issue("Checkout button misaligned", "Safari only")

    rowid = issue_rowid(temp_db, issue["id"])
    assert fts_rowids(temp_db, '"checkout"') == {rowid}
    assert fts_rowids(temp_db, '"safari"') == {rowid}
    assert indexed_documents(temp_db) == 1


def test_update_replaces_indexed_text(temp_db, make_issue):
    issue = make_issue("Alpha", "first draft")

    temp_db.issues.update(issue["id"], {"title": "Beta", "description": "final copy"})

    rowid = issue_rowid(temp_db, issue["id"])
    assert fts_rowids(temp_db, '"alpha"') == set()
    assert fts_rowids(temp_db, '"draft"') == set()
    assert fts_rowids(temp_db, '"beta"') == {rowid}
    assert fts_rowids(temp_db, '"final"') == {rowid}
    assert indexed_documents(temp_db) == 1


def test_clearing_description_removes_its_terms(temp_db, make_issue):
    issue = make_issue("Crash report", "stacktrace attached")

    temp_db.issues.update(issue["id"], {"description": ""})

    assert fts_rowids(temp_db, '"stacktrace"') == set()
    assert fts_rowids(temp_db, '"crash"') == {issue_rowid(temp_db, issue["id"])}


def test_non_indexed_update_leaves_index_alone(temp_db, make_issue):
    issue = make_issue("Slow dashboard")

    temp_db.issues.update(issue["id"], {"status": "done", "priority": "high"})

    assert fts_rowids(temp_db, '"dashboard"') == {issue_rowid(temp_db, issue["id"])}
    assert indexed_documents(temp_db) == 1


def test_delete_removes_from_index(temp_db, make_issue):
    keep = make_issue("Keep this one")
    gone = make_issue("Remove zebra")

    temp_db.issues.delete(gone["id"])

    assert fts_rowids(temp_db, '"zebra"') == set()
    assert fts_rowids(temp_db, '"keep"') == {issue_rowid(temp_db, keep["id"])}
    assert indexed_documents(temp_db) == 1


def test_restore_reindexes(temp_db, make_issue):
    issue = make_issue("Restorable walrus")
    snapshot = temp_db.issues.get(issue["id"])
    temp_db.issues.delete(issue["id"])

    restored = temp_db.issues.restore(Issue(**snapshot))

    assert restored["number"] == issue["number"]
    assert fts_rowids(temp_db, '"walrus"') == {issue_rowid(temp_db, issue["id"])}


# =============================================================================
# 2. Invariant over random write sequences
# =============================================================================
def test_index_matches_issues_after_random_writes(temp_db):
    rng = random.Random(1234)
    live = {}  # issue id -> unique token currently in its title
    next_token = 0

    for _ in range(120):
        op = rng.choice(["create", "create", "update", "delete", "touch"])
        if op == "create" or not live:
            token = f"tok{next_token}x"
            next_token += 1
            issue = temp_db.issues.create(Issue(title=f"Issue {token}", description="body"))
            live[issue["id"]] = token
        elif op == "update":
            issue_id = rng.choice(sorted(live))
            token = f"tok{next_token}x"
            next_token += 1
            temp_db.issues.update(issue_id, {"title": f"Renamed {token}"})
            live[issue_id] = token
        elif op == "delete":
            issue_id = rng.choice(sorted(live))
            temp_db.issues.delete(issue_id)
            del live[issue_id]
        else:
            issue_id = rng.choice(sorted(live))
            temp_db.issues.update(issue_id, {"status": rng.choice(["todo", "done"])})

    assert indexed_documents(temp_db) == temp_db.issues.count() == len(live)
    for issue_id, token in live.items():
        assert fts_rowids(temp_db, f'"{token}"') == {issue_rowid(temp_db, issue_id)}
    # Tokens of deleted or renamed issues are gone
    live_tokens = set(live.values())
    for n in range(next_token):
        if f"tok{n}x" not in live_tokens:
            assert fts_rowids(temp_db, f'"tok{n}x"') == set()
    assert temp_db.maintenance.verify()


# =============================================================================
# 3. Failed index writes roll back the issue write
# =============================================================================
@pytest.fixture
def broken_index(temp_db, make_issue):
    """Database whose index table is gone while its sync triggers remain."""
    existing = make_issue("Existing issue")
    temp_db.conn.cursor().execute("DROP TABLE issues_fts")
    return existing


def test_create_rolls_back_when_index_write_fails(temp_db, broken_index):
    with pytest.raises(IndexWriteFailed):
        temp_db.issues.create(Issue(title="Never stored"))

    assert temp_db.issues.count() == 1
    # The issue number was not consumed either
    cursor = temp_db.conn.cursor()
    cursor.execute("SELECT value FROM counters WHERE id = 'issue_counter'")
    assert cursor.fetchone()[0] == 1


def test_update_rolls_back_when_index_write_fails(temp_db, broken_index):
    with pytest.raises(IndexWriteFailed):
        temp_db.issues.update(broken_index["id"], {"title": "Changed"})

    assert temp_db.issues.get(broken_index["id"])["title"] == "Existing issue"


def test_delete_rolls_back_when_index_write_fails(temp_db, broken_index):
    with pytest.raises(IndexWriteFailed):
        temp_db.issues.delete(broken_index["id"])

    assert temp_db.issues.get(broken_index["id"]) is not None


def test_writes_succeed_again_after_rebuild(temp_db, broken_index):
    temp_db.maintenance.rebuild()

    issue = temp_db.issues.create(Issue(title="Fresh start"))
    assert fts_rowids(temp_db, '"fresh"') == {issue_rowid(temp_db, issue["id"])}
    assert fts_rowids(temp_db, '"existing"') == {issue_rowid(temp_db, broken_index["id"])}


@pytest.fixture
def corrupted_index(temp_db, make_issue):
    """Database whose index structure record is garbage while the table remains."""
    existing = make_issue("Existing issue")
    temp_db.conn.cursor().execute(
        "UPDATE issues_fts_data SET block = x'00ff00ff' WHERE id = 10"
    )
    return existing


def test_corrupted_index_fails_update_as_index_error(temp_db, corrupted_index):
    with pytest.raises(IndexWriteFailed):
        temp_db.issues.update(corrupted_index["id"], {"title": "Changed"})

    assert temp_db.issues.get(corrupted_index["id"])["title"] == "Existing issue"


def test_declared_constraints_are_not_index_errors(temp_db, make_issue):
    issue = make_issue("Has a number")

    with pytest.raises(sqlite3.IntegrityError, match="UNIQUE"):
        with temp_db.issues.write() as cursor:
            cursor.execute(
                "INSERT INTO issues (id, number, title, created_at, updated_at)"
                " VALUES ('dup', ?, 'Dup', 'now', 'now')",
                (issue["number"],),
            )

    assert temp_db.issues.count() == 1

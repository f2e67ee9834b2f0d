"""
Tests for the command line interface.
"""
import json
import sqlite3

import pytest
from click.testing import CliRunner

from issuetrack.cli import main
from issuetrack.core.db import Database
from issuetrack.core.db.locks import maintenance_lock_for
from issuetrack.core.models import Issue


@pytest.fixture
def seeded_path(db_path):
    """Database file with a few issues, closed before the CLI opens it."""
    with Database(db_path) as db:
        db.issues.create(Issue(title="Fix login bug", description="Password reset loops"))
        db.issues.create(Issue(title="Add dark mode", priority="low"))
    return db_path


def run(*args):
    return CliRunner().invoke(main, list(args))


def test_search_prints_results(seeded_path):
    result = run("--db-path", seeded_path, "search", "login")

    assert result.exit_code == 0, result.output
    assert "Found 1 issues" in result.output
    assert "#1" in result.output
    assert "Fix login bug" in result.output


def test_search_json(seeded_path):
    result = run("--db-path", seeded_path, "search", "password", "--json")

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert [r["number"] for r in data] == [1]
    assert "<mark>Password</mark>" in data[0]["descriptionSnippet"]


def test_search_without_matches(seeded_path):
    result = run("--db-path", seeded_path, "search", "nonexistentterm")
    assert result.exit_code == 0
    assert "No issues found" in result.output


def test_search_accepts_per_command_db_path(seeded_path):
    result = run("search", "dark", "--db-path", seeded_path)
    assert result.exit_code == 0, result.output
    assert "Add dark mode" in result.output


def test_index_rebuild(seeded_path):
    result = run("--db-path", seeded_path, "index", "rebuild")

    assert result.exit_code == 0, result.output
    assert "rebuilt with 2 issues" in result.output


def test_index_rebuild_refused_while_locked(seeded_path):
    with maintenance_lock_for(seeded_path).hold():
        result = run("--db-path", seeded_path, "index", "rebuild")

    assert result.exit_code == 1
    assert "already running" in result.output


def test_index_verify(seeded_path):
    result = run("--db-path", seeded_path, "index", "verify")

    assert result.exit_code == 0, result.output
    assert "Search index OK." in result.output
    assert "Indexed documents: 2 / 2 issues" in result.output


def test_index_drop(seeded_path):
    result = run("--db-path", seeded_path, "index", "drop", "--yes")

    assert result.exit_code == 0, result.output
    assert "Search index dropped." in result.output
    conn = sqlite3.connect(seeded_path)
    try:
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master")}
    finally:
        conn.close()
    assert "issues_fts" not in names
    assert "issues_fts_insert" not in names


def test_index_drop_asks_for_confirmation(seeded_path):
    result = CliRunner().invoke(main, ["--db-path", seeded_path, "index", "drop"], input="n\n")
    assert result.exit_code == 1
    with Database(seeded_path) as db:
        assert db.maintenance.status()["issues"] == 2


def test_index_status(seeded_path):
    result = run("--db-path", seeded_path, "index", "status")

    assert result.exit_code == 0, result.output
    state = json.loads(result.output)
    assert state["index_exists"] is True
    assert state["documents"] == state["issues"] == 2


def test_info(seeded_path):
    result = run("--db-path", seeded_path, "info")

    assert result.exit_code == 0, result.output
    assert "Issues: 2" in result.output
    assert "Search index: 2 documents" in result.output

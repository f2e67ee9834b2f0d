"""
Tests for ranked issue search.
"""
import pytest

from issuetrack.core.db import Database
from issuetrack.core.errors import MaintenanceInProgress, SearchUnavailable
from issuetrack.core.models import Issue, SearchResult


# =============================================================================
# 1. Basic scenarios
# =============================================================================
def test_created_issue_is_found_with_highlight(temp_db, make_issue):
    issue = make_issue("Fix login bug")

    results = temp_db.search_issues("login")

    assert len(results) == 1
    assert isinstance(results[0], SearchResult)
    assert results[0].id == issue["id"]
    assert results[0].number == issue["number"]
    assert "<mark>login</mark>" in results[0].title_snippet
    assert results[0].description_snippet == ""


def test_deleted_issue_is_not_found(temp_db, make_issue):
    issue = make_issue("Quokka rendering glitch")
    temp_db.issues.delete(issue["id"])

    assert temp_db.search_issues("quokka") == []


def test_renamed_issue_is_found_by_new_title_only(temp_db, make_issue):
    issue = make_issue("Alpha")
    temp_db.issues.update(issue["id"], {"title": "Beta"})

    assert temp_db.search_issues("Alpha") == []
    assert [r.id for r in temp_db.search_issues("Beta")] == [issue["id"]]


def test_injection_attempt_runs_safely(temp_db, make_issue):
    make_issue("Drop table issues from the report")

    results = temp_db.search_issues('"; DROP TABLE issues --')

    assert len(results) == 1
    assert temp_db.issues.count() == 1
    assert temp_db.maintenance.verify()


@pytest.mark.parametrize("query", ["", "   ", None, "*", '""', "-- ;"])
def test_empty_or_unsearchable_query_returns_nothing(temp_db, make_issue, query):
    make_issue("Anything at all")
    assert temp_db.search_issues(query) == []


# =============================================================================
# 2. Matching semantics
# =============================================================================
def test_all_terms_are_required(temp_db, make_issue):
    both = make_issue("Payment timeout", "Stripe webhook")
    make_issue("Payment receipt")

    assert [r.id for r in temp_db.search_issues("payment stripe")] == [both["id"]]


def test_phrase_requires_adjacent_words(temp_db, make_issue):
    adjacent = make_issue("Cannot sign in on mobile")
    make_issue("Sign the contract in person")

    assert [r.id for r in temp_db.search_issues('"sign in"')] == [adjacent["id"]]


def test_operators_are_matched_as_words(temp_db, make_issue):
    make_issue("Login page")
    make_issue("Logout page")

    # OR is a literal term here, so neither issue contains every word
    assert temp_db.search_issues("login OR logout") == []


def test_stemming_matches_word_variants(temp_db, make_issue):
    issue = make_issue("Uploading attachments fails")

    assert [r.id for r in temp_db.search_issues("upload")] == [issue["id"]]


def test_description_match_has_description_snippet(temp_db, make_issue):
    make_issue("Untitled", "The export button throws an error on large files")

    result = temp_db.search_issues("export")[0]

    assert "<mark>export</mark>" in result.description_snippet
    assert "<mark>" not in result.title_snippet


def test_long_query_requires_every_term(temp_db, make_issue):
    issue = make_issue("Many words", " ".join(f"w{i}x" for i in range(64)))

    matched = " ".join(f"w{i}x" for i in range(64))
    too_many = " ".join(f"w{i}x" for i in range(100))

    assert [r.id for r in temp_db.search_issues(matched)] == [issue["id"]]
    assert temp_db.search_issues(too_many) == []


def test_private_use_characters_are_matched(temp_db, make_issue):
    issue = make_issue("Custom icon \ue000 misaligned")
    make_issue("Custom icon aligned")

    assert [r.id for r in temp_db.search_issues("\ue000")] == [issue["id"]]


# =============================================================================
# 3. Ranking
# =============================================================================
def test_title_matches_rank_above_description_matches(temp_db, make_issue):
    in_description = make_issue("Misc cleanup", "Touches the database layer")
    in_title = make_issue("Database migration", "Schema changes")

    results = temp_db.search_issues("database")

    assert [r.id for r in results] == [in_title["id"], in_description["id"]]
    assert results[0].rank < results[1].rank


def test_results_are_ordered_by_rank(temp_db, make_issue):
    for i in range(10):
        make_issue(f"Cache issue {i}", "cache " * (i % 4))

    ranks = [r.rank for r in temp_db.search_issues("cache")]

    assert len(ranks) == 10
    assert ranks == sorted(ranks)


# =============================================================================
# 4. Limits
# =============================================================================
@pytest.fixture
def many_issues(temp_db):
    for i in range(105):
        temp_db.issues.create(Issue(title=f"Widget report {i}"))
    return temp_db


@pytest.mark.parametrize(
    "limit, expected",
    [(None, 20), ("9999", 100), ("0", 1), ("abc", 20), ("-3", 1), (5, 5), ("42", 42)],
)
def test_limit_is_clamped(many_issues, limit, expected):
    assert len(many_issues.search_issues("widget", limit)) == expected


# =============================================================================
# 5. Failure modes
# =============================================================================
def test_stale_index_entries_are_excluded(temp_db, make_issue):
    issue = make_issue("Orphaned entry")
    cursor = temp_db.conn.cursor()
    cursor.execute("DROP TRIGGER issues_fts_delete")
    cursor.execute("DELETE FROM issues WHERE id = ?", (issue["id"],))

    assert temp_db.search_issues("orphaned") == []


def test_missing_index_raises_search_unavailable(temp_db, make_issue):
    make_issue("Searchable")
    temp_db.maintenance.drop()

    with pytest.raises(SearchUnavailable):
        temp_db.search_issues("searchable")


def test_search_refused_during_maintenance(temp_db, make_issue):
    make_issue("Busy index")

    with temp_db.conn.maintenance_lock.hold():
        with pytest.raises(MaintenanceInProgress):
            temp_db.search_issues("busy")

    assert len(temp_db.search_issues("busy")) == 1


def test_maintenance_lock_is_shared_across_connections(temp_db, db_path, make_issue):
    make_issue("Shared lock")
    other = Database(db_path)
    try:
        with temp_db.conn.maintenance_lock.hold():
            with pytest.raises(MaintenanceInProgress):
                other.search_issues("shared")
            with pytest.raises(MaintenanceInProgress):
                other.issues.create(Issue(title="Blocked write"))
    finally:
        other.close()


def test_search_result_serializes_with_camel_case(temp_db, make_issue):
    make_issue("Serialize me", "with a description")

    data = temp_db.search_issues("serialize")[0].model_dump(by_alias=True)

    assert list(data) == [
        "id",
        "number",
        "title",
        "status",
        "priority",
        "titleSnippet",
        "descriptionSnippet",
        "rank",
    ]

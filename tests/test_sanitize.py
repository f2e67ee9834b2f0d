"""
Tests for search query sanitizing and pagination parsing.
"""
import re

import pytest

from issuetrack.core.db.search.sanitize import (
    escape_fts5_query,
    escape_like_pattern,
    parse_pagination_int,
    quote_fts5_term,
)

# A sanitized query is "" or quoted strings separated by single spaces
SAFE_QUERY = re.compile(r'^("(?:[^"]|"")*")( "(?:[^"]|"")*")*$')

HOSTILE_INPUTS = [
    '"; DROP TABLE issues --',
    "a AND b",
    "a OR b NOT c",
    "NEAR(a b, 3)",
    "title:secret",
    "^start",
    "prefix*",
    "(unbalanced",
    "-excluded +required",
    '"""',
    '"a" "b',
    "\x00\x00",
    "emoji \U0001F600 text",
    "\ud800 lone surrogate",
    "tab\tand\nnewline",
    "{title description}: x",
    "\\",
    "'single quotes'",
]


# =============================================================================
# 1. Terms and phrases
# =============================================================================
def test_terms_are_quoted_and_anded():
    assert escape_fts5_query("login bug") == '"login" "bug"'


def test_balanced_quotes_form_a_phrase():
    assert escape_fts5_query('"sign in" page') == '"sign in" "page"'
    assert escape_fts5_query('login "sign in" bug*') == '"login" "sign in" "bug*"'


def test_unbalanced_quote_is_literal():
    assert escape_fts5_query('foo"bar') == '"foo""bar"'
    assert escape_fts5_query('"open phrase') == '"""open" "phrase"'


def test_quote_fts5_term_doubles_quotes():
    assert quote_fts5_term('say "hi"') == '"say ""hi"""'


def test_extra_whitespace_is_collapsed():
    assert escape_fts5_query("  login \t\n bug  ") == '"login" "bug"'


# =============================================================================
# 2. Operators are neutralized
# =============================================================================
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a AND b", '"a" "AND" "b"'),
        ("NOT", '"NOT"'),
        ("title:secret", '"title:secret"'),
        ("(a OR b)", '"(a" "OR" "b)"'),
        ("prefix*", '"prefix*"'),
    ],
)
def test_operators_become_literal_terms(raw, expected):
    assert escape_fts5_query(raw) == expected


def test_sql_injection_attempt_is_plain_terms():
    assert escape_fts5_query('"; DROP TABLE issues --') == '"DROP" "TABLE" "issues"'


# =============================================================================
# 3. Totality
# =============================================================================
@pytest.mark.parametrize("raw", ["", "   ", "*", "-- ++", '""', '" "', "\x00", None, 42, ["a"]])
def test_nothing_searchable_yields_empty_query(raw):
    assert escape_fts5_query(raw) == ""


@pytest.mark.parametrize("raw", HOSTILE_INPUTS)
def test_output_is_always_well_formed(raw):
    result = escape_fts5_query(raw)
    assert result == "" or SAFE_QUERY.match(result)
    assert "\x00" not in result


def test_nul_splits_terms():
    assert escape_fts5_query("a\x00b") == '"a" "b"'


def test_every_term_is_kept():
    raw = " ".join(f"word{i}" for i in range(100))
    result = escape_fts5_query(raw)
    assert result.count('" "') + 1 == 100
    assert result.endswith('"word99"')


def test_private_use_characters_are_searchable():
    assert escape_fts5_query("\ue000") == '"\ue000"'
    assert escape_fts5_query("* \U000f0001x") == '"\U000f0001x"'


def test_very_long_input():
    raw = "x" * 100_000 + ' "' + "y " * 1000
    result = escape_fts5_query(raw)
    assert SAFE_QUERY.match(result)


# =============================================================================
# 4. LIKE escaping
# =============================================================================
def test_escape_like_pattern():
    assert escape_like_pattern("50%_off\\") == "50\\%\\_off\\\\"
    assert escape_like_pattern("plain") == "plain"


# =============================================================================
# 5. Pagination parsing
# =============================================================================
@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 20),
        ("", 20),
        ("abc", 20),
        ("10", 10),
        (" 7 ", 7),
        ("12abc", 12),
        ("0", 1),
        ("-5", 1),
        ("9999", 100),
        (50, 50),
        (3.9, 3),
        (float("nan"), 20),
        (float("inf"), 20),
        (True, 20),
    ],
)
def test_parse_pagination_int(value, expected):
    assert parse_pagination_int(value, 20, 1, 100) == expected

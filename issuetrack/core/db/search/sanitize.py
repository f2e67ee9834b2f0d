"""
Input sanitizers for search and listing queries.

``escape_fts5_query`` turns an untrusted search string into FTS5 MATCH
syntax made only of quoted strings joined by implicit AND. Inside a quoted
string every FTS5 operator (AND, OR, NOT, NEAR, ``*``, ``^``, ``:``,
parentheses, ``+``, ``-``) is literal text, so a user can never express an
operator. The function is pure and total: it never raises.
"""

import math
import re
import unicodedata
from typing import Any, List, Optional

_QUOTE = '"'

# Leading integer, the way a lenient query-string parser reads it ("12abc" -> 12)
_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")

# Characters SQLite cannot bind (lone surrogates) or that end C strings
_UNBINDABLE = re.compile("[\x00\ud800-\udfff]")


def _split_terms(text: str) -> List[str]:
    """
    Split a raw query into terms and phrases.

    Whitespace separates terms outside quotes. A quote with a matching
    closing quote delimits one phrase, kept whole. A quote with no closing
    partner is an ordinary character of the term it appears in.
    """
    terms: List[str] = []
    current: List[str] = []
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]
        if ch.isspace():
            if current:
                terms.append("".join(current))
                current = []
            i += 1
            continue

        if ch == _QUOTE:
            close = text.find(_QUOTE, i + 1)
            if close != -1:
                if current:
                    terms.append("".join(current))
                    current = []
                terms.append(text[i + 1:close])
                i = close + 1
                continue

        current.append(ch)
        i += 1

    if current:
        terms.append("".join(current))
    return terms


def _is_searchable(term: str) -> bool:
    """
    True if the tokenizer would produce at least one token from term.

    unicode61 treats letters, numbers and private-use characters (L*, N*,
    Co) as token characters; everything else separates tokens.
    """
    for ch in term:
        category = unicodedata.category(ch)
        if category[0] in "LN" or category == "Co":
            return True
    return False


def quote_fts5_term(term: str) -> str:
    """Wrap a term in an FTS5 string literal, doubling embedded quotes."""
    return _QUOTE + term.replace(_QUOTE, _QUOTE * 2) + _QUOTE


def escape_fts5_query(raw: Any) -> str:
    """
    Convert untrusted user input into a safe FTS5 MATCH expression.

    Each term or balanced phrase becomes one quoted FTS5 string; the
    strings are joined with spaces, which FTS5 reads as AND. Terms with no
    token characters are skipped because they tokenize to nothing and can
    never match. Every other term is kept, so all of them must match.

    Parameters
    ----------
    raw : str
        Raw query as typed by the user. Non-strings yield an empty query.

    Returns
    -------
    str
        Valid FTS5 query, or "" when nothing searchable remains

    Examples
    --------
    >>> escape_fts5_query('login "sign in" bug*')
    '"login" "sign in" "bug*"'
    >>> escape_fts5_query('   ')
    ''
    """
    if not isinstance(raw, str):
        return ""

    text = _UNBINDABLE.sub(" ", raw)
    terms = [t for t in _split_terms(text) if _is_searchable(t)]
    return " ".join(quote_fts5_term(t) for t in terms)


def escape_like_pattern(text: str) -> str:
    """Escape LIKE metacharacters (%, _, \\) for use with ESCAPE '\\'."""
    return re.sub(r"([%_\\])", r"\\\1", text)


def parse_pagination_int(
    value: Optional[Any],
    default: int,
    minimum: int,
    maximum: int,
) -> int:
    """
    Parse a pagination integer from a query parameter.

    Malformed input falls back to ``default``; anything out of range is
    clamped to ``[minimum, maximum]`` rather than rejected.

    Parameters
    ----------
    value : str or int, optional
        Raw parameter value
    default : int
        Value used when ``value`` is missing or has no leading integer
    minimum : int
        Lower bound (inclusive)
    maximum : int
        Upper bound (inclusive)

    Returns
    -------
    int
        Integer in ``[minimum, maximum]``
    """
    if value is None or isinstance(value, bool):
        parsed = default
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else default
    else:
        match = _LEADING_INT.match(str(value))
        parsed = int(match.group(1)) if match else default

    return max(minimum, min(maximum, parsed))

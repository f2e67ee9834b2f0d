"""
Ranked full-text retrieval over issues_fts.
"""

import logging
import sqlite3
from typing import Any, List, Optional, TYPE_CHECKING

from issuetrack.core.errors import SearchUnavailable
from issuetrack.core.models import SearchResult

from ..constants import (
    BM25_WEIGHTS,
    DEFAULT_SEARCH_LIMIT,
    FTS_TABLE,
    MAX_FILTER_MATCHES,
    MAX_SEARCH_LIMIT,
    MIN_SEARCH_LIMIT,
    SNIPPET_CLOSE,
    SNIPPET_ELLIPSIS,
    SNIPPET_OPEN,
    SNIPPET_TOKENS,
)
from .sanitize import escape_fts5_query, parse_pagination_int

if TYPE_CHECKING:
    from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _snippet_call(column: int) -> str:
    """snippet() for one column; '' when the column is NULL or empty."""
    return (
        f"COALESCE(snippet({FTS_TABLE}, {column}, '{SNIPPET_OPEN}', '{SNIPPET_CLOSE}', "
        f"'{SNIPPET_ELLIPSIS}', {SNIPPET_TOKENS}), '')"
    )


class SearchIndex:
    """
    Query engine for issue full-text search.

    Sanitizes the raw query, runs one ranked MATCH against the index, joins
    each hit back to issues for display fields and returns at most ``limit``
    results, best match first.

    Example
    -------
    >>> index = SearchIndex(conn)
    >>> results = index.search("login bug", limit="10")
    >>> results[0].title_snippet
    'Fix <mark>login</mark> <mark>bug</mark>'
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize the query engine.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection
        """
        self._conn = conn

    def search(self, query: Optional[str], limit: Optional[Any] = None) -> List[SearchResult]:
        """
        Search issues by title and description.

        Parameters
        ----------
        query : str
            Raw user query; operators are neutralized, terms are ANDed
        limit : str or int, optional
            Requested page size, clamped to [1, 100]; default 20

        Returns
        -------
        List[SearchResult]
            Hits ordered by ascending rank, empty for an empty query

        Raises
        ------
        SearchUnavailable
            If the index is missing or corrupted
        MaintenanceInProgress
            If an index rebuild is running
        """
        if not query or not query.strip():
            return []

        page_size = parse_pagination_int(
            limit, DEFAULT_SEARCH_LIMIT, MIN_SEARCH_LIMIT, MAX_SEARCH_LIMIT
        )
        fts_query = escape_fts5_query(query.strip())
        if not fts_query:
            return []

        self._conn.maintenance_lock.ensure_available()

        bm25_call = f"bm25({FTS_TABLE}, {', '.join(str(w) for w in BM25_WEIGHTS)})"
        cursor = self._conn.cursor()
        try:
            # snippet() locates matches from the index's own position lists
            cursor.execute(
                f"""
                SELECT
                    i.id,
                    i.number,
                    i.title,
                    i.status,
                    i.priority,
                    {_snippet_call(0)} AS title_snippet,
                    {_snippet_call(1)} AS description_snippet,
                    {bm25_call} AS rank
                FROM {FTS_TABLE}
                INNER JOIN issues i ON {FTS_TABLE}.rowid = i.rowid
                WHERE {FTS_TABLE} MATCH ?
                ORDER BY rank
                LIMIT ?
            """,
                (fts_query, page_size),
            )
            rows = cursor.fetchall()
        except sqlite3.DatabaseError as e:
            logger.error("FTS search error for %r: %s", fts_query, e)
            raise SearchUnavailable("Search index unavailable") from e
        finally:
            cursor.close()

        logger.debug("Search %r returned %d results", fts_query, len(rows))
        return [
            SearchResult(
                id=row[0],
                number=row[1],
                title=row[2],
                status=row[3],
                priority=row[4],
                title_snippet=row[5],
                description_snippet=row[6],
                rank=row[7],
            )
            for row in rows
        ]

    def match_ids(self, query: Optional[str], cap: int = MAX_FILTER_MATCHES) -> List[str]:
        """
        Ids of issues matching a query, unordered, at most ``cap``.

        Used by the issue list to filter by text before applying its own
        sorting and pagination.

        Raises
        ------
        SearchUnavailable
            If the index is missing or corrupted
        """
        fts_query = escape_fts5_query((query or "").strip())
        if not fts_query:
            return []

        self._conn.maintenance_lock.ensure_available()

        cursor = self._conn.cursor()
        try:
            cursor.execute(
                f"""
                SELECT i.id
                FROM {FTS_TABLE}
                INNER JOIN issues i ON {FTS_TABLE}.rowid = i.rowid
                WHERE {FTS_TABLE} MATCH ?
                LIMIT ?
            """,
                (fts_query, cap),
            )
            return [row[0] for row in cursor.fetchall()]
        except sqlite3.DatabaseError as e:
            logger.debug("FTS filter error for %r: %s", fts_query, e)
            raise SearchUnavailable("Search index unavailable") from e
        finally:
            cursor.close()

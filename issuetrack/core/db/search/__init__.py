"""
Search module for issue full-text search.

Provides the query sanitizer, the ranked query engine, the trigger-based
index synchronizer and the maintenance operator.
"""

from .index import SearchIndex
from .maintenance import IndexMaintenance
from .sanitize import escape_fts5_query, escape_like_pattern, parse_pagination_int
from .sync import IndexSynchronizer

__all__ = [
    "SearchIndex",
    "IndexMaintenance",
    "IndexSynchronizer",
    "escape_fts5_query",
    "escape_like_pattern",
    "parse_pagination_int",
]

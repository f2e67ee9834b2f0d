"""
Database constants for the issue tracker.

These constants configure FTS5 search weights, snippet size, result
bounds, and other search-related configuration values.
"""

# FTS5 table and the triggers that keep it in sync with issues
FTS_TABLE = "issues_fts"
FTS_TRIGGERS = ("issues_fts_insert", "issues_fts_update", "issues_fts_delete")

# BM25 weights for issues_fts columns
# Higher weights = more important in search ranking
# Column order: title, description
BM25_WEIGHTS = (10.0, 1.0)

# Snippet configuration
SNIPPET_TOKENS = 32
SNIPPET_OPEN = "<mark>"
SNIPPET_CLOSE = "</mark>"
SNIPPET_ELLIPSIS = "..."

# Search result bounds (top-N only, no offset)
DEFAULT_SEARCH_LIMIT = 20
MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 100

# Upper bound on ids returned to the issue list filter
MAX_FILTER_MATCHES = 200

# Rows fetched per batch while rebuilding the index
REBUILD_BATCH_SIZE = 500

# Issue list pagination defaults
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

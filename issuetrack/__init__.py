"""
issuetrack: issue tracking backend with SQLite FTS5 full-text search.
"""

__version__ = "0.1.0"

"""
Database module for the issue tracker.

Provides SQLite storage with an FTS5 full-text search index over issue
titles and descriptions, using a repository pattern architecture.
"""

from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection
from .schema import SchemaManager
from .repositories.issue import IssueRepository
from .repositories.project import ProjectRepository
from .repositories.label import LabelRepository
from .repositories.comment import CommentRepository
from .search.index import SearchIndex
from .search.maintenance import IndexMaintenance

# Import models for type hints
from issuetrack.core.models import Issue, SearchResult


class Database:
    """
    Main database facade combining all repositories.

    Provides a unified interface for database operations.

    Example
    -------
    >>> db = Database("issues.db")
    >>> issue = db.issues.create(Issue(title="Login fails"))
    >>> results = db.search_issues("login")
    >>> db.maintenance.rebuild()
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database connection and repositories.

        Parameters
        ----------
        db_path : str, optional
            Path to database file. If None, uses ISSUETRACK_DB_PATH or
            ``issuetrack.db`` in the working directory.
        """
        self.conn = DatabaseConnection(db_path)
        self._schema = SchemaManager(self.conn)
        self._schema.ensure()

        # Search (created first so it can be passed to IssueRepository)
        self.search = SearchIndex(self.conn)
        self.maintenance = IndexMaintenance(self.conn)

        # Repositories
        self.issues = IssueRepository(self.conn, search_index=self.search)
        self.projects = ProjectRepository(self.conn)
        self.labels = LabelRepository(self.conn)
        self.comments = CommentRepository(self.conn)

    @property
    def db_path(self) -> str:
        return self.conn.db_path

    def close(self):
        """Close the database connection."""
        self.conn.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit."""
        self.close()

    # --- Issue methods ---
    def create_issue(self, issue: Issue) -> Dict[str, Any]:
        """Delegate to IssueRepository.create()."""
        return self.issues.create(issue)

    def get_issue(self, issue_id: str) -> Optional[Dict[str, Any]]:
        """Delegate to IssueRepository.get()."""
        return self.issues.get(issue_id)

    def delete_issue(self, issue_id: str) -> bool:
        """Delegate to IssueRepository.delete()."""
        return self.issues.delete(issue_id)

    # --- Search methods ---
    def search_issues(self, query: Optional[str], limit: Optional[Any] = None) -> List[SearchResult]:
        """Delegate to SearchIndex.search()."""
        return self.search.search(query, limit)

    def drop_search_index(self) -> None:
        """Delegate to IndexMaintenance.drop()."""
        self.maintenance.drop()

    def rebuild_search_index(self) -> int:
        """Delegate to IndexMaintenance.rebuild()."""
        return self.maintenance.rebuild()

    def verify_search_index(self) -> bool:
        """Delegate to IndexMaintenance.verify()."""
        return self.maintenance.verify()


__all__ = ["Database", "DatabaseConnection"]

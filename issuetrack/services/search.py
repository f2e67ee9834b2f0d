"""
Search service for querying issues.

Provides issue search with:
- Full-text matching on titles and descriptions, every term required
- Highlighted snippets showing match context
- BM25 relevance ranking with titles weighted above descriptions
- Out-of-band index maintenance (rebuild, verify, drop)
"""
import logging
from typing import Any, Dict, List, Optional

from issuetrack.core.db import Database
from issuetrack.core.models import SearchResult

logger = logging.getLogger(__name__)


class IssueSearchService:
    """
    Provides search functionality over issues.

    Features:
    - search(): ranked results with snippets, bounded by limit
    - rebuild_index(): recreate the index from the issues table
    - index_health(): index state plus an integrity verdict
    """

    def __init__(self, db: Database):
        """
        Initialize search service.

        Parameters
        ----------
        db : Database
            Database instance
        """
        self.db = db

    def search(self, query: Optional[str], limit: Optional[Any] = None) -> List[SearchResult]:
        """
        Search issues by text content.

        Parameters
        ----------
        query : str
            Search query; quotes group a phrase, operators are literal text
        limit : str or int, optional
            Maximum number of results, clamped to [1, 100]

        Returns
        -------
        List[SearchResult]
            Matching issues, best match first
        """
        return self.db.search_issues(query, limit)

    def rebuild_index(self) -> int:
        """Rebuild the search index; returns the number of issues indexed."""
        return self.db.rebuild_search_index()

    def drop_index(self) -> None:
        self.db.drop_search_index()

    def index_health(self) -> Dict[str, Any]:
        """
        Describe the search index and whether it passes verification.

        Returns
        -------
        Dict[str, Any]
            ``status()`` fields plus ``healthy``
        """
        state = self.db.maintenance.status()
        state["healthy"] = self.db.verify_search_index()
        if not state["healthy"]:
            logger.warning("Search index failed verification: %s", state)
        return state

"""
Search API routes.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from issuetrack.api.deps import get_db
from issuetrack.core.db import Database
from issuetrack.core.models import SearchResult
from issuetrack.services.search import IssueSearchService

router = APIRouter()


@router.get("/issues/search", response_model=List[SearchResult])
def search_issues(
    q: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Database = Depends(get_db),
):
    """
    Full-text search over issue titles and descriptions.

    Parameters
    ----------
    q : str, optional
        Search query; an empty query returns an empty list
    limit : str, optional
        Maximum results; malformed values fall back to 20 and the
        value is clamped to [1, 100]
    """
    if not q or not q.strip():
        return []

    return IssueSearchService(db).search(q, limit)

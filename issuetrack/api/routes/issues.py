"""
Issue API routes.

Every write commits the issue row and its search index entry together;
index failures surface as errors, never as silently unsearchable issues.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from issuetrack.api.deps import get_db
from issuetrack.api.schemas import (
    BatchUpdate,
    BatchUpdateResponse,
    DeleteResponse,
    IssueCreate,
    IssueDetail,
    IssueResponse,
    IssueUpdate,
)
from issuetrack.core.db import Database
from issuetrack.core.db.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from issuetrack.core.db.search.sanitize import parse_pagination_int
from issuetrack.core.errors import NotFoundError
from issuetrack.core.models import Issue

logger = logging.getLogger(__name__)

router = APIRouter()


def _split_param(value: Optional[str]) -> Optional[List[str]]:
    """Comma-separated query parameter to a list (None when empty)."""
    if not value:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


@router.get("/issues", response_model=List[IssueResponse])
def list_issues(
    status: Optional[str] = Query(None, description="Comma-separated statuses"),
    priority: Optional[str] = Query(None, description="Comma-separated priorities"),
    project_id: Optional[str] = None,
    labels: Optional[str] = Query(None, description="Comma-separated label ids"),
    search: Optional[str] = None,
    sort: str = Query("created", pattern="^(created|updated|number|title|priority|due|manual)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    db: Database = Depends(get_db),
):
    """
    List issues with filters, sorting and pagination.

    ``search`` filters through the full-text index and falls back to a
    title match if the index is unavailable.
    """
    return db.issues.list(
        statuses=_split_param(status),
        priorities=_split_param(priority),
        project_id=project_id,
        label_ids=_split_param(labels),
        search=search,
        sort=sort,
        order=order,
        limit=parse_pagination_int(limit, DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE),
        offset=parse_pagination_int(offset, 0, 0, 1_000_000),
    )


@router.post("/issues", response_model=IssueDetail, status_code=201)
def create_issue(payload: IssueCreate, db: Database = Depends(get_db)):
    """Create an issue; it is searchable as soon as this returns."""
    issue = db.issues.create(Issue(**payload.model_dump()))
    logger.info("Created issue #%d", issue["number"])
    return issue


@router.post("/issues/restore", response_model=IssueDetail, status_code=201)
def restore_issue(payload: Issue, db: Database = Depends(get_db)):
    """
    Restore a deleted issue with its original id and number.

    Returns 409 if an issue with that id still exists.
    """
    return db.issues.restore(payload)


@router.patch("/issues/batch", response_model=BatchUpdateResponse)
def batch_update_issues(payload: BatchUpdate, db: Database = Depends(get_db)):
    """Set status, priority, assignee or project on many issues at once."""
    fields = payload.updates.model_dump(exclude_unset=True)
    count = db.issues.batch_update(payload.issue_ids, fields)
    return {"success": True, "count": count}


@router.get("/issues/{issue_id}", response_model=IssueDetail)
def get_issue(issue_id: str, db: Database = Depends(get_db)):
    """Get one issue with labels, parent and sub-issues."""
    issue = db.issues.get(issue_id)
    if issue is None:
        raise NotFoundError(f"Issue {issue_id} not found")
    return issue


@router.patch("/issues/{issue_id}", response_model=IssueDetail)
def update_issue(issue_id: str, payload: IssueUpdate, db: Database = Depends(get_db)):
    """Partially update an issue; omitted fields are left unchanged."""
    fields = payload.model_dump(exclude_unset=True)
    label_ids = fields.pop("label_ids", None)
    return db.issues.update(issue_id, fields, label_ids=label_ids)


@router.delete("/issues/{issue_id}", response_model=DeleteResponse)
def delete_issue(issue_id: str, db: Database = Depends(get_db)):
    """Delete an issue and return the removed record."""
    issue = db.issues.get(issue_id)
    if issue is None or not db.issues.delete(issue_id):
        raise NotFoundError(f"Issue {issue_id} not found")
    logger.info("Deleted issue #%d", issue["number"])
    return {"success": True, "issue": issue}

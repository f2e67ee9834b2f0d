"""
Issue comment API routes.

Comments are not indexed for search, so these writes never touch the index.
"""
from typing import List

from fastapi import APIRouter, Depends

from issuetrack.api.deps import get_db
from issuetrack.api.schemas import CommentCreate, CommentResponse, SuccessResponse
from issuetrack.core.db import Database
from issuetrack.core.errors import NotFoundError
from issuetrack.core.models import Comment

router = APIRouter()


def _require_issue(db: Database, issue_id: str) -> None:
    if db.issues.get(issue_id) is None:
        raise NotFoundError("Issue not found")


@router.get("/issues/{issue_id}/comments", response_model=List[CommentResponse])
def list_comments(issue_id: str, db: Database = Depends(get_db)):
    """Comments on an issue, oldest first."""
    _require_issue(db, issue_id)
    return db.comments.list_for_issue(issue_id)


@router.post("/issues/{issue_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(issue_id: str, payload: CommentCreate, db: Database = Depends(get_db)):
    return db.comments.add(Comment(issue_id=issue_id, content=payload.content))


@router.delete("/issues/{issue_id}/comments/{comment_id}", response_model=SuccessResponse)
def delete_comment(issue_id: str, comment_id: str, db: Database = Depends(get_db)):
    """Delete one comment of an issue."""
    comments = db.comments.list_for_issue(issue_id)
    if not any(comment["id"] == comment_id for comment in comments):
        raise NotFoundError("Comment not found")
    db.comments.delete(comment_id)
    return {"success": True}

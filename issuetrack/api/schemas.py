"""
Pydantic schemas for API request/response models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from issuetrack.core.models import HEX_COLOR_PATTERN, IssuePriority, IssueStatus, ProjectStatus


class IssueCreate(BaseModel):
    """Request body for creating an issue."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=100_000)
    status: IssueStatus = IssueStatus.BACKLOG
    priority: IssuePriority = IssuePriority.NONE
    assignee: Optional[str] = Field(default=None, max_length=200)
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    due_date: Optional[str] = None
    label_ids: List[str] = Field(default_factory=list, max_length=50)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class IssueUpdate(BaseModel):
    """Request body for a partial issue update; unset fields are unchanged."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=100_000)
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(default=None, max_length=200)
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    due_date: Optional[str] = None
    sort_order: Optional[int] = None
    label_ids: Optional[List[str]] = Field(default=None, max_length=50)


class LabelInfo(BaseModel):
    """Label attached to an issue."""

    id: str
    name: str
    color: str
    description: Optional[str] = None


class IssueResponse(BaseModel):
    """An issue with its labels."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    number: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    assignee: Optional[str] = None
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    due_date: Optional[str] = None
    sort_order: int = 0
    created_at: str
    updated_at: str
    labels: List[LabelInfo] = Field(default_factory=list)


class IssueDetail(IssueResponse):
    """Issue detail view with relations."""

    comment_count: int = 0
    parent: Optional[Dict[str, Any]] = None
    children: List[Dict[str, Any]] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    """Result of a delete; ``issue`` is the removed record, usable for restore."""

    success: bool
    issue: IssueDetail


class BatchChanges(BaseModel):
    """Fields a batch update may set."""

    model_config = ConfigDict(use_enum_values=True)

    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(default=None, max_length=200)
    project_id: Optional[str] = Field(default=None, max_length=50)


class BatchUpdate(BaseModel):
    """Request body for updating many issues at once."""

    issue_ids: List[str] = Field(min_length=1, max_length=500)
    updates: BatchChanges


class BatchUpdateResponse(BaseModel):
    success: bool
    count: int


class ProjectUpdate(BaseModel):
    """Request body for a partial project update."""

    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[ProjectStatus] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = None
    sort_order: Optional[int] = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    color: str
    icon: str
    sort_order: int = 0
    created_at: str
    updated_at: str
    issue_count: Optional[int] = None


class LabelResponse(LabelInfo):
    created_at: str
    updated_at: str
    issue_count: Optional[int] = None


class CommentCreate(BaseModel):
    """Request body for a new comment."""

    content: str = Field(min_length=1, max_length=100_000)


class CommentResponse(BaseModel):
    id: str
    issue_id: str
    content: str
    created_at: str
    updated_at: str


class SuccessResponse(BaseModel):
    success: bool

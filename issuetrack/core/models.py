"""
Domain models for the issue tracker.

These models describe issues, projects, labels and comments independent of
how they are stored. Repositories accept them for writes and return plain
dicts for reads; SearchResult is built per query and never persisted.

All models use Pydantic for validation, serialization, and type safety.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX_COLOR_PATTERN = r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class IssueStatus(str, Enum):
    """Workflow states an issue moves through."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class IssuePriority(str, Enum):
    """Issue priorities, most urgent first."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


# Sort position for ORDER BY priority (urgent first)
PRIORITY_ORDER = {
    IssuePriority.URGENT.value: 0,
    IssuePriority.HIGH.value: 1,
    IssuePriority.MEDIUM.value: 2,
    IssuePriority.LOW.value: 3,
    IssuePriority.NONE.value: 4,
}


class ProjectStatus(str, Enum):
    """Project lifecycle states."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Issue(BaseModel):
    """
    An issue as written to the primary store.

    ``id`` and ``number`` are assigned by the repository on create; they are
    only set by callers when restoring a previously deleted issue.
    """

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    id: Optional[str] = None
    number: Optional[int] = Field(default=None, ge=0)
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=100_000)
    status: IssueStatus = IssueStatus.BACKLOG
    priority: IssuePriority = IssuePriority.NONE
    assignee: Optional[str] = Field(default=None, max_length=200)
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    due_date: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    label_ids: List[str] = Field(default_factory=list, max_length=50)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class Project(BaseModel):
    """A project groups issues."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    id: Optional[str] = None
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    color: str = Field(default="#FFD700", pattern=HEX_COLOR_PATTERN)
    icon: str = "folder"
    sort_order: int = 0


class Label(BaseModel):
    """A label that can be attached to any number of issues."""

    id: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default="#6B7280", pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(default=None, max_length=500)


class Comment(BaseModel):
    """A comment on an issue."""

    id: Optional[str] = None
    issue_id: str
    content: str = Field(min_length=1, max_length=100_000)


class SearchResult(BaseModel):
    """
    One ranked full-text hit.

    Serialized with camelCase aliases in the order the fields are declared.
    ``rank`` comes from bm25(): lower means a better match.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    number: int
    title: str
    status: str
    priority: str
    title_snippet: str = Field(default="", alias="titleSnippet")
    description_snippet: str = Field(default="", alias="descriptionSnippet")
    rank: float

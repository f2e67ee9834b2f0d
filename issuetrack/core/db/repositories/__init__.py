"""
Repository classes for database operations.

Each repository handles CRUD operations for a specific domain entity.
"""

from .base import BaseRepository
from .comment import CommentRepository
from .issue import IssueRepository
from .label import LabelRepository
from .project import ProjectRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "IssueRepository",
    "LabelRepository",
    "ProjectRepository",
]

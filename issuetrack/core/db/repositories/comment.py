"""
Comment repository for database operations on issue comments.
"""

import sqlite3
from typing import Any, Dict, List

from issuetrack.core.errors import NotFoundError
from issuetrack.core.models import Comment

from .base import BaseRepository, new_id, row_to_dict, utc_now


class CommentRepository(BaseRepository):
    """
    Repository for comment operations.

    Comments are not part of the search index.
    """

    def add(self, comment: Comment) -> Dict[str, Any]:
        """
        Add a comment to an issue.

        Parameters
        ----------
        comment : Comment
            Comment with ``issue_id`` and ``content``

        Returns
        -------
        Dict[str, Any]
            The stored comment

        Raises
        ------
        NotFoundError
            If the issue does not exist
        """
        comment_id = new_id()
        now = utc_now()
        try:
            with self.write() as cursor:
                cursor.execute(
                    """
                    INSERT INTO comments (id, issue_id, content, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (comment_id, comment.issue_id, comment.content, now, now),
                )
        except sqlite3.IntegrityError as e:
            raise NotFoundError(f"Issue {comment.issue_id} not found") from e
        return {
            "id": comment_id,
            "issue_id": comment.issue_id,
            "content": comment.content,
            "created_at": now,
            "updated_at": now,
        }

    def list_for_issue(self, issue_id: str) -> List[Dict[str, Any]]:
        """Comments on an issue, oldest first."""
        cursor = self.cursor()
        cursor.execute(
            """
            SELECT id, issue_id, content, created_at, updated_at
            FROM comments
            WHERE issue_id = ?
            ORDER BY created_at, rowid
        """,
            (issue_id,),
        )
        return [row_to_dict(row) for row in cursor.fetchall()]

    def delete(self, comment_id: str) -> bool:
        with self.write() as cursor:
            cursor.execute("DELETE FROM comments WHERE id = ?", (comment_id,))
            return cursor.rowcount > 0

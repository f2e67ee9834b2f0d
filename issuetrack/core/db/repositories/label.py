"""
Label repository for database operations on labels.
"""

import sqlite3
from typing import Any, Dict, List, Optional

from issuetrack.core.errors import ConflictError
from issuetrack.core.models import Label

from .base import BaseRepository, new_id, row_to_dict, utc_now


class LabelRepository(BaseRepository):
    """Repository for label operations."""

    def create(self, label: Label) -> Dict[str, Any]:
        """
        Create a label.

        Raises
        ------
        ConflictError
            If a label with the same name exists
        """
        label_id = new_id()
        now = utc_now()
        try:
            with self.write() as cursor:
                cursor.execute(
                    """
                    INSERT INTO labels (id, name, color, description, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                """,
                    (label_id, label.name.strip(), label.color, label.description, now, now),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Label '{label.name}' already exists") from e
        return self.get(label_id)

    def get(self, label_id: str) -> Optional[Dict[str, Any]]:
        cursor = self.cursor()
        cursor.execute(
            "SELECT id, name, color, description, created_at, updated_at FROM labels WHERE id = ?",
            (label_id,),
        )
        return row_to_dict(cursor.fetchone())

    def list(self) -> List[Dict[str, Any]]:
        """
        List all labels with usage counts.

        Returns
        -------
        List[Dict[str, Any]]
            Labels with ``issue_count``, ordered by name
        """
        cursor = self.cursor()
        cursor.execute(
            """
            SELECT l.id, l.name, l.color, l.description, l.created_at, l.updated_at,
                   COUNT(il.issue_id) AS issue_count
            FROM labels l
            LEFT JOIN issue_labels il ON il.label_id = l.id
            GROUP BY l.id
            ORDER BY l.name
        """
        )
        return [row_to_dict(row) for row in cursor.fetchall()]

    def delete(self, label_id: str) -> bool:
        """Delete a label; it is removed from every issue carrying it."""
        with self.write() as cursor:
            cursor.execute("DELETE FROM labels WHERE id = ?", (label_id,))
            return cursor.rowcount > 0

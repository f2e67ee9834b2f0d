"""
Project repository for database operations on projects.
"""

from typing import Any, Dict, List, Optional

from issuetrack.core.models import Project

from .base import BaseRepository, new_id, row_to_dict, utc_now

PROJECT_COLUMNS = "id, name, description, status, color, icon, sort_order, created_at, updated_at"

UPDATABLE_FIELDS = ("name", "description", "status", "color", "icon", "sort_order")


class ProjectRepository(BaseRepository):
    """
    Repository for project CRUD operations.

    Handles project creation, retrieval, listing with issue counts, and
    deletion.
    """

    def create(self, project: Project) -> Dict[str, Any]:
        """
        Create a new project.

        Parameters
        ----------
        project : Project
            Project fields

        Returns
        -------
        Dict[str, Any]
            The stored project
        """
        project_id = new_id()
        now = utc_now()
        with self.write() as cursor:
            cursor.execute(
                f"""
                INSERT INTO projects ({PROJECT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    project_id,
                    project.name,
                    project.description,
                    project.status,
                    project.color,
                    project.icon,
                    project.sort_order,
                    now,
                    now,
                ),
            )
        return self.get(project_id)

    def get(self, project_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a project by ID.

        Parameters
        ----------
        project_id : str
            Project ID

        Returns
        -------
        Optional[Dict[str, Any]]
            Project data or None if not found
        """
        cursor = self.cursor()
        cursor.execute(f"SELECT {PROJECT_COLUMNS} FROM projects WHERE id = ?", (project_id,))
        return row_to_dict(cursor.fetchone())

    def list(self) -> List[Dict[str, Any]]:
        """
        List all projects with issue counts.

        Returns
        -------
        List[Dict[str, Any]]
            Projects with ``issue_count``, in manual sort order
        """
        cursor = self.cursor()
        cursor.execute(
            """
            SELECT p.id, p.name, p.description, p.status, p.color, p.icon,
                   p.sort_order, p.created_at, p.updated_at,
                   COUNT(i.id) AS issue_count
            FROM projects p
            LEFT JOIN issues i ON i.project_id = p.id
            GROUP BY p.id
            ORDER BY p.sort_order, p.name
        """
        )
        return [row_to_dict(row) for row in cursor.fetchall()]

    def update(self, project_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update project fields. Returns None if the project does not exist."""
        changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
        changes["updated_at"] = utc_now()
        assignments = ", ".join(f"{column} = ?" for column in changes)
        with self.write() as cursor:
            cursor.execute(
                f"UPDATE projects SET {assignments} WHERE id = ?",
                list(changes.values()) + [project_id],
            )
        return self.get(project_id)

    def delete(self, project_id: str) -> bool:
        """
        Delete a project. Its issues are unlinked but not deleted.

        Parameters
        ----------
        project_id : str
            Project ID to delete

        Returns
        -------
        bool
            True if project was deleted, False if not found
        """
        with self.write() as cursor:
            cursor.execute("DELETE FROM projects WHERE id = ?", (project_id,))
            return cursor.rowcount > 0

"""
Issue repository for database operations on issues.

Every write goes through ``BaseRepository.write()``; the sync triggers on the
issues table update the search index inside that same transaction.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from issuetrack.core.errors import (
    ConflictError,
    NotFoundError,
    SearchUnavailable,
    ValidationError,
)
from issuetrack.core.models import Issue, IssuePriority, IssueStatus, PRIORITY_ORDER

from ..constants import DEFAULT_PAGE_SIZE
from ..schema import ISSUE_COUNTER_ID
from ..search.sanitize import escape_like_pattern
from .base import BaseRepository, new_id, row_to_dict, utc_now

if TYPE_CHECKING:
    from ..connection import DatabaseConnection
    from ..search.index import SearchIndex

logger = logging.getLogger(__name__)

ISSUE_COLUMNS = (
    "id, number, title, description, status, priority, assignee, project_id, "
    "parent_id, due_date, sort_order, created_at, updated_at"
)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "assignee",
    "project_id",
    "parent_id",
    "due_date",
    "sort_order",
)

# Fields a batch update may change
BATCH_FIELDS = ("status", "priority", "assignee", "project_id")

_PRIORITY_CASE = "CASE priority " + " ".join(
    f"WHEN '{name}' THEN {order}" for name, order in PRIORITY_ORDER.items()
) + " ELSE 99 END"

SORT_COLUMNS = {
    "created": "created_at",
    "updated": "updated_at",
    "number": "number",
    "title": "title COLLATE NOCASE",
    "priority": _PRIORITY_CASE,
    "due": "due_date",
    "manual": "sort_order",
}

_STATUSES = {s.value for s in IssueStatus}
_PRIORITIES = {p.value for p in IssuePriority}


class IssueRepository(BaseRepository):
    """
    Repository for issue CRUD operations.

    Handles issue creation with sequential numbering, retrieval with labels,
    listing with filters, updates, deletion and restore.
    """

    guards_search_index = True

    def __init__(self, conn: "DatabaseConnection", search_index: Optional["SearchIndex"] = None):
        """
        Initialize issue repository.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection
        search_index : SearchIndex, optional
            Query engine used by ``list(search=...)``
        """
        super().__init__(conn)
        self._search = search_index

    def create(self, issue: Issue) -> Dict[str, Any]:
        """
        Create an issue with the next issue number.

        Parameters
        ----------
        issue : Issue
            Issue fields; ``id`` and ``number`` are assigned here

        Returns
        -------
        Dict[str, Any]
            The stored issue with labels

        Raises
        ------
        ValidationError
            If the project, parent or a label does not exist
        IndexWriteFailed
            If the search index could not be updated
        """
        issue_id = new_id()
        now = utc_now()

        try:
            with self.write() as cursor:
                cursor.execute(
                    "UPDATE counters SET value = value + 1 WHERE id = ?",
                    (ISSUE_COUNTER_ID,),
                )
                cursor.execute(
                    "SELECT value FROM counters WHERE id = ?", (ISSUE_COUNTER_ID,)
                )
                number = cursor.fetchone()[0]

                if issue.parent_id:
                    self._check_parent(cursor, None, issue.parent_id)

                cursor.execute(
                    f"""
                    INSERT INTO issues ({ISSUE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        issue_id,
                        number,
                        issue.title,
                        issue.description or None,
                        issue.status,
                        issue.priority,
                        issue.assignee or None,
                        issue.project_id or None,
                        issue.parent_id or None,
                        issue.due_date or None,
                        0,
                        now,
                        now,
                    ),
                )
                self._set_labels(cursor, issue_id, issue.label_ids)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Invalid issue reference: {e}") from e

        logger.debug("Created issue #%d (%s)", number, issue_id)
        return self.get(issue_id)

    def restore(self, issue: Issue) -> Dict[str, Any]:
        """
        Re-insert a previously deleted issue with its original id and number.

        The issue counter is left untouched. Labels that no longer exist are
        skipped.

        Raises
        ------
        ValidationError
            If ``id`` or ``number`` is missing
        ConflictError
            If an issue with this id or number already exists
        """
        if not issue.id or issue.number is None:
            raise ValidationError("Restoring an issue requires its id and number")

        now = utc_now()
        try:
            with self.write() as cursor:
                cursor.execute("SELECT 1 FROM issues WHERE id = ?", (issue.id,))
                if cursor.fetchone():
                    raise ConflictError("Issue with this ID already exists")

                cursor.execute(
                    f"""
                    INSERT INTO issues ({ISSUE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        issue.id,
                        issue.number,
                        issue.title,
                        issue.description or None,
                        issue.status,
                        issue.priority,
                        issue.assignee or None,
                        self._existing_or_none(cursor, "projects", issue.project_id),
                        self._existing_or_none(cursor, "issues", issue.parent_id),
                        issue.due_date or None,
                        issue.sort_order,
                        issue.created_at or now,
                        issue.updated_at or now,
                    ),
                )
                cursor.executemany(
                    """
                    INSERT OR IGNORE INTO issue_labels (issue_id, label_id)
                    SELECT ?, id FROM labels WHERE id = ?
                """,
                    [(issue.id, label_id) for label_id in issue.label_ids],
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Issue number {issue.number} is already taken") from e

        logger.info("Restored issue #%d (%s)", issue.number, issue.id)
        return self.get(issue.id)

    def get(self, issue_id: str) -> Optional[Dict[str, Any]]:
        """
        Get an issue by ID with labels, parent, children and comment count.

        Parameters
        ----------
        issue_id : str
            Issue ID

        Returns
        -------
        Optional[Dict[str, Any]]
            Issue data or None if not found
        """
        cursor = self.cursor()
        cursor.execute(f"SELECT {ISSUE_COLUMNS} FROM issues WHERE id = ?", (issue_id,))
        issue = row_to_dict(cursor.fetchone())
        if not issue:
            return None

        issue["labels"] = self._labels_for([issue_id]).get(issue_id, [])

        cursor.execute("SELECT COUNT(*) FROM comments WHERE issue_id = ?", (issue_id,))
        issue["comment_count"] = cursor.fetchone()[0]

        issue["parent"] = None
        if issue["parent_id"]:
            cursor.execute(
                "SELECT id, number, title FROM issues WHERE id = ?",
                (issue["parent_id"],),
            )
            issue["parent"] = row_to_dict(cursor.fetchone())

        cursor.execute(
            f"SELECT {ISSUE_COLUMNS} FROM issues WHERE parent_id = ? ORDER BY number",
            (issue_id,),
        )
        issue["children"] = [row_to_dict(row) for row in cursor.fetchall()]
        return issue

    def get_by_number(self, number: int) -> Optional[Dict[str, Any]]:
        """Get an issue by its human-facing number."""
        cursor = self.cursor()
        cursor.execute("SELECT id FROM issues WHERE number = ?", (number,))
        row = cursor.fetchone()
        return self.get(row[0]) if row else None

    def list(
        self,
        statuses: Optional[List[str]] = None,
        priorities: Optional[List[str]] = None,
        project_id: Optional[str] = None,
        label_ids: Optional[List[str]] = None,
        search: Optional[str] = None,
        sort: str = "created",
        order: str = "desc",
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        List issues with optional filters.

        Parameters
        ----------
        statuses : List[str], optional
            Only issues in one of these statuses
        priorities : List[str], optional
            Only issues with one of these priorities
        project_id : str, optional
            Only issues in this project
        label_ids : List[str], optional
            Only issues carrying at least one of these labels
        search : str, optional
            Full-text filter. Falls back to a title LIKE match when the
            search index is unavailable.
        sort : str
            One of 'created', 'updated', 'number', 'title', 'priority',
            'due', 'manual'
        order : str
            'asc' or 'desc'
        limit : int
            Maximum results
        offset : int
            Pagination offset

        Returns
        -------
        List[Dict[str, Any]]
            Issues with their labels
        """
        conditions: List[str] = []
        params: List[Any] = []

        if statuses:
            conditions.append(f"status IN ({','.join(['?'] * len(statuses))})")
            params.extend(statuses)
        if priorities:
            conditions.append(f"priority IN ({','.join(['?'] * len(priorities))})")
            params.extend(priorities)
        if project_id:
            conditions.append("project_id = ?")
            params.append(project_id)
        if label_ids:
            conditions.append(
                f"id IN (SELECT issue_id FROM issue_labels WHERE label_id IN "
                f"({','.join(['?'] * len(label_ids))}))"
            )
            params.extend(label_ids)
        if search and search.strip():
            self._add_search_condition(search, conditions, params)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        sort_column = SORT_COLUMNS.get(sort, SORT_COLUMNS["created"])
        direction = "ASC" if order == "asc" else "DESC"

        cursor = self.cursor()
        cursor.execute(
            f"""
            SELECT {ISSUE_COLUMNS}
            FROM issues
            {where_clause}
            ORDER BY {sort_column} {direction}, number {direction}
            LIMIT ? OFFSET ?
        """,
            params + [limit, offset],
        )
        issues = [row_to_dict(row) for row in cursor.fetchall()]

        labels_by_issue = self._labels_for([issue["id"] for issue in issues])
        for issue in issues:
            issue["labels"] = labels_by_issue.get(issue["id"], [])
        return issues

    def count(self) -> int:
        """Total number of issues."""
        cursor = self.cursor()
        cursor.execute("SELECT COUNT(*) FROM issues")
        return cursor.fetchone()[0]

    def update(
        self,
        issue_id: str,
        fields: Dict[str, Any],
        label_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Update issue fields and optionally replace its labels.

        Only title and description changes reach the search index; other
        columns leave it untouched.

        Parameters
        ----------
        issue_id : str
            Issue ID
        fields : Dict[str, Any]
            Column values to change; keys outside UPDATABLE_FIELDS are ignored
        label_ids : List[str], optional
            Replacement label set; None leaves labels unchanged

        Returns
        -------
        Dict[str, Any]
            The updated issue

        Raises
        ------
        NotFoundError
            If the issue does not exist
        ValidationError
            If a value or parent/project reference is invalid
        """
        changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
        self._validate_changes(changes)

        try:
            with self.write() as cursor:
                cursor.execute("SELECT 1 FROM issues WHERE id = ?", (issue_id,))
                if not cursor.fetchone():
                    raise NotFoundError(f"Issue {issue_id} not found")

                if changes.get("parent_id"):
                    self._check_parent(cursor, issue_id, changes["parent_id"])

                changes["updated_at"] = utc_now()
                assignments = ", ".join(f"{column} = ?" for column in changes)
                cursor.execute(
                    f"UPDATE issues SET {assignments} WHERE id = ?",
                    list(changes.values()) + [issue_id],
                )

                if label_ids is not None:
                    cursor.execute("DELETE FROM issue_labels WHERE issue_id = ?", (issue_id,))
                    self._set_labels(cursor, issue_id, label_ids)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Invalid issue reference: {e}") from e

        return self.get(issue_id)

    def batch_update(self, issue_ids: List[str], fields: Dict[str, Any]) -> int:
        """
        Apply the same field changes to many issues in one transaction.

        Parameters
        ----------
        issue_ids : List[str]
            Issues to change; unknown ids are skipped
        fields : Dict[str, Any]
            Values for any of BATCH_FIELDS; other keys are ignored

        Returns
        -------
        int
            Number of issues changed

        Raises
        ------
        ValidationError
            If no ids are given, a value is invalid or the project does not exist
        """
        if not issue_ids:
            raise ValidationError("No issue IDs provided")
        changes = {key: value for key, value in fields.items() if key in BATCH_FIELDS}
        self._validate_changes(changes)
        changes["updated_at"] = utc_now()

        assignments = ", ".join(f"{column} = ?" for column in changes)
        placeholders = ",".join(["?"] * len(issue_ids))
        try:
            with self.write() as cursor:
                cursor.execute(
                    f"UPDATE issues SET {assignments} WHERE id IN ({placeholders})",
                    list(changes.values()) + list(issue_ids),
                )
                count = cursor.rowcount
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Invalid issue reference: {e}") from e

        logger.info("Batch updated %d issues", count)
        return count

    def delete(self, issue_id: str) -> bool:
        """
        Delete an issue. Its labels links and comments go with it.

        Parameters
        ----------
        issue_id : str
            Issue ID to delete

        Returns
        -------
        bool
            True if issue was deleted, False if not found
        """
        with self.write() as cursor:
            # Sub-issues become top-level issues
            cursor.execute(
                "UPDATE issues SET parent_id = NULL WHERE parent_id = ?", (issue_id,)
            )
            cursor.execute("DELETE FROM issues WHERE id = ?", (issue_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.debug("Deleted issue %s", issue_id)
        return deleted

    def _add_search_condition(self, search: str, conditions: List[str], params: List[Any]) -> None:
        """Filter by full-text match, or by title LIKE if the index is down."""
        if self._search is not None:
            try:
                ids = self._search.match_ids(search)
            except SearchUnavailable:
                logger.warning("Search index unavailable, filtering issues by title")
            else:
                if ids:
                    conditions.append(f"id IN ({','.join(['?'] * len(ids))})")
                    params.extend(ids)
                else:
                    conditions.append("1 = 0")
                return

        conditions.append("title LIKE ? ESCAPE '\\'")
        params.append(f"%{escape_like_pattern(search)}%")

    def _validate_changes(self, changes: Dict[str, Any]) -> None:
        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValidationError("Title is required")
            changes["title"] = title
        if "status" in changes and changes["status"] not in _STATUSES:
            raise ValidationError(f"Invalid status: {changes['status']}")
        if "priority" in changes and changes["priority"] not in _PRIORITIES:
            raise ValidationError(f"Invalid priority: {changes['priority']}")
        for key in ("description", "assignee", "project_id", "parent_id", "due_date"):
            if key in changes and not changes[key]:
                changes[key] = None

    def _check_parent(self, cursor: sqlite3.Cursor, issue_id: Optional[str], parent_id: str) -> None:
        """Enforce one level of nesting for sub-issues."""
        if parent_id == issue_id:
            raise ValidationError("An issue cannot be its own parent")

        cursor.execute("SELECT parent_id FROM issues WHERE id = ?", (parent_id,))
        parent = cursor.fetchone()
        if parent is None:
            raise ValidationError("Parent issue not found")
        if parent[0]:
            raise ValidationError("Cannot nest sub-issues more than one level deep")

        if issue_id is not None:
            cursor.execute("SELECT 1 FROM issues WHERE parent_id = ? LIMIT 1", (issue_id,))
            if cursor.fetchone():
                raise ValidationError(
                    "An issue with sub-issues cannot become a sub-issue itself"
                )

    def _set_labels(self, cursor: sqlite3.Cursor, issue_id: str, label_ids: List[str]) -> None:
        cursor.executemany(
            "INSERT OR IGNORE INTO issue_labels (issue_id, label_id) VALUES (?, ?)",
            [(issue_id, label_id) for label_id in label_ids],
        )

    def _existing_or_none(self, cursor: sqlite3.Cursor, table: str, record_id: Optional[str]) -> Optional[str]:
        if not record_id:
            return None
        cursor.execute(f"SELECT 1 FROM {table} WHERE id = ?", (record_id,))
        return record_id if cursor.fetchone() else None

    def _labels_for(self, issue_ids: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        """Batch load labels for multiple issues."""
        if not issue_ids:
            return {}

        placeholders = ",".join(["?"] * len(issue_ids))
        cursor = self.cursor()
        cursor.execute(
            f"""
            SELECT il.issue_id, l.id, l.name, l.color, l.description
            FROM issue_labels il
            INNER JOIN labels l ON il.label_id = l.id
            WHERE il.issue_id IN ({placeholders})
            ORDER BY l.name
        """,
            issue_ids,
        )

        labels_by_issue: Dict[str, List[Dict[str, Any]]] = {}
        for row in cursor.fetchall():
            labels_by_issue.setdefault(row[0], []).append(
                {"id": row[1], "name": row[2], "color": row[3], "description": row[4]}
            )
        return labels_by_issue

"""
Shared state passed between CLI commands through ``ctx.obj``.
"""
from pathlib import Path
from typing import Optional

from issuetrack.core.config import get_default_db_path
from issuetrack.core.db import Database


class CLIContext:
    """
    Holds global CLI options and a lazily opened database.

    Attributes
    ----------
    verbose : bool
        Whether --verbose was given
    db_path : Path, optional
        Database override; None means the configured default
    """

    def __init__(self, verbose: bool = False, db_path: Optional[Path] = None):
        self.verbose = verbose
        self.db_path = db_path
        self._db: Optional[Database] = None

    def get_db(self) -> Database:
        """Open the database on first use and reuse it afterwards."""
        if self._db is None:
            path = self.db_path or get_default_db_path()
            self._db = Database(str(path))
        return self._db

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None

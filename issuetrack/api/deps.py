"""
FastAPI dependencies for shared resources.

Provides dependency injection for database connections.
"""

from typing import Generator

from issuetrack.core.config import get_default_db_path
from issuetrack.core.db import Database


def get_db() -> Generator[Database, None, None]:
    """
    Dependency that provides a database and ensures cleanup.

    Yields
    ------
    Database
        Database instance for the current request

    Notes
    -----
    Each request opens its own connection and closes it afterwards, so a
    request never shares a transaction with another one.
    """
    db = Database(str(get_default_db_path()))
    try:
        yield db
    finally:
        db.close()

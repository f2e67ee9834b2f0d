"""
Configuration for the issue tracker.

Values come from environment variables with sensible defaults, so the CLI,
the API server and the test-suite can each point at their own database file.
"""

import os
from pathlib import Path
from typing import List

DEFAULT_DB_FILENAME = "issuetrack.db"

# Seconds a connection waits on a locked database before giving up
DEFAULT_BUSY_TIMEOUT = 5.0


def get_default_db_path() -> Path:
    """
    Get the database path.

    Uses ISSUETRACK_DB_PATH when set, otherwise ``issuetrack.db`` in the
    current working directory.

    Returns
    -------
    Path
        Path to the SQLite database file
    """
    env_path = os.getenv("ISSUETRACK_DB_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / DEFAULT_DB_FILENAME


def get_busy_timeout() -> float:
    """Busy timeout in seconds, from ISSUETRACK_BUSY_TIMEOUT."""
    raw = os.getenv("ISSUETRACK_BUSY_TIMEOUT")
    if not raw:
        return DEFAULT_BUSY_TIMEOUT
    try:
        return max(0.0, float(raw))
    except ValueError:
        return DEFAULT_BUSY_TIMEOUT


def get_cors_origins() -> List[str]:
    """Allowed CORS origins for the API server."""
    raw = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]

"""
Health check API route.

Provides endpoint for checking database reachability and search index state.
"""
import logging
import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from issuetrack.api.deps import get_db
from issuetrack.core.db import Database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health(db: Database = Depends(get_db)):
    """
    Health check endpoint.

    Returns 200 when the database answers a trivial query, 503 otherwise.
    ``search_index`` reports whether the full-text index table exists.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        db.conn.cursor().execute("SELECT 1").fetchone()
        index_exists = db.maintenance.status()["index_exists"]
    except sqlite3.DatabaseError as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "error", "timestamp": timestamp},
        )

    return {
        "status": "ok",
        "timestamp": timestamp,
        "search_index": "ok" if index_exists else "missing",
    }

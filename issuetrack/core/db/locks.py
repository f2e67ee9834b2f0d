"""
Maintenance lock for search index rebuilds.

A rebuild holds the lock for its whole run; searches and issue writes made
through any connection to the same database file in this process check it
and fail fast with MaintenanceInProgress instead of queueing behind the
rebuild's write transaction.
"""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

from issuetrack.core.errors import MaintenanceInProgress


class MaintenanceLock:
    """Non-blocking lock guarding out-of-band index maintenance."""

    def __init__(self, name: str = ""):
        self.name = name
        self._lock = threading.Lock()

    @property
    def held(self) -> bool:
        """True while a maintenance operation is running."""
        return self._lock.locked()

    def ensure_available(self) -> None:
        """Raise MaintenanceInProgress if maintenance is running."""
        if self.held:
            raise MaintenanceInProgress(
                f"Search index maintenance in progress for {self.name or 'database'}"
            )

    @contextmanager
    def hold(self) -> Iterator[None]:
        """
        Hold the lock for the duration of the block.

        Raises
        ------
        MaintenanceInProgress
            If another maintenance operation already holds it
        """
        if not self._lock.acquire(blocking=False):
            raise MaintenanceInProgress(
                f"Another maintenance operation is running for {self.name or 'database'}"
            )
        try:
            yield
        finally:
            self._lock.release()


_registry: Dict[str, MaintenanceLock] = {}
_registry_guard = threading.Lock()


def _db_key(db_path: str) -> str:
    """Normalize a database path so aliases of one file share a key."""
    if db_path == ":memory:" or db_path.startswith("file:"):
        return db_path
    return str(Path(db_path).expanduser().resolve())


def maintenance_lock_for(db_path: str) -> MaintenanceLock:
    """Return the process-wide maintenance lock for a database file."""
    key = _db_key(db_path)
    with _registry_guard:
        lock = _registry.get(key)
        if lock is None:
            lock = MaintenanceLock(key)
            _registry[key] = lock
        return lock

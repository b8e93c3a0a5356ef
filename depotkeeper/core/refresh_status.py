"""Per-project "in progress" markers for schedulers.

The purge core does not lock.  Anything that may run two purge-family
operations on the same project at once claims the project here first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from depotkeeper.core.database import DepotDatabase
from depotkeeper.models.status import RefreshStatus

logger = logging.getLogger(__name__)


class ProjectBusyError(RuntimeError):
    """Raised when a project is already claimed by another operation."""


class RefreshStatusStore:
    """SQLite-backed claim table keyed by ``(group_id, artifact_id)``."""

    def __init__(self, db: DepotDatabase) -> None:
        self._db = db

    def claim(self, group_id: str, artifact_id: str, owner: str) -> bool:
        """Mark a project running. Returns False if it already is."""
        now = datetime.now(timezone.utc).isoformat()
        with self._db.connection() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO refresh_status (group_id, artifact_id) VALUES (?, ?)",
                (group_id, artifact_id),
            )
            cursor = conn.execute(
                "UPDATE refresh_status SET running = 1, owner = ?, claimed_at = ? "
                "WHERE group_id = ? AND artifact_id = ? AND running = 0",
                (owner, now, group_id, artifact_id),
            )
        claimed = cursor.rowcount == 1
        if not claimed:
            logger.info("%s:%s is already being processed", group_id, artifact_id)
        return claimed

    def release(self, group_id: str, artifact_id: str) -> None:
        """Clear the running flag and stamp ``last_run``."""
        now = datetime.now(timezone.utc).isoformat()
        with self._db.connection() as conn:
            conn.execute(
                "UPDATE refresh_status SET running = 0, owner = '', last_run = ? "
                "WHERE group_id = ? AND artifact_id = ?",
                (now, group_id, artifact_id),
            )

    def get(self, group_id: str, artifact_id: str) -> RefreshStatus:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT running, owner, claimed_at, last_run FROM refresh_status "
                "WHERE group_id = ? AND artifact_id = ?",
                (group_id, artifact_id),
            ).fetchone()
        if row is None:
            return RefreshStatus(group_id=group_id, artifact_id=artifact_id)
        running, owner, claimed_at, last_run = row
        return RefreshStatus(
            group_id=group_id,
            artifact_id=artifact_id,
            running=bool(running),
            owner=owner,
            claimed_at=claimed_at,
            last_run=last_run,
        )

    @contextmanager
    def claimed(self, group_id: str, artifact_id: str, owner: str) -> Iterator[None]:
        """Hold a project's claim for the duration of the block."""
        if not self.claim(group_id, artifact_id, owner):
            raise ProjectBusyError(f"{group_id}:{artifact_id} is already being processed")
        try:
            yield
        finally:
            self.release(group_id, artifact_id)

"""Version Catalog — the durable list of projects and their versions.

The purge core only depends on the ``VersionCatalog`` protocol.
``ProjectCatalog`` is the SQLite implementation; its ``create_project``
and ``add_version`` methods exist for the ingestion side and for seeding.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from depotkeeper.core.database import DepotDatabase
from depotkeeper.core.versions import order_versions
from depotkeeper.models.projects import ProjectRecord, VersionRecord
from depotkeeper.models.versioning import SemanticVersion, is_snapshot

logger = logging.getLogger(__name__)


@runtime_checkable
class VersionCatalog(Protocol):
    """What the purge core needs from a version catalog."""

    def find_project(self, group_id: str, artifact_id: str) -> ProjectRecord | None: ...

    def list_projects(self) -> list[ProjectRecord]: ...

    def list_versions(self, group_id: str, artifact_id: str) -> list[str]: ...

    def list_version_records(self, group_id: str, artifact_id: str) -> list[VersionRecord]: ...

    def find_version(
        self, group_id: str, artifact_id: str, version_id: str
    ) -> VersionRecord | None: ...

    def mark_evicted(self, group_id: str, artifact_id: str, version_id: str) -> bool: ...

    def remove_version_record(self, group_id: str, artifact_id: str, version_id: str) -> bool: ...

    def get_latest_version(self, group_id: str, artifact_id: str) -> str | None: ...


class ProjectCatalog:
    """SQLite-backed ``VersionCatalog``.

    Parameters
    ----------
    db:
        The shared depot database.
    """

    def __init__(self, db: DepotDatabase) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(
        self, group_id: str, artifact_id: str, project_id: str = ""
    ) -> ProjectRecord:
        """Create a project, or return the existing one unchanged."""
        with self._db.connection() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO projects (group_id, artifact_id, project_id) "
                "VALUES (?, ?, ?)",
                (group_id, artifact_id, project_id),
            )
            row = conn.execute(
                "SELECT project_id FROM projects WHERE group_id = ? AND artifact_id = ?",
                (group_id, artifact_id),
            ).fetchone()
        return ProjectRecord(group_id=group_id, artifact_id=artifact_id, project_id=row[0])

    def find_project(self, group_id: str, artifact_id: str) -> ProjectRecord | None:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT group_id, artifact_id, project_id FROM projects "
                "WHERE group_id = ? AND artifact_id = ?",
                (group_id, artifact_id),
            ).fetchone()
        if row is None:
            return None
        return ProjectRecord(group_id=row[0], artifact_id=row[1], project_id=row[2])

    def list_projects(self) -> list[ProjectRecord]:
        """Return every project sorted by coordinates."""
        with self._db.connection() as conn:
            rows = conn.execute(
                "SELECT group_id, artifact_id, project_id FROM projects "
                "ORDER BY group_id, artifact_id"
            ).fetchall()
        return [
            ProjectRecord(group_id=g, artifact_id=a, project_id=p) for g, a, p in rows
        ]

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def add_version(
        self, group_id: str, artifact_id: str, version_id: str, *, evicted: bool = False
    ) -> VersionRecord:
        """Record a new immutable version for an existing project."""
        if is_snapshot(version_id):
            raise ValueError("The snapshot branch is not a catalog version record")
        SemanticVersion.parse(version_id)
        if self.find_project(group_id, artifact_id) is None:
            raise KeyError(f"Unknown project {group_id}:{artifact_id}")
        updated_at = _now()
        with self._db.connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO project_versions "
                "(group_id, artifact_id, version_id, evicted, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (group_id, artifact_id, version_id, int(evicted), updated_at),
            )
        return VersionRecord(
            group_id=group_id,
            artifact_id=artifact_id,
            version_id=version_id,
            evicted=evicted,
            updated_at=updated_at,
        )

    def find_version(
        self, group_id: str, artifact_id: str, version_id: str
    ) -> VersionRecord | None:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT group_id, artifact_id, version_id, evicted, updated_at "
                "FROM project_versions "
                "WHERE group_id = ? AND artifact_id = ? AND version_id = ?",
                (group_id, artifact_id, version_id),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def list_version_records(self, group_id: str, artifact_id: str) -> list[VersionRecord]:
        """Return the project's version records ordered oldest to newest."""
        with self._db.connection() as conn:
            rows = conn.execute(
                "SELECT group_id, artifact_id, version_id, evicted, updated_at "
                "FROM project_versions WHERE group_id = ? AND artifact_id = ?",
                (group_id, artifact_id),
            ).fetchall()
        records = {row[2]: self._row_to_record(row) for row in rows}
        return [records[v] for v in order_versions(records)]

    def list_versions(self, group_id: str, artifact_id: str) -> list[str]:
        """Return version identifiers ordered oldest to newest, evicted included."""
        return [r.version_id for r in self.list_version_records(group_id, artifact_id)]

    def get_latest_version(self, group_id: str, artifact_id: str) -> str | None:
        versions = self.list_versions(group_id, artifact_id)
        return versions[-1] if versions else None

    def mark_evicted(self, group_id: str, artifact_id: str, version_id: str) -> bool:
        """Flag a version as evicted. Returns False if it has no record."""
        with self._db.connection() as conn:
            cursor = conn.execute(
                "UPDATE project_versions SET evicted = 1, updated_at = ? "
                "WHERE group_id = ? AND artifact_id = ? AND version_id = ?",
                (_now(), group_id, artifact_id, version_id),
            )
        if cursor.rowcount:
            logger.info("Marked %s:%s:%s evicted", group_id, artifact_id, version_id)
        return cursor.rowcount > 0

    def remove_version_record(self, group_id: str, artifact_id: str, version_id: str) -> bool:
        """Drop a version from the catalog. Returns False if it had no record."""
        with self._db.connection() as conn:
            cursor = conn.execute(
                "DELETE FROM project_versions "
                "WHERE group_id = ? AND artifact_id = ? AND version_id = ?",
                (group_id, artifact_id, version_id),
            )
        if cursor.rowcount:
            logger.info("Removed version record %s:%s:%s", group_id, artifact_id, version_id)
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_record(row: tuple) -> VersionRecord:
        group_id, artifact_id, version_id, evicted, updated_at = row
        return VersionRecord(
            group_id=group_id,
            artifact_id=artifact_id,
            version_id=version_id,
            evicted=bool(evicted),
            updated_at=updated_at,
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

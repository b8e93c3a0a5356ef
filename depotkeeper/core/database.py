"""SQLite-backed depot database shared by the catalog and collections.

One file holds every collection.  Each store opens a short-lived
connection per call; the schema is created when the database is opened.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_PROJECTS = """
CREATE TABLE IF NOT EXISTS projects (
    group_id     TEXT NOT NULL,
    artifact_id  TEXT NOT NULL,
    project_id   TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (group_id, artifact_id)
);
"""

_CREATE_PROJECT_VERSIONS = """
CREATE TABLE IF NOT EXISTS project_versions (
    group_id     TEXT NOT NULL,
    artifact_id  TEXT NOT NULL,
    version_id   TEXT NOT NULL,
    evicted      INTEGER NOT NULL DEFAULT 0,
    updated_at   TEXT NOT NULL,
    PRIMARY KEY (group_id, artifact_id, version_id)
);
"""

_CREATE_ENTITIES = """
CREATE TABLE IF NOT EXISTS entities (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    group_id          TEXT NOT NULL,
    artifact_id       TEXT NOT NULL,
    version_id        TEXT NOT NULL,
    entity_path       TEXT NOT NULL,
    classifier_path   TEXT NOT NULL DEFAULT '',
    versioned_entity  INTEGER NOT NULL DEFAULT 0,
    content_json      TEXT NOT NULL DEFAULT '{}',
    UNIQUE (group_id, artifact_id, version_id, entity_path, versioned_entity)
);
"""

_CREATE_FILE_GENERATIONS = """
CREATE TABLE IF NOT EXISTS file_generations (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    group_id         TEXT NOT NULL,
    artifact_id      TEXT NOT NULL,
    version_id       TEXT NOT NULL,
    path             TEXT NOT NULL,
    generation_type  TEXT NOT NULL DEFAULT '',
    content          TEXT NOT NULL DEFAULT '',
    UNIQUE (group_id, artifact_id, version_id, path)
);
"""

_CREATE_REFRESH_STATUS = """
CREATE TABLE IF NOT EXISTS refresh_status (
    group_id     TEXT NOT NULL,
    artifact_id  TEXT NOT NULL,
    running      INTEGER NOT NULL DEFAULT 0,
    owner        TEXT NOT NULL DEFAULT '',
    claimed_at   TEXT,
    last_run     TEXT,
    PRIMARY KEY (group_id, artifact_id)
);
"""

_CREATE_IDX_ENTITIES = """
CREATE INDEX IF NOT EXISTS idx_entities_version
    ON entities(group_id, artifact_id, version_id);
"""

_CREATE_IDX_FILE_GENERATIONS = """
CREATE INDEX IF NOT EXISTS idx_file_generations_version
    ON file_generations(group_id, artifact_id, version_id);
"""

_SCHEMA = (
    _CREATE_PROJECTS,
    _CREATE_PROJECT_VERSIONS,
    _CREATE_ENTITIES,
    _CREATE_FILE_GENERATIONS,
    _CREATE_REFRESH_STATUS,
    _CREATE_IDX_ENTITIES,
    _CREATE_IDX_FILE_GENERATIONS,
)


class DepotDatabase:
    """Handle on the depot's SQLite file.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    timeout:
        Seconds a writer waits on a locked database before failing.
    """

    def __init__(self, db_path: Path, *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self._db_path), timeout=self._timeout, check_same_thread=False
        )
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and always closes."""
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connection() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

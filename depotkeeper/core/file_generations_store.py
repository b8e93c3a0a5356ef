"""File generations collection."""

from __future__ import annotations

from depotkeeper.core.database import DepotDatabase
from depotkeeper.models.documents import FileGenerationDocument

_COLUMNS = "group_id, artifact_id, version_id, path, generation_type, content"
_SCOPE = "group_id = ? AND artifact_id = ? AND version_id = ?"


class FileGenerationsStore:
    """Read, count and delete generated files per project version."""

    def __init__(self, db: DepotDatabase) -> None:
        self._db = db

    def insert(self, generation: FileGenerationDocument) -> None:
        with self._db.connection() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO file_generations ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    generation.group_id,
                    generation.artifact_id,
                    generation.version_id,
                    generation.path,
                    generation.generation_type,
                    generation.content,
                ),
            )

    def find(self, group_id: str, artifact_id: str, version_id: str) -> list[FileGenerationDocument]:
        with self._db.connection() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM file_generations WHERE {_SCOPE} ORDER BY path",
                (group_id, artifact_id, version_id),
            ).fetchall()
        return [self._row_to_generation(row) for row in rows]

    def get_all(self) -> list[FileGenerationDocument]:
        with self._db.connection() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM file_generations ORDER BY id"
            ).fetchall()
        return [self._row_to_generation(row) for row in rows]

    def count(self, group_id: str, artifact_id: str, version_id: str) -> int:
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM file_generations WHERE {_SCOPE}",
                (group_id, artifact_id, version_id),
            ).fetchone()
        return row[0]

    def delete_version(self, group_id: str, artifact_id: str, version_id: str) -> int:
        with self._db.connection() as conn:
            cursor = conn.execute(
                f"DELETE FROM file_generations WHERE {_SCOPE}",
                (group_id, artifact_id, version_id),
            )
        return cursor.rowcount

    @staticmethod
    def _row_to_generation(row: tuple) -> FileGenerationDocument:
        group_id, artifact_id, version_id, path, generation_type, content = row
        return FileGenerationDocument(
            group_id=group_id,
            artifact_id=artifact_id,
            version_id=version_id,
            path=path,
            generation_type=generation_type,
            content=content,
        )

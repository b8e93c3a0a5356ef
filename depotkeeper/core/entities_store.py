"""Entities collection — versioned and revision entity documents.

Documents of immutable versions and of the snapshot branch share one
table; revision documents are simply those whose ``version_id`` is the
snapshot token.
"""

from __future__ import annotations

import json

from depotkeeper.core.database import DepotDatabase
from depotkeeper.core.hasher import entities_signature
from depotkeeper.models.documents import EntityDocument
from depotkeeper.models.versioning import MASTER_SNAPSHOT

_COLUMNS = (
    "group_id, artifact_id, version_id, entity_path, "
    "classifier_path, versioned_entity, content_json"
)


class EntitiesStore:
    """Read, count and delete entity documents.

    Parameters
    ----------
    db:
        The shared depot database.
    """

    def __init__(self, db: DepotDatabase) -> None:
        self._db = db

    def insert(self, entity: EntityDocument) -> None:
        """Insert or replace an entity document."""
        with self._db.connection() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO entities ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    entity.group_id,
                    entity.artifact_id,
                    entity.version_id,
                    entity.entity_path,
                    entity.classifier_path,
                    int(entity.versioned_entity),
                    json.dumps(entity.content, sort_keys=True),
                ),
            )

    def get_entities(
        self, group_id: str, artifact_id: str, version_id: str, versioned: bool
    ) -> list[EntityDocument]:
        """Return entities of one kind (plain or versioned) for a version."""
        return self._select(group_id, artifact_id, version_id, versioned)

    def get_all_entities(
        self, group_id: str, artifact_id: str, version_id: str
    ) -> list[EntityDocument]:
        return self._select(group_id, artifact_id, version_id, None)

    def count(
        self,
        group_id: str,
        artifact_id: str,
        version_id: str,
        versioned: bool | None = None,
    ) -> int:
        clause, params = _scope(group_id, artifact_id, version_id, versioned)
        with self._db.connection() as conn:
            row = conn.execute(f"SELECT COUNT(*) FROM entities WHERE {clause}", params).fetchone()
        return row[0]

    def delete_version(
        self,
        group_id: str,
        artifact_id: str,
        version_id: str,
        versioned: bool | None = None,
    ) -> int:
        """Delete a version's entities; ``versioned=None`` deletes both kinds."""
        clause, params = _scope(group_id, artifact_id, version_id, versioned)
        with self._db.connection() as conn:
            cursor = conn.execute(f"DELETE FROM entities WHERE {clause}", params)
        return cursor.rowcount

    # ------------------------------------------------------------------
    # Document counts
    # ------------------------------------------------------------------

    def get_version_entity_count(
        self,
        group_id: str | None = None,
        artifact_id: str | None = None,
        version_id: str | None = None,
    ) -> int:
        """Count documents belonging to immutable versions."""
        clauses = ["version_id != ?"]
        params: list[str] = [MASTER_SNAPSHOT]
        for column, value in (
            ("group_id", group_id),
            ("artifact_id", artifact_id),
            ("version_id", version_id),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM entities WHERE {' AND '.join(clauses)}", params
            ).fetchone()
        return row[0]

    def get_revision_entity_count(
        self, group_id: str | None = None, artifact_id: str | None = None
    ) -> int:
        """Count documents belonging to the snapshot branch."""
        clauses = ["version_id = ?"]
        params: list[str] = [MASTER_SNAPSHOT]
        for column, value in (("group_id", group_id), ("artifact_id", artifact_id)):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM entities WHERE {' AND '.join(clauses)}", params
            ).fetchone()
        return row[0]

    def version_signature(self, group_id: str, artifact_id: str, version_id: str) -> str | None:
        """Content signature of a version's entities, ``None`` if it has none."""
        return entities_signature(self.get_all_entities(group_id, artifact_id, version_id))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _select(
        self, group_id: str, artifact_id: str, version_id: str, versioned: bool | None
    ) -> list[EntityDocument]:
        clause, params = _scope(group_id, artifact_id, version_id, versioned)
        with self._db.connection() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM entities WHERE {clause} ORDER BY entity_path",
                params,
            ).fetchall()
        return [self._row_to_entity(row) for row in rows]

    @staticmethod
    def _row_to_entity(row: tuple) -> EntityDocument:
        (
            group_id,
            artifact_id,
            version_id,
            entity_path,
            classifier_path,
            versioned_entity,
            content_json,
        ) = row
        return EntityDocument(
            group_id=group_id,
            artifact_id=artifact_id,
            version_id=version_id,
            entity_path=entity_path,
            classifier_path=classifier_path,
            versioned_entity=bool(versioned_entity),
            content=json.loads(content_json),
        )


def _scope(
    group_id: str, artifact_id: str, version_id: str, versioned: bool | None
) -> tuple[str, list]:
    clause = "group_id = ? AND artifact_id = ? AND version_id = ?"
    params: list = [group_id, artifact_id, version_id]
    if versioned is not None:
        clause += " AND versioned_entity = ?"
        params.append(int(versioned))
    return clause, params

"""Reconciliation feed — diff local version records against upstream.

The upstream repository is an external collaborator described by the
``ArtifactRepository`` protocol.  ``RepositoryReconciler`` turns its
listing into ``VersionMismatch`` reports; the purge service consumes
those reports and never queries the repository itself.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import TypeAdapter

from depotkeeper.core.catalog import VersionCatalog
from depotkeeper.models.projects import ProjectRecord
from depotkeeper.models.reconciliation import VersionMismatch
from depotkeeper.models.versioning import is_snapshot

logger = logging.getLogger(__name__)

SignatureSource = Callable[[str, str, str], Optional[str]]

_MISMATCH_LIST = TypeAdapter(list[VersionMismatch])


@runtime_checkable
class ArtifactRepository(Protocol):
    """The upstream source of truth for published versions."""

    def find_versions(self, group_id: str, artifact_id: str) -> list[str]: ...

    def get_version_signature(
        self, group_id: str, artifact_id: str, version_id: str
    ) -> str | None: ...


class StaticArtifactRepository:
    """In-memory repository listing.

    *listing* maps ``"group:artifact"`` to either a list of version ids or
    a mapping of version id to content signature (``None`` if unknown).
    """

    def __init__(self, listing: Mapping[str, Any]) -> None:
        self._listing: dict[str, dict[str, str | None]] = {}
        for key, versions in listing.items():
            if isinstance(versions, Mapping):
                self._listing[key] = dict(versions)
            else:
                self._listing[key] = {v: None for v in versions}

    @classmethod
    def from_file(cls, path: Path) -> StaticArtifactRepository:
        return cls(json.loads(Path(path).read_text(encoding="utf-8")))

    def find_versions(self, group_id: str, artifact_id: str) -> list[str]:
        return list(self._listing.get(f"{group_id}:{artifact_id}", {}))

    def get_version_signature(
        self, group_id: str, artifact_id: str, version_id: str
    ) -> str | None:
        return self._listing.get(f"{group_id}:{artifact_id}", {}).get(version_id)


class RepositoryReconciler:
    """Builds ``VersionMismatch`` reports for catalog projects.

    Parameters
    ----------
    catalog:
        The local version catalog.
    repository:
        The upstream listing.
    local_signature:
        Optional ``(group, artifact, version) -> signature`` lookup for
        local content.  Without it no content conflicts are reported.
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        repository: ArtifactRepository,
        *,
        local_signature: SignatureSource | None = None,
    ) -> None:
        self._catalog = catalog
        self._repository = repository
        self._local_signature = local_signature

    def find_mismatch(
        self, group_id: str, artifact_id: str, project_id: str = ""
    ) -> VersionMismatch:
        """Compare one project's local versions with the upstream listing."""
        local = self._catalog.list_versions(group_id, artifact_id)
        try:
            upstream = [
                v for v in self._repository.find_versions(group_id, artifact_id)
                if not is_snapshot(v)
            ]
        except Exception as exc:
            logger.warning("Repository listing failed for %s:%s: %s", group_id, artifact_id, exc)
            return VersionMismatch(
                project_id=project_id,
                group_id=group_id,
                artifact_id=artifact_id,
                errors=[f"{type(exc).__name__}: {exc}"],
            )

        upstream_set = set(upstream)
        local_set = set(local)
        not_in_repository = [v for v in local if v not in upstream_set]
        not_in_store = [v for v in upstream if v not in local_set]

        conflicts: list[str] = []
        errors: list[str] = []
        if self._local_signature is not None:
            for version_id in (v for v in local if v in upstream_set):
                try:
                    remote = self._repository.get_version_signature(
                        group_id, artifact_id, version_id
                    )
                except Exception as exc:
                    errors.append(f"{version_id}: {type(exc).__name__}: {exc}")
                    continue
                mine = self._local_signature(group_id, artifact_id, version_id)
                if remote is not None and mine is not None and remote != mine:
                    conflicts.append(version_id)

        return VersionMismatch(
            project_id=project_id,
            group_id=group_id,
            artifact_id=artifact_id,
            versions_not_in_repository=not_in_repository,
            versions_not_in_store=not_in_store,
            conflicting_versions=conflicts,
            errors=errors,
        )

    def find_mismatches(
        self, projects: Iterable[ProjectRecord] | None = None
    ) -> list[VersionMismatch]:
        """Return reports for drifting projects only, in catalog order."""
        targets = list(projects) if projects is not None else self._catalog.list_projects()
        mismatches = [
            self.find_mismatch(p.group_id, p.artifact_id, p.project_id) for p in targets
        ]
        drifting = [m for m in mismatches if m.has_drift]
        logger.info("Reconciled %d project(s), %d drifting", len(targets), len(drifting))
        return drifting


def load_mismatches(path: Path) -> list[VersionMismatch]:
    """Read a JSON list of ``VersionMismatch`` reports."""
    return _MISMATCH_LIST.validate_json(Path(path).read_bytes())


def dump_mismatches(mismatches: Iterable[VersionMismatch]) -> str:
    return _MISMATCH_LIST.dump_json(list(mismatches), indent=2).decode("utf-8")

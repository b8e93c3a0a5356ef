"""Purge orchestrator — retention-count eviction, hard deletes, reconciliation.

Every operation fans a version out to all registered artifact-type
handlers first and only then touches the catalog.  A handler failure is
recorded in the returned ``PurgeOutcome`` and leaves the version's
catalog entry as it was, so the next pass retries it.  Observers may see
a version whose documents are gone but whose flag is not yet set; they
never see the reverse.

Serializing purges of the same project is the caller's job (see
``depotkeeper.core.refresh_status``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from depotkeeper.core.catalog import VersionCatalog
from depotkeeper.core.handlers import ArtifactType, HandlerRegistry, HandlerRegistryError
from depotkeeper.models.projects import VersionCoordinates
from depotkeeper.models.purge import HandlerFailure, PurgeOutcome
from depotkeeper.models.reconciliation import VersionMismatch
from depotkeeper.models.versioning import SemanticVersion, is_snapshot

logger = logging.getLogger(__name__)


class PurgeService:
    """Evicts and deletes project versions across all artifact collections.

    Parameters
    ----------
    catalog:
        The version catalog to read and update.
    registry:
        Handlers for every artifact collection holding version documents.
    extra_required_types:
        Artifact types beyond the built-in ``ArtifactType`` members that
        must have a handler before any purge runs.  The built-in types
        are always required.
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        registry: HandlerRegistry,
        *,
        extra_required_types: Iterable[str] = (),
    ) -> None:
        self._catalog = catalog
        self._registry = registry
        self._required_types: list[ArtifactType | str] = list(ArtifactType)
        self._required_types.extend(
            t for t in extra_required_types if t not in {m.value for m in ArtifactType}
        )

    # ------------------------------------------------------------------
    # Eviction
    # ------------------------------------------------------------------

    def evict_oldest_versions(
        self, group_id: str, artifact_id: str, keep_count: int
    ) -> PurgeOutcome:
        """Evict all but the newest *keep_count* versions of a project.

        Evicted versions lose their documents but stay listed in the
        catalog with ``evicted=True``.  The snapshot branch is never
        considered.  Versions already evicted are left alone.
        """
        if keep_count < 0:
            raise ValueError(f"keep_count must be >= 0, got {keep_count}")
        self.check_registry()

        if self._catalog.find_project(group_id, artifact_id) is None:
            logger.info("Nothing to evict: project %s:%s not found", group_id, artifact_id)
            return PurgeOutcome()

        records = self._catalog.list_version_records(group_id, artifact_id)
        if len(records) <= keep_count:
            logger.debug(
                "%s:%s has %d versions, keeping %d; nothing to evict",
                group_id, artifact_id, len(records), keep_count,
            )
            return PurgeOutcome()

        candidates = records[: len(records) - keep_count]
        outcomes: list[PurgeOutcome] = []
        for record in candidates:
            if record.evicted:
                continue
            deleted, failures = self._purge_documents(group_id, artifact_id, record.version_id)
            evicted: list[VersionCoordinates] = []
            if not failures:
                self._catalog.mark_evicted(group_id, artifact_id, record.version_id)
                evicted.append(_coordinates(group_id, artifact_id, record.version_id))
            else:
                logger.warning(
                    "Leaving %s:%s:%s unevicted after %d handler failure(s)",
                    group_id, artifact_id, record.version_id, len(failures),
                )
            outcomes.append(
                PurgeOutcome(deleted=deleted, failures=failures, evicted_versions=evicted)
            )

        outcome = PurgeOutcome.merge(*outcomes)
        logger.info(
            "Evicted %d version(s) of %s:%s (%d documents removed, %d failures)",
            len(outcome.evicted_versions), group_id, artifact_id,
            outcome.total_deleted, len(outcome.failures),
        )
        return outcome

    # ------------------------------------------------------------------
    # Hard delete
    # ------------------------------------------------------------------

    def delete_version(self, group_id: str, artifact_id: str, version_id: str) -> PurgeOutcome:
        """Delete a version's documents and drop it from the catalog.

        Passing the snapshot token clears the branch's revision documents;
        the branch itself is a permanent slot and has no record to drop.
        """
        snapshot = is_snapshot(version_id)
        if not snapshot:
            SemanticVersion.parse(version_id)
        self.check_registry()

        if self._catalog.find_project(group_id, artifact_id) is None:
            logger.info("Nothing to delete: project %s:%s not found", group_id, artifact_id)
            return PurgeOutcome()

        deleted, failures = self._purge_documents(group_id, artifact_id, version_id)
        if failures:
            logger.warning(
                "Keeping catalog entry for %s:%s:%s after %d handler failure(s)",
                group_id, artifact_id, version_id, len(failures),
            )
            return PurgeOutcome(deleted=deleted, failures=failures)

        removed: list[VersionCoordinates] = []
        if not snapshot and self._catalog.remove_version_record(group_id, artifact_id, version_id):
            removed.append(_coordinates(group_id, artifact_id, version_id))
        logger.info(
            "Deleted %s:%s:%s (%d documents removed)",
            group_id, artifact_id, version_id, sum(deleted.values()),
        )
        return PurgeOutcome(deleted=deleted, deleted_versions=removed)

    # ------------------------------------------------------------------
    # Reconciliation-driven delete
    # ------------------------------------------------------------------

    def delete_versions_not_in_repository(
        self, mismatches: Iterable[VersionMismatch]
    ) -> PurgeOutcome:
        """Hard-delete every version the upstream repository no longer has.

        Mismatches are processed in the order given.  Versions missing
        locally or in content conflict are reported but never mutated;
        a mismatch carrying feed errors is skipped entirely.

        Every version id to be deleted is validated, and the registry
        checked, before the first delete, so a malformed id raises
        ``MalformedVersionError`` with nothing changed.
        """
        mismatches = list(mismatches)
        for mismatch in mismatches:
            if mismatch.errors:
                continue
            for version_id in mismatch.versions_not_in_repository:
                if not is_snapshot(version_id):
                    SemanticVersion.parse(version_id)
        self.check_registry()

        outcomes: list[PurgeOutcome] = []
        for mismatch in mismatches:
            g, a = mismatch.group_id, mismatch.artifact_id
            if mismatch.errors:
                logger.warning(
                    "Skipping %s:%s, reconciliation reported errors: %s",
                    g, a, "; ".join(mismatch.errors),
                )
                outcomes.append(PurgeOutcome(skipped_projects=[f"{g}:{a}"]))
                continue

            for version_id in mismatch.versions_not_in_repository:
                outcomes.append(self.delete_version(g, a, version_id))

            reported = PurgeOutcome(
                missing_locally=[_coordinates(g, a, v) for v in mismatch.versions_not_in_store],
                conflicting_versions=[
                    _coordinates(g, a, v) for v in mismatch.conflicting_versions
                ],
            )
            if not reported.is_empty:
                logger.info(
                    "%s:%s: %d version(s) missing locally, %d in conflict; left untouched",
                    g, a, len(reported.missing_locally), len(reported.conflicting_versions),
                )
            outcomes.append(reported)

        return PurgeOutcome.merge(*outcomes)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def check_registry(self) -> None:
        """Raise ``HandlerRegistryError`` unless every required type has a handler."""
        if not len(self._registry):
            raise HandlerRegistryError("No artifact handlers registered")
        self._registry.ensure_registered(self._required_types)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _purge_documents(
        self, group_id: str, artifact_id: str, version_id: str
    ) -> tuple[dict[str, int], list[HandlerFailure]]:
        """Run every handler's delete for one version, isolating failures."""
        deleted: dict[str, int] = {}
        failures: list[HandlerFailure] = []
        for artifact_type, handler in self._registry.items():
            try:
                count = handler.delete_documents(group_id, artifact_id, version_id)
            except Exception as exc:
                logger.warning(
                    "Handler '%s' failed for %s:%s:%s: %s",
                    artifact_type, group_id, artifact_id, version_id, exc,
                )
                failures.append(
                    HandlerFailure(
                        artifact_type=artifact_type,
                        group_id=group_id,
                        artifact_id=artifact_id,
                        version_id=version_id,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )
                continue
            logger.debug(
                "Handler '%s' removed %d document(s) for %s:%s:%s",
                artifact_type, count, group_id, artifact_id, version_id,
            )
            deleted[artifact_type] = deleted.get(artifact_type, 0) + count
        return deleted, failures


def _coordinates(group_id: str, artifact_id: str, version_id: str) -> VersionCoordinates:
    return VersionCoordinates(group_id=group_id, artifact_id=artifact_id, version_id=version_id)

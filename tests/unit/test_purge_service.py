"""Tests for PurgeService — eviction, hard delete, reconciliation-driven delete."""

from __future__ import annotations

import pytest

from depotkeeper.core.depot import Depot
from depotkeeper.core.handlers import ArtifactType, HandlerRegistry, HandlerRegistryError
from depotkeeper.core.purge_service import PurgeService
from depotkeeper.models.documents import EntityDocument
from depotkeeper.models.reconciliation import VersionMismatch
from depotkeeper.models.versioning import MASTER_SNAPSHOT, MalformedVersionError

G, A = "examples.metadata", "test"


def _entity_count(depot: Depot, version: str, artifact_id: str = A) -> int:
    return len(depot.entities.get_entities(G, artifact_id, version, False))


class TestEvictOldestVersions:
    def test_evicts_all_but_newest(self, seeded_depot: Depot):
        assert seeded_depot.catalog.list_versions(G, A) == ["2.0.0", "2.2.0", "2.3.0"]
        assert seeded_depot.catalog.get_latest_version(G, A) == "2.3.0"
        assert _entity_count(seeded_depot, "2.0.0") == 2

        outcome = seeded_depot.purge.evict_oldest_versions(G, A, 1)

        assert seeded_depot.catalog.list_versions(G, A) == ["2.0.0", "2.2.0", "2.3.0"]
        assert seeded_depot.catalog.find_version(G, A, "2.0.0").evicted is True
        assert seeded_depot.catalog.find_version(G, A, "2.2.0").evicted is True
        assert seeded_depot.catalog.find_version(G, A, "2.3.0").evicted is False
        assert _entity_count(seeded_depot, "2.0.0") == 0
        assert _entity_count(seeded_depot, "2.2.0") == 0
        assert _entity_count(seeded_depot, "2.3.0") == 2
        assert [v.version_id for v in outcome.evicted_versions] == ["2.0.0", "2.2.0"]
        assert outcome.deleted == {"entities": 4, "versioned_entities": 0, "file_generations": 2}
        assert outcome.succeeded

    def test_evicted_versions_lose_every_document_type(self, seeded_depot: Depot):
        seeded_depot.entities.insert(
            EntityDocument(
                group_id=G, artifact_id=A, version_id="2.0.0",
                entity_path="examples::metadata::test::Versioned", versioned_entity=True,
            )
        )
        seeded_depot.purge.evict_oldest_versions(G, A, 2)
        for _, handler in seeded_depot.registry.items():
            assert handler.count_documents(G, A, "2.0.0") == 0
        assert seeded_depot.file_generations.count(G, A, "2.2.0") == 1

    def test_keep_more_than_exists_is_noop(self, seeded_depot: Depot):
        outcome = seeded_depot.purge.evict_oldest_versions(G, A, 5)
        assert outcome.is_empty
        for version in ("2.0.0", "2.2.0", "2.3.0"):
            assert seeded_depot.catalog.find_version(G, A, version).evicted is False
            assert _entity_count(seeded_depot, version) == 2

    def test_keep_exactly_all_is_noop(self, seeded_depot: Depot):
        assert seeded_depot.purge.evict_oldest_versions(G, A, 3).is_empty

    def test_no_versions_leaves_snapshot_alone(self, seeded_depot: Depot):
        assert seeded_depot.catalog.list_versions(G, "test1") == []
        assert _entity_count(seeded_depot, MASTER_SNAPSHOT, "test1") == 1

        outcome = seeded_depot.purge.evict_oldest_versions(G, "test1", 1)

        assert outcome.is_empty
        assert seeded_depot.catalog.list_versions(G, "test1") == []
        assert _entity_count(seeded_depot, MASTER_SNAPSHOT, "test1") == 1

    def test_keep_zero_evicts_everything_but_snapshot(self, seeded_depot: Depot):
        seeded_depot.entities.insert(
            EntityDocument(group_id=G, artifact_id=A, version_id=MASTER_SNAPSHOT, entity_path="x::Draft")
        )
        seeded_depot.purge.evict_oldest_versions(G, A, 0)
        assert all(r.evicted for r in seeded_depot.catalog.list_version_records(G, A))
        assert seeded_depot.entities.get_revision_entity_count(G, A) == 1

    def test_idempotent(self, seeded_depot: Depot):
        seeded_depot.purge.evict_oldest_versions(G, A, 1)
        second = seeded_depot.purge.evict_oldest_versions(G, A, 1)
        assert second.is_empty
        assert seeded_depot.catalog.find_version(G, A, "2.0.0").evicted is True

    def test_larger_keep_never_unevicts(self, seeded_depot: Depot):
        seeded_depot.purge.evict_oldest_versions(G, A, 1)
        outcome = seeded_depot.purge.evict_oldest_versions(G, A, 10)
        assert outcome.is_empty
        assert seeded_depot.catalog.find_version(G, A, "2.0.0").evicted is True
        assert seeded_depot.catalog.find_version(G, A, "2.2.0").evicted is True

    def test_retained_versions_untouched_even_if_flagged(self, seeded_depot: Depot):
        seeded_depot.catalog.mark_evicted(G, A, "2.3.0")
        seeded_depot.purge.evict_oldest_versions(G, A, 1)
        assert _entity_count(seeded_depot, "2.3.0") == 2

    def test_unknown_project(self, seeded_depot: Depot):
        assert seeded_depot.purge.evict_oldest_versions(G, "missing", 0).is_empty

    def test_negative_keep_rejected(self, seeded_depot: Depot):
        with pytest.raises(ValueError):
            seeded_depot.purge.evict_oldest_versions(G, A, -1)

    def test_other_projects_untouched(self, seeded_depot: Depot):
        seeded_depot.purge.evict_oldest_versions(G, A, 0)
        assert seeded_depot.entities.count(G, "test-dependencies", "1.0.0") == 1


class TestDeleteVersion:
    def test_delete_version(self, seeded_depot: Depot):
        version = "2.0.0"
        assert len(seeded_depot.entities.get_all_entities(G, A, version)) == 2
        assert len(seeded_depot.entities.get_entities(G, A, version, True)) == 0
        assert len(seeded_depot.file_generations.get_all()) == 3

        outcome = seeded_depot.purge.delete_version(G, A, version)

        assert _entity_count(seeded_depot, version) == 0
        assert len(seeded_depot.entities.get_entities(G, A, version, True)) == 0
        assert seeded_depot.file_generations.find(G, A, version) == []
        assert seeded_depot.catalog.list_versions(G, A) == ["2.2.0", "2.3.0"]
        assert seeded_depot.file_generations.count(G, A, "2.2.0") == 1
        assert seeded_depot.file_generations.count(G, A, "2.3.0") == 1
        assert _entity_count(seeded_depot, "2.2.0") == 2
        assert outcome.total_deleted == 3
        assert [str(v) for v in outcome.deleted_versions] == [f"{G}:{A}:2.0.0"]

    def test_idempotent(self, seeded_depot: Depot):
        seeded_depot.purge.delete_version(G, A, "2.0.0")
        second = seeded_depot.purge.delete_version(G, A, "2.0.0")
        assert second.total_deleted == 0
        assert second.deleted_versions == []
        assert second.succeeded
        assert seeded_depot.catalog.list_versions(G, A) == ["2.2.0", "2.3.0"]

    def test_delete_evicted_version_removes_listing(self, seeded_depot: Depot):
        seeded_depot.purge.evict_oldest_versions(G, A, 2)
        outcome = seeded_depot.purge.delete_version(G, A, "2.0.0")
        assert outcome.total_deleted == 0
        assert "2.0.0" not in seeded_depot.catalog.list_versions(G, A)

    def test_delete_snapshot_documents(self, seeded_depot: Depot):
        outcome = seeded_depot.purge.delete_version(G, "test1", MASTER_SNAPSHOT)
        assert outcome.deleted["entities"] == 1
        assert outcome.deleted_versions == []
        assert seeded_depot.entities.get_revision_entity_count(G, "test1") == 0
        assert seeded_depot.catalog.find_project(G, "test1") is not None

    def test_malformed_version_raises(self, seeded_depot: Depot):
        with pytest.raises(MalformedVersionError):
            seeded_depot.purge.delete_version(G, A, "2.0")

    def test_unknown_project(self, seeded_depot: Depot):
        assert seeded_depot.purge.delete_version(G, "missing", "1.0.0").is_empty


class TestDeleteVersionsNotInRepository:
    def test_deletes_missing_upstream(self, seeded_depot: Depot):
        mismatch = VersionMismatch(
            project_id="PROD-A", group_id=G, artifact_id=A,
            versions_not_in_repository=["2.0.0"],
        )
        assert len(seeded_depot.file_generations.get_all()) == 3

        outcome = seeded_depot.purge.delete_versions_not_in_repository([mismatch])

        assert seeded_depot.catalog.list_versions(G, A) == ["2.2.0", "2.3.0"]
        assert _entity_count(seeded_depot, "2.0.0") == 0
        assert len(seeded_depot.entities.get_entities(G, A, "2.0.0", True)) == 0
        assert seeded_depot.file_generations.find(G, A, "2.0.0") == []
        assert outcome.succeeded
        assert len(outcome.deleted_versions) == 1

    def test_missing_locally_and_conflicts_only_reported(self, seeded_depot: Depot):
        mismatch = VersionMismatch(
            group_id=G, artifact_id=A,
            versions_not_in_store=["3.0.0"],
            conflicting_versions=["2.2.0"],
        )
        outcome = seeded_depot.purge.delete_versions_not_in_repository([mismatch])

        assert seeded_depot.catalog.list_versions(G, A) == ["2.0.0", "2.2.0", "2.3.0"]
        assert _entity_count(seeded_depot, "2.2.0") == 2
        assert seeded_depot.catalog.find_version(G, A, "2.2.0").evicted is False
        assert [v.version_id for v in outcome.missing_locally] == ["3.0.0"]
        assert [v.version_id for v in outcome.conflicting_versions] == ["2.2.0"]
        assert outcome.total_deleted == 0

    def test_feed_errors_skip_project(self, seeded_depot: Depot):
        mismatch = VersionMismatch(
            group_id=G, artifact_id=A,
            versions_not_in_repository=["2.0.0"],
            errors=["repository unavailable"],
        )
        outcome = seeded_depot.purge.delete_versions_not_in_repository([mismatch])
        assert outcome.skipped_projects == [f"{G}:{A}"]
        assert "2.0.0" in seeded_depot.catalog.list_versions(G, A)

    def test_processes_in_given_order(self, seeded_depot: Depot):
        mismatches = [
            VersionMismatch(group_id=G, artifact_id="test-dependencies",
                            versions_not_in_repository=["1.0.0"]),
            VersionMismatch(group_id=G, artifact_id=A,
                            versions_not_in_repository=["2.3.0", "2.0.0"]),
        ]
        outcome = seeded_depot.purge.delete_versions_not_in_repository(mismatches)
        assert [str(v) for v in outcome.deleted_versions] == [
            f"{G}:test-dependencies:1.0.0", f"{G}:{A}:2.3.0", f"{G}:{A}:2.0.0",
        ]
        assert seeded_depot.catalog.list_versions(G, A) == ["2.2.0"]

    def test_malformed_id_anywhere_rejects_whole_batch(self, seeded_depot: Depot):
        mismatches = [
            VersionMismatch(group_id=G, artifact_id=A, versions_not_in_repository=["2.0.0"]),
            VersionMismatch(group_id=G, artifact_id="test-dependencies",
                            versions_not_in_repository=["bogus"]),
        ]
        with pytest.raises(MalformedVersionError):
            seeded_depot.purge.delete_versions_not_in_repository(mismatches)
        assert seeded_depot.catalog.list_versions(G, A) == ["2.0.0", "2.2.0", "2.3.0"]
        assert _entity_count(seeded_depot, "2.0.0") == 2

    def test_malformed_id_in_skipped_mismatch_ignored(self, seeded_depot: Depot):
        mismatches = [
            VersionMismatch(group_id=G, artifact_id="test-dependencies",
                            versions_not_in_repository=["bogus"], errors=["feed down"]),
            VersionMismatch(group_id=G, artifact_id=A, versions_not_in_repository=["2.0.0"]),
        ]
        outcome = seeded_depot.purge.delete_versions_not_in_repository(mismatches)
        assert outcome.skipped_projects == [f"{G}:test-dependencies"]
        assert [v.version_id for v in outcome.deleted_versions] == ["2.0.0"]

    def test_empty_input(self, seeded_depot: Depot):
        assert seeded_depot.purge.delete_versions_not_in_repository([]).is_empty


class TestRegistryConfiguration:
    def test_empty_registry_rejected(self, seeded_depot: Depot):
        service = PurgeService(seeded_depot.catalog, HandlerRegistry())
        with pytest.raises(HandlerRegistryError):
            service.evict_oldest_versions(G, A, 1)

    def test_missing_required_handler_rejected(self, seeded_depot: Depot):
        registry = HandlerRegistry()
        registry.register(ArtifactType.ENTITIES, seeded_depot.registry.require(ArtifactType.ENTITIES))
        service = PurgeService(seeded_depot.catalog, registry)
        with pytest.raises(HandlerRegistryError):
            service.delete_version(G, A, "2.0.0")
        assert seeded_depot.catalog.list_versions(G, A) == ["2.0.0", "2.2.0", "2.3.0"]
        assert _entity_count(seeded_depot, "2.0.0") == 2

    def test_builtin_types_cannot_be_waived(self, seeded_depot: Depot):
        registry = HandlerRegistry()
        registry.register(ArtifactType.ENTITIES, seeded_depot.registry.require(ArtifactType.ENTITIES))
        service = PurgeService(seeded_depot.catalog, registry, extra_required_types=["entities"])
        with pytest.raises(HandlerRegistryError):
            service.delete_version(G, A, "2.0.0")
        assert seeded_depot.catalog.list_versions(G, A) == ["2.0.0", "2.2.0", "2.3.0"]
        assert seeded_depot.file_generations.count(G, A, "2.0.0") == 1

    def test_extra_required_type(self, seeded_depot: Depot):
        service = PurgeService(
            seeded_depot.catalog, seeded_depot.registry, extra_required_types=["service_stores"]
        )
        with pytest.raises(HandlerRegistryError, match="service_stores"):
            service.evict_oldest_versions(G, A, 0)
        assert seeded_depot.catalog.find_version(G, A, "2.0.0").evicted is False

    def test_check_registry(self, seeded_depot: Depot):
        seeded_depot.purge.check_registry()
        seeded_depot.registry.unregister(ArtifactType.FILE_GENERATIONS)
        with pytest.raises(HandlerRegistryError):
            seeded_depot.purge.check_registry()

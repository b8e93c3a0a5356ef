"""Tests for the artifact-type handler registry and built-in handlers."""

from __future__ import annotations

import pytest

from depotkeeper.core.entities_store import EntitiesStore
from depotkeeper.core.file_generations_store import FileGenerationsStore
from depotkeeper.core.handlers import (
    ArtifactHandler,
    ArtifactType,
    EntitiesHandler,
    FileGenerationsHandler,
    HandlerRegistry,
    HandlerRegistryError,
)
from depotkeeper.models.documents import EntityDocument


class CountingHandler:
    """Minimal handler for registry tests."""

    def __init__(self) -> None:
        self.deleted: list[tuple[str, str, str]] = []

    def count_documents(self, group_id: str, artifact_id: str, version_id: str) -> int:
        return 0

    def delete_documents(self, group_id: str, artifact_id: str, version_id: str) -> int:
        self.deleted.append((group_id, artifact_id, version_id))
        return 0


class TestArtifactType:
    def test_values(self):
        assert ArtifactType.ENTITIES == "entities"
        assert ArtifactType.VERSIONED_ENTITIES == "versioned_entities"
        assert ArtifactType.FILE_GENERATIONS == "file_generations"


class TestHandlerRegistry:
    def test_register_and_get(self):
        registry = HandlerRegistry()
        handler = CountingHandler()
        registry.register(ArtifactType.ENTITIES, handler)
        assert registry.get("entities") is handler
        assert registry.get(ArtifactType.ENTITIES) is handler
        assert ArtifactType.ENTITIES in registry
        assert len(registry) == 1

    def test_open_set_of_tags(self):
        registry = HandlerRegistry()
        registry.register("service_stores", CountingHandler())
        assert "service_stores" in registry
        assert [tag for tag, _ in registry.items()] == ["service_stores"]

    def test_duplicate_rejected(self):
        registry = HandlerRegistry()
        registry.register(ArtifactType.ENTITIES, CountingHandler())
        with pytest.raises(HandlerRegistryError):
            registry.register(ArtifactType.ENTITIES, CountingHandler())

    def test_replace(self):
        registry = HandlerRegistry()
        registry.register(ArtifactType.ENTITIES, CountingHandler())
        replacement = CountingHandler()
        registry.register(ArtifactType.ENTITIES, replacement, replace=True)
        assert registry.require(ArtifactType.ENTITIES) is replacement

    def test_unregister(self):
        registry = HandlerRegistry()
        registry.register(ArtifactType.ENTITIES, CountingHandler())
        assert registry.unregister(ArtifactType.ENTITIES) is True
        assert registry.unregister(ArtifactType.ENTITIES) is False
        assert len(registry) == 0

    def test_require_missing(self):
        with pytest.raises(HandlerRegistryError):
            HandlerRegistry().require(ArtifactType.FILE_GENERATIONS)

    def test_ensure_registered_names_all_missing(self):
        registry = HandlerRegistry()
        registry.register(ArtifactType.ENTITIES, CountingHandler())
        with pytest.raises(HandlerRegistryError) as excinfo:
            registry.ensure_registered(list(ArtifactType))
        assert "file_generations" in str(excinfo.value)
        assert "versioned_entities" in str(excinfo.value)

    def test_items_in_registration_order(self):
        registry = HandlerRegistry()
        registry.register(ArtifactType.FILE_GENERATIONS, CountingHandler())
        registry.register(ArtifactType.ENTITIES, CountingHandler())
        assert [tag for tag, _ in registry.items()] == ["file_generations", "entities"]

    def test_contains_ignores_other_types(self):
        assert 42 not in HandlerRegistry()


class TestBuiltinHandlers:
    def test_protocol(self, entities_store: EntitiesStore, file_generations_store: FileGenerationsStore):
        assert isinstance(EntitiesHandler(entities_store), ArtifactHandler)
        assert isinstance(FileGenerationsHandler(file_generations_store), ArtifactHandler)

    def test_entities_handler_respects_kind(self, entities_store: EntitiesStore):
        for versioned in (False, True):
            entities_store.insert(
                EntityDocument(
                    group_id="g", artifact_id="a", version_id="1.0.0",
                    entity_path="x::Y", versioned_entity=versioned,
                )
            )
        plain = EntitiesHandler(entities_store)
        versioned = EntitiesHandler(entities_store, versioned=True)
        assert plain.count_documents("g", "a", "1.0.0") == 1
        assert versioned.count_documents("g", "a", "1.0.0") == 1
        assert plain.delete_documents("g", "a", "1.0.0") == 1
        assert versioned.count_documents("g", "a", "1.0.0") == 1

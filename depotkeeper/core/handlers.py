"""Artifact-type handler registry.

Each artifact type stored in the depot has one handler that can count
and delete the documents of a ``(group_id, artifact_id, version_id)``
scope.  The purge service iterates the registry and never branches on
type, so a new collection only needs a new handler registration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Protocol, runtime_checkable

from depotkeeper.core.entities_store import EntitiesStore
from depotkeeper.core.file_generations_store import FileGenerationsStore

logger = logging.getLogger(__name__)


class ArtifactType(str, Enum):
    """Built-in artifact types. Any other string tag may also be registered."""

    ENTITIES = "entities"
    VERSIONED_ENTITIES = "versioned_entities"
    FILE_GENERATIONS = "file_generations"


class HandlerRegistryError(RuntimeError):
    """Raised when the registry is missing a handler or has a duplicate."""


@runtime_checkable
class ArtifactHandler(Protocol):
    """Counts and deletes one artifact type's documents for a version."""

    def count_documents(self, group_id: str, artifact_id: str, version_id: str) -> int: ...

    def delete_documents(self, group_id: str, artifact_id: str, version_id: str) -> int: ...


def _tag(artifact_type: ArtifactType | str) -> str:
    return artifact_type.value if isinstance(artifact_type, ArtifactType) else str(artifact_type)


class HandlerRegistry:
    """Mapping of artifact type tag to handler, in registration order.

    Examples
    --------
    >>> registry = HandlerRegistry()
    >>> registry.register(ArtifactType.FILE_GENERATIONS, FileGenerationsHandler(store))
    >>> ArtifactType.FILE_GENERATIONS in registry
    True
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ArtifactHandler] = {}

    def register(
        self,
        artifact_type: ArtifactType | str,
        handler: ArtifactHandler,
        *,
        replace: bool = False,
    ) -> None:
        """Register *handler* for *artifact_type*.

        Raises
        ------
        HandlerRegistryError
            If the type already has a handler and ``replace`` is False.
        """
        tag = _tag(artifact_type)
        if tag in self._handlers and not replace:
            raise HandlerRegistryError(
                f"A handler for '{tag}' is already registered; pass replace=True to swap it."
            )
        self._handlers[tag] = handler
        logger.info("Registered %s handler for '%s'", type(handler).__name__, tag)

    def unregister(self, artifact_type: ArtifactType | str) -> bool:
        tag = _tag(artifact_type)
        if tag in self._handlers:
            del self._handlers[tag]
            logger.info("Unregistered handler for '%s'", tag)
            return True
        return False

    def get(self, artifact_type: ArtifactType | str) -> ArtifactHandler | None:
        return self._handlers.get(_tag(artifact_type))

    def require(self, artifact_type: ArtifactType | str) -> ArtifactHandler:
        """Return the handler for *artifact_type* or raise ``HandlerRegistryError``."""
        handler = self.get(artifact_type)
        if handler is None:
            raise HandlerRegistryError(f"No handler registered for '{_tag(artifact_type)}'")
        return handler

    def ensure_registered(self, artifact_types: Iterable[ArtifactType | str]) -> None:
        """Raise if any of *artifact_types* has no handler, naming all of them."""
        missing = [tag for tag in map(_tag, artifact_types) if tag not in self._handlers]
        if missing:
            raise HandlerRegistryError(
                f"No handler registered for: {', '.join(sorted(missing))}"
            )

    def items(self) -> list[tuple[str, ArtifactHandler]]:
        return list(self._handlers.items())

    def __contains__(self, artifact_type: object) -> bool:
        if not isinstance(artifact_type, (str, ArtifactType)):
            return False
        return _tag(artifact_type) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


# ---------------------------------------------------------------------------
# Built-in handlers
# ---------------------------------------------------------------------------


class EntitiesHandler:
    """Handler for plain or versioned entity documents.

    Parameters
    ----------
    store:
        The entities collection.
    versioned:
        Selects the versioned-entities artifact type instead of plain entities.
    """

    def __init__(self, store: EntitiesStore, *, versioned: bool = False) -> None:
        self._store = store
        self._versioned = versioned

    def count_documents(self, group_id: str, artifact_id: str, version_id: str) -> int:
        return self._store.count(group_id, artifact_id, version_id, versioned=self._versioned)

    def delete_documents(self, group_id: str, artifact_id: str, version_id: str) -> int:
        return self._store.delete_version(
            group_id, artifact_id, version_id, versioned=self._versioned
        )


class FileGenerationsHandler:
    """Handler for generated file documents."""

    def __init__(self, store: FileGenerationsStore) -> None:
        self._store = store

    def count_documents(self, group_id: str, artifact_id: str, version_id: str) -> int:
        return self._store.count(group_id, artifact_id, version_id)

    def delete_documents(self, group_id: str, artifact_id: str, version_id: str) -> int:
        return self._store.delete_version(group_id, artifact_id, version_id)


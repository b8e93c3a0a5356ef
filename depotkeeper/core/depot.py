"""Depot — wires the database, catalog, collections and purge service.

Mirrors how a deployment assembles the purge core: one database, the
built-in handler registry, and a ``PurgeService`` checked against the
configured artifact types.
"""

from __future__ import annotations

from pathlib import Path

from depotkeeper.config import DepotConfig
from depotkeeper.core.catalog import ProjectCatalog
from depotkeeper.core.database import DepotDatabase
from depotkeeper.core.entities_store import EntitiesStore
from depotkeeper.core.file_generations_store import FileGenerationsStore
from depotkeeper.core.handlers import (
    ArtifactType,
    EntitiesHandler,
    FileGenerationsHandler,
    HandlerRegistry,
)
from depotkeeper.core.housekeeping import Housekeeper
from depotkeeper.core.purge_service import PurgeService
from depotkeeper.core.reconciliation import ArtifactRepository, RepositoryReconciler
from depotkeeper.core.refresh_status import RefreshStatusStore


class Depot:
    """All depot subsystems bound to one database.

    Parameters
    ----------
    config:
        Depot configuration. Uses defaults if not provided.
    db_path:
        Overrides ``config.database_path``.
    """

    def __init__(self, config: DepotConfig | None = None, *, db_path: Path | None = None) -> None:
        self.config = config or DepotConfig()
        self.db = DepotDatabase(db_path or self.config.database_path)

        self.catalog = ProjectCatalog(self.db)
        self.entities = EntitiesStore(self.db)
        self.file_generations = FileGenerationsStore(self.db)
        self.refresh_status = RefreshStatusStore(self.db)

        self.registry = HandlerRegistry()
        self.registry.register(ArtifactType.ENTITIES, EntitiesHandler(self.entities))
        self.registry.register(
            ArtifactType.VERSIONED_ENTITIES, EntitiesHandler(self.entities, versioned=True)
        )
        self.registry.register(
            ArtifactType.FILE_GENERATIONS, FileGenerationsHandler(self.file_generations)
        )

        self.purge = PurgeService(
            self.catalog,
            self.registry,
            extra_required_types=self.config.extra_artifact_types,
        )

    def reconciler(self, repository: ArtifactRepository) -> RepositoryReconciler:
        """Reconciler comparing this depot's catalog and entity signatures to *repository*."""
        return RepositoryReconciler(
            self.catalog, repository, local_signature=self.entities.version_signature
        )

    def housekeeper(
        self, *, keep_count: int | None = None, max_workers: int | None = None
    ) -> Housekeeper:
        return Housekeeper(
            self.catalog,
            self.purge,
            self.refresh_status,
            keep_count=self.config.keep_versions if keep_count is None else keep_count,
            max_workers=max_workers or self.config.housekeeping_workers,
            owner=self.config.claim_owner,
        )

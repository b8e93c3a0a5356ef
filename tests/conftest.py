"""Shared test fixtures for depotkeeper."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from depotkeeper.config import DepotConfig
from depotkeeper.core.catalog import ProjectCatalog
from depotkeeper.core.database import DepotDatabase
from depotkeeper.core.depot import Depot
from depotkeeper.core.entities_store import EntitiesStore
from depotkeeper.core.file_generations_store import FileGenerationsStore
from depotkeeper.models.documents import EntityDocument, FileGenerationDocument

DATA_DIR = Path(__file__).parent / "data"


def _load(name: str) -> list[dict]:
    return json.loads((DATA_DIR / name).read_text(encoding="utf-8"))


def seed_depot(depot: Depot) -> None:
    """Load the JSON fixture files into *depot*."""
    for project in _load("projects.json"):
        depot.catalog.create_project(**project)
    for version in _load("projectsVersions.json"):
        depot.catalog.add_version(**version)
    for entity in _load("entities.json"):
        depot.entities.insert(EntityDocument(**entity))
    for generation in _load("generations.json"):
        depot.file_generations.insert(FileGenerationDocument(**generation))


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def db_path(tmp_dir: Path) -> Path:
    return tmp_dir / "depot.db"


@pytest.fixture
def database(db_path: Path) -> DepotDatabase:
    """Provide a fresh DepotDatabase backed by a temp SQLite file."""
    return DepotDatabase(db_path)


@pytest.fixture
def catalog(database: DepotDatabase) -> ProjectCatalog:
    return ProjectCatalog(database)


@pytest.fixture
def entities_store(database: DepotDatabase) -> EntitiesStore:
    return EntitiesStore(database)


@pytest.fixture
def file_generations_store(database: DepotDatabase) -> FileGenerationsStore:
    return FileGenerationsStore(database)


@pytest.fixture
def depot(db_path: Path) -> Depot:
    """Provide an empty Depot with every built-in handler registered."""
    return Depot(DepotConfig(database_path=db_path))


@pytest.fixture
def seeded_depot(depot: Depot) -> Depot:
    """Provide a Depot loaded with the fixture projects and documents.

    ``examples.metadata:test`` has versions 2.0.0, 2.2.0 and 2.3.0 with two
    entities and one file generation each; ``examples.metadata:test1`` has
    no versions and one snapshot-branch entity.
    """
    seed_depot(depot)
    return depot

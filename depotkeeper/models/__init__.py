"""depotkeeper data models — all Pydantic v2, all frozen (immutable)."""

from depotkeeper.models.documents import EntityDocument, FileGenerationDocument
from depotkeeper.models.projects import ProjectRecord, VersionCoordinates, VersionRecord
from depotkeeper.models.purge import HandlerFailure, PurgeOutcome
from depotkeeper.models.reconciliation import VersionMismatch
from depotkeeper.models.status import RefreshStatus
from depotkeeper.models.versioning import (
    MASTER_SNAPSHOT,
    MalformedVersionError,
    SemanticVersion,
    is_snapshot,
)

__all__ = [
    # versioning
    "MASTER_SNAPSHOT",
    "MalformedVersionError",
    "SemanticVersion",
    "is_snapshot",
    # projects
    "ProjectRecord",
    "VersionRecord",
    "VersionCoordinates",
    # documents
    "EntityDocument",
    "FileGenerationDocument",
    # purge
    "HandlerFailure",
    "PurgeOutcome",
    # reconciliation
    "VersionMismatch",
    # status
    "RefreshStatus",
]

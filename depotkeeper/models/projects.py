"""Project and version catalog models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class ProjectRecord(BaseModel):
    """A ``(group_id, artifact_id)`` project known to the depot.

    Every project implicitly owns the snapshot branch; it is never
    listed among its version records.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    project_id: str = ""

    @property
    def coordinates(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)


class VersionRecord(BaseModel):
    """Catalog entry for one immutable version of a project.

    ``evicted`` versions keep their entry but have no documents left in
    any artifact collection.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version_id: str
    evicted: bool = False
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class VersionCoordinates(BaseModel):
    """Fully qualified version reference used in reports."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version_id: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version_id}"

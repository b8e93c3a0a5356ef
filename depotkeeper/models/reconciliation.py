"""Reconciliation report between the depot and the upstream repository."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class VersionMismatch(BaseModel):
    """Drift between local version records and the upstream listing.

    * ``versions_not_in_repository`` — recorded locally, gone upstream.
    * ``versions_not_in_store`` — published upstream, never ingested.
    * ``conflicting_versions`` — on both sides with different content.
    * ``errors`` — the feed could not produce a reliable listing.
    """

    model_config = ConfigDict(frozen=True)

    project_id: str = ""
    group_id: str
    artifact_id: str
    versions_not_in_repository: list[str] = Field(default_factory=list)
    versions_not_in_store: list[str] = Field(default_factory=list)
    conflicting_versions: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return bool(
            self.versions_not_in_repository
            or self.versions_not_in_store
            or self.conflicting_versions
            or self.errors
        )

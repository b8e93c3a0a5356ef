"""Purge outcome models — the structured report every purge call returns.

Handler failures are collected here rather than raised, so a caller
always sees which collections were cleaned and which were not.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from depotkeeper.models.projects import VersionCoordinates


class HandlerFailure(BaseModel):
    """One artifact-type handler that failed for one version."""

    model_config = ConfigDict(frozen=True)

    artifact_type: str
    group_id: str
    artifact_id: str
    version_id: str
    error: str


class PurgeOutcome(BaseModel):
    """Aggregated result of an evict, delete or reconciliation pass.

    Examples
    --------
    >>> a = PurgeOutcome(deleted={"entities": 2})
    >>> b = PurgeOutcome(deleted={"entities": 1, "file_generations": 3})
    >>> PurgeOutcome.merge(a, b).deleted
    {'entities': 3, 'file_generations': 3}
    """

    model_config = ConfigDict(frozen=True)

    deleted: dict[str, int] = Field(default_factory=dict)
    failures: list[HandlerFailure] = Field(default_factory=list)
    evicted_versions: list[VersionCoordinates] = Field(default_factory=list)
    deleted_versions: list[VersionCoordinates] = Field(default_factory=list)
    missing_locally: list[VersionCoordinates] = Field(default_factory=list)
    conflicting_versions: list[VersionCoordinates] = Field(default_factory=list)
    skipped_projects: list[str] = Field(default_factory=list)

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())

    @property
    def succeeded(self) -> bool:
        """True when no handler failed."""
        return not self.failures

    @property
    def is_empty(self) -> bool:
        """True when the pass neither changed nor reported anything."""
        return not (
            self.total_deleted
            or self.failures
            or self.evicted_versions
            or self.deleted_versions
            or self.missing_locally
            or self.conflicting_versions
            or self.skipped_projects
        )

    @classmethod
    def merge(cls, *outcomes: PurgeOutcome) -> PurgeOutcome:
        """Combine outcomes in order: counts are summed, lists concatenated."""
        deleted: dict[str, int] = {}
        lists: dict[str, list] = {
            "failures": [],
            "evicted_versions": [],
            "deleted_versions": [],
            "missing_locally": [],
            "conflicting_versions": [],
            "skipped_projects": [],
        }
        for outcome in outcomes:
            for artifact_type, count in outcome.deleted.items():
                deleted[artifact_type] = deleted.get(artifact_type, 0) + count
            for name, items in lists.items():
                items.extend(getattr(outcome, name))
        return cls(deleted=deleted, **lists)

"""Artifact documents stored per version in the depot collections."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntityDocument(BaseModel):
    """A single entity of a project version.

    ``versioned_entity`` separates the versioned-entities artifact type
    from plain entities; both live in the same collection.  Documents
    whose ``version_id`` is the snapshot token are revision documents.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version_id: str
    entity_path: str
    classifier_path: str = ""
    versioned_entity: bool = False
    content: dict[str, Any] = Field(default_factory=dict)


class FileGenerationDocument(BaseModel):
    """A generated file produced for a project version."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version_id: str
    path: str
    generation_type: str = ""
    content: str = ""

"""Refresh status model — the per-project "in progress" marker."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RefreshStatus(BaseModel):
    """Whether a long-running operation currently holds a project."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    running: bool = False
    owner: str = ""
    claimed_at: datetime | None = None
    last_run: datetime | None = None

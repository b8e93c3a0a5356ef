"""Scheduled housekeeping — retention-count eviction across projects.

Each project is claimed before it is purged; projects already held by
another operation are skipped and reported.  A project whose catalog
cannot be ordered is recorded in ``errors`` and the pass moves on.
Different projects are independent and may be processed on a thread pool.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel, ConfigDict, Field

from depotkeeper.core.catalog import VersionCatalog
from depotkeeper.core.purge_service import PurgeService
from depotkeeper.core.refresh_status import ProjectBusyError, RefreshStatusStore
from depotkeeper.models.projects import ProjectRecord
from depotkeeper.models.purge import PurgeOutcome
from depotkeeper.models.versioning import MalformedVersionError

logger = logging.getLogger(__name__)


class HousekeepingReport(BaseModel):
    """Per-project outcomes of one housekeeping pass."""

    model_config = ConfigDict(frozen=True)

    outcomes: dict[str, PurgeOutcome] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def total(self) -> PurgeOutcome:
        return PurgeOutcome.merge(*self.outcomes.values())


class Housekeeper:
    """Runs ``evict_oldest_versions`` for every catalog project.

    Parameters
    ----------
    catalog:
        Source of the project list.
    purge_service:
        Performs the evictions.
    refresh_status:
        Claim table used to serialize work per project.
    keep_count:
        Versions to retain per project.
    max_workers:
        Number of projects processed concurrently.
    owner:
        Name recorded on claims taken by this housekeeper.
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        purge_service: PurgeService,
        refresh_status: RefreshStatusStore,
        *,
        keep_count: int,
        max_workers: int = 1,
        owner: str = "housekeeper",
    ) -> None:
        if keep_count < 0:
            raise ValueError(f"keep_count must be >= 0, got {keep_count}")
        self._catalog = catalog
        self._purge = purge_service
        self._status = refresh_status
        self._keep_count = keep_count
        self._max_workers = max(1, max_workers)
        self._owner = owner

    def run(self, projects: Iterable[ProjectRecord] | None = None) -> HousekeepingReport:
        self._purge.check_registry()
        targets = list(projects) if projects is not None else self._catalog.list_projects()
        logger.info(
            "Housekeeping %d project(s), keeping %d version(s) each",
            len(targets), self._keep_count,
        )
        if self._max_workers == 1:
            results = [self._process(p) for p in targets]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                results = list(pool.map(self._process, targets))

        outcomes: dict[str, PurgeOutcome] = {}
        skipped: list[str] = []
        errors: dict[str, str] = {}
        for key, outcome, error in results:
            if error is not None:
                errors[key] = error
            elif outcome is None:
                skipped.append(key)
            else:
                outcomes[key] = outcome
        return HousekeepingReport(outcomes=outcomes, skipped=skipped, errors=errors)

    def _process(
        self, project: ProjectRecord
    ) -> tuple[str, PurgeOutcome | None, str | None]:
        key = f"{project.group_id}:{project.artifact_id}"
        try:
            with self._status.claimed(project.group_id, project.artifact_id, self._owner):
                outcome = self._purge.evict_oldest_versions(
                    project.group_id, project.artifact_id, self._keep_count
                )
        except ProjectBusyError:
            logger.warning("Skipping %s: claimed by another operation", key)
            return key, None, None
        except MalformedVersionError as exc:
            logger.error("Cannot order versions of %s: %s", key, exc)
            return key, None, f"{type(exc).__name__}: {exc}"
        return key, outcome, None

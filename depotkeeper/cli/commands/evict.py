"""``depotkeeper evict GROUP ARTIFACT --keep N`` — retention-count eviction."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from depotkeeper.cli.render import OutcomeRenderer
from depotkeeper.core.depot import Depot

console = Console()


def evict_cmd(
    group_id: str = typer.Argument(..., help="Project group id."),
    artifact_id: str = typer.Argument(..., help="Project artifact id."),
    keep: int = typer.Option(
        None,
        "--keep",
        "-k",
        min=0,
        help="Number of newest versions to retain (defaults to DEPOTKEEPER_KEEP_VERSIONS).",
    ),
    db: Path = typer.Option(None, "--db", help="Path to the depot database."),
) -> None:
    """Evict all but the newest versions of a project.

    Evicted versions lose their documents but stay listed.  The snapshot
    branch is never evicted.
    """
    depot = Depot(db_path=db)
    keep_count = depot.config.keep_versions if keep is None else keep
    outcome = depot.purge.evict_oldest_versions(group_id, artifact_id, keep_count)
    OutcomeRenderer(console=console).print_outcome(
        outcome, title=f"Evict {group_id}:{artifact_id} (keep {keep_count})"
    )
    if not outcome.succeeded:
        raise typer.Exit(code=1)

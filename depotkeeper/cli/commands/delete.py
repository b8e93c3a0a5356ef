"""``depotkeeper delete GROUP ARTIFACT VERSION`` — hard-delete one version."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from depotkeeper.cli.render import OutcomeRenderer
from depotkeeper.core.depot import Depot
from depotkeeper.models.versioning import MalformedVersionError

console = Console()


def delete_cmd(
    group_id: str = typer.Argument(..., help="Project group id."),
    artifact_id: str = typer.Argument(..., help="Project artifact id."),
    version_id: str = typer.Argument(..., help="Version to delete, or master-SNAPSHOT."),
    db: Path = typer.Option(None, "--db", help="Path to the depot database."),
) -> None:
    """Delete a version's documents and remove it from the catalog."""
    depot = Depot(db_path=db)
    try:
        outcome = depot.purge.delete_version(group_id, artifact_id, version_id)
    except MalformedVersionError as exc:
        console.print(f"[bold red]Invalid version:[/bold red] {exc}")
        raise typer.Exit(code=2)

    OutcomeRenderer(console=console).print_outcome(
        outcome, title=f"Delete {group_id}:{artifact_id}:{version_id}"
    )
    if not outcome.succeeded:
        raise typer.Exit(code=1)

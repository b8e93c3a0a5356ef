"""``depotkeeper versions GROUP ARTIFACT`` — list a project's versions."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from depotkeeper.cli.render import OutcomeRenderer
from depotkeeper.core.depot import Depot

console = Console()


def versions_cmd(
    group_id: str = typer.Argument(..., help="Project group id."),
    artifact_id: str = typer.Argument(..., help="Project artifact id."),
    db: Path = typer.Option(None, "--db", help="Path to the depot database."),
) -> None:
    """Show every version of a project with its eviction flag and document counts."""
    depot = Depot(db_path=db)
    if depot.catalog.find_project(group_id, artifact_id) is None:
        console.print(f"[bold red]Project not found:[/bold red] {group_id}:{artifact_id}")
        raise typer.Exit(code=1)

    renderer = OutcomeRenderer(console=console)
    console.print(renderer.render_versions(depot, group_id, artifact_id))
    latest = depot.catalog.get_latest_version(group_id, artifact_id)
    console.print(f"Latest version: [bold]{latest or '-'}[/bold]")

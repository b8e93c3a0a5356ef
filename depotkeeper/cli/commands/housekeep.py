"""``depotkeeper housekeep`` — evict old versions across every project."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from depotkeeper.cli.render import OutcomeRenderer
from depotkeeper.core.depot import Depot

console = Console()


def housekeep_cmd(
    keep: int = typer.Option(
        None, "--keep", "-k", min=0,
        help="Versions to retain per project (defaults to DEPOTKEEPER_KEEP_VERSIONS).",
    ),
    workers: int = typer.Option(
        None, "--workers", "-w", min=1,
        help="Projects processed concurrently.",
    ),
    db: Path = typer.Option(None, "--db", help="Path to the depot database."),
) -> None:
    """Run one housekeeping pass over all projects."""
    depot = Depot(db_path=db)
    report = depot.housekeeper(keep_count=keep, max_workers=workers).run()
    OutcomeRenderer(console=console).print_housekeeping(report)
    if report.errors or not report.total.succeeded:
        raise typer.Exit(code=1)

"""``depotkeeper reconcile`` — delete versions the upstream repository dropped.

Mismatch reports come either pre-computed (``--mismatches``, a JSON list
of ``VersionMismatch``) or from an upstream listing file
(``--repository``, JSON mapping ``"group:artifact"`` to versions).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from depotkeeper.cli.render import OutcomeRenderer
from depotkeeper.core.depot import Depot
from depotkeeper.core.reconciliation import (
    StaticArtifactRepository,
    dump_mismatches,
    load_mismatches,
)

console = Console()


def reconcile_cmd(
    mismatches_file: Path = typer.Option(
        None, "--mismatches", "-m", exists=True, dir_okay=False,
        help="JSON file with VersionMismatch reports.",
    ),
    repository_file: Path = typer.Option(
        None, "--repository", "-r", exists=True, dir_okay=False,
        help="JSON file with the upstream version listing.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the mismatch reports without deleting anything.",
    ),
    db: Path = typer.Option(None, "--db", help="Path to the depot database."),
) -> None:
    """Hard-delete local versions that no longer exist upstream."""
    if (mismatches_file is None) == (repository_file is None):
        console.print("[bold red]Pass exactly one of --mismatches or --repository.[/bold red]")
        raise typer.Exit(code=2)

    depot = Depot(db_path=db)
    if mismatches_file is not None:
        mismatches = load_mismatches(mismatches_file)
    else:
        repository = StaticArtifactRepository.from_file(repository_file)
        mismatches = depot.reconciler(repository).find_mismatches()

    if dry_run:
        console.print_json(dump_mismatches(mismatches))
        return

    outcome = depot.purge.delete_versions_not_in_repository(mismatches)
    OutcomeRenderer(console=console).print_outcome(outcome, title="Reconciliation")
    if not outcome.succeeded:
        raise typer.Exit(code=1)

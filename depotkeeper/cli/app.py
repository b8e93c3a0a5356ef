"""Main Typer application — imports and registers all CLI commands.

Entry point: ``depotkeeper`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer

from depotkeeper.cli.commands.delete import delete_cmd
from depotkeeper.cli.commands.evict import evict_cmd
from depotkeeper.cli.commands.housekeep import housekeep_cmd
from depotkeeper.cli.commands.reconcile import reconcile_cmd
from depotkeeper.cli.commands.versions_cmd import versions_cmd
from depotkeeper.config import DepotConfig

app = typer.Typer(
    name="depotkeeper",
    help="depotkeeper: version retention, eviction and reconciliation for the artifact depot.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def configure(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to DEPOTKEEPER_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    level = (log_level or DepotConfig().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="versions", help="List a project's versions and document counts.")(versions_cmd)
app.command(name="evict", help="Evict all but the newest versions of a project.")(evict_cmd)
app.command(name="delete", help="Hard-delete one version of a project.")(delete_cmd)
app.command(name="reconcile", help="Delete versions missing from the upstream repository.")(
    reconcile_cmd
)
app.command(name="housekeep", help="Evict old versions across every project.")(housekeep_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()

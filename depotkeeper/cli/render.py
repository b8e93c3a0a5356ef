"""Rich terminal rendering for purge outcomes and version listings.

Color scheme
------------
- green   : retained / deleted counts
- yellow  : evicted versions, reported-only drift
- red     : handler failures
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from depotkeeper.core.depot import Depot
from depotkeeper.core.housekeeping import HousekeepingReport
from depotkeeper.models.purge import PurgeOutcome
from depotkeeper.models.versioning import MASTER_SNAPSHOT


class OutcomeRenderer:
    """Renders ``PurgeOutcome`` and catalog listings as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def render_outcome(self, outcome: PurgeOutcome, title: str = "Purge outcome") -> Panel:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Artifact type", style="cyan")
        table.add_column("Documents removed", justify="right", style="green")
        for artifact_type, count in sorted(outcome.deleted.items()):
            table.add_row(artifact_type, str(count))
        if not outcome.deleted:
            table.add_row("[dim]-[/dim]", "[dim]0[/dim]")

        lines: list[str] = []
        for label, style, items in (
            ("Evicted", "yellow", outcome.evicted_versions),
            ("Deleted", "green", outcome.deleted_versions),
            ("Missing locally", "yellow", outcome.missing_locally),
            ("Content conflict", "yellow", outcome.conflicting_versions),
        ):
            if items:
                joined = ", ".join(str(item) for item in items)
                lines.append(f"[{style}]{label}:[/{style}] {joined}")
        if outcome.skipped_projects:
            lines.append(f"[yellow]Skipped:[/yellow] {', '.join(outcome.skipped_projects)}")
        for failure in outcome.failures:
            lines.append(
                f"[bold red]FAILED[/bold red] {failure.artifact_type} "
                f"{failure.group_id}:{failure.artifact_id}:{failure.version_id} "
                f"— {failure.error}"
            )

        border = "red" if outcome.failures else "green"
        body = Table.grid(padding=(0, 1))
        body.add_row(table)
        for line in lines:
            body.add_row(line)
        return Panel(body, title=f"[bold]{title}[/bold]", border_style=border)

    def print_outcome(self, outcome: PurgeOutcome, title: str = "Purge outcome") -> None:
        self.console.print(self.render_outcome(outcome, title))

    def print_housekeeping(self, report: HousekeepingReport) -> None:
        for key, outcome in report.outcomes.items():
            if not outcome.is_empty:
                self.print_outcome(outcome, title=key)
        total = report.total
        self.console.print(
            f"[bold]{len(report.outcomes)}[/bold] project(s) processed, "
            f"[bold]{len(total.evicted_versions)}[/bold] version(s) evicted, "
            f"[bold]{total.total_deleted}[/bold] document(s) removed."
        )
        if report.skipped:
            self.console.print(f"[yellow]Skipped (busy):[/yellow] {', '.join(report.skipped)}")
        for key, error in report.errors.items():
            self.console.print(f"[bold red]ERROR[/bold red] {key}: {error}")

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def render_versions(self, depot: Depot, group_id: str, artifact_id: str) -> Table:
        """Table of a project's versions with per-type document counts."""
        handlers = depot.registry.items()
        table = Table(title=f"{group_id}:{artifact_id}")
        table.add_column("Version", style="cyan")
        table.add_column("Evicted", justify="center")
        for artifact_type, _ in handlers:
            table.add_column(artifact_type, justify="right")

        for record in depot.catalog.list_version_records(group_id, artifact_id):
            evicted = "[yellow]Yes[/yellow]" if record.evicted else "[green]No[/green]"
            counts = [
                str(h.count_documents(group_id, artifact_id, record.version_id))
                for _, h in handlers
            ]
            table.add_row(record.version_id, evicted, *counts)

        snapshot_counts = [
            str(h.count_documents(group_id, artifact_id, MASTER_SNAPSHOT)) for _, h in handlers
        ]
        table.add_row(f"[dim]{MASTER_SNAPSHOT}[/dim]", "[dim]-[/dim]", *snapshot_counts)
        return table

"""depotkeeper CLI — Typer-based command-line interface.

Provides the ``depotkeeper`` command with subcommands for listing project
versions, evicting and deleting versions, reconciling against an upstream
listing, and running housekeeping passes.

All output uses Rich for formatted terminal display.
"""

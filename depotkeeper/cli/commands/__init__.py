"""Subcommands of the ``depotkeeper`` CLI."""

"""bagforge CLI — Typer-based command-line interface.

Provides the ``bagforge`` command with subcommands for creating,
validating and listing bags.

All output uses Rich for formatted terminal display.
"""

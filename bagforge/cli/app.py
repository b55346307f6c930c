"""Main Typer application — imports and registers all CLI commands.

Entry point: ``bagforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from bagforge.cli.commands.create import create_cmd
from bagforge.cli.commands.list_cmd import list_cmd
from bagforge.cli.commands.validate import validate_cmd
from bagforge.config import config

app = typer.Typer(
    name="bagforge",
    help="bagforge: create and validate BagIt containers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to BAGFORGE_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="create", help="Create and finalize a bag from files.")(create_cmd)
app.command(name="validate", help="Validate an existing bag.")(validate_cmd)
app.command(name="list", help="Validate a bag and list its payloads.")(list_cmd)


@app.command(name="algorithms", help="List built-in checksum algorithms.")
def algorithms_cmd() -> None:
    """List built-in checksum algorithms and their manifest filenames."""
    from rich.console import Console
    from rich.table import Table

    from bagforge.models.algorithm import BUILTIN_ALGORITHMS

    table = Table(title="Checksum Algorithms")
    table.add_column("Name", style="cyan")
    table.add_column("Manifest")
    table.add_column("Tag Manifest")
    for algorithm in BUILTIN_ALGORITHMS:
        table.add_row(
            algorithm.name, algorithm.manifest_filename, algorithm.tag_manifest_filename
        )
    Console().print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()

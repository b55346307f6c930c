"""``bagforge list`` — validate a bag and show its payloads and tags."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bagforge.cli.commands.validate import open_or_exit

console = Console()


def list_cmd(
    root: Path = typer.Argument(..., help="Bag directory."),
    algorithm: str = typer.Option(
        None, "--algorithm", "-a", help="Checksum algorithm (defaults to BAGFORGE_DEFAULT_ALGORITHM)."
    ),
) -> None:
    """List the payloads of the bag at ROOT."""
    bag = open_or_exit(root, algorithm)

    table = Table(title=f"Payloads ({bag.algorithm.name})")
    table.add_column("Path", style="cyan")
    table.add_column("Bytes", justify="right")
    table.add_column("Checksum", style="dim")
    for payload in bag.payloads():
        table.add_row(
            escape(payload.relative_path.as_posix()), str(payload.size_bytes), str(payload.checksum)
        )
    console.print(table)

    if bag.tags:
        tags = Table(title="bag-info.txt")
        tags.add_column("Key", style="cyan")
        tags.add_column("Value")
        for tag in bag.tags:
            tags.add_row(escape(tag.key), escape(tag.value))
        console.print(tags)

"""``bagforge validate`` — open a bag and verify it.

Exits with status 1 and prints the error kind when any check fails.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from bagforge.config import config
from bagforge.core.bag import Bag
from bagforge.errors import BagError

console = Console()


def open_or_exit(
    root: Path,
    algorithm: str | None,
    *,
    verify_oxum: bool | None = None,
    verify_tag_manifest: bool | None = None,
) -> Bag:
    """Validate the bag, printing the failure and exiting 1 on error."""
    try:
        return Bag.read_existing(
            root,
            algorithm or config.default_algorithm,
            verify_oxum=verify_oxum,
            verify_tag_manifest=verify_tag_manifest,
        )
    except BagError as exc:
        stage = f" at {exc.stage}" if exc.stage else ""
        console.print(f"[red]Invalid bag ({exc.kind.value}{stage}):[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def validate_cmd(
    root: Path = typer.Argument(..., help="Bag directory to validate."),
    algorithm: str = typer.Option(
        None, "--algorithm", "-a", help="Checksum algorithm (defaults to BAGFORGE_DEFAULT_ALGORITHM)."
    ),
    skip_oxum: bool = typer.Option(
        False, "--skip-oxum", help="Do not cross-check Payload-Oxum."
    ),
    skip_tag_manifest: bool = typer.Option(
        False, "--skip-tag-manifest", help="Do not verify the tag-manifest."
    ),
) -> None:
    """Validate the bag at ROOT."""
    bag = open_or_exit(
        root,
        algorithm,
        verify_oxum=False if skip_oxum else None,
        verify_tag_manifest=False if skip_tag_manifest else None,
    )
    oxum = bag.payload_oxum()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Bag is valid.[/bold green]",
                "",
                f"[bold]Location:[/bold]   {escape(str(bag.root))}",
                f"[bold]Algorithm:[/bold]  {bag.algorithm.name}",
                f"[bold]Payloads:[/bold]   {oxum.stream_count}",
                f"[bold]Bytes:[/bold]      {oxum.octet_count}",
            ]),
            title="[bold]bagforge[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )

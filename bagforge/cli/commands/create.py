"""``bagforge create`` — build a bag from source files.

Copies every file into ``<root>/data``, then writes the manifest,
``bagit.txt``, ``bag-info.txt`` and the tag-manifest.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from bagforge.config import config
from bagforge.core.bag import Bag
from bagforge.errors import BagError
from bagforge.models.tags import BaggingDate, CustomTag, Tag, TagError, parse_tag

console = Console()


def _parse_tag_option(raw: str) -> Tag:
    try:
        tag = parse_tag(raw)
    except TagError as exc:
        raise typer.BadParameter(f"{raw!r}: {exc}") from exc
    if not isinstance(tag, (CustomTag, BaggingDate)):
        raise typer.BadParameter(f"{raw!r}: `{tag.key}` cannot be set from the command line")
    return tag


def create_cmd(
    root: Path = typer.Argument(..., help="Directory where the bag will be created."),
    files: list[Path] = typer.Argument(..., help="Files to add to the bag."),
    algorithm: str = typer.Option(
        None, "--algorithm", "-a", help="Checksum algorithm (defaults to BAGFORGE_DEFAULT_ALGORITHM)."
    ),
    tag: list[str] = typer.Option(
        [], "--tag", "-t", help="Extra bag-info tag as 'Key: Value'. Repeatable."
    ),
    date: bool = typer.Option(
        config.add_bagging_date, "--date/--no-date", help="Record today's Bagging-Date in bag-info.txt."
    ),
) -> None:
    """Create a bag at ROOT holding FILES."""
    extra_tags = [_parse_tag_option(raw) for raw in tag]

    try:
        bag = Bag.new_empty(root, algorithm or config.default_algorithm)
        if date and not any(isinstance(t, BaggingDate) for t in extra_tags):
            bag.add_tag(BaggingDate(date=dt.date.today()))
        for extra in extra_tags:
            bag.add_tag(extra)
        for source in files:
            payload = bag.add_file(source)
            console.print(f"[dim]added[/dim] {escape(str(payload.relative_path))}")
        bag.finalize()
    except BagError as exc:
        console.print(f"[red]Failed to create bag ({exc.kind.value}):[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    oxum = bag.payload_oxum()
    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Bag created![/bold green]",
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

"""Functional entry points for building and opening bags.

These wrap ``Bag`` for callers that prefer plain functions::

    bag = create_empty("/tmp/bag", "sha256")
    add_file(bag, "report.pdf")
    finalize(bag)

    bag = open_and_validate("/tmp/bag", "sha256")
    for item in payloads(bag):
        print(item.relative_path, item.checksum)
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path, PurePosixPath
from typing import NamedTuple

from bagforge.config import config
from bagforge.core.bag import Bag
from bagforge.models.algorithm import Algorithm
from bagforge.models.checksum import Checksum


class PayloadView(NamedTuple):
    """Read-only view of one payload."""

    relative_path: PurePosixPath
    checksum: Checksum
    size_bytes: int


def create_empty(root: Path | str, algorithm_name: Algorithm | str | None = None) -> Bag:
    """Start a new bag at ``root``; defaults to ``config.default_algorithm``."""
    return Bag.new_empty(Path(root), algorithm_name or config.default_algorithm)


def add_file(bag: Bag, source_path: Path | str) -> None:
    bag.add_file(Path(source_path))


def finalize(bag: Bag) -> None:
    bag.finalize()


def open_and_validate(
    root: Path | str, algorithm_name: Algorithm | str | None = None
) -> Bag:
    """Open and fully validate the bag at ``root``."""
    return Bag.read_existing(Path(root), algorithm_name or config.default_algorithm)


def payloads(bag: Bag) -> Iterator[PayloadView]:
    """Iterate ``(relative_path, checksum, size_bytes)`` in manifest order."""
    for payload in bag.payloads():
        yield PayloadView(payload.relative_path, payload.checksum, payload.size_bytes)

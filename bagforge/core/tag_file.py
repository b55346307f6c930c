"""Ordered tag files (``bagit.txt``, ``bag-info.txt``).

Order is insertion order and survives a read/write round-trip, so a bag
regenerated from the same inputs is byte-identical.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TypeVar

from bagforge.errors import BagError, ErrorKind
from bagforge.models.tags import Tag, TagError, parse_tag

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TagFileReadError(BagError):
    """Failed to open, read or decode a tag file."""

    kind = ErrorKind.ENVIRONMENT


class TagFileWriteError(BagError):
    """Failed to write a tag file."""

    kind = ErrorKind.ENVIRONMENT


def read_lines(path: Path) -> list[str]:
    """Read a UTF-8 text file as lines.

    Lines are split on ``\\n`` with a trailing ``\\r`` removed; a single
    trailing newline at end of file does not produce an empty last line.
    """
    path = Path(path)
    try:
        text = path.read_bytes().decode("utf-8")
    except OSError as exc:
        raise TagFileReadError("Failed to read file", path=path, cause=exc) from exc
    except UnicodeDecodeError as exc:
        raise TagFileReadError("File is not valid UTF-8", path=path, cause=exc) from exc

    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def write_lines(path: Path, lines: Iterable[str]) -> None:
    """Replace ``path`` with ``lines`` joined by single newlines."""
    path = Path(path)
    try:
        path.write_bytes("\n".join(lines).encode("utf-8"))
    except OSError as exc:
        raise TagFileWriteError("Failed to write file", path=path, cause=exc) from exc


class TagFile:
    """An ordered list of tags backed by a text file."""

    def __init__(self, tags: Iterable[Tag] = ()) -> None:
        self._tags: list[Tag] = list(tags)

    @classmethod
    def read(cls, path: Path) -> TagFile:
        """Parse every line of ``path``; the first malformed line is fatal."""
        path = Path(path)
        tags: list[Tag] = []
        for number, line in enumerate(read_lines(path), start=1):
            try:
                tags.append(parse_tag(line))
            except TagError as exc:
                exc.path = path
                exc.line_number = number
                raise
        logger.debug("Read %d tags from %s", len(tags), path)
        return cls(tags)

    def write(self, path: Path) -> None:
        write_lines(path, (str(tag) for tag in self._tags))

    # ------------------------------------------------------------------
    # Collection helpers
    # ------------------------------------------------------------------

    def add(self, tag: Tag) -> None:
        self._tags.append(tag)

    def tags(self) -> Iterator[Tag]:
        return iter(self._tags)

    def find(self, tag_type: type[T]) -> T | None:
        """Return the first tag of ``tag_type``, if any."""
        for tag in self._tags:
            if isinstance(tag, tag_type):
                return tag
        return None

    def replace(self, tag_type: type, tag: Tag) -> None:
        """Drop every tag of ``tag_type`` and append ``tag``."""
        self._tags = [t for t in self._tags if not isinstance(t, tag_type)]
        self._tags.append(tag)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagFile):
            return NotImplemented
        return self._tags == other._tags

    def __repr__(self) -> str:
        return f"TagFile({self._tags!r})"

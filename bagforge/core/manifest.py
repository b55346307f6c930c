"""Checksum manifests (``manifest-<alg>.txt`` and ``tagmanifest-<alg>.txt``).

Each non-blank line is ``<hex-checksum> <relative-path>``. Reading a
manifest turns every line into a validated ``Payload``: the path must stay
inside the bag root and the file on disk must match the declared checksum.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath

from bagforge.core.hasher import Hasher, compute_checksum_file
from bagforge.core.tag_file import read_lines, write_lines
from bagforge.errors import BagError, ErrorKind
from bagforge.models.algorithm import Algorithm
from bagforge.models.checksum import Checksum
from bagforge.models.payload import (
    ChecksumMismatchError,
    InvalidManifestLineError,
    Payload,
    PayloadSizeError,
    resolve_inside,
)

logger = logging.getLogger(__name__)

MANIFEST_PREFIX = "manifest-"
TAG_MANIFEST_PREFIX = "tagmanifest-"
MANIFEST_SUFFIX = ".txt"


class AmbiguousManifestError(BagError):
    """More than one file matches the requested manifest name."""

    kind = ErrorKind.POLICY


def split_manifest_line(line: str) -> tuple[str, str]:
    """Split a manifest line into ``(checksum, relative_path)``.

    The line must hold exactly two whitespace-separated tokens.
    """
    parts = line.split()
    if len(parts) != 2:
        raise InvalidManifestLineError(f"Invalid manifest line {line!r}")
    return parts[0], parts[1]


def payload_from_manifest_line(line: str, root: Path, hasher: Hasher) -> Payload:
    """Validate one manifest line against the bag rooted at ``root``."""
    declared, relative_path = split_manifest_line(line)

    file_path = resolve_inside(root, relative_path)
    actual = compute_checksum_file(file_path, hasher)
    expected = Checksum.from_hex(declared)
    if actual != expected:
        raise ChecksumMismatchError(relative_path, expected, actual)

    try:
        size_bytes = file_path.stat().st_size
    except OSError as exc:
        raise PayloadSizeError("Failed to get file size", path=file_path, cause=exc) from exc

    return Payload(
        checksum=actual,
        relative_path=PurePosixPath(relative_path),
        size_bytes=size_bytes,
    )


class Manifest:
    """A located manifest file for one algorithm."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    @classmethod
    def find(
        cls, entries: Sequence[Path], algorithm: Algorithm, prefix: str
    ) -> Manifest | None:
        """Pick the ``<prefix><algorithm>.txt`` regular file among ``entries``."""
        candidates = [
            Path(entry)
            for entry in entries
            if Path(entry).is_file()
            and Path(entry).stem.startswith(prefix)
            and Path(entry).suffix == MANIFEST_SUFFIX
        ]
        matches = [
            path for path in candidates if path.stem.removeprefix(prefix) == algorithm.name
        ]
        if len(matches) > 1:
            raise AmbiguousManifestError(
                f"{len(matches)} files match {prefix}{algorithm.name}{MANIFEST_SUFFIX}: "
                + ", ".join(sorted(p.name for p in matches))
            )
        return cls(matches[0]) if matches else None

    @classmethod
    def find_manifest(cls, entries: Sequence[Path], algorithm: Algorithm) -> Manifest | None:
        return cls.find(entries, algorithm, MANIFEST_PREFIX)

    @classmethod
    def find_tag_manifest(cls, entries: Sequence[Path], algorithm: Algorithm) -> Manifest | None:
        return cls.find(entries, algorithm, TAG_MANIFEST_PREFIX)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_and_collect(self, root: Path, hasher: Hasher) -> list[Payload]:
        """Validate every line; the first failing line aborts the whole read."""
        payloads: list[Payload] = []
        for number, line in enumerate(read_lines(self.path), start=1):
            if not line.strip():
                continue
            try:
                payloads.append(payload_from_manifest_line(line, root, hasher))
            except BagError as exc:
                if exc.path is None:
                    exc.path = self.path
                    exc.line_number = number
                raise
        logger.debug("Validated %d entries from %s", len(payloads), self.path.name)
        return payloads

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @staticmethod
    def render(payloads: Iterable[Payload]) -> list[str]:
        return [payload.manifest_line() for payload in payloads]

    @staticmethod
    def write(path: Path, payloads: Iterable[Payload]) -> Manifest:
        write_lines(path, Manifest.render(payloads))
        return Manifest(path)

    def __repr__(self) -> str:
        return f"Manifest({self.path})"

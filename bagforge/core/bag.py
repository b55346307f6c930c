"""The Bag aggregate and its assembly pipeline.

A bag is built in three steps::

    bag = Bag.new_empty(root, Algorithm.sha256())
    bag.add_file(source)          # repeated
    bag.finalize()                # writes the four tag files

or opened and fully validated with ``Bag.read_existing``. A finalized or
validated bag is sealed: further mutation raises ``BagSealedError``.

``finalize`` is not atomic across its four files; a failure part-way leaves
a partially written bag on disk.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from bagforge.core.hasher import Hasher, compute_checksum_file, get_hasher, resolve_algorithm
from bagforge.core.manifest import Manifest
from bagforge.core.tag_file import TagFile
from bagforge.errors import BagError, ErrorKind
from bagforge.models.algorithm import Algorithm
from bagforge.models.payload import PAYLOAD_DIRECTORY, Payload
from bagforge.models.tags import BagitVersion, Encoding, PayloadOxum, Tag

logger = logging.getLogger(__name__)

BAGIT_TXT = "bagit.txt"
BAG_INFO_TXT = "bag-info.txt"
BAGIT_VERSION = (1, 0)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class AssembleError(BagError):
    """Base class for failures while building a bag."""

    kind = ErrorKind.ENVIRONMENT


class FileHasNoNameError(AssembleError):
    """Source path has no file-name component."""

    kind = ErrorKind.INPUT


class PayloadNameError(AssembleError):
    """Source file name contains whitespace and cannot appear in a manifest."""

    kind = ErrorKind.INPUT


class PayloadDirectoryError(AssembleError):
    """Failed to create the payload directory."""


class CopyToPayloadError(AssembleError):
    """Failed to copy a source file into the payload directory."""


class PayloadOutsideRootError(AssembleError):
    """Copied file unexpectedly does not fall under the bag root."""

    kind = ErrorKind.SECURITY


class DuplicatePayloadError(AssembleError):
    """A payload with the same destination name was already added."""

    kind = ErrorKind.INPUT


class ReservedTagError(AssembleError):
    """Tag is computed by the assembler and cannot be set by callers."""

    kind = ErrorKind.INPUT


class FinalizeError(AssembleError):
    """Writing one of the tag files failed."""


class BagSealedError(AssembleError):
    """The bag was finalized or validated and can no longer change."""

    kind = ErrorKind.POLICY


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class Bag:
    """A bag rooted at ``root`` using a single checksum algorithm.

    Parameters
    ----------
    root:
        Directory holding (or that will hold) the bag.
    algorithm:
        Checksum algorithm, as an ``Algorithm`` or its filename token.
    """

    def __init__(
        self,
        root: Path,
        algorithm: Algorithm | str,
        *,
        payloads: list[Payload] | None = None,
        tags: list[Tag] | None = None,
        hasher: Hasher | None = None,
        sealed: bool = False,
    ) -> None:
        self._root = Path(root)
        self._algorithm = resolve_algorithm(algorithm)
        self._hasher = hasher or get_hasher(self._algorithm)
        self._payloads: list[Payload] = list(payloads or [])
        self._info = TagFile(tags or [])
        self._sealed = sealed

    @classmethod
    def new_empty(cls, root: Path, algorithm: Algorithm | str) -> Bag:
        """Create an empty, unsealed bag. No filesystem access happens here."""
        return cls(root, algorithm)

    @classmethod
    def read_existing(
        cls,
        root: Path,
        algorithm: Algorithm | str,
        *,
        verify_oxum: bool | None = None,
        verify_tag_manifest: bool | None = None,
    ) -> Bag:
        """Open and fully validate an existing bag. See ``BagValidator``."""
        from bagforge.core.validator import BagValidator

        return BagValidator(
            root,
            algorithm,
            verify_oxum=verify_oxum,
            verify_tag_manifest=verify_tag_manifest,
        ).run()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self._root

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def tags(self) -> tuple[Tag, ...]:
        """Bag-info tags in file order."""
        return tuple(self._info)

    @property
    def payload_directory(self) -> Path:
        return self._root / PAYLOAD_DIRECTORY

    @property
    def manifest_path(self) -> Path:
        return self._root / self._algorithm.manifest_filename

    @property
    def tag_manifest_path(self) -> Path:
        return self._root / self._algorithm.tag_manifest_filename

    def payloads(self) -> Iterator[Payload]:
        """Iterate payloads in manifest order. Each call starts over."""
        return iter(tuple(self._payloads))

    def payload_oxum(self) -> PayloadOxum:
        """Byte/stream summary computed from the payload list."""
        return PayloadOxum(
            octet_count=sum(p.size_bytes for p in self._payloads),
            stream_count=len(self._payloads),
        )

    def __len__(self) -> int:
        return len(self._payloads)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bag):
            return NotImplemented
        return (
            self._root == other._root
            and self._algorithm == other._algorithm
            and self._payloads == other._payloads
            and tuple(self._info) == tuple(other._info)
        )

    def __repr__(self) -> str:
        return (
            f"Bag(root={str(self._root)!r}, algorithm={self._algorithm.name!r}, "
            f"payloads={len(self._payloads)}, sealed={self._sealed})"
        )

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _ensure_mutable(self) -> None:
        if self._sealed:
            raise BagSealedError("Bag is sealed and cannot be modified", path=self._root)

    def add_tag(self, tag: Tag) -> None:
        """Append a bag-info tag. ``Payload-Oxum`` is always computed by ``finalize``."""
        self._ensure_mutable()
        if isinstance(tag, PayloadOxum):
            raise ReservedTagError("Payload-Oxum is computed on finalize and cannot be set")
        self._info.add(tag)

    def add_file(self, source: Path) -> Payload:
        """Checksum ``source``, copy it under ``data/`` and record it."""
        self._ensure_mutable()
        source = Path(source)

        checksum = compute_checksum_file(source, self._hasher)

        if not source.name:
            raise FileHasNoNameError("Source path has no file name", path=source)
        if any(ch.isspace() for ch in source.name):
            raise PayloadNameError(
                f"File name {source.name!r} contains whitespace", path=source
            )

        try:
            self.payload_directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PayloadDirectoryError(
                "Failed to create payload directory", path=self.payload_directory, cause=exc
            ) from exc
        destination = self.payload_directory / source.name

        try:
            relative = destination.relative_to(self._root)
        except ValueError as exc:
            raise PayloadOutsideRootError(
                "Copied file is not inside the bag root", path=destination
            ) from exc
        relative_path = PurePosixPath(*relative.parts)
        if any(p.relative_path == relative_path for p in self._payloads):
            raise DuplicatePayloadError(
                f"Payload `{relative_path}` was already added", path=source
            )

        try:
            shutil.copyfile(source, destination)
            size_bytes = destination.stat().st_size
        except OSError as exc:
            raise CopyToPayloadError(
                "Failed to copy file to payload directory", path=destination, cause=exc
            ) from exc

        payload = Payload(
            checksum=checksum,
            relative_path=relative_path,
            size_bytes=size_bytes,
        )
        self._payloads.append(payload)
        logger.debug("Added %s to bag %s", relative_path, self._root)
        return payload

    def finalize(self) -> None:
        """Write manifest, declaration, bag-info and tag-manifest, then seal.

        Files are written in that order, each replacing any existing file.
        """
        self._ensure_mutable()
        try:
            Manifest.write(self.manifest_path, self._payloads)

            major, minor = BAGIT_VERSION
            declaration = TagFile([BagitVersion(major=major, minor=minor), Encoding()])
            declaration.write(self._root / BAGIT_TXT)

            self._info.replace(PayloadOxum, self.payload_oxum())
            self._info.write(self._root / BAG_INFO_TXT)

            tag_payloads = [
                Payload(
                    checksum=compute_checksum_file(self._root / name, self._hasher),
                    relative_path=PurePosixPath(name),
                    size_bytes=(self._root / name).stat().st_size,
                )
                for name in (BAGIT_TXT, BAG_INFO_TXT, self._algorithm.manifest_filename)
            ]
            Manifest.write(self.tag_manifest_path, tag_payloads)
        except BagError as exc:
            raise FinalizeError(
                f"Failed to finalize bag: {exc.message}", path=exc.path or self._root, cause=exc
            ) from exc
        except OSError as exc:
            raise FinalizeError("Failed to finalize bag", path=self._root, cause=exc) from exc

        self._sealed = True
        logger.info(
            "Finalized bag %s: %s (%s)",
            self._root,
            self.payload_oxum().value,
            self._algorithm.name,
        )

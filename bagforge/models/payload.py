"""Payload entity — one file inside a bag."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

from bagforge.errors import BagError, ErrorKind
from bagforge.models.checksum import Checksum

PAYLOAD_DIRECTORY = "data"


class PayloadError(BagError):
    """Base class for payload and manifest-line failures."""


class InvalidManifestLineError(PayloadError):
    """A manifest line is not ``<checksum> <relative-path>``."""


class NotInsideBagError(PayloadError):
    """A manifest path resolves outside the bag root."""

    kind = ErrorKind.SECURITY


class PayloadPathError(PayloadError):
    """The bag root or a payload path could not be resolved."""

    kind = ErrorKind.ENVIRONMENT


class ChecksumMismatchError(PayloadError):
    """The file on disk does not match the checksum declared for it."""

    kind = ErrorKind.INTEGRITY

    def __init__(self, relative_path: str, expected: Checksum, actual: Checksum, **kwargs) -> None:
        super().__init__(
            f"Checksum of `{relative_path}` differs: manifest declares {expected}, "
            f"file on disk has {actual}",
            **kwargs,
        )
        self.relative_path = relative_path
        self.expected = expected
        self.actual = actual


class PayloadSizeError(PayloadError):
    """Failed to stat a payload file for its size."""

    kind = ErrorKind.ENVIRONMENT


class Payload(BaseModel):
    """A file inside a bag.

    ``relative_path`` is always relative to the bag root and uses ``/``
    separators, exactly as it appears in a manifest line.
    """

    model_config = ConfigDict(frozen=True)

    checksum: Checksum
    relative_path: PurePosixPath
    size_bytes: int = Field(ge=0)

    def absolute_path(self, root: Path) -> Path:
        """Location of the payload for a bag rooted at ``root``."""
        return Path(root).joinpath(*self.relative_path.parts)

    def manifest_line(self) -> str:
        return f"{self.checksum} {self.relative_path.as_posix()}"

    def __str__(self) -> str:
        return self.manifest_line()


def resolve_inside(root: Path, relative_path: str) -> Path:
    """Resolve ``relative_path`` against ``root`` and require it stays inside.

    Both sides are canonicalized (symlinks and ``..`` resolved), so a path
    that escapes through traversal, an absolute override, or a symlink
    raises ``NotInsideBagError``.
    """
    try:
        canonical_root = Path(root).resolve(strict=True)
    except OSError as exc:
        raise PayloadPathError(
            "Failed to resolve bag root", path=Path(root), cause=exc
        ) from exc
    try:
        candidate = (Path(root) / relative_path).resolve()
    except OSError as exc:
        raise PayloadPathError(
            f"Failed to resolve payload path `{relative_path}`", path=Path(root), cause=exc
        ) from exc
    if candidate == canonical_root or not candidate.is_relative_to(canonical_root):
        raise NotInsideBagError(f"Payload `{relative_path}` is not inside the bag")
    return candidate

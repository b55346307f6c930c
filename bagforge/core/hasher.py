"""Checksum engine — binds algorithm descriptors to digest implementations.

Callers select a ``Hasher`` value at runtime; the built-in variants map to
hashlib constructors and further algorithms can be registered by name.
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from bagforge.config import config
from bagforge.errors import BagError, ErrorKind
from bagforge.models.algorithm import Algorithm, AlgorithmKind
from bagforge.models.checksum import Checksum

logger = logging.getLogger(__name__)

HashFactory = Callable[[], Any]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class UnsupportedAlgorithmError(BagError):
    """No digest implementation is known for the requested algorithm."""

    kind = ErrorKind.POLICY


class ChecksumComputeError(BagError):
    """Base class for failures while checksumming a file."""

    kind = ErrorKind.ENVIRONMENT


class ChecksumFileNotFoundError(ChecksumComputeError):
    """Path does not reference a regular file."""


class ChecksumOpenError(ChecksumComputeError):
    """File exists but could not be opened."""


class ChecksumReadError(ChecksumComputeError):
    """File was opened but reading it failed."""


class ChecksumDigestError(ChecksumComputeError):
    """The digest computation itself failed."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Hasher(Protocol):
    """Anything that can turn bytes into a ``Checksum`` for one algorithm."""

    @property
    def algorithm(self) -> Algorithm: ...

    @property
    def name(self) -> str: ...

    def new(self) -> Any:
        """Return a fresh hash object exposing ``update`` and ``digest``."""
        ...

    def digest(self, data: bytes) -> Checksum: ...


class HashlibHasher:
    """``Hasher`` backed by a hashlib-style constructor."""

    def __init__(self, algorithm: Algorithm, factory: HashFactory) -> None:
        self._algorithm = algorithm
        self._factory = factory

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    @property
    def name(self) -> str:
        return self._algorithm.name

    def new(self) -> Any:
        return self._factory()

    def digest(self, data: bytes) -> Checksum:
        hash_object = self._factory()
        hash_object.update(data)
        return Checksum.from_bytes(hash_object.digest())

    def __repr__(self) -> str:
        return f"HashlibHasher({self.name})"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_BUILTIN_FACTORIES: dict[AlgorithmKind, HashFactory] = {
    AlgorithmKind.SHA256: hashlib.sha256,
    AlgorithmKind.SHA512: hashlib.sha512,
    AlgorithmKind.BLAKE2B256: functools.partial(hashlib.blake2b, digest_size=32),
    AlgorithmKind.BLAKE2B512: hashlib.blake2b,
}

_CUSTOM_FACTORIES: dict[str, HashFactory] = {}


def register_hasher(name: str, factory: HashFactory) -> Hasher:
    """Register a digest constructor for ``Custom(name)`` and return its hasher."""
    algorithm = Algorithm.custom(name)
    _CUSTOM_FACTORIES[algorithm.name] = factory
    logger.debug("Registered custom checksum algorithm %s", algorithm.name)
    return HashlibHasher(algorithm, factory)


def unregister_hasher(name: str) -> None:
    _CUSTOM_FACTORIES.pop(name, None)


def resolve_algorithm(algorithm: Algorithm | str) -> Algorithm:
    """Accept an ``Algorithm`` or its filename token."""
    if isinstance(algorithm, Algorithm):
        return algorithm
    try:
        return Algorithm.from_name(algorithm)
    except ValidationError as exc:
        raise UnsupportedAlgorithmError(
            f"Invalid checksum algorithm name {algorithm!r}"
        ) from exc


def get_hasher(algorithm: Algorithm | str) -> Hasher:
    """Resolve a digest implementation.

    Lookup order: built-in variants, registered custom names, then any
    algorithm hashlib itself provides (``md5``, ``sha1``, ``sha3_256``...).
    """
    algorithm = resolve_algorithm(algorithm)
    factory = _BUILTIN_FACTORIES.get(algorithm.kind)
    if factory is None:
        factory = _CUSTOM_FACTORIES.get(algorithm.name)
    if factory is None and algorithm.name in hashlib.algorithms_available:
        factory = functools.partial(hashlib.new, algorithm.name)
    if factory is None:
        raise UnsupportedAlgorithmError(
            f"No digest implementation registered for algorithm `{algorithm.name}`"
        )
    return HashlibHasher(algorithm, factory)


# ---------------------------------------------------------------------------
# File checksums
# ---------------------------------------------------------------------------


def compute_checksum_file(
    path: Path, hasher: Hasher, chunk_size: int | None = None
) -> Checksum:
    """Checksum the bytes of a regular file.

    The file is fed to the hash object in ``chunk_size`` pieces (default
    ``config.hash_chunk_size``); the result is identical to hashing the
    whole content at once.
    """
    path = Path(path)
    chunk_size = chunk_size or config.hash_chunk_size

    if not path.is_file():
        raise ChecksumFileNotFoundError("File not found on disk", path=path)

    try:
        handle = path.open("rb")
    except OSError as exc:
        raise ChecksumOpenError("Failed to open file", path=path, cause=exc) from exc

    with handle:
        try:
            hash_object = hasher.new()
        except Exception as exc:
            raise ChecksumDigestError(
                f"Failed to initialise {hasher.name} digest", path=path, cause=exc
            ) from exc
        while True:
            try:
                chunk = handle.read(chunk_size)
            except OSError as exc:
                raise ChecksumReadError("Failed to read file", path=path, cause=exc) from exc
            if not chunk:
                break
            hash_object.update(chunk)
        try:
            checksum = Checksum.from_bytes(hash_object.digest())
        except Exception as exc:
            raise ChecksumDigestError(
                f"Failed to compute {hasher.name} checksum of file", path=path, cause=exc
            ) from exc

    logger.debug("%s %s %s", hasher.name, checksum, path)
    return checksum

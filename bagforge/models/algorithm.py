"""Checksum algorithm descriptors.

The algorithm's ``name`` is embedded in manifest filenames
(``manifest-<name>.txt`` / ``tagmanifest-<name>.txt``), so it is the single
identity the on-disk format knows about.
"""

from __future__ import annotations

import re
from enum import Enum
from functools import total_ordering

from pydantic import BaseModel, ConfigDict, model_validator

_CUSTOM_NAME = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


class AlgorithmKind(str, Enum):
    """Closed set of algorithm variants. Declaration order defines sort order."""

    SHA256 = "sha256"
    SHA512 = "sha512"
    BLAKE2B256 = "blake2b256"
    BLAKE2B512 = "blake2b512"
    CUSTOM = "custom"


_KIND_ORDER: dict[AlgorithmKind, int] = {kind: i for i, kind in enumerate(AlgorithmKind)}


@total_ordering
class Algorithm(BaseModel):
    """An immutable checksum algorithm choice.

    Built-in variants carry no ``custom_name``; ``CUSTOM`` requires one.
    """

    model_config = ConfigDict(frozen=True)

    kind: AlgorithmKind
    custom_name: str | None = None

    @model_validator(mode="after")
    def _check_custom_name(self) -> Algorithm:
        if self.kind is AlgorithmKind.CUSTOM:
            if not self.custom_name or not _CUSTOM_NAME.match(self.custom_name):
                raise ValueError(
                    f"Invalid custom algorithm name {self.custom_name!r}: "
                    "expected a lowercase token of letters, digits, '_' or '-'"
                )
        elif self.custom_name is not None:
            raise ValueError(f"{self.kind.value} does not take a custom name")
        return self

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def sha256(cls) -> Algorithm:
        return cls(kind=AlgorithmKind.SHA256)

    @classmethod
    def sha512(cls) -> Algorithm:
        return cls(kind=AlgorithmKind.SHA512)

    @classmethod
    def blake2b256(cls) -> Algorithm:
        return cls(kind=AlgorithmKind.BLAKE2B256)

    @classmethod
    def blake2b512(cls) -> Algorithm:
        return cls(kind=AlgorithmKind.BLAKE2B512)

    @classmethod
    def custom(cls, name: str) -> Algorithm:
        return cls(kind=AlgorithmKind.CUSTOM, custom_name=name)

    @classmethod
    def from_name(cls, name: str) -> Algorithm:
        """Map a canonical filename token to its variant, else ``Custom(name)``."""
        if name != AlgorithmKind.CUSTOM.value:
            try:
                return cls(kind=AlgorithmKind(name))
            except ValueError:
                pass
        return cls.custom(name)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Lowercase token used in manifest filenames."""
        if self.kind is AlgorithmKind.CUSTOM and self.custom_name is not None:
            return self.custom_name
        return self.kind.value

    @property
    def manifest_filename(self) -> str:
        return f"manifest-{self.name}.txt"

    @property
    def tag_manifest_filename(self) -> str:
        return f"tagmanifest-{self.name}.txt"

    def _sort_key(self) -> tuple[int, str]:
        return (_KIND_ORDER[self.kind], self.custom_name or "")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Algorithm):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.name


BUILTIN_ALGORITHMS: tuple[Algorithm, ...] = (
    Algorithm.sha256(),
    Algorithm.sha512(),
    Algorithm.blake2b256(),
    Algorithm.blake2b512(),
)

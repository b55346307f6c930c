"""Hex checksum value type."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Checksum(BaseModel):
    """An opaque hex-encoded digest.

    Built from raw digest bytes with ``from_bytes`` (hex-encoded, lowercase)
    or from already-encoded text with ``from_hex`` (stored verbatim, never
    re-encoded). Equality is exact, case-sensitive text equality, so callers
    comparing against computed digests must supply lowercase hex.
    """

    model_config = ConfigDict(frozen=True)

    value: str

    @classmethod
    def from_bytes(cls, raw: bytes) -> Checksum:
        return cls(value=raw.hex())

    @classmethod
    def from_hex(cls, text: str) -> Checksum:
        return cls(value=text)

    def __str__(self) -> str:
        return self.value

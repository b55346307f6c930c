"""bagforge data models — all Pydantic v2, all frozen (immutable)."""

from bagforge.models.algorithm import BUILTIN_ALGORITHMS, Algorithm, AlgorithmKind
from bagforge.models.checksum import Checksum
from bagforge.models.payload import PAYLOAD_DIRECTORY, Payload
from bagforge.models.tags import (
    BaggingDate,
    BagitVersion,
    CustomTag,
    Encoding,
    PayloadOxum,
    Tag,
    parse_tag,
    serialize_tag,
)

__all__ = [
    # algorithm
    "Algorithm",
    "AlgorithmKind",
    "BUILTIN_ALGORITHMS",
    # checksum
    "Checksum",
    # payload
    "PAYLOAD_DIRECTORY",
    "Payload",
    # tags
    "BagitVersion",
    "Encoding",
    "BaggingDate",
    "PayloadOxum",
    "CustomTag",
    "Tag",
    "parse_tag",
    "serialize_tag",
]

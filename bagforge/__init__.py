"""bagforge: build and validate BagIt containers.

A bag is a directory holding a ``data/`` payload tree, a checksum manifest,
a ``bagit.txt`` declaration and optional ``bag-info.txt`` metadata:

  - Assembly copies files into ``data/``, records their checksums and writes
    manifest, declaration, bag-info (with Payload-Oxum) and tag-manifest.
  - Validation checks the declaration, verifies every payload checksum,
    rejects paths escaping the bag root, cross-checks Payload-Oxum and
    verifies the tag-manifest.
  - SHA-256, SHA-512, BLAKE2b-256, BLAKE2b-512 built in; any other hashlib
    algorithm or registered digest usable by name.
"""

__version__ = "0.2.0"
__description__ = "Create and validate BagIt containers"

from bagforge.api import (
    PayloadView,
    add_file,
    create_empty,
    finalize,
    open_and_validate,
    payloads,
)
from bagforge.core.bag import (
    AssembleError,
    Bag,
    BagSealedError,
    CopyToPayloadError,
    DuplicatePayloadError,
    FileHasNoNameError,
    FinalizeError,
    PayloadDirectoryError,
    PayloadNameError,
    PayloadOutsideRootError,
    ReservedTagError,
)
from bagforge.core.hasher import (
    ChecksumComputeError,
    ChecksumDigestError,
    ChecksumFileNotFoundError,
    ChecksumOpenError,
    ChecksumReadError,
    Hasher,
    HashlibHasher,
    UnsupportedAlgorithmError,
    compute_checksum_file,
    get_hasher,
    register_hasher,
)
from bagforge.core.manifest import AmbiguousManifestError, Manifest
from bagforge.core.tag_file import TagFile, TagFileReadError, TagFileWriteError
from bagforge.core.validator import (
    AlgorithmNotFoundError,
    BagNotDirectoryError,
    BagValidator,
    DeclarationKeyError,
    DeclarationLinesError,
    ListDirectoryError,
    MissingDeclarationError,
    OxumMismatchError,
    ValidateError,
    ValidationStage,
)
from bagforge.errors import BagError, ErrorKind
from bagforge.models import (
    Algorithm,
    AlgorithmKind,
    BaggingDate,
    BagitVersion,
    Checksum,
    CustomTag,
    Encoding,
    Payload,
    PayloadOxum,
    Tag,
    parse_tag,
)
from bagforge.models.payload import (
    ChecksumMismatchError,
    InvalidManifestLineError,
    NotInsideBagError,
    PayloadError,
    PayloadPathError,
    PayloadSizeError,
)
from bagforge.models.tags import (
    KeyForbiddenCharacterError,
    TagError,
    TagFormatError,
    UnsupportedEncodingError,
    ValueForbiddenCharacterError,
    ValueParsingError,
)

__all__ = [
    "__version__",
    # entry points
    "create_empty",
    "add_file",
    "finalize",
    "open_and_validate",
    "payloads",
    "PayloadView",
    # aggregate
    "Bag",
    "BagValidator",
    "ValidationStage",
    "Manifest",
    "TagFile",
    # checksums
    "Hasher",
    "HashlibHasher",
    "compute_checksum_file",
    "get_hasher",
    "register_hasher",
    # models
    "Algorithm",
    "AlgorithmKind",
    "Checksum",
    "Payload",
    "Tag",
    "BagitVersion",
    "Encoding",
    "BaggingDate",
    "PayloadOxum",
    "CustomTag",
    "parse_tag",
    # errors
    "ErrorKind",
    "BagError",
    "ChecksumComputeError",
    "ChecksumFileNotFoundError",
    "ChecksumOpenError",
    "ChecksumReadError",
    "ChecksumDigestError",
    "UnsupportedAlgorithmError",
    "TagError",
    "TagFormatError",
    "KeyForbiddenCharacterError",
    "ValueForbiddenCharacterError",
    "ValueParsingError",
    "UnsupportedEncodingError",
    "TagFileReadError",
    "TagFileWriteError",
    "PayloadError",
    "InvalidManifestLineError",
    "NotInsideBagError",
    "PayloadPathError",
    "PayloadSizeError",
    "ChecksumMismatchError",
    "AmbiguousManifestError",
    "AssembleError",
    "FileHasNoNameError",
    "PayloadDirectoryError",
    "PayloadNameError",
    "CopyToPayloadError",
    "PayloadOutsideRootError",
    "DuplicatePayloadError",
    "ReservedTagError",
    "FinalizeError",
    "BagSealedError",
    "ValidateError",
    "BagNotDirectoryError",
    "MissingDeclarationError",
    "DeclarationKeyError",
    "DeclarationLinesError",
    "ListDirectoryError",
    "AlgorithmNotFoundError",
    "OxumMismatchError",
]

"""Bag validation state machine.

Stages run in strict order and the first failure is terminal:

1. DIRECTORY_CHECK       root exists and is a directory
2. DECLARATION_CHECK     ``bagit.txt`` is exactly version + UTF-8 encoding
3. INFO_LOAD             ``bag-info.txt`` parsed in full, if present
4. DIRECTORY_LISTING     root entries listed once for manifest discovery
5. MANIFEST_RESOLVE      algorithm name resolved, its manifest located
6. PAYLOAD_VALIDATE      every manifest line checksummed and contained
7. OXUM_CROSS_CHECK      declared Payload-Oxum equals computed totals
8. TAG_MANIFEST_VALIDATE tag-manifest lines checked, if present

Success returns a sealed ``Bag``; no partial results are ever returned.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from bagforge.config import config
from bagforge.core.bag import BAG_INFO_TXT, BAGIT_TXT, Bag
from bagforge.core.hasher import Hasher, get_hasher, resolve_algorithm
from bagforge.core.manifest import Manifest
from bagforge.core.tag_file import TagFile, read_lines
from bagforge.errors import BagError, ErrorKind
from bagforge.models.algorithm import Algorithm
from bagforge.models.payload import Payload
from bagforge.models.tags import (
    KEY_ENCODING,
    KEY_VERSION,
    BagitVersion,
    Encoding,
    PayloadOxum,
    Tag,
    TagError,
    parse_tag,
)

logger = logging.getLogger(__name__)


class ValidationStage(str, Enum):
    """Ordered states of a validation run."""

    DIRECTORY_CHECK = "directory_check"
    DECLARATION_CHECK = "declaration_check"
    INFO_LOAD = "info_load"
    DIRECTORY_LISTING = "directory_listing"
    MANIFEST_RESOLVE = "manifest_resolve"
    PAYLOAD_VALIDATE = "payload_validate"
    OXUM_CROSS_CHECK = "oxum_cross_check"
    TAG_MANIFEST_VALIDATE = "tag_manifest_validate"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ValidateError(BagError):
    """Base class for bag-level validation failures."""


class BagNotDirectoryError(ValidateError):
    """Bag root is missing or not a directory."""


class MissingDeclarationError(ValidateError):
    """``bagit.txt`` is absent."""


class DeclarationKeyError(ValidateError):
    """``bagit.txt`` has the wrong tag (or value) at a position."""

    def __init__(self, key: str, **kwargs) -> None:
        super().__init__(f"Wrong bag declaration `{BAGIT_TXT}` on key `{key}`", **kwargs)
        self.key = key


class DeclarationLinesError(ValidateError):
    """``bagit.txt`` holds more than the two expected tags."""


class ListDirectoryError(ValidateError):
    """Listing the bag root failed."""

    kind = ErrorKind.ENVIRONMENT


class AlgorithmNotFoundError(ValidateError):
    """No manifest exists for the requested algorithm."""

    kind = ErrorKind.POLICY


class OxumMismatchError(ValidateError):
    """Declared Payload-Oxum disagrees with the validated payloads."""

    kind = ErrorKind.INTEGRITY

    def __init__(self, field: str, declared: int, actual: int, **kwargs) -> None:
        super().__init__(
            f"Payload-Oxum {field} mismatch: declared {declared}, found {actual}", **kwargs
        )
        self.field = field
        self.declared = declared
        self.actual = actual


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class BagValidator:
    """Open and validate one bag directory.

    Parameters
    ----------
    root:
        Bag root directory.
    algorithm:
        Algorithm whose manifest must be present and verified, as an
        ``Algorithm`` or its filename token. Names are resolved during
        ``MANIFEST_RESOLVE``.
    verify_oxum:
        Cross-check a declared ``Payload-Oxum``. Defaults to ``config.verify_oxum``.
    verify_tag_manifest:
        Verify ``tagmanifest-<alg>.txt`` when present. Defaults to
        ``config.verify_tag_manifest``.
    """

    def __init__(
        self,
        root: Path,
        algorithm: Algorithm | str,
        *,
        verify_oxum: bool | None = None,
        verify_tag_manifest: bool | None = None,
    ) -> None:
        self.root = Path(root)
        self.requested_algorithm = algorithm
        self.algorithm: Algorithm | None = None
        self.hasher: Hasher | None = None
        self.verify_oxum = config.verify_oxum if verify_oxum is None else verify_oxum
        self.verify_tag_manifest = (
            config.verify_tag_manifest if verify_tag_manifest is None else verify_tag_manifest
        )
        self.stage: ValidationStage | None = None

        self._info: TagFile = TagFile()
        self._entries: list[Path] = []
        self._manifest: Manifest | None = None
        self._payloads: list[Payload] = []

    def _enter(self, stage: ValidationStage) -> None:
        self.stage = stage
        logger.debug("Bag %s: %s", self.root, stage.value)

    def run(self) -> Bag:
        """Execute every stage in order and return the validated bag."""
        steps = (
            (ValidationStage.DIRECTORY_CHECK, self._check_directory),
            (ValidationStage.DECLARATION_CHECK, self._check_declaration),
            (ValidationStage.INFO_LOAD, self._load_info),
            (ValidationStage.DIRECTORY_LISTING, self._list_directory),
            (ValidationStage.MANIFEST_RESOLVE, self._resolve_manifest),
            (ValidationStage.PAYLOAD_VALIDATE, self._validate_payloads),
            (ValidationStage.OXUM_CROSS_CHECK, self._cross_check_oxum),
            (ValidationStage.TAG_MANIFEST_VALIDATE, self._validate_tag_manifest),
        )
        try:
            for stage, step in steps:
                self._enter(stage)
                step()
        except BagError as exc:
            exc.stage = self.stage.value if self.stage else None
            logger.warning(
                "Validation of bag %s failed at %s: %s",
                self.root,
                exc.stage,
                exc,
            )
            raise

        logger.info(
            "Validated bag %s: %d payloads (%s)",
            self.root,
            len(self._payloads),
            self.algorithm.name,
        )
        return Bag(
            self.root,
            self.algorithm,
            payloads=self._payloads,
            tags=list(self._info),
            hasher=self.hasher,
            sealed=True,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _check_directory(self) -> None:
        if not self.root.is_dir():
            raise BagNotDirectoryError("Path is not a directory", path=self.root)

    def _check_declaration(self) -> None:
        path = self.root / BAGIT_TXT
        if not path.exists():
            raise MissingDeclarationError(f"Missing `{BAGIT_TXT}` file", path=self.root)

        # Lines that do not parse are dropped; the positional check below
        # then reports which key was wrong.
        tags: list[Tag] = []
        for line in read_lines(path):
            try:
                tags.append(parse_tag(line))
            except TagError:
                continue

        if len(tags) < 1 or not isinstance(tags[0], BagitVersion):
            raise DeclarationKeyError(KEY_VERSION, path=path)
        if len(tags) < 2 or not isinstance(tags[1], Encoding):
            raise DeclarationKeyError(KEY_ENCODING, path=path)
        if len(tags) > 2:
            raise DeclarationLinesError(
                f"Wrong number of tags in `{BAGIT_TXT}`: expected 2, found {len(tags)}",
                path=path,
            )

    def _load_info(self) -> None:
        path = self.root / BAG_INFO_TXT
        if path.exists():
            self._info = TagFile.read(path)

    def _list_directory(self) -> None:
        try:
            self._entries = list(self.root.iterdir())
        except OSError as exc:
            raise ListDirectoryError(
                "Failed to list bag directory", path=self.root, cause=exc
            ) from exc

    def _resolve_manifest(self) -> None:
        self.algorithm = resolve_algorithm(self.requested_algorithm)
        self._manifest = Manifest.find_manifest(self._entries, self.algorithm)
        if self._manifest is None:
            raise AlgorithmNotFoundError(
                f"Requested algorithm `{self.algorithm.name}` has no manifest in bag",
                path=self.root,
            )

    def _validate_payloads(self) -> None:
        if self._manifest is None or self.algorithm is None:
            raise ValidateError("Payloads validated before a manifest was resolved")
        self.hasher = get_hasher(self.algorithm)
        self._payloads = self._manifest.validate_and_collect(self.root, self.hasher)

    def _cross_check_oxum(self) -> None:
        declared = self._info.find(PayloadOxum)
        if declared is None or not self.verify_oxum:
            return
        octets = sum(p.size_bytes for p in self._payloads)
        streams = len(self._payloads)
        info_path = self.root / BAG_INFO_TXT
        if declared.octet_count != octets:
            raise OxumMismatchError("octet_count", declared.octet_count, octets, path=info_path)
        if declared.stream_count != streams:
            raise OxumMismatchError(
                "stream_count", declared.stream_count, streams, path=info_path
            )

    def _validate_tag_manifest(self) -> None:
        if not self.verify_tag_manifest:
            return
        if self.hasher is None:
            raise ValidateError("Tag-manifest validated before payloads")
        tag_manifest = Manifest.find_tag_manifest(self._entries, self.hasher.algorithm)
        if tag_manifest is not None:
            tag_manifest.validate_and_collect(self.root, self.hasher)

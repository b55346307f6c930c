"""Adversarial tests — malformed tag files and manifests."""

from __future__ import annotations

import pytest

from bagforge.core.bag import Bag
from bagforge.core.validator import AlgorithmNotFoundError, DeclarationKeyError, OxumMismatchError
from bagforge.errors import ErrorKind
from bagforge.models.payload import ChecksumMismatchError, InvalidManifestLineError
from bagforge.models.tags import TagError, parse_tag


def _drop_tag_manifest(bag: Bag) -> None:
    bag.tag_manifest_path.unlink()


class TestMalformedTags:
    @pytest.mark.parametrize("line", ["", ":", ": value", "Key:", "Key:value", "Key:: value"])
    def test_bad_shape_is_input_error(self, line: str):
        with pytest.raises(TagError) as info:
            parse_tag(line)
        assert info.value.kind is ErrorKind.INPUT

    @pytest.mark.parametrize(
        "line",
        [
            "BagIt-Version: 1",
            "BagIt-Version: 1.0.0",
            "BagIt-Version: 256.0",
            "BagIt-Version: -1.0",
            "Payload-Oxum: 1.x",
            "Payload-Oxum: ١.١",
            "Bagging-Date: yesterday",
            "Tag-File-Character-Encoding: latin-1",
        ],
    )
    def test_bad_value_is_format_error(self, line: str):
        with pytest.raises(TagError) as info:
            parse_tag(line)
        assert info.value.kind is ErrorKind.FORMAT

    def test_info_bad_line_reports_location(self, sha256_bag: Bag):
        info_path = sha256_bag.root / "bag-info.txt"
        info_path.write_text("Payload-Oxum: 300.2\nContact-Name Alice")
        _drop_tag_manifest(sha256_bag)
        with pytest.raises(TagError) as info:
            Bag.read_existing(sha256_bag.root, "sha256")
        assert info.value.path == info_path
        assert info.value.line_number == 2

    def test_declaration_garbage(self, sha256_bag: Bag):
        (sha256_bag.root / "bagit.txt").write_bytes(b"\x00\x01garbage")
        with pytest.raises(DeclarationKeyError):
            Bag.read_existing(sha256_bag.root, "sha256")


class TestMalformedManifests:
    @pytest.mark.parametrize("line", ["deadbeef", "deadbeef\t", "  deadbeef  "])
    def test_single_field_line(self, sha256_bag: Bag, line: str):
        manifest = sha256_bag.manifest_path
        manifest.write_text(line + "\n" + manifest.read_text())
        _drop_tag_manifest(sha256_bag)
        with pytest.raises(InvalidManifestLineError) as info:
            Bag.read_existing(sha256_bag.root, "sha256")
        assert info.value.line_number == 1
        assert info.value.kind is ErrorKind.INPUT

    def test_trailing_token_is_invalid_line(self, sha256_bag: Bag):
        manifest = sha256_bag.manifest_path
        first, second = manifest.read_text().split("\n")
        manifest.write_text(f"{first} extra\n{second}")
        with pytest.raises(InvalidManifestLineError) as info:
            Bag.read_existing(sha256_bag.root, "sha256", verify_tag_manifest=False)
        assert info.value.line_number == 1
        assert info.value.kind is ErrorKind.INPUT

    def test_blank_manifest_has_no_payloads(self, sha256_bag: Bag):
        sha256_bag.manifest_path.write_text("\n   \n")
        _drop_tag_manifest(sha256_bag)
        with pytest.raises(OxumMismatchError):
            Bag.read_existing(sha256_bag.root, "sha256")

    def test_non_hex_checksum(self, sha256_bag: Bag):
        manifest = sha256_bag.manifest_path
        lines = manifest.read_text().splitlines()
        _, path = lines[0].split(None, 1)
        manifest.write_text("\n".join(["z" * 64 + "  " + path, lines[1]]))
        _drop_tag_manifest(sha256_bag)
        with pytest.raises(ChecksumMismatchError):
            Bag.read_existing(sha256_bag.root, "sha256")

    def test_uppercase_checksum_does_not_match(self, sha256_bag: Bag):
        manifest = sha256_bag.manifest_path
        checksum, rest = manifest.read_text().split(None, 1)
        manifest.write_text(checksum.upper() + "  " + rest)
        _drop_tag_manifest(sha256_bag)
        with pytest.raises(ChecksumMismatchError):
            Bag.read_existing(sha256_bag.root, "sha256")

    def test_crlf_manifest_accepted(self, sha256_bag: Bag):
        manifest = sha256_bag.manifest_path
        manifest.write_bytes(manifest.read_bytes().replace(b"\n", b"\r\n") + b"\r\n")
        _drop_tag_manifest(sha256_bag)
        assert len(Bag.read_existing(sha256_bag.root, "sha256")) == 2

    def test_manifest_directory_is_not_a_manifest(self, sha256_bag: Bag):
        sha256_bag.manifest_path.unlink()
        sha256_bag.manifest_path.mkdir()
        with pytest.raises(AlgorithmNotFoundError):
            Bag.read_existing(sha256_bag.root, "sha256")

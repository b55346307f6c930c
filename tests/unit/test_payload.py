"""Tests for the Payload entity and its containment rule."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest
from pydantic import ValidationError

from bagforge.models.checksum import Checksum
from bagforge.models.payload import (
    NotInsideBagError,
    Payload,
    PayloadPathError,
    resolve_inside,
)


@pytest.fixture
def payload() -> Payload:
    return Payload(
        checksum=Checksum.from_hex("abc123"),
        relative_path=PurePosixPath("data/report.pdf"),
        size_bytes=42,
    )


class TestPayload:
    def test_manifest_line(self, payload: Payload):
        assert payload.manifest_line() == "abc123 data/report.pdf"
        assert str(payload) == "abc123 data/report.pdf"

    def test_absolute_path(self, payload: Payload, tmp_dir: Path):
        assert payload.absolute_path(tmp_dir) == tmp_dir / "data" / "report.pdf"

    def test_relative_path_accepts_str(self):
        p = Payload(checksum=Checksum.from_hex("00"), relative_path="data/x", size_bytes=0)
        assert p.relative_path == PurePosixPath("data/x")

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            Payload(checksum=Checksum.from_hex("00"), relative_path="data/x", size_bytes=-1)

    def test_frozen(self, payload: Payload):
        with pytest.raises(ValidationError):
            payload.size_bytes = 1

    def test_equality(self, payload: Payload):
        same = Payload(
            checksum=Checksum.from_hex("abc123"),
            relative_path="data/report.pdf",
            size_bytes=42,
        )
        assert payload == same


class TestResolveInside:
    @pytest.fixture
    def root(self, tmp_dir: Path) -> Path:
        root = tmp_dir / "bag"
        (root / "data" / "nested").mkdir(parents=True)
        (root / "data" / "nested" / "file.txt").write_text("inside")
        (tmp_dir / "escape.txt").write_text("outside")
        return root

    def test_inside(self, root: Path):
        resolved = resolve_inside(root, "data/nested/file.txt")
        assert resolved == (root / "data" / "nested" / "file.txt").resolve()

    def test_dot_dot_that_stays_inside(self, root: Path):
        resolved = resolve_inside(root, "data/nested/../nested/file.txt")
        assert resolved.name == "file.txt"

    def test_parent_traversal(self, root: Path):
        with pytest.raises(NotInsideBagError) as info:
            resolve_inside(root, "../escape.txt")
        assert info.value.kind.value == "security"

    def test_deep_traversal(self, root: Path):
        with pytest.raises(NotInsideBagError):
            resolve_inside(root, "data/../../escape.txt")

    def test_absolute_override(self, root: Path, tmp_dir: Path):
        with pytest.raises(NotInsideBagError):
            resolve_inside(root, str(tmp_dir / "escape.txt"))

    def test_sibling_with_common_prefix(self, root: Path, tmp_dir: Path):
        sibling = tmp_dir / "bag-evil"
        sibling.mkdir()
        (sibling / "x").write_text("x")
        with pytest.raises(NotInsideBagError):
            resolve_inside(root, "../bag-evil/x")

    def test_root_itself_is_not_a_payload(self, root: Path):
        with pytest.raises(NotInsideBagError):
            resolve_inside(root, ".")

    def test_symlink_escape(self, root: Path, tmp_dir: Path):
        link = root / "data" / "link.txt"
        try:
            link.symlink_to(tmp_dir / "escape.txt")
        except OSError:
            pytest.skip("symlinks not supported")
        with pytest.raises(NotInsideBagError):
            resolve_inside(root, "data/link.txt")

    def test_missing_root(self, tmp_dir: Path):
        with pytest.raises(PayloadPathError):
            resolve_inside(tmp_dir / "nope", "data/file.txt")
